"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_WORK_START = time(8, 0)
DEFAULT_GRACE_MINUTES = 0
DEFAULT_DEDUCTION_BASE_DAYS = 26
DEFAULT_WORK_HOURS_PER_DAY = 8

DEFAULT_PERIOD1_START = 1
DEFAULT_PERIOD1_END = 15
DEFAULT_PERIOD2_START = 16

AUTO_LINE_PREFIX = "[AUTO] "
SSO_LINE_NAME = AUTO_LINE_PREFIX + "Social security"
SSO_REFUND_LINE_NAME = AUTO_LINE_PREFIX + "Social security refund"
ABSENCE_LINE_NAME = AUTO_LINE_PREFIX + "Absence"
LATE_LINE_NAME = AUTO_LINE_PREFIX + "Late arrival"
LEAVE_OVERAGE_LINE_TEMPLATE = AUTO_LINE_PREFIX + "Leave over entitlement ({leave_type})"

HR_SETTINGS_KEY = "hr"
