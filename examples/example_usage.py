"""Example: run a pay period through the service layer (no Flask).

Controllers are a thin layer; the payroll rules live in the services and the
pure engine functions they call.
"""

import json
import logging

from config import load_settings

from src.payroll_system.payroll_system.container import build_container
from src.payroll_system.payroll_system.core.exceptions import SsoReconciliationRequired


def main():
    settings = load_settings()
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=settings.DB_CONFIG)

    try:
        result = container.payroll_service.generate_batch(year=2025, month=4, period_no=1)
    except SsoReconciliationRequired as e:
        print(f"Blocked: {e}. Locked rate {e.locked.employee_percent}%, live rate {e.current.employee_percent}%")
        return

    print(json.dumps(result.to_dict(), indent=2))
    for payslip in result.generated:
        print(payslip.employee_name, payslip.snapshot.net_pay)


if __name__ == "__main__":
    main()
