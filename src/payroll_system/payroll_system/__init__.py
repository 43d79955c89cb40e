"""Payroll System package.

Attendance classification, leave entitlement and bi-monthly payroll for a
shop, organized by feature modules (attendance, leave, payroll, ...) with a
thin Flask JSON controller layer over service/repository layers.
"""
