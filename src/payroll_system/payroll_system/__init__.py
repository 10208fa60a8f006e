"""Payroll System package.

This package is organized by feature modules (attendance, payroll, calendar, ...)
with a thin Flask controller layer and service/repository layers underneath.
The reconciliation and pay computation code never reads global settings: every
call receives an explicit ``PolicyConfig``.
"""
