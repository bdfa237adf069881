"""
academy_payroll.payroll

Payroll domain logic with no I/O.

Responsibilities:
- Month period keys ("YYYY-MM") and their validation.
- Pure ledger arithmetic: month totals, remaining payable, final payment, cap check.
"""

# Package marker.
