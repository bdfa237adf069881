"""
academy_payroll.services

Service-layer package.

Responsibilities:
- Own transaction boundaries and persistence decisions.
- Serialize ledger writes per employee.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services are plain Python over an AsyncSession; routers only translate HTTP.
