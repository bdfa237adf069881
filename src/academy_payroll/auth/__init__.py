"""
academy_payroll.auth

Authentication/authorization package.

Responsibilities:
- JWT helpers and validation.
- Password hashing.
- The role-parameterized auth gate (FastAPI dependency) and its principal stores.
"""

# Package marker.
