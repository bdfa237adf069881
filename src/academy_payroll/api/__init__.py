"""
academy_payroll.api

API package for the academy payroll service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring and error mapping.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer stays thin: request validation + auth + delegation to services.
