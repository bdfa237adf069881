"""
academy_payroll.errors

Domain error taxonomy shared by the auth gate, payroll ledger and API layer.

Responsibilities:
- Give every recoverable failure a class with a fixed HTTP status.
- Carry structured payloads (e.g., cap breakdown) for self-explanatory responses.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any


class AcademyError(Exception):
    """
    Base class for failures that are rendered as structured JSON responses.
    """

    status_code: int = 500

    def __init__(self, message: str, *, error: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        # Internal detail; only rendered outside prod.
        self.error = error

    def payload(self) -> dict[str, Any]:
        return {}


class InvalidRequest(AcademyError):
    status_code = 400


class NotFound(AcademyError):
    status_code = 404


class CapExceeded(AcademyError):
    """
    An advance would push the month's total past the employee's base salary.
    """

    status_code = 400

    def __init__(
        self,
        *,
        base_salary: Decimal,
        total_advances: Decimal,
        requested_amount: Decimal,
    ) -> None:
        super().__init__("Advance amount exceeds remaining payable for this month")
        self.base_salary = base_salary
        self.total_advances = total_advances
        self.requested_amount = requested_amount

    @property
    def remaining_payable(self) -> Decimal:
        # Unclamped on purpose: callers render the exact headroom (or deficit).
        return self.base_salary - self.total_advances

    def payload(self) -> dict[str, Any]:
        return {
            "baseSalary": float(self.base_salary),
            "totalAdvances": float(self.total_advances),
            "remainingPayable": float(self.remaining_payable),
            "requestedAmount": float(self.requested_amount),
        }


class AlreadyFinalized(AcademyError):
    status_code = 400

    def __init__(self, month: str) -> None:
        super().__init__("Salary already finalized for this month")
        self.month = month

    def payload(self) -> dict[str, Any]:
        return {"month": self.month}


class Unauthenticated(AcademyError):
    status_code = 401

    def __init__(self, reason: str) -> None:
        super().__init__("Authentication required")
        # Logged, never rendered.
        self.reason = reason


class InvalidCredential(Unauthenticated):
    def __init__(self, reason: str = "invalid_token") -> None:
        super().__init__(reason)


class LoginFailed(AcademyError):
    status_code = 401

    def __init__(self, reason: str) -> None:
        # Same message for unknown user, wrong password and disabled account.
        super().__init__("Invalid credentials")
        self.reason = reason


class Forbidden(AcademyError):
    status_code = 403

    def __init__(self, reason: str = "role_mismatch", *, message: str = "Access denied") -> None:
        super().__init__(message)
        self.reason = reason


class InternalError(AcademyError):
    status_code = 500


# --- Module Notes -----------------------------------------------------------
# HTTP mapping lives in `api.errors`; services raise these without importing FastAPI.
