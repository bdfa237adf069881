"""
academy_payroll.auth.passwords

bcrypt password hashing. Hashing is CPU-bound, so both helpers run in the
threadpool to keep the event loop responsive during logins.
"""

from __future__ import annotations

import bcrypt
from starlette.concurrency import run_in_threadpool


def _hash(password: str, rounds: int) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def _verify(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
    except ValueError:
        # Malformed stored hash.
        return False


async def hash_password(password: str, *, rounds: int) -> str:
    return await run_in_threadpool(_hash, password, rounds)


async def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return await run_in_threadpool(_verify, password, password_hash)
