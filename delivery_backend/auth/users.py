from __future__ import annotations

from typing import Any

import bcrypt

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _add_user(username: str, password: str, user_id: str, role: str = "customer") -> None:
    _users[username] = {
        "password_hash": _hash_password(password),
        "user_id": user_id,
        "role": role,
    }


def _seed_users() -> None:
    """Pre-seed demo accounts on import.

    ``user_id`` is the customer id used to look up order history.
    """
    _add_user("customer", "customer123", user_id="1")
    _add_user("saver", "saver123", user_id="2")
    _add_user("newcomer", "newcomer123", user_id="3")
    _add_user("admin", "admin123", user_id="100", role="admin")


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username, user_id, role}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {"username": username, "user_id": record["user_id"], "role": record["role"]}
    return None


_seed_users()
