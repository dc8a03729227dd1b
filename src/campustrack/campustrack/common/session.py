from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError


@dataclass(frozen=True)
class Caller:
    """Who is calling, as resolved by the external login system."""

    user_id: str
    role: Role


def resolve_caller(session: Mapping) -> Optional[Caller]:
    """Read the caller from a Flask-style session mapping.

    Returns None when nobody is logged in or the stored role is unknown.
    """
    user_id = session.get("user_id")
    role = session.get("role")
    if not user_id or not role:
        return None
    try:
        return Caller(user_id=str(user_id), role=Role(str(role).upper()))
    except ValueError:
        return None


def require_role(caller: Optional[Caller], role: Role) -> Caller:
    if caller is None:
        raise AuthorizationError("Unauthorized: please sign in")
    if caller.role != role:
        raise AuthorizationError(f"Unauthorized: {role.value.lower()} access required")
    return caller
