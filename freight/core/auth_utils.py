"""Authentication and authorization utilities"""
from typing import Optional

from freight.core.enums import UserRole
from freight.core.errors import forbidden, not_found


def check_not_found(item, resource_name: str = "Resource", resource_id: Optional[int] = None) -> None:

    if not item:
        if resource_id:
            raise not_found(f"{resource_name} with id {resource_id} not found")
        raise not_found(f"{resource_name} not found")


def check_ownership(owner_id: int, principal, resource_name: str = "Resource") -> None:

    if owner_id != principal.id:
        raise forbidden(f"Forbidden: You can only access your own {resource_name}s")


def ensure_role(principal, *roles: UserRole) -> None:

    if principal is None:
        raise forbidden("Authentication required")
    if principal.role not in roles:
        raise forbidden(f"{'/'.join(str(r) for r in roles)} access required")
