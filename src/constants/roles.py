from enum import Enum
from typing import Optional

from config import ADMIN_EQUALS_SUPER_ADMIN


class BuiltinRole(str, Enum):
    SUPER_ADMIN = "Super Admin"
    ADMIN = "Admin"


BUILTIN_ROLE_NAMES = [r.value for r in BuiltinRole]


def is_super_admin(role: Optional[str]) -> bool:
    return role == BuiltinRole.SUPER_ADMIN.value


def is_legacy_admin(role: Optional[str]) -> bool:
    """"Admin" predates stored permission sets and keeps a hard-coded default."""
    return role == BuiltinRole.ADMIN.value


def is_privileged(role: Optional[str]) -> bool:
    """Admin or Super Admin. Route gates let both through without a round trip."""
    return is_super_admin(role) or is_legacy_admin(role)


def bypasses_permissions(role: Optional[str], admin_equals_super_admin: Optional[bool] = None) -> bool:
    """
    True when the role is authorized for everything without reading any stored set.
    :param admin_equals_super_admin: overrides the ADMIN_EQUALS_SUPER_ADMIN setting
    """
    if admin_equals_super_admin is None:
        admin_equals_super_admin = ADMIN_EQUALS_SUPER_ADMIN
    if is_super_admin(role):
        return True
    return admin_equals_super_admin and is_legacy_admin(role)
