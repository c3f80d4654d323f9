from typing import Dict, Optional

from constants.permissions import (
    LEGACY_ADMIN_MODULES,
    default_permission_set,
    ensure_known,
    full_permission_set,
    legacy_admin_permission_set,
    normalize_permission_set,
)
from constants.roles import bypasses_permissions, is_legacy_admin
from tools.logger import get_logger
from .permission_store import PermissionStore

logger = get_logger("permission_resolver")


class PermissionResolver:
    """
    Answers "what can role R do". Stored sets always win over the legacy fallback;
    anything missing resolves to False.
    """

    def __init__(self, store: PermissionStore, admin_equals_super_admin: Optional[bool] = None):
        self.store = store
        self.admin_equals_super_admin = admin_equals_super_admin

    def _bypasses(self, role: str) -> bool:
        return bypasses_permissions(role, self.admin_equals_super_admin)

    def resolve_all(self, role: str) -> Dict[str, Dict[str, bool]]:
        if self._bypasses(role):
            return full_permission_set()

        stored = self.store.get_permissions(role)
        if stored is not None:
            return normalize_permission_set(stored)

        if is_legacy_admin(role):
            logger.info("No stored permissions for Admin, using legacy default")
            return legacy_admin_permission_set()
        logger.info(f"No stored permissions for role {role!r}, denying everything")
        return default_permission_set(False)

    def check(self, role: str, module: str, action: str) -> bool:
        ensure_known(module, action)
        if self._bypasses(role):
            return True

        stored = self.store.get_permissions(role)
        if stored is None:
            return is_legacy_admin(role) and module in LEGACY_ADMIN_MODULES

        record = stored.get(module)
        if not isinstance(record, dict):
            return False
        return record.get(action) is True
