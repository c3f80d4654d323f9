from typing import Dict, List, Tuple

from services.exceptions import InvalidArgument
from tools.logger import get_logger

logger = get_logger("permissions")

ACTION_VIEW = "view"
ACTION_CREATE = "create"
ACTION_EDIT = "edit"
ACTION_DELETE = "delete"
ACTION_LOAD = "load"
ACTION_QUERY = "query"

MODULE_PANEL = "Panel"
MODULE_COMPANIES = "Firmalar"
MODULE_DEALERS = "Bayiler"
MODULE_PANEL_USERS = "Panel-Kullanicilari"
MODULE_PROGRAM_USERS = "Program-Kullanicilari"
MODULE_BALANCE = "Bakiye-Yonetimi"
MODULE_MILEAGE = "Kilometre-Hacker"
MODULE_VIN = "VIN-Hacker"
MODULE_COMMISSION = "Komisyon-Yonetimi"
MODULE_SETTINGS = "Ayarlar"
MODULE_DEVICE_SALES = "Cihaz-Satislari"
MODULE_DEVICE_PURCHASE = "Cihaz-Satin-Al"
MODULE_REPORTS = "Raporlar"
MODULE_ROLES = "Roller"
MODULE_BLOG = "Blog"

_CRUD = (ACTION_VIEW, ACTION_CREATE, ACTION_EDIT, ACTION_DELETE)

# Module -> actions the module supports. Adding a module here is the only way to make
# it assignable; unknown keys are rejected on write.
MODULE_ACTIONS: Dict[str, Tuple[str, ...]] = {
    MODULE_PANEL: (ACTION_VIEW,),
    MODULE_COMPANIES: _CRUD,
    MODULE_DEALERS: _CRUD,
    MODULE_PANEL_USERS: _CRUD,
    MODULE_PROGRAM_USERS: _CRUD,
    MODULE_BALANCE: (ACTION_VIEW, ACTION_LOAD),
    MODULE_MILEAGE: (ACTION_VIEW, ACTION_CREATE, ACTION_QUERY),
    MODULE_VIN: (ACTION_VIEW, ACTION_CREATE, ACTION_QUERY),
    MODULE_COMMISSION: (ACTION_VIEW, ACTION_EDIT),
    MODULE_SETTINGS: (ACTION_VIEW, ACTION_EDIT),
    MODULE_DEVICE_SALES: (ACTION_VIEW, ACTION_CREATE, ACTION_EDIT),
    MODULE_DEVICE_PURCHASE: (ACTION_VIEW, ACTION_CREATE),
    MODULE_REPORTS: (ACTION_VIEW,),
    MODULE_ROLES: _CRUD,
    MODULE_BLOG: _CRUD,
}

# Human readable labels for the role editing form
MODULE_LABELS: Dict[str, str] = {
    MODULE_PANEL: "Panel",
    MODULE_COMPANIES: "Firmalar",
    MODULE_DEALERS: "Bayiler",
    MODULE_PANEL_USERS: "Panel Kullanıcıları",
    MODULE_PROGRAM_USERS: "Program Kullanıcıları",
    MODULE_BALANCE: "Bakiye Yönetimi",
    MODULE_MILEAGE: "Kilometre Hacker",
    MODULE_VIN: "VIN Hacker",
    MODULE_COMMISSION: "Komisyon Yönetimi",
    MODULE_SETTINGS: "Ayarlar",
    MODULE_DEVICE_SALES: "Cihaz Satışları",
    MODULE_DEVICE_PURCHASE: "Cihaz Satın Al",
    MODULE_REPORTS: "Raporlar",
    MODULE_ROLES: "Roller",
    MODULE_BLOG: "Blog",
}

# Modules that existed before stored permission sets. An "Admin" role without a stored
# set gets every action on these.
LEGACY_ADMIN_MODULES = [m for m in MODULE_ACTIONS if m != MODULE_BLOG]


def is_known(module: str, action: str) -> bool:
    return action in MODULE_ACTIONS.get(module, ())


def ensure_known(module: str, action: str) -> None:
    """Raises InvalidArgument if the module or the action for that module is not registered."""
    if module not in MODULE_ACTIONS:
        logger.error(f"Permission check for unknown module: {module!r}")
        raise InvalidArgument(f"Unknown module: {module}")
    if action not in MODULE_ACTIONS[module]:
        logger.error(f"Permission check for unsupported action: {module!r}.{action!r}")
        raise InvalidArgument(f"Action '{action}' is not valid for module '{module}'")


def validate_permission_set(permissions) -> List[str]:
    """
    Returns the list of problems found in a permission set. An empty list means the
    set can be stored as is.
    """
    if not isinstance(permissions, dict):
        return ["Permission set must be an object"]
    problems = []
    for module, record in permissions.items():
        if module not in MODULE_ACTIONS:
            problems.append(f"Unknown module: {module}")
            continue
        if not isinstance(record, dict):
            problems.append(f"Capabilities for {module} must be an object")
            continue
        for action, allowed in record.items():
            if action not in MODULE_ACTIONS[module]:
                problems.append(f"Action '{action}' is not valid for module '{module}'")
            elif not isinstance(allowed, bool):
                problems.append(f"Value of {module}.{action} must be a boolean")
    return problems


def default_permission_set(value: bool = False) -> Dict[str, Dict[str, bool]]:
    return {module: {action: value for action in actions} for module, actions in MODULE_ACTIONS.items()}


def full_permission_set() -> Dict[str, Dict[str, bool]]:
    return default_permission_set(True)


def legacy_admin_permission_set() -> Dict[str, Dict[str, bool]]:
    permissions = default_permission_set(False)
    for module in LEGACY_ADMIN_MODULES:
        permissions[module] = {action: True for action in MODULE_ACTIONS[module]}
    return permissions


def normalize_permission_set(stored: dict) -> Dict[str, Dict[str, bool]]:
    """
    Shapes a stored set into the full registry shape. Missing modules and actions are
    False; keys the registry does not know are dropped.
    """
    permissions = default_permission_set(False)
    for module, record in (stored or {}).items():
        if module not in MODULE_ACTIONS or not isinstance(record, dict):
            logger.warning(f"Ignoring unknown module in stored permissions: {module!r}")
            continue
        for action, allowed in record.items():
            if action in MODULE_ACTIONS[module]:
                permissions[module][action] = allowed is True
            else:
                logger.warning(f"Ignoring unknown action in stored permissions: {module!r}.{action!r}")
    return permissions
