from abc import ABC, abstractmethod
from contextlib import contextmanager
from copy import deepcopy
from datetime import datetime, timezone
from typing import Dict, List, Optional

from bson import ObjectId
from mongoengine import OperationError
from pymongo.errors import PyMongoError

from constants.permissions import default_permission_set, legacy_admin_permission_set, validate_permission_set
from constants.roles import is_legacy_admin
from models.roles import Role
from tools.logger import get_logger
from tools.utils import serialize_document
from .exceptions import PermissionStorageError, PermissionValidationError, RoleNotFound

logger = get_logger("permission_store")


class PermissionStore(ABC):
    """Durable mapping role name -> permission set."""

    @abstractmethod
    def get_permissions(self, role: str) -> Optional[Dict[str, Dict[str, bool]]]:
        """
        Returns the stored set, or None when the role has no stored set (or does not
        exist). An explicitly empty set is returned as ``{}``.
        """

    @abstractmethod
    def set_permissions(self, role: str, permissions: dict, user_id: Optional[str] = None) -> None:
        """Replaces the whole set. Raises PermissionValidationError or RoleNotFound."""

    @abstractmethod
    def list_roles(self) -> List[dict]:
        """Role metadata, newest first, without permission payloads."""

    @abstractmethod
    def delete_role(self, role: str) -> None:
        """Raises RoleNotFound if there is nothing to delete."""

    def merge_permissions(self, role: str, partial: dict, user_id: Optional[str] = None,
                          base: Optional[Dict[str, Dict[str, bool]]] = None) -> Dict[str, Dict[str, bool]]:
        """
        Applies a partial update on top of the stored set and writes the merged result
        as a whole. When nothing is stored the update lands on ``base`` (the role's
        resolved view) or, without one, on the role's fallback: the legacy default for
        "Admin", all-false for anyone else.
        """
        problems = validate_permission_set(partial)
        if problems:
            raise PermissionValidationError(problems)
        current = self.get_permissions(role)
        if current is not None:
            merged = deepcopy(current)
        elif base is not None:
            merged = deepcopy(base)
        elif is_legacy_admin(role):
            merged = legacy_admin_permission_set()
        else:
            merged = default_permission_set()
        for module, record in partial.items():
            merged.setdefault(module, {}).update(record)
        self.set_permissions(role, merged, user_id)
        return merged


@contextmanager
def _storage_errors(operation: str):
    try:
        yield
    except (PyMongoError, OperationError) as e:
        logger.error(f"Storage error during {operation}: {e}")
        raise PermissionStorageError(f"Storage error during {operation}", cause=e) from e


class MongoPermissionStore(PermissionStore):

    def get_permissions(self, role: str) -> Optional[Dict[str, Dict[str, bool]]]:
        with _storage_errors("get_permissions"):
            doc = Role.objects(role_name=role).only("permissions").as_pymongo().first()
        if doc is None:
            return None
        return doc.get("permissions")

    def set_permissions(self, role: str, permissions: dict, user_id: Optional[str] = None) -> None:
        problems = validate_permission_set(permissions)
        if problems:
            logger.warning(f"Rejected permission update for role {role!r}: {problems}")
            raise PermissionValidationError(problems)

        update = {
            "set__permissions": deepcopy(permissions),
            "set__log__updated_at": datetime.now(timezone.utc),
        }
        if user_id is not None:
            update["set__log__updater_user_id"] = ObjectId(user_id)

        with _storage_errors("set_permissions"):
            updated = Role.objects(role_name=role).update_one(**update)
        if not updated:
            raise RoleNotFound(role)
        logger.info(f"Permissions replaced for role {role!r}")

    def list_roles(self) -> List[dict]:
        with _storage_errors("list_roles"):
            roles = Role.objects.exclude("permissions").order_by("-log__created_at")
            result = []
            for r in roles:
                data = serialize_document(r)
                data.pop("permissions", None)
                result.append(data)
            return result

    def delete_role(self, role: str) -> None:
        with _storage_errors("delete_role"):
            deleted = Role.objects(role_name=role).delete()
        if not deleted:
            raise RoleNotFound(role)
        logger.info(f"Role deleted: {role!r}")
