from typing import List, Optional

from config import PREVENT_SELF_ROLE_DELETE
from constants.permissions import default_permission_set, validate_permission_set
from constants.roles import BUILTIN_ROLE_NAMES, is_super_admin
from models.roles import Role
from models.users import User
from schemas.roles_schema import RolesCreate, RolesRead, RolesUpdate, RoleSummary
from tools.logger import logger
from .base_service import BaseService
from .exceptions import PermissionValidationError, RoleChangeForbidden
from .permission_store import MongoPermissionStore, PermissionStore


class RoleService(
    BaseService[
        Role,
        RolesCreate,
        RolesRead,
        RolesUpdate
    ]
):
    def __init__(self, store: Optional[PermissionStore] = None, prevent_self_delete: Optional[bool] = None):
        super().__init__(Role, RolesRead)
        self.store = store or MongoPermissionStore()
        self.prevent_self_delete = PREVENT_SELF_ROLE_DELETE if prevent_self_delete is None else prevent_self_delete

    def list_for_caller(self, caller_role: Optional[str]) -> List[RoleSummary]:
        """Role metadata, newest first. "Super Admin" is only listed for Super Admins."""
        return [
            RoleSummary.model_validate(role)
            for role in self.store.list_roles()
            if is_super_admin(caller_role) or not is_super_admin(role["role_name"])
        ]

    def create(self, obj_in: RolesCreate, user_id: Optional[str] = None) -> RolesRead:
        """New roles start with an explicit all-false set unless one is supplied."""
        if obj_in.role_name in BUILTIN_ROLE_NAMES:
            raise RoleChangeForbidden(f"'{obj_in.role_name}' is a reserved role name")

        data = obj_in.model_dump()
        if data.get("permissions") is None:
            data["permissions"] = default_permission_set()
        else:
            problems = validate_permission_set(data["permissions"])
            if problems:
                raise PermissionValidationError(problems)
        role = super().create(data, user_id)
        logger.info(f"Role created: {role.role_name!r}")
        return role

    def update(self, id: str, obj_in: RolesUpdate, user_id: Optional[str] = None) -> RolesRead:
        """
        Renames or re-describes a role. Built-in roles cannot be renamed and no role can
        take a built-in name. Users holding the old name follow the rename.
        """
        current = self._get_document(id)
        new_name = obj_in.role_name
        renaming = new_name is not None and new_name != current.role_name
        if renaming:
            if current.role_name in BUILTIN_ROLE_NAMES:
                raise RoleChangeForbidden(f"Built-in role '{current.role_name}' cannot be renamed")
            if new_name in BUILTIN_ROLE_NAMES:
                raise RoleChangeForbidden(f"'{new_name}' is a reserved role name")

        role = super().update(id, obj_in, user_id)
        if renaming:
            moved = User.objects(role_name=current.role_name).update(set__role_name=new_name)
            logger.info(f"Role renamed {current.role_name!r} -> {new_name!r}, {moved} user(s) updated")
        return role

    def delete(self, id: str, caller_role: Optional[str] = None) -> None:
        """
        Deletes a role. Users still holding the name resolve to no permissions.
        Built-in roles are never deleted.
        """
        role = self._get_document(id)
        if role.role_name in BUILTIN_ROLE_NAMES:
            raise RoleChangeForbidden(f"Built-in role '{role.role_name}' cannot be deleted")
        if self.prevent_self_delete and caller_role == role.role_name:
            raise RoleChangeForbidden("You cannot delete the role you are currently using")
        super().delete(id)
        logger.info(f"Role deleted: {role.role_name!r}")
