from typing import Optional

from constants.roles import BUILTIN_ROLE_NAMES, is_super_admin
from models.roles import Role
from models.users import User
from schemas.users_schema import UsersCreate, UsersUpdate, UsersRead
from tools.logger import logger
from .base_service import BaseService
from .exceptions import RoleChangeForbidden, RoleNotFound


class UsersService(
    BaseService[
        User,
        UsersCreate,
        UsersRead,
        UsersUpdate
    ]
):
    def __init__(self):
        super().__init__(User, UsersRead)

    def get_or_create_from_token(self, payload: dict) -> User:
        """
        Loads the user behind a validated token, creating it on first login.
        New users get no role, which resolves to no permissions.
        """
        ext_id = payload.get("sub")
        user_obj = User.objects(ext_id=ext_id).first()
        if not user_obj:
            user_obj = User(
                ext_id=ext_id,
                first_name=payload.get("given_name", ""),
                last_name=payload.get("family_name", ""),
                email=payload.get("email"),
                is_active=True
            )
            user_obj.save()
            logger.info(f"User created on first login: {ext_id}")
        return user_obj

    def assign_role(self, user_id: str, role_name: str, assigner_role: Optional[str], assigner_id: Optional[str] = None) -> UsersRead:
        """
        Assigns a role to a user. Only Super Admins may hand out "Super Admin".
        """
        if is_super_admin(role_name) and not is_super_admin(assigner_role):
            raise RoleChangeForbidden("Only Super Admins can assign the Super Admin role")
        if role_name not in BUILTIN_ROLE_NAMES and not Role.objects(role_name=role_name).first():
            raise RoleNotFound(role_name)
        user = self.update(user_id, UsersUpdate(role_name=role_name), assigner_id)
        logger.info(f"Role {role_name!r} assigned to user {user_id}")
        return user
