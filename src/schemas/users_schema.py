from typing import Optional
from pydantic import BaseModel, computed_field

from .roles_schema import LogRead


class UsersRead(BaseModel):
    id: str
    ext_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    role_name: Optional[str] = None
    is_active: bool = True
    log: Optional[LogRead] = None

    @computed_field
    @property
    def role(self) -> Optional[str]:
        """Same as ``role_name``; the panel reads the logged user's role from ``role``."""
        return self.role_name


class UsersCreate(BaseModel):
    ext_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    role_name: Optional[str] = None
    is_active: bool = True


class UsersUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    role_name: Optional[str] = None
    is_active: Optional[bool] = None


class UserRoleUpdate(BaseModel):
    role_name: str
