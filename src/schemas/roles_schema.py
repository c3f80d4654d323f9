from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

# Incoming permission payloads are kept loose here; the module registry validates
# them so that unknown keys are reported instead of silently dropped or coerced.
PermissionPayload = Dict[str, Any]
PermissionSet = Dict[str, Dict[str, bool]]


class LogRead(BaseModel):
    creator_user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updater_user_id: Optional[str] = None
    updated_at: Optional[datetime] = None


class RolesCreate(BaseModel):
    role_name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    permissions: Optional[PermissionPayload] = None


class RolesUpdate(BaseModel):
    role_name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class RoleSummary(BaseModel):
    """Role metadata without the permission payload."""
    id: str
    role_name: str
    description: Optional[str] = None
    log: Optional[LogRead] = None


class RolesRead(RoleSummary):
    permissions: Optional[PermissionSet] = None


class PermissionsUpdate(BaseModel):
    role: str = Field(..., min_length=1)
    permissions: PermissionPayload


class PermissionCheck(BaseModel):
    role: str
    module: str
    action: str
    allowed: bool


class ModuleInfo(BaseModel):
    key: str
    label: str
    actions: List[str]
