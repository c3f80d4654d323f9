from fastapi import APIRouter, HTTPException, Depends, Path, Query
from typing import Dict, List

from auth.access_utils import current_role, get_current_user, get_resolver, require_permission
from constants.permissions import ACTION_CREATE, ACTION_DELETE, ACTION_EDIT, ACTION_VIEW, MODULE_ROLES
from constants.roles import is_super_admin
from schemas.response_models import ApiResponse, success_response
from schemas.roles_schema import (
    PermissionCheck,
    PermissionSet,
    PermissionsUpdate,
    RolesCreate,
    RolesRead,
    RolesUpdate,
    RoleSummary,
)
from services.permission_resolver import PermissionResolver
from services.roles_service import RoleService

router = APIRouter(prefix="/roles", tags=["Role Management"])
service_role = RoleService()


def _ensure_can_read_role(user: dict, role: str, resolver: PermissionResolver) -> None:
    """Anyone may resolve their own role; other roles need Roller.view."""
    caller_role = current_role(user)
    if role == caller_role:
        return
    if not resolver.check(caller_role, MODULE_ROLES, ACTION_VIEW):
        raise HTTPException(status_code=403, detail="Not authorized to read other roles")


@router.get("/rolekontrol", response_model=ApiResponse[PermissionSet])
def get_role_permissions(
    role: str = Query(..., min_length=1, description="Role name"),
    user=Depends(get_current_user),
    resolver: PermissionResolver = Depends(get_resolver),
):
    """
    Fully resolved permission set of a role, used by the menu filter and route gate.
    """
    _ensure_can_read_role(user, role, resolver)
    return success_response(resolver.resolve_all(role))


@router.get("/list-permissions", response_model=ApiResponse[PermissionSet])
def list_role_permissions(
    role: str = Query(..., min_length=1, description="Role name"),
    user=Depends(get_current_user),
    resolver: PermissionResolver = Depends(get_resolver),
):
    """
    Same resolution as /rolekontrol, used to pre-fill the role editing form.
    """
    _ensure_can_read_role(user, role, resolver)
    return success_response(resolver.resolve_all(role))


@router.get("/check", response_model=ApiResponse[PermissionCheck])
def check_permission(
    role: str = Query(..., min_length=1),
    module: str = Query(...),
    action: str = Query(...),
    user=Depends(get_current_user),
    resolver: PermissionResolver = Depends(get_resolver),
):
    _ensure_can_read_role(user, role, resolver)
    allowed = resolver.check(role, module, action)
    return success_response(PermissionCheck(role=role, module=module, action=action, allowed=allowed))


@router.post("/update-permissions", response_model=ApiResponse)
def update_role_permissions(
    body: PermissionsUpdate,
    user=Depends(require_permission(MODULE_ROLES, ACTION_EDIT)),
):
    """
    Replaces the whole permission set of a role.
    """
    service_role.store.set_permissions(body.role, body.permissions, user["user_db"]["id"])
    return success_response(message="Role permissions updated")


@router.patch("/update-permissions", response_model=ApiResponse[Dict[str, Dict[str, bool]]])
def merge_role_permissions(
    body: PermissionsUpdate,
    user=Depends(require_permission(MODULE_ROLES, ACTION_EDIT)),
    resolver: PermissionResolver = Depends(get_resolver),
):
    """
    Merges the given modules/actions into the stored set and returns the stored result.
    A role without a stored set is merged over what it currently resolves to.
    """
    merged = service_role.store.merge_permissions(
        body.role, body.permissions, user["user_db"]["id"], base=resolver.resolve_all(body.role)
    )
    return success_response(merged, message="Role permissions updated")


@router.get("/", response_model=ApiResponse[List[RoleSummary]])
def get_all_roles(user=Depends(require_permission(MODULE_ROLES, ACTION_VIEW))):
    return success_response(service_role.list_for_caller(current_role(user)))


@router.post("/", response_model=ApiResponse[RolesRead], status_code=201)
def create_role(
    role: RolesCreate,
    user=Depends(require_permission(MODULE_ROLES, ACTION_CREATE)),
):
    created = service_role.create(role, user["user_db"]["id"])
    return success_response(created, message="Role created")


@router.get("/{role_id}", response_model=ApiResponse[RolesRead])
def get_role_by_id(
    role_id: str = Path(..., description="Role ID"),
    user=Depends(require_permission(MODULE_ROLES, ACTION_VIEW)),
):
    role = service_role.get_by_id(role_id)
    # hide Super Admin role from non-Super-Admin users
    if is_super_admin(role.role_name) and not is_super_admin(current_role(user)):
        raise HTTPException(status_code=404, detail="Role not found")
    return success_response(role)


@router.put("/{role_id}", response_model=ApiResponse[RolesRead])
def update_role(
    role_id: str = Path(..., description="Role ID to update"),
    role: RolesUpdate = ...,
    user=Depends(require_permission(MODULE_ROLES, ACTION_EDIT)),
):
    updated = service_role.update(role_id, role, user["user_db"]["id"])
    return success_response(updated, message="Role updated")


@router.delete("/{role_id}", response_model=ApiResponse)
def delete_role(
    role_id: str = Path(..., description="Role ID to delete"),
    user=Depends(require_permission(MODULE_ROLES, ACTION_DELETE)),
):
    service_role.delete(role_id, caller_role=current_role(user))
    return success_response(message="Role deleted")
