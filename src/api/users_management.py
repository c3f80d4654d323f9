from fastapi import APIRouter, HTTPException, Depends, Path

from auth.access_utils import current_role, get_current_user, require_permission
from constants.permissions import ACTION_EDIT, MODULE_PANEL_USERS
from schemas.response_models import ApiResponse, success_response
from schemas.users_schema import UsersRead, UserRoleUpdate
from services.users_service import UsersService

router = APIRouter(tags=["User Management"])
users_service = UsersService()


@router.get("/api/user", response_model=UsersRead)
def get_logged_user(user=Depends(get_current_user)):
    """
    Returns the logged user, including the role the panel resolves permissions for.
    """
    return users_service.get_by_id(user["user_db"]["id"])


@router.put("/users/{user_id}/role", response_model=ApiResponse[UsersRead])
def assign_user_role(
    user_id: str = Path(..., description="Unique identifier of the user"),
    body: UserRoleUpdate = ...,
    user=Depends(require_permission(MODULE_PANEL_USERS, ACTION_EDIT)),
):
    """
    Assigns a role to a panel user.
    """
    if user_id == user["user_db"]["id"]:
        raise HTTPException(status_code=403, detail="Users cannot change their own role")
    updated = users_service.assign_role(user_id, body.role_name, current_role(user), user["user_db"]["id"])
    return success_response(updated, message="Role assigned")
