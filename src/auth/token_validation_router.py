from fastapi import APIRouter, Depends

from auth.access_utils import current_role, get_current_user, get_resolver
from services.permission_resolver import PermissionResolver

router = APIRouter(tags=["Authentication"], prefix="/auth")


@router.get("/token/validate", summary="Validate a keycloak token")
def validate_local_token(
    current_user: dict = Depends(get_current_user),
    resolver: PermissionResolver = Depends(get_resolver),
):
    """Token payload plus the resolved permissions of the caller's role."""
    return {
        "valid": True,
        "payload": current_user,
        "permissions": resolver.resolve_all(current_role(current_user)),
    }
