from fastapi import APIRouter, Depends, Response
from typing import List

from auth.access_utils import get_current_user
from constants.navigation import MENU_ENTRIES
from constants.permissions import MODULE_ACTIONS, MODULE_LABELS
from schemas.response_models import ApiResponse, success_response
from schemas.roles_schema import ModuleInfo

router = APIRouter(prefix="/meta", tags=["Meta"])


@router.get("/modules", response_model=ApiResponse[List[ModuleInfo]])
def list_modules(response: Response, user=Depends(get_current_user)):
    """
    Returns the permission modules and the actions each one supports, in the order the
    role editing form shows them.
    """
    modules = [
        ModuleInfo(key=key, label=MODULE_LABELS.get(key, key), actions=list(actions))
        for key, actions in MODULE_ACTIONS.items()
    ]
    # These lists only change with a deploy
    response.headers["Cache-Control"] = "public, max-age=3600"
    return success_response(modules)


@router.get("/navigation")
def list_navigation(response: Response, user=Depends(get_current_user)):
    """
    Returns the menu entries with their module tags so clients can filter them.
    """
    response.headers["Cache-Control"] = "public, max-age=3600"
    return success_response([
        {"href": e.href, "label": e.label, "module": e.module, "visible": e.visible}
        for e in MENU_ENTRIES
    ])
