from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError
import requests

from config import KEYCLOAK_URL, KEYCLOAK_REALM, HTTP_TIMEOUT
from services.permission_resolver import PermissionResolver
from services.permission_store import MongoPermissionStore
from services.users_service import UsersService
from tools.logger import logger
from tools.utils import serialize_log

security = HTTPBearer()
users_service = UsersService()
permission_resolver = PermissionResolver(MongoPermissionStore())


def get_resolver() -> PermissionResolver:
    return permission_resolver


def get_jwks():
    jwks_url = f"{KEYCLOAK_URL}/realms/{KEYCLOAK_REALM}/protocol/openid-connect/certs"

    try:
        response = requests.get(jwks_url, timeout=HTTP_TIMEOUT)
    except requests.RequestException as e:
        logger.error(f"JWKS request failed: {e}")
        raise HTTPException(status_code=503, detail="Could not fetch the identity provider public keys (JWKS)")
    if response.status_code != 200:
        raise HTTPException(status_code=500, detail="Could not fetch the identity provider public keys (JWKS)")
    return response.json()


def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    token = credentials.credentials
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {str(e)}")

    jwks = get_jwks()
    key = next((k for k in jwks["keys"] if k["kid"] == unverified_header.get("kid")), None)
    if not key:
        raise HTTPException(status_code=401, detail="Public key not found")

    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=[unverified_header["alg"]],
            audience="account",
            issuer=f"{KEYCLOAK_URL}/realms/{KEYCLOAK_REALM}",
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except JWTError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {str(e)}")

    user_obj = users_service.get_or_create_from_token(payload)
    if not user_obj.is_active:
        raise HTTPException(status_code=403, detail="User is not active or not authorized")

    payload = {
        k: v for k, v in payload.items()
        if k not in ["realm_access", "allowed-origins", "resource_access"]
    }
    payload["user_db"] = {
        "id": str(user_obj.id),
        "is_active": user_obj.is_active,
        "role": user_obj.role_name,
        "log": serialize_log(user_obj.log),
    }
    return payload


def current_role(user: dict):
    return user["user_db"].get("role")


def require_permission(module: str, action: str):
    """
    Dependency that only lets the request through when the caller's role may perform
    ``action`` on ``module``. Returns the current user payload.
    """
    def checker(user: dict = Depends(get_current_user), resolver: PermissionResolver = Depends(get_resolver)) -> dict:
        role = current_role(user)
        if not resolver.check(role, module, action):
            logger.warning(f"Access denied: role {role!r} lacks {module}.{action}")
            raise HTTPException(status_code=403, detail="Access denied")
        return user
    return checker
