from copy import deepcopy
from typing import Dict, List, Optional

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from mongoengine import connect, disconnect

from constants.permissions import validate_permission_set
from services.exceptions import PermissionValidationError, RoleNotFound
from services.permission_store import PermissionStore

TEST_DB = "dealer_panel_test"


class InMemoryStore(PermissionStore):
    """Dict backed store. ``roles`` maps role name -> stored set or None."""

    def __init__(self, roles: Optional[Dict[str, Optional[dict]]] = None):
        self.roles = dict(roles or {})
        self.reads = 0

    def get_permissions(self, role):
        self.reads += 1
        stored = self.roles.get(role)
        return deepcopy(stored) if stored is not None else None

    def set_permissions(self, role, permissions, user_id=None):
        problems = validate_permission_set(permissions)
        if problems:
            raise PermissionValidationError(problems)
        if role not in self.roles:
            raise RoleNotFound(role)
        self.roles[role] = deepcopy(permissions)

    def list_roles(self) -> List[dict]:
        return [{"id": str(ObjectId()), "role_name": name} for name in self.roles]

    def delete_role(self, role):
        if role not in self.roles:
            raise RoleNotFound(role)
        del self.roles[role]


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def db():
    conn = connect(TEST_DB, host="mongodb://localhost", alias="default", mongo_client_class=mongomock.MongoClient)
    yield conn
    conn.drop_database(TEST_DB)
    disconnect(alias="default")


@pytest.fixture
def seeded_db(db):
    from database import seed_builtin_roles

    seed_builtin_roles()
    return db


@pytest.fixture
def app():
    from main import app as fastapi_app

    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app, seeded_db):
    return TestClient(app)


@pytest.fixture
def login(app):
    """
    Logs a fake user in with the given role. Returns the user payload the endpoints
    will see.
    """
    from auth.access_utils import get_current_user

    def _login(role: Optional[str], user_id: Optional[str] = None) -> dict:
        user = {
            "sub": "test-user",
            "user_db": {
                "id": user_id or str(ObjectId()),
                "is_active": True,
                "role": role,
                "log": None,
            },
        }
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    return _login
