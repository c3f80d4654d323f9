import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from constants.permissions import default_permission_set, legacy_admin_permission_set
from models.log import Log
from models.roles import Role
from services.exceptions import PermissionStorageError, PermissionValidationError, RoleNotFound
from services.permission_store import MongoPermissionStore

pytestmark = pytest.mark.usefixtures("db")


def _role(name, permissions=None):
    return Role(role_name=name, description=f"{name} role", permissions=permissions, log=Log()).save()


@pytest.fixture
def store():
    return MongoPermissionStore()


def test_missing_role_reads_none(store):
    assert store.get_permissions("Ghost") is None


def test_role_without_stored_set_reads_none(store):
    _role("Editor")
    assert store.get_permissions("Editor") is None


def test_empty_set_is_not_none(store):
    _role("Editor", {})
    assert store.get_permissions("Editor") == {}


def test_set_then_get_round_trip(store):
    _role("Editor")
    permissions = {"Firmalar": {"view": True, "edit": False}, "Raporlar": {"view": True}}
    store.set_permissions("Editor", permissions, user_id=str(ObjectId()))
    assert store.get_permissions("Editor") == permissions
    assert Role.objects.get(role_name="Editor").log.updated_at is not None


def test_set_replaces_whole_set(store):
    _role("Editor", {"Firmalar": {"view": True}, "Bayiler": {"view": True}})
    store.set_permissions("Editor", {"Raporlar": {"view": True}})
    assert store.get_permissions("Editor") == {"Raporlar": {"view": True}}


def test_invalid_set_is_rejected_and_stored_set_kept(store):
    original = {"Firmalar": {"view": True}}
    _role("Editor", original)
    with pytest.raises(PermissionValidationError) as exc_info:
        store.set_permissions("Editor", {"Firmalar": {"view": True}, "Unknown": {"view": True}})
    assert exc_info.value.problems == ["Unknown module: Unknown"]
    assert store.get_permissions("Editor") == original


def test_set_on_missing_role(store):
    with pytest.raises(RoleNotFound):
        store.set_permissions("Ghost", {})


def test_merge_starts_from_all_false(store):
    _role("Editor")
    merged = store.merge_permissions("Editor", {"Bayiler": {"view": True}})
    expected = default_permission_set()
    expected["Bayiler"]["view"] = True
    assert merged == expected
    assert store.get_permissions("Editor") == expected


def test_merge_on_admin_without_set_keeps_legacy_default(store):
    _role("Admin")
    merged = store.merge_permissions("Admin", {"Blog": {"view": True}})
    expected = legacy_admin_permission_set()
    expected["Blog"]["view"] = True
    assert merged == expected
    assert store.get_permissions("Admin")["Firmalar"]["view"] is True


def test_merge_over_given_base(store):
    _role("Editor")
    base = default_permission_set()
    base["Raporlar"]["view"] = True
    merged = store.merge_permissions("Editor", {"Bayiler": {"view": True}}, base=base)
    assert merged["Raporlar"]["view"] is True
    assert merged["Bayiler"]["view"] is True
    # stored sets win over the base
    merged = store.merge_permissions("Editor", {"Blog": {"view": True}}, base=default_permission_set())
    assert merged["Raporlar"]["view"] is True


def test_merge_keeps_other_modules(store):
    _role("Editor", {"Firmalar": {"view": True}})
    merged = store.merge_permissions("Editor", {"Firmalar": {"edit": True}, "Raporlar": {"view": True}})
    assert merged == {"Firmalar": {"view": True, "edit": True}, "Raporlar": {"view": True}}


def test_merge_validates_partial(store):
    _role("Editor", {"Firmalar": {"view": True}})
    with pytest.raises(PermissionValidationError):
        store.merge_permissions("Editor", {"Firmalar": {"view": "true"}})
    assert store.get_permissions("Editor") == {"Firmalar": {"view": True}}


def test_list_roles_omits_permissions(store):
    _role("Editor", {"Firmalar": {"view": True}})
    _role("Viewer")
    roles = store.list_roles()
    assert {r["role_name"] for r in roles} == {"Editor", "Viewer"}
    assert all("permissions" not in r for r in roles)
    assert all(isinstance(r["id"], str) for r in roles)


def test_delete_role(store):
    _role("Editor", {"Firmalar": {"view": True}})
    store.delete_role("Editor")
    assert store.get_permissions("Editor") is None
    with pytest.raises(RoleNotFound):
        store.delete_role("Editor")


class _UnreachableRole:
    @staticmethod
    def objects(*args, **kwargs):
        raise ServerSelectionTimeoutError("no servers")


def test_driver_errors_become_storage_errors(store, monkeypatch):
    monkeypatch.setattr("services.permission_store.Role", _UnreachableRole)
    with pytest.raises(PermissionStorageError) as exc_info:
        store.get_permissions("Editor")
    assert isinstance(exc_info.value.cause, ServerSelectionTimeoutError)
    with pytest.raises(PermissionStorageError):
        store.delete_role("Editor")
