import pytest

from constants.permissions import default_permission_set, legacy_admin_permission_set
from models.log import Log
from models.roles import Role
from models.users import User


def _role(name, permissions=None):
    return Role(role_name=name, permissions=permissions, log=Log()).save()


@pytest.fixture
def editor(seeded_db):
    return _role("Editor", {"Firmalar": {"view": True}, "Roller": {"view": True, "delete": True}})


def test_own_role_needs_only_authentication(client, login, editor):
    login("Editor")
    response = client.get("/roles/rolekontrol", params={"role": "Editor"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["Firmalar"]["view"] is True
    assert body["data"]["Firmalar"]["delete"] is False
    assert body["data"]["Blog"] == {"view": False, "create": False, "edit": False, "delete": False}


def test_other_role_needs_roles_view(client, login):
    _role("Viewer", {"Raporlar": {"view": True}})
    login("Viewer")
    response = client.get("/roles/list-permissions", params={"role": "Admin"})
    assert response.status_code == 403
    assert response.json()["success"] is False


def test_admin_reads_legacy_default(client, login):
    login("Admin")
    response = client.get("/roles/list-permissions", params={"role": "Admin"})
    assert response.status_code == 200
    assert response.json()["data"] == legacy_admin_permission_set()


def test_check_endpoint(client, login, editor):
    login("Editor")
    response = client.get("/roles/check", params={"role": "Editor", "module": "Firmalar", "action": "view"})
    assert response.status_code == 200
    assert response.json()["data"]["allowed"] is True

    response = client.get("/roles/check", params={"role": "Editor", "module": "Firmalar", "action": "edit"})
    assert response.json()["data"]["allowed"] is False


def test_check_unknown_module_is_bad_request(client, login, editor):
    login("Editor")
    response = client.get("/roles/check", params={"role": "Editor", "module": "UnknownModule", "action": "view"})
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_replace_permissions(client, login, editor):
    login("Super Admin")
    response = client.post(
        "/roles/update-permissions",
        json={"role": "Editor", "permissions": {"Bayiler": {"view": True}}},
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Role permissions updated"
    assert Role.objects.get(role_name="Editor").permissions == {"Bayiler": {"view": True}}


def test_invalid_permissions_are_rejected(client, login, editor):
    login("Super Admin")
    before = Role.objects.get(role_name="Editor").permissions
    response = client.post(
        "/roles/update-permissions",
        json={"role": "Editor", "permissions": {"UnknownModule": {"view": True}}},
    )
    assert response.status_code == 400
    assert response.json()["errors"] == ["Unknown module: UnknownModule"]
    assert Role.objects.get(role_name="Editor").permissions == before


def test_update_permissions_for_missing_role(client, login):
    login("Super Admin")
    response = client.post("/roles/update-permissions", json={"role": "Ghost", "permissions": {}})
    assert response.status_code == 404


def test_update_permissions_needs_roles_edit(client, login, editor):
    login("Editor")
    response = client.post("/roles/update-permissions", json={"role": "Editor", "permissions": {}})
    assert response.status_code == 403
    assert Role.objects.get(role_name="Editor").permissions["Firmalar"] == {"view": True}


def test_merge_permissions(client, login, editor):
    login("Admin")
    response = client.patch(
        "/roles/update-permissions",
        json={"role": "Editor", "permissions": {"Firmalar": {"edit": True}}},
    )
    assert response.status_code == 200
    assert response.json()["data"]["Firmalar"] == {"view": True, "edit": True}
    assert response.json()["data"]["Roller"] == {"view": True, "delete": True}


def test_merge_into_admin_keeps_legacy_capabilities(client, login):
    login("Super Admin")
    response = client.patch(
        "/roles/update-permissions",
        json={"role": "Admin", "permissions": {"Blog": {"view": True}}},
    )
    assert response.status_code == 200
    login("Admin")
    data = client.get("/roles/rolekontrol", params={"role": "Admin"}).json()["data"]
    assert data["Firmalar"]["view"] is True
    assert data["Roller"]["edit"] is True
    assert data["Blog"]["view"] is True
    assert data["Blog"]["delete"] is False


def test_list_hides_super_admin_from_others(client, login, editor):
    login("Admin")
    names = {r["role_name"] for r in client.get("/roles/").json()["data"]}
    assert names == {"Admin", "Editor"}

    login("Super Admin")
    names = {r["role_name"] for r in client.get("/roles/").json()["data"]}
    assert names == {"Super Admin", "Admin", "Editor"}


def test_get_super_admin_role_by_id_is_hidden(client, login):
    super_admin = Role.objects.get(role_name="Super Admin")
    login("Admin")
    assert client.get(f"/roles/{super_admin.id}").status_code == 404
    login("Super Admin")
    assert client.get(f"/roles/{super_admin.id}").json()["data"]["role_name"] == "Super Admin"


def test_create_role_starts_with_nothing(client, login):
    login("Admin")
    response = client.post("/roles/", json={"role_name": "Muhasebe", "description": "Accounting"})
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["role_name"] == "Muhasebe"
    assert data["permissions"] == default_permission_set()


def test_create_role_with_invalid_permissions(client, login):
    login("Admin")
    response = client.post("/roles/", json={"role_name": "Bayi", "permissions": {"Bayiler": {"fly": True}}})
    assert response.status_code == 400
    assert Role.objects(role_name="Bayi").first() is None


def test_builtin_names_are_reserved(client, login):
    login("Super Admin")
    assert client.post("/roles/", json={"role_name": "Admin"}).status_code == 409


def test_rename_moves_users(client, login, editor):
    User(ext_id="u-1", role_name="Editor").save()
    login("Admin")
    response = client.put(f"/roles/{editor.id}", json={"role_name": "Yazar"})
    assert response.status_code == 200
    assert response.json()["data"]["role_name"] == "Yazar"
    assert User.objects.get(ext_id="u-1").role_name == "Yazar"


def test_builtin_roles_cannot_be_renamed(client, login, editor):
    admin = Role.objects.get(role_name="Admin")
    login("Super Admin")
    assert client.put(f"/roles/{admin.id}", json={"role_name": "Yonetici"}).status_code == 409
    assert client.put(f"/roles/{editor.id}", json={"role_name": "Super Admin"}).status_code == 409
    # description only is fine
    assert client.put(f"/roles/{admin.id}", json={"description": "Legacy"}).status_code == 200


def test_delete_role(client, login, editor):
    login("Admin")
    response = client.delete(f"/roles/{editor.id}")
    assert response.status_code == 200
    assert Role.objects(role_name="Editor").first() is None

    login("Super Admin")
    data = client.get("/roles/rolekontrol", params={"role": "Editor"}).json()["data"]
    assert data == default_permission_set()


def test_builtin_roles_cannot_be_deleted(client, login):
    admin = Role.objects.get(role_name="Admin")
    login("Super Admin")
    response = client.delete(f"/roles/{admin.id}")
    assert response.status_code == 409
    assert Role.objects(role_name="Admin").first() is not None


def test_own_role_cannot_be_deleted(client, login, editor):
    login("Editor")
    response = client.delete(f"/roles/{editor.id}")
    assert response.status_code == 409
    assert Role.objects(role_name="Editor").first() is not None


def test_invalid_role_id(client, login):
    login("Admin")
    assert client.get("/roles/not-an-id").status_code == 400
