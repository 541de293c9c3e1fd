from conftest import ADMIN_EMAIL, SUPER_ADMIN_EMAIL

from scholarstream.models import Role, User


def test_create_user(client):
    response = client.post("/users", json={"name": "Ada", "email": "Ada@Example.com", "photo": "ada.png"})

    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "ada@example.com"
    assert body["role"] == "Student"
    assert "createdAt" in body


def test_create_existing_user(client):
    client.post("/users", json={"email": "ada@example.com"})

    response = client.post("/users", json={"email": "ada@example.com", "name": "Again"})

    assert response.status_code == 200
    assert response.json() == {"message": "User already exists"}


def test_bootstrap_identities_get_their_role(client):
    admin = client.post("/users", json={"email": ADMIN_EMAIL}).json()
    owner = client.post("/users", json={"email": SUPER_ADMIN_EMAIL}).json()

    assert admin["role"] == "Admin"
    assert owner["role"] == "SuperAdmin"


def test_list_users_requires_admin(client, make_user, auth_headers):
    make_user("student@example.com")
    make_user(ADMIN_EMAIL, Role.ADMIN)

    assert client.get("/users", headers=auth_headers("student@example.com")).status_code == 403

    response = client.get("/users", headers=auth_headers(ADMIN_EMAIL))
    assert response.status_code == 200
    assert {u["email"] for u in response.json()} == {"student@example.com", ADMIN_EMAIL}


def test_get_role(client, make_user, auth_headers):
    make_user("mod@example.com", Role.MODERATOR)
    headers = auth_headers("mod@example.com")

    assert client.get("/users/mod@example.com/role", headers=headers).json() == {"role": "Moderator"}
    assert client.get("/users/nobody@example.com/role", headers=headers).json() == {"role": "Student"}


def test_admin_changes_role(client, db, make_user, auth_headers):
    make_user(ADMIN_EMAIL, Role.ADMIN)
    student = make_user("student@example.com")

    response = client.patch(
        f"/users/role/{student.id}", json={"role": "Moderator"}, headers=auth_headers(ADMIN_EMAIL)
    )

    assert response.status_code == 200
    assert response.json()["result"]["role"] == "Moderator"
    db.expire_all()
    assert db.get(User, student.id).role == "Moderator"


def test_role_change_without_governing_role_is_forbidden(client, db, make_user, auth_headers):
    make_user("mod@example.com", Role.MODERATOR)
    student = make_user("student@example.com")

    response = client.patch(
        f"/users/role/{student.id}", json={"role": "Moderator"}, headers=auth_headers("mod@example.com")
    )

    assert response.status_code == 403
    db.expire_all()
    assert db.get(User, student.id).role == "Student"


def test_bootstrap_role_cannot_change(client, db, make_user, auth_headers):
    make_user(SUPER_ADMIN_EMAIL, Role.SUPER_ADMIN)
    admin = make_user(ADMIN_EMAIL, Role.ADMIN)

    response = client.patch(
        f"/users/role/{admin.id}", json={"role": "Student"}, headers=auth_headers(SUPER_ADMIN_EMAIL)
    )

    assert response.status_code == 403
    db.expire_all()
    assert db.get(User, admin.id).role == "Admin"


def test_role_change_rejects_unknown_role(client, make_user, auth_headers):
    make_user(ADMIN_EMAIL, Role.ADMIN)
    student = make_user("student@example.com")

    response = client.patch(
        f"/users/role/{student.id}", json={"role": "Wizard"}, headers=auth_headers(ADMIN_EMAIL)
    )
    assert response.status_code == 422


def test_role_change_missing_user(client, make_user, auth_headers):
    make_user(ADMIN_EMAIL, Role.ADMIN)

    response = client.patch("/users/role/nope", json={"role": "Moderator"}, headers=auth_headers(ADMIN_EMAIL))
    assert response.status_code == 404


def test_delete_user(client, db, make_user, auth_headers):
    make_user(ADMIN_EMAIL, Role.ADMIN)
    student = make_user("student@example.com")

    response = client.delete(f"/users/{student.id}", headers=auth_headers(ADMIN_EMAIL))

    assert response.status_code == 200
    db.expire_all()
    assert db.get(User, student.id) is None
    assert client.delete(f"/users/{student.id}", headers=auth_headers(ADMIN_EMAIL)).status_code == 404


def test_bootstrap_user_cannot_be_deleted(client, make_user, auth_headers):
    make_user(SUPER_ADMIN_EMAIL, Role.SUPER_ADMIN)
    admin = make_user(ADMIN_EMAIL, Role.ADMIN)

    response = client.delete(f"/users/{admin.id}", headers=auth_headers(SUPER_ADMIN_EMAIL))
    assert response.status_code == 403
