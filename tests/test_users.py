from conftest import PASSWORD, make_account
from backoffice.data.database.user_model import Role


def register(client, email, name="New User", password="hunter22"):
    return client.post("/auth/register", json={"name": name, "email": email, "password": password})


def test_first_user_is_admin_then_customers(client):
    first = register(client, "founder@example.com")
    second = register(client, "shopper@example.com")

    assert first.status_code == 201
    assert first.json()["role"] == "ADMIN"
    assert second.status_code == 201
    assert second.json()["role"] == "CUSTOMER"


def test_password_is_never_returned(client):
    body = register(client, "private@example.com").json()

    assert "password" not in body
    assert "password_hash" not in body


def test_duplicate_email_is_a_conflict(client):
    register(client, "dup@example.com")

    response = register(client, "DUP@example.com")

    assert response.status_code == 409
    assert response.json()["code"] == "DuplicateEmail"


def test_registration_validation(client):
    assert register(client, "not-an-email").status_code == 400
    assert register(client, "short@example.com", password="123").status_code == 400
    assert register(client, "blank@example.com", name="   ").status_code == 400


def test_login_me_and_logout(client):
    register(client, "clerk@example.com", name="Clerk", password="pa55word")

    login = client.post("/auth/login", json={"email": "clerk@example.com", "password": "pa55word"})
    assert login.status_code == 200
    token = login.json()["access_token"]
    assert login.json()["token_type"] == "bearer"
    headers = {"Authorization": f"Bearer {token}"}

    me = client.get("/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["email"] == "clerk@example.com"

    assert client.post("/auth/logout", headers=headers).status_code == 204
    assert client.get("/auth/me", headers=headers).status_code == 401


def test_login_rejects_bad_credentials(client):
    register(client, "someone@example.com", password="correct-horse")

    wrong_password = client.post("/auth/login", json={"email": "someone@example.com", "password": "nope"})
    unknown_user = client.post("/auth/login", json={"email": "nobody@example.com", "password": "nope"})

    assert wrong_password.status_code == 401
    assert unknown_user.status_code == 401


def test_unknown_token_is_anonymous(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-real-token"})

    assert response.status_code == 401


def test_user_listing_is_admin_only(client, admin, staff):
    listed = client.get("/users", headers=admin.headers)

    assert listed.status_code == 200
    emails = {user["email"] for user in listed.json()}
    assert emails == {admin.email, staff.email}
    assert all("password_hash" not in user for user in listed.json())
    assert client.get("/users", headers=staff.headers).status_code == 401


def test_admin_changes_another_users_role(client, admin, customer):
    response = client.patch(f"/users/{customer.id}/role", json={"role": "STAFF"}, headers=admin.headers)

    assert response.status_code == 200
    assert response.json()["role"] == "STAFF"
    # The new role applies to the customer's existing session
    assert client.get("/orders", headers=customer.headers).status_code == 200


def test_admin_cannot_change_own_role(client, admin):
    response = client.patch(f"/users/{admin.id}/role", json={"role": "CUSTOMER"}, headers=admin.headers)

    assert response.status_code == 401
    me = client.get("/auth/me", headers=admin.headers)
    assert me.json()["role"] == "ADMIN"


def test_role_update_errors(client, admin, staff):
    other = make_account(Role.CUSTOMER, email="other@example.com")

    assert client.patch(f"/users/{other.id}/role", json={"role": "ADMIN"}, headers=staff.headers).status_code == 401
    assert client.patch(f"/users/{other.id}/role", json={"role": "OWNER"}, headers=admin.headers).status_code == 400
    assert client.patch("/users/5555/role", json={"role": "STAFF"}, headers=admin.headers).status_code == 404


def test_seeded_accounts_can_log_in(client, staff):
    response = client.post("/auth/login", json={"email": staff.email, "password": PASSWORD})

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "STAFF"
