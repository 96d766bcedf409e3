def test_login_and_me(client, auth_headers):
    response = client.get("/users/me", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["username"] == "admin"


def test_wrong_password(client, admin_user):
    response = client.post("/auth/login", data={"username": "admin", "password": "nope"})

    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_inactive_user_cannot_login(client, admin_user, db_session):
    admin_user.is_active = False
    db_session.commit()

    response = client.post("/auth/login", data={"username": "admin", "password": "Pass1234!"})

    assert response.status_code == 401


def test_validation_errors_use_error_format(client, auth_headers):
    response = client.post("/sales/", headers=auth_headers, json={"payments": []})

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert any(e["field"] == "items" for e in body["details"]["errors"])
