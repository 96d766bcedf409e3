from tests.helpers import create_client, dec


def test_account_payment_replays_with_same_idempotency_key(client, auth_headers):
    customer = create_client(client, auth_headers)
    client_id = customer["id"]

    charge = client.post(f"/accounts/{client_id}/charges", headers=auth_headers, json={"amount": "500.00"})
    assert charge.status_code == 200

    headers = {**auth_headers, "Idempotency-Key": "pago-1"}
    payload = {"amount": "200.00", "description": "Pago en efectivo"}
    first = client.post(f"/accounts/{client_id}/payments", headers=headers, json=payload)
    assert first.status_code == 200

    replay = client.post(f"/accounts/{client_id}/payments", headers=headers, json=payload)
    assert replay.status_code == 200
    assert replay.json() == first.json()

    account = client.get(f"/accounts/{client_id}", headers=auth_headers).json()
    assert dec(account["balance"]) == dec("300.00")
    assert len(account["movements"]) == 2


def test_idempotency_key_reused_with_other_payload(client, auth_headers):
    client_id = create_client(client, auth_headers)["id"]
    headers = {**auth_headers, "Idempotency-Key": "pago-2"}

    first = client.post(f"/accounts/{client_id}/payments", headers=headers, json={"amount": "10.00"})
    assert first.status_code == 200

    conflict = client.post(f"/accounts/{client_id}/payments", headers=headers, json={"amount": "99.00"})
    assert conflict.status_code == 409
    assert conflict.json()["code"] == "IDEMPOTENCY_KEY_REUSED"


def test_payment_with_zero_amount(client, auth_headers):
    client_id = create_client(client, auth_headers)["id"]

    response = client.post(f"/accounts/{client_id}/payments", headers=auth_headers, json={"amount": "0"})

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_AMOUNT"


def test_unknown_account(client, auth_headers):
    response = client.get("/accounts/4040", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["code"] == "CLIENT_NOT_FOUND"


def test_account_statement_pdf(client, auth_headers):
    client_id = create_client(client, auth_headers, name="Panadería Ñandú")["id"]
    client.post(f"/accounts/{client_id}/charges", headers=auth_headers, json={"amount": "75.50"})

    response = client.get(f"/accounts/{client_id}/pdf", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_client_with_debt_cannot_be_deleted(client, auth_headers):
    client_id = create_client(client, auth_headers)["id"]
    client.post(f"/accounts/{client_id}/charges", headers=auth_headers, json={"amount": "10.00"})

    response = client.delete(f"/clients/{client_id}", headers=auth_headers)
    assert response.status_code == 400

    detail = client.get(f"/clients/{client_id}", headers=auth_headers).json()
    assert dec(detail["balance"]) == dec("10.00")
    assert detail["is_active"] is True


def test_requests_without_token_are_rejected(client):
    response = client.get("/accounts/1")
    assert response.status_code == 401
