from tests.helpers import create_client, create_product, dec, open_session, sell


def test_sale_requires_open_session(client, auth_headers):
    product = create_product(client, auth_headers, sku="HAR001")

    response = sell(client, auth_headers, [{"product_id": product["id"]}], [{"method": "CASH", "amount": "100.00"}])

    assert response.status_code == 409
    assert response.json()["code"] == "CASH_SESSION_REQUIRED"


def test_cash_sale_gives_change_and_moves_stock(client, auth_headers):
    open_session(client, auth_headers)
    product = create_product(client, auth_headers, sku="HAR001", price="150.00", cost="90.00", stock="10")

    response = sell(
        client,
        auth_headers,
        [{"product_id": product["id"], "quantity": "2"}],
        [{"method": "CASH", "amount": "500.00"}],
    )

    assert response.status_code == 200, response.text
    sale = response.json()
    assert dec(sale["total"]) == dec("300.00")
    assert dec(sale["change"]) == dec("200.00")
    assert dec(sale["paid"]) == dec("300.00")
    assert [(p["method"], dec(p["amount"])) for p in sale["payments"]] == [("CASH", dec("300.00"))]

    stock = client.get(f"/products/{product['id']}", headers=auth_headers).json()["stock"]
    assert dec(stock) == dec("8")

    kardex = client.get(f"/inventory/kardex/{product['id']}", headers=auth_headers).json()
    assert kardex[0]["type"] == "SALE_OUT"
    assert dec(kardex[0]["qty"]) == dec("-2")
    assert dec(kardex[0]["unit_cost"]) == dec("90")


def test_server_computes_totals_with_discounts(client, auth_headers):
    open_session(client, auth_headers)
    product = create_product(client, auth_headers, sku="DEC001", price="100.00")

    response = sell(
        client,
        auth_headers,
        [{"product_id": product["id"], "quantity": "3", "discount": "20.00"}],
        [{"method": "TRANSFER", "amount": "270.00"}],
        discount="10.00",
    )

    assert response.status_code == 200, response.text
    sale = response.json()
    assert dec(sale["subtotal"]) == dec("280.00")
    assert dec(sale["total"]) == dec("270.00")


def test_insufficient_payment_is_rejected(client, auth_headers):
    open_session(client, auth_headers)
    product = create_product(client, auth_headers, sku="HAR001", price="150.00")

    response = sell(client, auth_headers, [{"product_id": product["id"]}], [{"method": "CASH", "amount": "100.00"}])

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_AMOUNT"
    assert client.get("/sales/", headers=auth_headers).json() == []


def test_change_only_from_cash(client, auth_headers):
    open_session(client, auth_headers)
    product = create_product(client, auth_headers, sku="HAR001", price="150.00")

    response = sell(client, auth_headers, [{"product_id": product["id"]}], [{"method": "CARD", "amount": "200.00"}])

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_AMOUNT"


def test_insufficient_stock(client, auth_headers):
    open_session(client, auth_headers)
    product = create_product(client, auth_headers, sku="MOL001", price="10.00", stock="1")

    response = sell(
        client, auth_headers, [{"product_id": product["id"], "quantity": "2"}], [{"method": "CASH", "amount": "20.00"}]
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INSUFFICIENT_STOCK"


def test_account_sale_charges_client(client, auth_headers):
    session = open_session(client, auth_headers, opening_amount="0")
    customer = create_client(client, auth_headers)
    product = create_product(client, auth_headers, sku="LAC001", price="250.00")

    response = sell(
        client,
        auth_headers,
        [{"product_id": product["id"], "quantity": "2"}],
        [{"method": "CASH", "amount": "100.00"}, {"method": "ACCOUNT", "amount": "400.00"}],
        client_id=customer["id"],
    )
    assert response.status_code == 200, response.text

    account = client.get(f"/accounts/{customer['id']}", headers=auth_headers).json()
    assert dec(account["balance"]) == dec("400.00")
    assert account["movements"][0]["sale_id"] == response.json()["id"]

    detail = client.get(f"/cash-sessions/{session['id']}", headers=auth_headers).json()
    assert dec(detail["summary"]["theoretical_cash"]) == dec("100.00")
    assert "ACCOUNT" not in detail["summary"]["sales"]


def test_account_payment_needs_client(client, auth_headers):
    open_session(client, auth_headers)
    product = create_product(client, auth_headers, sku="LAC001", price="250.00")

    response = sell(client, auth_headers, [{"product_id": product["id"]}], [{"method": "ACCOUNT", "amount": "250.00"}])

    assert response.status_code == 400
    assert response.json()["code"] == "CLIENT_REQUIRED"


def test_account_sale_over_credit_limit(client, auth_headers):
    open_session(client, auth_headers)
    customer = create_client(client, auth_headers, credit_limit="100.00")
    product = create_product(client, auth_headers, sku="LAC001", price="250.00", stock="5")

    response = sell(
        client,
        auth_headers,
        [{"product_id": product["id"]}],
        [{"method": "ACCOUNT", "amount": "250.00"}],
        client_id=customer["id"],
    )

    assert response.status_code == 400
    assert response.json()["code"] == "CREDIT_LIMIT_EXCEEDED"
    stock = client.get(f"/products/{product['id']}", headers=auth_headers).json()["stock"]
    assert dec(stock) == dec("5")


def test_numbers_are_sequential_per_type(client, auth_headers):
    open_session(client, auth_headers)
    product = create_product(client, auth_headers, sku="MOL002", price="10.00", stock="10")
    item = [{"product_id": product["id"]}]
    cash = [{"method": "CASH", "amount": "10.00"}]

    numbers = [
        sell(client, auth_headers, item, cash).json()["number"],
        sell(client, auth_headers, item, cash).json()["number"],
        sell(client, auth_headers, item, cash, type="INVOICE_C").json()["number"],
    ]

    assert numbers == [1, 2, 1]


def test_sale_replays_with_same_idempotency_key(client, auth_headers):
    open_session(client, auth_headers)
    product = create_product(client, auth_headers, sku="MOL002", price="10.00", stock="10")
    headers = {**auth_headers, "Idempotency-Key": "venta-1"}
    payload = {"items": [{"product_id": product["id"]}], "payments": [{"method": "CASH", "amount": "10.00"}]}

    first = client.post("/sales/", headers=headers, json=payload)
    replay = client.post("/sales/", headers=headers, json=payload)

    assert replay.json() == first.json()
    assert len(client.get("/sales/", headers=auth_headers).json()) == 1
