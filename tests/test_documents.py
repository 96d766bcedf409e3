from tests.helpers import create_client, create_product, dec


def _order(client, headers):
    product = create_product(client, headers, sku="DEC002", price="650.00")
    response = client.post(
        "/orders/",
        headers=headers,
        json={"items": [{"product_id": product["id"], "quantity": "2"}], "notes": "Torta de cumpleaños"},
    )
    assert response.status_code == 200, response.text
    return response.json()


def test_order_lifecycle(client, auth_headers):
    order = _order(client, auth_headers)
    assert order["status"] == "PENDING"
    assert dec(order["total"]) == dec("1300.00")

    for status in ("CONFIRMED", "DELIVERED"):
        response = client.patch(f"/orders/{order['id']}/status", headers=auth_headers, json={"status": status})
        assert response.status_code == 200
        assert response.json()["status"] == status


def test_delivered_order_cannot_be_cancelled(client, auth_headers):
    order = _order(client, auth_headers)
    client.patch(f"/orders/{order['id']}/status", headers=auth_headers, json={"status": "CONFIRMED"})
    client.patch(f"/orders/{order['id']}/status", headers=auth_headers, json={"status": "DELIVERED"})

    response = client.patch(f"/orders/{order['id']}/status", headers=auth_headers, json={"status": "CANCELLED"})

    assert response.status_code == 409
    assert response.json()["code"] == "INVALID_STATUS_TRANSITION"


def test_pending_order_cannot_skip_to_delivered(client, auth_headers):
    order = _order(client, auth_headers)

    response = client.patch(f"/orders/{order['id']}/status", headers=auth_headers, json={"status": "DELIVERED"})

    assert response.status_code == 409


def test_orders_do_not_touch_stock(client, auth_headers):
    order = _order(client, auth_headers)
    product_id = order["items"][0]["product_id"]

    stock = client.get(f"/products/{product_id}", headers=auth_headers).json()["stock"]
    assert dec(stock) == dec("10")


def test_empty_order(client, auth_headers):
    response = client.post("/orders/", headers=auth_headers, json={"items": []})

    assert response.status_code == 400
    assert response.json()["code"] == "EMPTY_DOCUMENT"


def test_quotation_converts_to_order(client, auth_headers):
    customer = create_client(client, auth_headers)
    product = create_product(client, auth_headers, sku="MOL001", price="8500.00")
    quotation = client.post(
        "/quotations/",
        headers=auth_headers,
        json={"client_id": customer["id"], "items": [{"product_id": product["id"], "discount": "500.00"}]},
    ).json()
    assert dec(quotation["total"]) == dec("8000.00")

    order = client.post(f"/quotations/{quotation['id']}/convert-to-order", headers=auth_headers)
    assert order.status_code == 200, order.text
    assert order.json()["quotation_id"] == quotation["id"]
    assert dec(order.json()["total"]) == dec("8000.00")

    updated = client.get(f"/quotations/{quotation['id']}", headers=auth_headers).json()
    assert updated["status"] == "ACCEPTED"


def test_rejected_quotation_cannot_be_converted(client, auth_headers):
    product = create_product(client, auth_headers, sku="MOL001", price="100.00")
    quotation = client.post("/quotations/", headers=auth_headers, json={"items": [{"product_id": product["id"]}]}).json()
    client.patch(f"/quotations/{quotation['id']}/status", headers=auth_headers, json={"status": "REJECTED"})

    response = client.post(f"/quotations/{quotation['id']}/convert-to-order", headers=auth_headers)

    assert response.status_code == 409
    assert response.json()["code"] == "INVALID_STATUS_TRANSITION"


def test_quotation_pdf(client, auth_headers):
    product = create_product(client, auth_headers, sku="MOL001", price="100.00")
    quotation = client.post("/quotations/", headers=auth_headers, json={"items": [{"product_id": product["id"]}]}).json()

    response = client.get(f"/quotations/{quotation['id']}/pdf", headers=auth_headers)

    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")
