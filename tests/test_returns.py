from tests.helpers import create_client, create_product, dec, open_session, sell


def _sale(client, headers, payments, **extra):
    product = create_product(client, headers, sku="CHO002", price="100.00", cost="60.00", stock="10")
    response = sell(client, headers, [{"product_id": product["id"], "quantity": "3"}], payments, **extra)
    assert response.status_code == 200, response.text
    return product, response.json()


def test_cash_refund_restocks_and_leaves_the_drawer(client, auth_headers):
    session = open_session(client, auth_headers, opening_amount="0")
    product, sale = _sale(client, auth_headers, [{"method": "CASH", "amount": "300.00"}])

    response = client.post(
        f"/sales/{sale['id']}/returns",
        headers=auth_headers,
        json={"items": [{"product_id": product["id"], "quantity": "1"}], "reason": "Vencido"},
    )

    assert response.status_code == 200, response.text
    assert dec(response.json()["total_refunded"]) == dec("100.00")

    stock = client.get(f"/products/{product['id']}", headers=auth_headers).json()["stock"]
    assert dec(stock) == dec("8")

    kardex = client.get(f"/inventory/kardex/{product['id']}", headers=auth_headers).json()
    assert kardex[0]["type"] == "RETURN_IN"
    assert dec(kardex[0]["unit_cost"]) == dec("60")

    movements = client.get(f"/cash-movements/{session['id']}", headers=auth_headers).json()
    assert [(m["type"], dec(m["amount"])) for m in movements] == [("EXPENSE", dec("100.00"))]

    current = client.get("/cash-sessions/my/current", headers=auth_headers).json()
    assert dec(current["theoretical_cash"]) == dec("200.00")


def test_cannot_return_more_than_sold(client, auth_headers):
    open_session(client, auth_headers)
    product, sale = _sale(client, auth_headers, [{"method": "CASH", "amount": "300.00"}])
    url = f"/sales/{sale['id']}/returns"

    first = client.post(url, headers=auth_headers, json={"items": [{"product_id": product["id"], "quantity": "2"}], "reason": "Roto"})
    assert first.status_code == 200

    second = client.post(url, headers=auth_headers, json={"items": [{"product_id": product["id"], "quantity": "2"}], "reason": "Roto"})
    assert second.status_code == 400
    assert second.json()["code"] == "INVALID_RETURN_QUANTITY"


def test_account_refund_is_a_credit_note(client, auth_headers):
    open_session(client, auth_headers)
    customer = create_client(client, auth_headers)
    product, sale = _sale(
        client, auth_headers, [{"method": "ACCOUNT", "amount": "300.00"}], client_id=customer["id"]
    )

    response = client.post(
        f"/sales/{sale['id']}/returns",
        headers=auth_headers,
        json={"items": [{"product_id": product["id"], "quantity": "3"}], "refund_method": "ACCOUNT", "reason": "Anulada"},
    )
    assert response.status_code == 200, response.text

    account = client.get(f"/accounts/{customer['id']}", headers=auth_headers).json()
    assert dec(account["balance"]) == dec("0")
    assert [m["type"] for m in account["movements"]] == ["CHARGE", "PAYMENT"]


def test_return_for_unknown_sale(client, auth_headers):
    response = client.post(
        "/sales/777/returns",
        headers=auth_headers,
        json={"items": [{"product_id": 1, "quantity": "1"}], "reason": "x"},
    )

    assert response.status_code == 404
    assert response.json()["code"] == "SALE_NOT_FOUND"


def test_refund_prorates_header_discount(client, auth_headers):
    open_session(client, auth_headers, opening_amount="0")
    product = create_product(client, auth_headers, sku="CHO001", price="100.00", cost="60.00", stock="5")
    response = sell(
        client,
        auth_headers,
        [{"product_id": product["id"], "quantity": "1"}],
        [{"method": "CASH", "amount": "80.00"}],
        discount="20.00",
    )
    assert response.status_code == 200, response.text
    sale = response.json()

    refund = client.post(
        f"/sales/{sale['id']}/returns",
        headers=auth_headers,
        json={"items": [{"product_id": product["id"], "quantity": "1"}], "reason": "Cambio"},
    )

    assert refund.status_code == 200, refund.text
    assert dec(refund.json()["total_refunded"]) == dec("80.00")
    current = client.get("/cash-sessions/my/current", headers=auth_headers).json()
    assert dec(current["theoretical_cash"]) == dec("0")


def test_partial_refunds_never_exceed_sale_total(client, auth_headers):
    open_session(client, auth_headers, opening_amount="0")
    product, sale = _sale(client, auth_headers, [{"method": "CASH", "amount": "290.00"}], discount="10.00")
    url = f"/sales/{sale['id']}/returns"

    refunded = []
    for _ in range(3):
        response = client.post(
            url, headers=auth_headers, json={"items": [{"product_id": product["id"], "quantity": "1"}], "reason": "Roto"}
        )
        assert response.status_code == 200, response.text
        refunded.append(dec(response.json()["total_refunded"]))

    # 100 x 290 / 300 = 96.67 por unidad; la última salda el resto
    assert refunded == [dec("96.67"), dec("96.67"), dec("96.66")]
    assert sum(refunded) == dec("290.00")
