from tests.helpers import create_product, open_session, sell


def test_ticket_html(client, auth_headers):
    open_session(client, auth_headers)
    product = create_product(client, auth_headers, sku="HAR001", name="Harina 0000 1kg", price="1200.00")
    sale = sell(
        client,
        auth_headers,
        [{"product_id": product["id"], "quantity": "2"}],
        [{"method": "CASH", "amount": "3000.00"}],
    ).json()

    response = client.get(f"/tickets/{sale['id']}/print", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    html = response.text
    assert "PUNTO PASTELERO" in html
    assert "Harina 0000 1kg" in html
    assert "$2,400.00" in html
    assert "Efectivo" in html
    assert "Consumidor Final" in html


def test_ticket_for_unknown_sale(client, auth_headers):
    response = client.get("/tickets/999/print", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["code"] == "SALE_NOT_FOUND"
