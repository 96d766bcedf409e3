from decimal import Decimal

from app.services.kardex import weighted_average
from tests.helpers import create_product, dec


def _supplier(client, headers):
    response = client.post("/suppliers/", headers=headers, json={"name": "Molinos del Sur"})
    assert response.status_code == 200
    return response.json()


def test_weighted_average():
    assert weighted_average(Decimal("10"), Decimal("100"), Decimal("10"), Decimal("200")) == Decimal("150.0000")
    assert weighted_average(Decimal("0"), Decimal("80"), Decimal("5"), Decimal("120")) == Decimal("120.0000")
    assert weighted_average(Decimal("-2"), Decimal("80"), Decimal("5"), Decimal("120")) == Decimal("120.0000")


def test_purchase_updates_stock_and_average_cost(client, auth_headers):
    supplier = _supplier(client, auth_headers)
    product = create_product(client, auth_headers, sku="HAR001", cost="100.00", stock="10")

    response = client.post(
        "/purchases/",
        headers=auth_headers,
        json={
            "supplier_id": supplier["id"],
            "invoice_number": "A-0001-00001234",
            "items": [{"product_id": product["id"], "quantity": "10", "unit_cost": "200.00"}],
        },
    )
    assert response.status_code == 200, response.text
    assert dec(response.json()["total"]) == dec("2000.00")

    updated = client.get(f"/products/{product['id']}", headers=auth_headers).json()
    assert dec(updated["stock"]) == dec("20")
    assert dec(updated["avg_cost"]) == dec("150")

    kardex = client.get(f"/inventory/kardex/{product['id']}", headers=auth_headers).json()
    assert kardex[0]["type"] == "PURCHASE_IN"
    assert kardex[0]["ref_table"] == "purchases"


def test_supplier_payment(client, auth_headers):
    supplier = _supplier(client, auth_headers)
    product = create_product(client, auth_headers, sku="HAR002", stock="0")
    purchase = client.post(
        "/purchases/",
        headers=auth_headers,
        json={"supplier_id": supplier["id"], "items": [{"product_id": product["id"], "quantity": "4", "unit_cost": "25.00"}]},
    ).json()

    payment = client.post(f"/purchases/{purchase['id']}/payments", headers=auth_headers, json={"amount": "60.00"})
    assert payment.status_code == 200

    detail = client.get(f"/purchases/{purchase['id']}", headers=auth_headers).json()
    assert dec(detail["paid_amount"]) == dec("60.00")


def test_purchase_from_unknown_supplier(client, auth_headers):
    product = create_product(client, auth_headers, sku="HAR001")

    response = client.post(
        "/purchases/",
        headers=auth_headers,
        json={"supplier_id": 99, "items": [{"product_id": product["id"], "quantity": "1", "unit_cost": "1"}]},
    )

    assert response.status_code == 404
    assert response.json()["code"] == "SUPPLIER_NOT_FOUND"


def test_adjustments_keep_average_cost(client, auth_headers):
    product = create_product(client, auth_headers, sku="DEC001", cost="40.00", stock="10")

    out = client.post(
        "/inventory/adjust",
        headers=auth_headers,
        json={"product_id": product["id"], "quantity": "-3", "reason": "Merma"},
    )
    assert out.status_code == 200
    assert out.json()["type"] == "ADJUSTMENT_OUT"
    assert dec(out.json()["qty_after"]) == dec("7")
    assert dec(out.json()["total_cost"]) == dec("-120.00")

    updated = client.get(f"/products/{product['id']}", headers=auth_headers).json()
    assert dec(updated["avg_cost"]) == dec("40")


def test_adjustment_cannot_leave_negative_stock(client, auth_headers):
    product = create_product(client, auth_headers, sku="DEC001", stock="2")

    response = client.post(
        "/inventory/adjust",
        headers=auth_headers,
        json={"product_id": product["id"], "quantity": "-5", "reason": "Rotura"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INSUFFICIENT_STOCK"
