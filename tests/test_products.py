import io

from openpyxl import load_workbook

from tests.helpers import create_product, dec


def test_initial_stock_enters_kardex(client, auth_headers):
    product = create_product(client, auth_headers, sku="FON001", cost="4600.00", stock="15")

    assert dec(product["stock"]) == dec("15")
    assert dec(product["avg_cost"]) == dec("4600")

    kardex = client.get(f"/inventory/kardex/{product['id']}", headers=auth_headers).json()
    assert [row["type"] for row in kardex] == ["ADJUSTMENT_IN"]


def test_duplicate_sku(client, auth_headers):
    create_product(client, auth_headers, sku="FON001")

    response = client.post("/products/", headers=auth_headers, json={"sku": "FON001", "name": "Otro", "price": "1"})

    assert response.status_code == 400
    assert response.json()["code"] == "DUPLICATE_SKU"


def test_search_and_category(client, auth_headers):
    category = client.post("/categories/", headers=auth_headers, json={"name": "Decoración"}).json()
    client.post(
        "/products/",
        headers=auth_headers,
        json={"sku": "DEC010", "name": "Granas de colores", "price": "900", "category_id": category["id"]},
    )
    create_product(client, auth_headers, sku="HAR001", name="Harina leudante")

    found = client.get("/products/", headers=auth_headers, params={"search": "granas"}).json()

    assert [p["sku"] for p in found] == ["DEC010"]
    assert found[0]["category"]["name"] == "Decoración"


def test_update_does_not_touch_stock(client, auth_headers):
    product = create_product(client, auth_headers, sku="HAR001", stock="4")

    response = client.put(f"/products/{product['id']}", headers=auth_headers, json={"price": "130.00"})

    assert response.status_code == 200
    assert dec(response.json()["price"]) == dec("130.00")
    assert dec(response.json()["stock"]) == dec("4")


def test_export_catalog(client, auth_headers):
    create_product(client, auth_headers, sku="HAR001")

    response = client.get("/products/export", headers=auth_headers)

    assert response.status_code == 200
    sheet = load_workbook(io.BytesIO(response.content))["Productos"]
    assert sheet["A2"].value == "HAR001"
