from decimal import Decimal


def create_product(client, headers, *, sku: str, price="100.00", cost="50.00", stock="10", min_stock="0", name=None):
    response = client.post(
        "/products/",
        headers=headers,
        json={
            "sku": sku,
            "name": name or f"Producto {sku}",
            "price": price,
            "cost": cost,
            "initial_stock": stock,
            "min_stock": min_stock,
        },
    )
    assert response.status_code == 200, response.text
    return response.json()


def create_client(client, headers, *, name="Confitería Dulce", has_credit=True, credit_limit="0"):
    response = client.post(
        "/clients/",
        headers=headers,
        json={"name": name, "has_credit": has_credit, "credit_limit": credit_limit},
    )
    assert response.status_code == 200, response.text
    return response.json()


def open_session(client, headers, *, opening_amount="1000.00", register_name="Caja 1"):
    register = client.post("/cash-registers/", headers=headers, json={"name": register_name})
    assert register.status_code == 200, register.text
    response = client.post(
        "/cash-sessions/open",
        headers=headers,
        json={"cash_register_id": register.json()["id"], "opening_amount": opening_amount},
    )
    assert response.status_code == 200, response.text
    return response.json()


def sell(client, headers, items, payments, **extra):
    payload = {"items": items, "payments": payments}
    payload.update(extra)
    return client.post("/sales/", headers=headers, json=payload)


def dec(value) -> Decimal:
    return Decimal(str(value))
