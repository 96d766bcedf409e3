import io
from datetime import date, datetime, timedelta
from decimal import Decimal

from openpyxl import load_workbook
from sqlalchemy.orm import Query

from app.config import settings
from app.models import AccountMovement, AccountMovementType, Client
from app.services import reports
from tests.helpers import create_client, create_product, dec, open_session, sell


def _two_sales(client, headers):
    open_session(client, headers)
    customer = create_client(client, headers)
    flour = create_product(client, headers, sku="HAR001", price="100.00", cost="60.00")
    cocoa = create_product(client, headers, sku="CHO002", price="50.00", cost="20.00")
    sell(
        client,
        headers,
        [{"product_id": flour["id"], "quantity": "2"}],
        [{"method": "CASH", "amount": "200.00"}],
    )
    sell(
        client,
        headers,
        [{"product_id": cocoa["id"], "quantity": "1"}, {"product_id": flour["id"], "quantity": "1"}],
        [{"method": "CARD", "amount": "50.00"}, {"method": "ACCOUNT", "amount": "100.00"}],
        client_id=customer["id"],
        type="INVOICE_C",
    )
    return customer, flour, cocoa


def test_sales_report_groups(client, auth_headers):
    customer, flour, cocoa = _two_sales(client, auth_headers)

    report = client.get("/reports/sales", headers=auth_headers).json()

    assert report["count"] == 2
    assert dec(report["total_sales"]) == dec("350.00")
    assert {k: dec(v) for k, v in report["by_payment_method"].items()} == {
        "ACCOUNT": dec("100.00"),
        "CARD": dec("50.00"),
        "CASH": dec("200.00"),
    }
    assert {k: dec(v) for k, v in report["by_type"].items()} == {"INVOICE_C": dec("150.00"), "TICKET": dec("200.00")}
    assert dec(report["by_product"][str(flour["id"])]["quantity"]) == dec("3")
    assert dec(report["by_client"][f"#{customer['id']}"]) == dec("150.00")


def test_sales_report_filters_by_from_and_to(client, auth_headers):
    _two_sales(client, auth_headers)
    today = date.today()

    old = client.get("/reports/sales", headers=auth_headers, params={"from": "2000-01-01", "to": "2000-01-02"}).json()
    assert old["count"] == 0
    assert dec(old["total_sales"]) == dec("0")

    around_today = {"from": str(today - timedelta(days=1)), "to": str(today + timedelta(days=1))}
    report = client.get("/reports/sales", headers=auth_headers, params=around_today).json()
    assert report["count"] == 2

    listed = client.get("/sales/", headers=auth_headers, params={"from": "2000-01-01", "to": "2000-01-02"}).json()
    assert listed == []
    assert len(client.get("/sales/", headers=auth_headers, params=around_today).json()) == 2


def test_sales_report_is_independent_of_row_order(client, auth_headers, db_session, monkeypatch):
    _two_sales(client, auth_headers)
    report = reports.sales_report(db_session)

    original_all = Query.all
    monkeypatch.setattr(Query, "all", lambda self: list(reversed(original_all(self))))
    reordered = reports.sales_report(db_session)

    assert reordered == report
    assert list(reordered["by_payment_method"]) == sorted(reordered["by_payment_method"])

def test_daily_summary(client, auth_headers):
    _two_sales(client, auth_headers)

    summary = client.get("/reports/daily-summary", headers=auth_headers).json()

    assert summary["transactions_count"] == 2
    assert dec(summary["total_revenue"]) == dec("350.00")
    # 350 - (3 x 60 + 1 x 20)
    assert dec(summary["gross_profit"]) == dec("150.00")
    assert summary["top_selling_items"][0]["name"] == "Producto HAR001"


def test_daily_summary_profit_discounts_header_discount(client, auth_headers):
    open_session(client, auth_headers)
    flour = create_product(client, auth_headers, sku="HAR001", price="100.00", cost="60.00")
    response = sell(
        client,
        auth_headers,
        [{"product_id": flour["id"], "quantity": "2"}],
        [{"method": "CASH", "amount": "170.00"}],
        discount="30.00",
    )
    assert response.status_code == 200, response.text

    summary = client.get("/reports/daily-summary", headers=auth_headers).json()

    assert dec(summary["total_revenue"]) == dec("170.00")
    # 170 - 2 x 60
    assert dec(summary["gross_profit"]) == dec("50.00")


def test_accounts_receivable_and_aging(client, auth_headers, db_session):
    recent = create_client(client, auth_headers, name="Al día")
    client.post(f"/accounts/{recent['id']}/charges", headers=auth_headers, json={"amount": "100.00"})

    late = Client(name="Atrasado", has_credit=True)
    db_session.add(late)
    db_session.flush()
    db_session.add(
        AccountMovement(
            client_id=late.id,
            type=AccountMovementType.CHARGE,
            amount=Decimal("400.00"),
            created_at=datetime.utcnow() - timedelta(days=45),
        )
    )
    db_session.commit()

    rows = client.get("/reports/accounts-receivable", headers=auth_headers).json()
    by_name = {r["client_name"]: r for r in rows}
    assert dec(by_name["Al día"]["overdue"]) == dec("0")
    assert dec(by_name["Atrasado"]["overdue"]) == dec("400.00")
    assert by_name["Atrasado"]["last_payment"] is None

    aging = client.get("/reports/aging", headers=auth_headers).json()
    assert dec(aging["total_receivable"]) == dec("500.00")
    late_row = next(c for c in aging["customers"] if c["customer_name"] == "Atrasado")
    assert dec(late_row["overdue_31_60"]) == dec("400.00")
    assert dec(late_row["current_0_30"]) == dec("0")


def test_aging_buckets_follow_overdue_days(client, auth_headers, db_session, monkeypatch):
    monkeypatch.setattr(settings, "OVERDUE_DAYS", 15)
    debtor = Client(name="Quincenal", has_credit=True)
    db_session.add(debtor)
    db_session.flush()
    for days, amount in ((10, "10.00"), (20, "20.00"), (40, "40.00"), (50, "50.00")):
        db_session.add(
            AccountMovement(
                client_id=debtor.id,
                type=AccountMovementType.CHARGE,
                amount=Decimal(amount),
                created_at=datetime.utcnow() - timedelta(days=days),
            )
        )
    db_session.commit()

    aging = client.get("/reports/aging", headers=auth_headers).json()
    row = aging["customers"][0]
    assert dec(row["current_0_30"]) == dec("10.00")
    assert dec(row["overdue_31_60"]) == dec("20.00")
    assert dec(row["overdue_61_90"]) == dec("40.00")
    assert dec(row["overdue_91_plus"]) == dec("50.00")

    receivable = client.get("/reports/accounts-receivable", headers=auth_headers).json()
    assert dec(receivable[0]["overdue"]) == dec("110.00")


def test_stock_report(client, auth_headers):
    open_session(client, auth_headers)
    low = create_product(client, auth_headers, sku="LAC002", cost="10.00", stock="2", min_stock="5")
    sold = create_product(client, auth_headers, sku="LAC001", price="30.00", cost="20.00", stock="10")
    sell(client, auth_headers, [{"product_id": sold["id"]}], [{"method": "CASH", "amount": "30.00"}])

    report = client.get("/reports/stock", headers=auth_headers).json()

    assert [p["id"] for p in report["low_stock"]] == [low["id"]]
    assert [p["id"] for p in report["no_movement"]] == [low["id"]]
    # 2 x 10 + 9 x 20
    assert dec(report["stock_value"]) == dec("200.00")


def test_kardex_report_pages_and_totals(client, auth_headers):
    product = create_product(client, auth_headers, sku="DEC001", cost="10.00", stock="10")
    for _ in range(3):
        client.post(
            "/inventory/adjust",
            headers=auth_headers,
            json={"product_id": product["id"], "quantity": "-1", "reason": "Merma"},
        )

    report = client.get(
        "/reports/kardex", headers=auth_headers, params={"product_id": product["id"], "page_size": 2}
    ).json()

    assert report["count"] == 4
    assert len(report["rows"]) == 2
    assert report["rows"][0]["type"] == "ADJUSTMENT_IN"
    assert dec(report["totals"]["qty_in"]) == dec("10")
    assert dec(report["totals"]["qty_out"]) == dec("3")
    assert dec(report["totals"]["cost_out"]) == dec("30.00")

    second = client.get(
        "/reports/kardex",
        headers=auth_headers,
        params={"product_id": product["id"], "page_size": 2, "page": 2, "type": "ADJUSTMENT_OUT"},
    ).json()
    assert second["count"] == 3
    assert len(second["rows"]) == 1


def test_kardex_report_date_range(client, auth_headers):
    product = create_product(client, auth_headers, sku="DEC002", cost="10.00", stock="5")
    today = date.today()

    old = client.get(
        "/reports/kardex",
        headers=auth_headers,
        params={"product_id": product["id"], "from": "2000-01-01", "to": "2000-12-31"},
    ).json()
    assert old["count"] == 0

    current = client.get(
        "/reports/kardex",
        headers=auth_headers,
        params={"product_id": product["id"], "from": str(today - timedelta(days=1)), "to": str(today + timedelta(days=1))},
    ).json()
    assert current["count"] == 1


def test_excel_export(client, auth_headers):
    _two_sales(client, auth_headers)

    response = client.get("/reports/sales", headers=auth_headers, params={"format": "excel"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    workbook = load_workbook(io.BytesIO(response.content))
    assert "Por medio de pago" in workbook.sheetnames


def test_pdf_export(client, auth_headers):
    create_product(client, auth_headers, sku="DEC001", stock="1", min_stock="3")

    for path in ("/reports/stock", "/reports/kardex", "/reports/accounts-receivable", "/reports/sales"):
        response = client.get(path, headers=auth_headers, params={"format": "pdf"})
        assert response.status_code == 200, path
        assert response.content.startswith(b"%PDF")


def test_unknown_format(client, auth_headers):
    response = client.get("/reports/stock", headers=auth_headers, params={"format": "csv"})

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_REPORT_FORMAT"
