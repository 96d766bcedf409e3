# app/services/reports.py
"""
Reportes de solo lectura. Se recalculan en cada pedido a partir de las
tablas transaccionales; ninguno depende del orden en que se lean las filas.
"""
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.models import (
    AccountMovementType,
    CashSession,
    CashSessionStatus,
    Client,
    MovementType,
    Product,
    Sale,
    SaleItem,
    StockMovement,
)
from app.services.ledger import signed_amount
from app.utils.money import ZERO, money, to_decimal


def day_bounds(date_from: Optional[date] = None, date_to: Optional[date] = None):
    """Convierte fechas ISO a un rango inclusivo de días completos."""
    start = datetime.combine(date_from, time.min) if date_from else None
    end = datetime.combine(date_to, time.max) if date_to else None
    return start, end


def _sorted(d: dict) -> dict:
    return {k: d[k] for k in sorted(d, key=str)}


# --------------------------------------------------------------------------
# Ventas
# --------------------------------------------------------------------------
def sales_report(db: Session, date_from: Optional[date] = None, date_to: Optional[date] = None) -> dict:
    start, end = day_bounds(date_from, date_to)
    query = db.query(Sale)
    if start:
        query = query.filter(Sale.created_at >= start)
    if end:
        query = query.filter(Sale.created_at <= end)
    sales = query.all()

    total_sales = ZERO
    by_client = defaultdict(lambda: ZERO)
    by_type = defaultdict(lambda: ZERO)
    by_payment_method = defaultdict(lambda: ZERO)
    by_product = defaultdict(lambda: {"quantity": ZERO, "total": ZERO})

    for sale in sales:
        total = to_decimal(sale.total)
        total_sales += total
        client_key = f"#{sale.client_id}" if sale.client_id else (sale.customer_name or "Consumidor Final")
        by_client[client_key] += total
        by_type[sale.type.value] += total
        for p in sale.payments:
            by_payment_method[p.method.value] += to_decimal(p.amount)
        for item in sale.items:
            entry = by_product[item.product_id]
            entry["quantity"] += to_decimal(item.quantity)
            entry["total"] += to_decimal(item.total)

    return {
        "date_from": date_from,
        "date_to": date_to,
        "count": len(sales),
        "total_sales": money(total_sales),
        "by_client": {k: money(v) for k, v in _sorted(by_client).items()},
        "by_product": {
            str(k): {"quantity": v["quantity"], "total": money(v["total"])} for k, v in _sorted(by_product).items()
        },
        "by_payment_method": {k: money(v) for k, v in _sorted(by_payment_method).items()},
        "by_type": {k: money(v) for k, v in _sorted(by_type).items()},
    }


def daily_summary(db: Session, target_date: date) -> dict:
    """Resumen de ventas, métodos de pago y utilidad del día."""
    start, end = day_bounds(target_date, target_date)
    sales = db.query(Sale).filter(Sale.created_at >= start, Sale.created_at <= end).all()

    revenue = ZERO
    profit = ZERO
    payments = defaultdict(lambda: ZERO)
    products = defaultdict(lambda: ZERO)
    for sale in sales:
        revenue += to_decimal(sale.total)
        # utilidad sobre el total cobrado, después del descuento de cabecera
        profit += to_decimal(sale.total)
        for p in sale.payments:
            payments[p.method.value] += to_decimal(p.amount)
        for item in sale.items:
            qty = to_decimal(item.quantity)
            profit -= to_decimal(item.unit_cost) * qty
            products[item.description or str(item.product_id)] += qty

    top = sorted(products.items(), key=lambda kv: (-kv[1], kv[0]))[:5]
    return {
        "date": target_date,
        "transactions_count": len(sales),
        "total_revenue": money(revenue),
        "gross_profit": money(profit),
        "payments": {k: money(v) for k, v in _sorted(payments).items()},
        "top_selling_items": [{"name": name, "quantity": qty} for name, qty in top],
    }


# --------------------------------------------------------------------------
# Cuenta corriente
# --------------------------------------------------------------------------
def accounts_receivable_report(db: Session, now: Optional[datetime] = None) -> list:
    """Clientes con saldo deudor, último pago y cargos vencidos."""
    now = now or datetime.utcnow()
    limit = now - timedelta(days=settings.OVERDUE_DAYS)

    rows = []
    for client in db.query(Client).order_by(Client.id).all():
        balance = ZERO
        overdue = ZERO
        last_payment = None
        for mov in client.movements:
            balance += signed_amount(mov)
            if mov.type == AccountMovementType.CHARGE:
                if mov.created_at < limit:
                    overdue += to_decimal(mov.amount)
            elif last_payment is None or mov.created_at > last_payment:
                last_payment = mov.created_at

        if balance > 0:
            rows.append(
                {
                    "client_id": client.id,
                    "client_name": client.name,
                    "balance": money(balance),
                    "last_payment": last_payment,
                    "overdue": money(overdue),
                }
            )
    return rows


def aging_report(db: Session, now: Optional[datetime] = None) -> dict:
    """
    Antigüedad de saldos: clasifica los cargos de cada cliente deudor en
    tramos de OVERDUE_DAYS días (0-30, 31-60, 61-90 y más de 90 por defecto).
    """
    now = now or datetime.utcnow()
    step = settings.OVERDUE_DAYS
    customers = []
    total_receivable = ZERO

    for client in db.query(Client).order_by(Client.id).all():
        balance = ZERO
        buckets = {"current": ZERO, "31_60": ZERO, "61_90": ZERO, "91_plus": ZERO}
        for mov in client.movements:
            balance += signed_amount(mov)
            if mov.type != AccountMovementType.CHARGE:
                continue
            days_old = (now - mov.created_at).days
            if days_old <= step:
                buckets["current"] += to_decimal(mov.amount)
            elif days_old <= step * 2:
                buckets["31_60"] += to_decimal(mov.amount)
            elif days_old <= step * 3:
                buckets["61_90"] += to_decimal(mov.amount)
            else:
                buckets["91_plus"] += to_decimal(mov.amount)

        if balance <= 0:
            continue
        customers.append(
            {
                "customer_id": client.id,
                "customer_name": client.name,
                "total_balance": money(balance),
                "current_0_30": money(buckets["current"]),
                "overdue_31_60": money(buckets["31_60"]),
                "overdue_61_90": money(buckets["61_90"]),
                "overdue_91_plus": money(buckets["91_plus"]),
            }
        )
        total_receivable += balance

    return {"report_date": now.date(), "total_receivable": money(total_receivable), "customers": customers}


# --------------------------------------------------------------------------
# Stock y kardex
# --------------------------------------------------------------------------
def _product_row(p: Product) -> dict:
    return {
        "id": p.id,
        "sku": p.sku,
        "name": p.name,
        "stock": to_decimal(p.stock),
        "min_stock": to_decimal(p.min_stock),
        "avg_cost": to_decimal(p.avg_cost),
    }


def stock_report(db: Session) -> dict:
    products = db.query(Product).filter(Product.is_active == True).order_by(Product.id).all()
    sold_ids = {row[0] for row in db.query(SaleItem.product_id).distinct().all()}

    low_stock = [_product_row(p) for p in products if to_decimal(p.stock) < to_decimal(p.min_stock)]
    no_movement = [_product_row(p) for p in products if p.id not in sold_ids]
    stock_value = sum((to_decimal(p.avg_cost) * to_decimal(p.stock) for p in products), ZERO)

    return {
        "low_stock": low_stock[: settings.LOW_STOCK_REPORT_LIMIT],
        "no_movement": no_movement,
        "stock_value": money(stock_value),
    }


def kardex_report(
    db: Session,
    product_id: Optional[int] = None,
    type: Optional[MovementType] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    page: int = 1,
    page_size: Optional[int] = None,
) -> dict:
    page = max(page, 1)
    page_size = min(max(page_size or settings.KARDEX_DEFAULT_PAGE_SIZE, 1), settings.KARDEX_MAX_PAGE_SIZE)
    start, end = day_bounds(date_from, date_to)

    query = db.query(StockMovement)
    if product_id:
        query = query.filter(StockMovement.product_id == product_id)
    if type:
        query = query.filter(StockMovement.type == type)
    if start:
        query = query.filter(StockMovement.created_at >= start)
    if end:
        query = query.filter(StockMovement.created_at <= end)

    # Totales sobre todo el filtro, no solo la página
    all_rows = query.with_entities(StockMovement.qty, StockMovement.total_cost).all()
    qty_in = qty_out = cost_in = cost_out = ZERO
    for qty, total_cost in all_rows:
        qty = to_decimal(qty)
        total_cost = to_decimal(total_cost)
        if qty > 0:
            qty_in += qty
            cost_in += total_cost
        else:
            qty_out += -qty
            cost_out += -total_cost

    rows = (
        query.order_by(StockMovement.created_at.asc(), StockMovement.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )

    return {
        "rows": [
            {
                "id": r.id,
                "date": r.created_at,
                "product_id": r.product_id,
                "sku": r.product.sku if r.product else None,
                "type": r.type.value,
                "qty": to_decimal(r.qty),
                "qty_before": to_decimal(r.qty_before),
                "qty_after": to_decimal(r.qty_after),
                "unit_cost": to_decimal(r.unit_cost),
                "total_cost": to_decimal(r.total_cost),
                "avg_cost_after": to_decimal(r.avg_cost_after),
                "ref_table": r.ref_table,
                "ref_id": r.ref_id,
                "notes": r.notes,
            }
            for r in rows
        ],
        "totals": {
            "qty_in": qty_in,
            "qty_out": qty_out,
            "cost_in": money(cost_in),
            "cost_out": money(cost_out),
        },
        "page": page,
        "page_size": page_size,
        "count": len(all_rows),
    }


# --------------------------------------------------------------------------
# Caja
# --------------------------------------------------------------------------
def cash_discrepancies(db: Session, limit: int = 10) -> list:
    """Últimas sesiones cerradas con faltante o sobrante."""
    return (
        db.query(CashSession)
        .filter(CashSession.status == CashSessionStatus.CLOSED, CashSession.difference != 0)
        .order_by(CashSession.closed_at.desc(), CashSession.id.desc())
        .limit(limit)
        .all()
    )
