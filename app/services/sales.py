# app/services/sales.py
import logging
from decimal import Decimal
from typing import List, Tuple

from sqlalchemy.orm import Session

from app.errors import AppError, ErrorCatalog
from app.logger import log_json
from app.models import (
    AccountMovementType,
    CashMovementType,
    MovementType,
    Payment,
    PaymentMethod,
    Sale,
    SaleItem,
    SaleReturn,
    SaleReturnItem,
)
from app.services import cash_sessions, kardex, ledger
from app.utils.folios import get_next_number
from app.utils.money import ZERO, money, to_decimal

logger = logging.getLogger(__name__)


def line_total(price, quantity, discount) -> Decimal:
    return money(to_decimal(price) * to_decimal(quantity) - to_decimal(discount))


def get_sale(db: Session, sale_id: int) -> Sale:
    sale = db.query(Sale).filter(Sale.id == sale_id).first()
    if not sale:
        raise AppError(ErrorCatalog.SALE_NOT_FOUND, details={"sale_id": sale_id})
    return sale


def list_sales(db: Session, date_from=None, date_to=None, client_id=None, type=None, skip=0, limit=100):
    query = db.query(Sale)
    if date_from:
        query = query.filter(Sale.created_at >= date_from)
    if date_to:
        query = query.filter(Sale.created_at <= date_to)
    if client_id:
        query = query.filter(Sale.client_id == client_id)
    if type:
        query = query.filter(Sale.type == type)
    return query.order_by(Sale.created_at.desc(), Sale.id.desc()).offset(skip).limit(limit).all()


def create_sale(db: Session, sale_in, user) -> Tuple[Sale, Decimal]:
    """
    Registra una venta: descuenta stock (kardex SALE_OUT al costo promedio),
    asocia los pagos a la caja abierta del vendedor y carga a cuenta
    corriente los pagos ACCOUNT.

    Devuelve la venta y el vuelto entregado en efectivo.
    """
    if not sale_in.items:
        raise AppError(ErrorCatalog.EMPTY_DOCUMENT, message="El ticket está vacío")

    session = cash_sessions.get_open_session_for_user(db, user.id)
    if not session:
        raise AppError(ErrorCatalog.CASH_SESSION_REQUIRED)

    client = ledger.get_client(db, sale_in.client_id) if sale_in.client_id else None

    # --- 1. Líneas y totales (siempre calculados acá) ---
    lines = []
    subtotal = ZERO
    for item in sale_in.items:
        product = kardex.get_product(db, item.product_id)
        price = to_decimal(item.price) if item.price is not None else to_decimal(product.price)
        total = line_total(price, item.quantity, item.discount)
        subtotal += total
        lines.append((product, item, price, total))

    subtotal = money(subtotal)
    discount = money(sale_in.discount or 0)
    total = money(subtotal - discount)
    if total < 0:
        raise AppError(ErrorCatalog.INVALID_AMOUNT, message="El descuento supera el subtotal")

    # --- 2. Pagos ---
    paid = money(sum((to_decimal(p.amount) for p in sale_in.payments), ZERO))
    if paid < total:
        raise AppError(
            ErrorCatalog.INVALID_AMOUNT,
            message="Monto insuficiente. Use cuenta corriente para el saldo pendiente.",
            details={"total": total, "paid": paid},
        )

    change = money(paid - total)
    cash_paid = sum((to_decimal(p.amount) for p in sale_in.payments if p.method == PaymentMethod.CASH), ZERO)
    if change > cash_paid:
        raise AppError(
            ErrorCatalog.INVALID_AMOUNT,
            message="Solo se puede dar vuelto sobre pagos en efectivo",
            details={"change": change},
        )

    account_total = money(sum((to_decimal(p.amount) for p in sale_in.payments if p.method == PaymentMethod.ACCOUNT), ZERO))
    if account_total > 0 and not client:
        raise AppError(ErrorCatalog.CLIENT_REQUIRED)

    # --- 3. Documento ---
    sale = Sale(
        type=sale_in.type,
        client_id=client.id if client else None,
        customer_name=sale_in.customer_name or (client.name if client else "Consumidor Final"),
        seller_id=user.id,
        cash_session_id=session.id,
        number=get_next_number(db, sale_in.type),
        subtotal=subtotal,
        discount=discount,
        total=total,
        paid=money(paid - change),
        notes=sale_in.notes,
    )
    db.add(sale)
    db.flush()

    for product, item, price, total_line in lines:
        movement = kardex.apply_movement(
            db,
            product,
            MovementType.SALE_OUT,
            item.quantity,
            user_id=user.id,
            ref_table="sales",
            ref_id=sale.id,
            notes=f"Venta #{sale.number}",
        )
        db.add(
            SaleItem(
                sale_id=sale.id,
                product_id=product.id,
                description=product.name,
                quantity=to_decimal(item.quantity),
                price=price,
                discount=money(item.discount or 0),
                unit_cost=movement.unit_cost,
                total=total_line,
            )
        )

    # El vuelto sale del efectivo recibido
    pending_change = change
    for p in sale_in.payments:
        amount = money(p.amount)
        if p.method == PaymentMethod.CASH and pending_change > 0:
            used = min(amount, pending_change)
            amount -= used
            pending_change -= used
        if amount <= 0:
            continue
        db.add(
            Payment(
                sale_id=sale.id,
                cash_session_id=session.id,
                method=p.method,
                amount=amount,
                reference=p.reference,
            )
        )

    # --- 4. Cuenta corriente ---
    if account_total > 0:
        ledger.record_charge(
            db,
            client.id,
            account_total,
            description=f"Venta #{sale.number}",
            sale_id=sale.id,
            user_id=user.id,
        )

    db.flush()
    db.refresh(sale)

    log_json(
        logger,
        {
            "event": "sale_created",
            "sale_id": sale.id,
            "number": sale.number,
            "total": total,
            "paid": sale.paid,
            "change": change,
            "session_id": session.id,
            "user_id": user.id,
        },
    )
    return sale, change


def _returned_qty(sale: Sale, product_id: int) -> Decimal:
    qty = ZERO
    for r in sale.returns:
        for item in r.items:
            if item.product_id == product_id:
                qty += to_decimal(item.quantity)
    return qty


def create_return(db: Session, sale_id: int, return_in, user) -> SaleReturn:
    """
    Devolución parcial o total. La mercadería reingresa al kardex y el
    reintegro sale de la caja abierta (efectivo u otro medio) o se acredita
    en la cuenta corriente del cliente.
    """
    sale = get_sale(db, sale_id)
    if not return_in.items:
        raise AppError(ErrorCatalog.EMPTY_DOCUMENT)

    sold = {}
    for line in sale.items:
        entry = sold.setdefault(line.product_id, {"qty": ZERO, "total": ZERO, "unit_cost": line.unit_cost})
        entry["qty"] += to_decimal(line.quantity)
        entry["total"] += to_decimal(line.total)

    # el descuento de cabecera se prorratea sobre cada línea
    subtotal = to_decimal(sale.subtotal)
    factor = to_decimal(sale.total) / subtotal if subtotal > 0 else ZERO

    plan: List[tuple] = []
    total_refund = ZERO
    requested = {}
    for item in return_in.items:
        qty = to_decimal(item.quantity)
        requested[item.product_id] = requested.get(item.product_id, ZERO) + qty
        line = sold.get(item.product_id)
        available = (line["qty"] - _returned_qty(sale, item.product_id)) if line else ZERO
        if qty <= 0 or requested[item.product_id] > available:
            raise AppError(
                ErrorCatalog.INVALID_RETURN_QUANTITY,
                details={"product_id": item.product_id, "requested": qty, "available": available},
            )
        refund = money(line["total"] / line["qty"] * qty * factor)
        total_refund += refund
        plan.append([item.product_id, qty, refund, line["unit_cost"]])

    total_refund = money(total_refund)

    # nunca se reintegra más de lo cobrado; la última devolución salda el resto
    remaining = money(to_decimal(sale.total) - sum((to_decimal(r.total_refunded) for r in sale.returns), ZERO))
    closes_sale = all(
        _returned_qty(sale, product_id) + requested.get(product_id, ZERO) >= line["qty"]
        for product_id, line in sold.items()
    )
    if total_refund > remaining or closes_sale:
        adjust = max(remaining, ZERO) - total_refund
        plan[-1][2] = money(plan[-1][2] + adjust)
        total_refund = money(total_refund + adjust)

    refund_method = PaymentMethod(return_in.refund_method)

    session = None
    if refund_method == PaymentMethod.ACCOUNT:
        if not sale.client_id:
            raise AppError(ErrorCatalog.CLIENT_REQUIRED)
    else:
        session = cash_sessions.get_open_session_for_user(db, user.id)
        if not session:
            raise AppError(ErrorCatalog.CASH_SESSION_REQUIRED)

    sale_return = SaleReturn(
        sale_id=sale.id,
        user_id=user.id,
        refund_method=refund_method,
        total_refunded=total_refund,
        reason=return_in.reason,
    )
    db.add(sale_return)
    db.flush()

    for product_id, qty, refund, unit_cost in plan:
        product = kardex.get_product(db, product_id)
        kardex.apply_movement(
            db,
            product,
            MovementType.RETURN_IN,
            qty,
            unit_cost=unit_cost,
            user_id=user.id,
            ref_table="sale_returns",
            ref_id=sale_return.id,
            notes=return_in.reason,
        )
        db.add(SaleReturnItem(return_id=sale_return.id, product_id=product_id, quantity=qty, refund_amount=refund))

    if total_refund > 0:
        if refund_method == PaymentMethod.ACCOUNT:
            ledger.record_movement(
                db,
                sale.client_id,
                AccountMovementType.PAYMENT,
                total_refund,
                description=f"Nota de crédito venta #{sale.number}",
                sale_id=sale.id,
                user_id=user.id,
            )
        else:
            cash_sessions.add_movement(
                db,
                session.id,
                CashMovementType.EXPENSE,
                refund_method,
                total_refund,
                concept=f"Devolución venta #{sale.number}",
                user=user,
                related_sale_id=sale.id,
            )

    db.flush()
    db.refresh(sale_return)

    log_json(
        logger,
        {
            "event": "sale_return",
            "sale_id": sale.id,
            "return_id": sale_return.id,
            "refund_method": refund_method.value,
            "total_refunded": total_refund,
        },
    )
    return sale_return
