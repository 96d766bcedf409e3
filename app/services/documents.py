# app/services/documents.py
"""Pedidos y presupuestos: documentos comerciales sin impacto en stock ni caja."""
import logging

from sqlalchemy.orm import Session

from app.errors import AppError, ErrorCatalog
from app.logger import log_json
from app.models import Order, OrderItem, OrderStatus, Quotation, QuotationItem, QuotationStatus
from app.services import kardex, ledger
from app.utils.money import ZERO, money, to_decimal

logger = logging.getLogger(__name__)

# Estados terminales: no admiten más cambios
ORDER_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

QUOTATION_TRANSITIONS = {
    QuotationStatus.PENDING: {QuotationStatus.ACCEPTED, QuotationStatus.REJECTED, QuotationStatus.EXPIRED},
    QuotationStatus.ACCEPTED: set(),
    QuotationStatus.REJECTED: set(),
    QuotationStatus.EXPIRED: set(),
}


def _build_items(db: Session, items, item_cls):
    if not items:
        raise AppError(ErrorCatalog.EMPTY_DOCUMENT)

    rows = []
    total = ZERO
    for item in items:
        product = kardex.get_product(db, item.product_id)
        price = to_decimal(item.price) if item.price is not None else to_decimal(product.price)
        discount = money(item.discount or 0)
        total += to_decimal(item.quantity) * price - discount
        rows.append(
            item_cls(
                product_id=product.id,
                quantity=to_decimal(item.quantity),
                price=price,
                discount=discount,
            )
        )
    return rows, money(total)


# --------------------------------------------------------------------------
# Pedidos
# --------------------------------------------------------------------------
def get_order(db: Session, order_id: int) -> Order:
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise AppError(ErrorCatalog.ORDER_NOT_FOUND, details={"order_id": order_id})
    return order


def list_orders(db: Session, status=None, client_id=None):
    query = db.query(Order)
    if status:
        query = query.filter(Order.status == status)
    if client_id:
        query = query.filter(Order.client_id == client_id)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def create_order(db: Session, order_in) -> Order:
    if order_in.client_id:
        ledger.get_client(db, order_in.client_id)

    items, total = _build_items(db, order_in.items, OrderItem)
    order = Order(
        client_id=order_in.client_id,
        status=OrderStatus.PENDING,
        total=total,
        notes=order_in.notes,
        items=items,
    )
    db.add(order)
    db.flush()

    log_json(logger, {"event": "order_created", "order_id": order.id, "total": total})
    return order


def update_order_status(db: Session, order_id: int, status: OrderStatus) -> Order:
    order = get_order(db, order_id)
    status = OrderStatus(status)
    if status not in ORDER_TRANSITIONS[order.status]:
        raise AppError(
            ErrorCatalog.INVALID_STATUS_TRANSITION,
            details={"from": order.status.value, "to": status.value},
        )
    order.status = status
    db.flush()

    log_json(logger, {"event": "order_status", "order_id": order.id, "status": status.value})
    return order


# --------------------------------------------------------------------------
# Presupuestos
# --------------------------------------------------------------------------
def get_quotation(db: Session, quotation_id: int) -> Quotation:
    quotation = db.query(Quotation).filter(Quotation.id == quotation_id).first()
    if not quotation:
        raise AppError(ErrorCatalog.QUOTATION_NOT_FOUND, details={"quotation_id": quotation_id})
    return quotation


def list_quotations(db: Session, status=None, client_id=None):
    query = db.query(Quotation)
    if status:
        query = query.filter(Quotation.status == status)
    if client_id:
        query = query.filter(Quotation.client_id == client_id)
    return query.order_by(Quotation.created_at.desc(), Quotation.id.desc()).all()


def create_quotation(db: Session, quotation_in) -> Quotation:
    if quotation_in.client_id:
        ledger.get_client(db, quotation_in.client_id)

    items, total = _build_items(db, quotation_in.items, QuotationItem)
    quotation = Quotation(
        client_id=quotation_in.client_id,
        status=QuotationStatus.PENDING,
        total=total,
        notes=quotation_in.notes,
        valid_days=quotation_in.valid_days,
        items=items,
    )
    db.add(quotation)
    db.flush()

    log_json(logger, {"event": "quotation_created", "quotation_id": quotation.id, "total": total})
    return quotation


def update_quotation_status(db: Session, quotation_id: int, status: QuotationStatus) -> Quotation:
    quotation = get_quotation(db, quotation_id)
    status = QuotationStatus(status)
    if status not in QUOTATION_TRANSITIONS[quotation.status]:
        raise AppError(
            ErrorCatalog.INVALID_STATUS_TRANSITION,
            details={"from": quotation.status.value, "to": status.value},
        )
    quotation.status = status
    db.flush()
    return quotation


def convert_to_order(db: Session, quotation_id: int) -> Order:
    """Acepta el presupuesto (si estaba pendiente) y genera el pedido con sus mismas líneas."""
    quotation = get_quotation(db, quotation_id)
    if quotation.status == QuotationStatus.PENDING:
        quotation.status = QuotationStatus.ACCEPTED
    elif quotation.status != QuotationStatus.ACCEPTED:
        raise AppError(
            ErrorCatalog.INVALID_STATUS_TRANSITION,
            details={"from": quotation.status.value, "to": "ORDER"},
        )

    order = Order(
        client_id=quotation.client_id,
        quotation_id=quotation.id,
        status=OrderStatus.PENDING,
        total=quotation.total,
        notes=quotation.notes,
        items=[
            OrderItem(product_id=i.product_id, quantity=i.quantity, price=i.price, discount=i.discount)
            for i in quotation.items
        ],
    )
    db.add(order)
    db.flush()

    log_json(logger, {"event": "quotation_converted", "quotation_id": quotation.id, "order_id": order.id})
    return order
