# app/services/purchases.py
"""Compras a proveedores: ingreso de mercadería y pagos."""
import logging

from sqlalchemy.orm import Session

from app.errors import AppError, ErrorCatalog
from app.logger import log_json
from app.models import MovementType, Purchase, PurchaseItem, Supplier, SupplierPayment
from app.services import kardex
from app.utils.money import ZERO, money, to_decimal

logger = logging.getLogger(__name__)


def get_supplier(db: Session, supplier_id: int) -> Supplier:
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()
    if not supplier:
        raise AppError(ErrorCatalog.SUPPLIER_NOT_FOUND, details={"supplier_id": supplier_id})
    return supplier


def get_purchase(db: Session, purchase_id: int) -> Purchase:
    purchase = db.query(Purchase).filter(Purchase.id == purchase_id).first()
    if not purchase:
        raise AppError(ErrorCatalog.PURCHASE_NOT_FOUND, details={"purchase_id": purchase_id})
    return purchase


def create_purchase(db: Session, purchase_in, user=None) -> Purchase:
    """
    La compra se recibe en el acto: suma stock, recalcula el costo promedio
    ponderado de cada producto y deja filas PURCHASE_IN en el kardex.
    """
    if not purchase_in.items:
        raise AppError(ErrorCatalog.EMPTY_DOCUMENT)
    get_supplier(db, purchase_in.supplier_id)

    user_id = getattr(user, "id", None)
    purchase = Purchase(
        supplier_id=purchase_in.supplier_id,
        invoice_number=purchase_in.invoice_number,
        notes=purchase_in.notes,
        created_by_id=user_id,
    )
    db.add(purchase)
    db.flush()

    total = ZERO
    for item in purchase_in.items:
        product = kardex.get_product(db, item.product_id)
        unit_cost = to_decimal(item.unit_cost)
        if unit_cost < 0:
            raise AppError(ErrorCatalog.INVALID_AMOUNT, message="El costo no puede ser negativo")

        subtotal = money(unit_cost * to_decimal(item.quantity))
        total += subtotal
        db.add(
            PurchaseItem(
                purchase_id=purchase.id,
                product_id=product.id,
                quantity=to_decimal(item.quantity),
                unit_cost=unit_cost,
                subtotal=subtotal,
            )
        )
        kardex.apply_movement(
            db,
            product,
            MovementType.PURCHASE_IN,
            item.quantity,
            unit_cost=unit_cost,
            user_id=user_id,
            ref_table="purchases",
            ref_id=purchase.id,
        )

    purchase.total = money(total)
    db.flush()
    db.refresh(purchase)

    log_json(
        logger,
        {
            "event": "purchase_received",
            "purchase_id": purchase.id,
            "supplier_id": purchase.supplier_id,
            "total": purchase.total,
        },
    )
    return purchase


def register_payment(db: Session, purchase_id: int, amount, notes=None) -> SupplierPayment:
    purchase = get_purchase(db, purchase_id)
    amount = money(amount)
    if amount <= 0:
        raise AppError(ErrorCatalog.INVALID_AMOUNT, details={"amount": amount})

    payment = SupplierPayment(
        supplier_id=purchase.supplier_id,
        purchase_id=purchase.id,
        amount=amount,
        notes=notes,
    )
    db.add(payment)
    purchase.paid_amount = money(to_decimal(purchase.paid_amount) + amount)
    db.flush()

    log_json(
        logger,
        {
            "event": "supplier_payment",
            "purchase_id": purchase.id,
            "amount": amount,
            "paid_amount": purchase.paid_amount,
        },
    )
    return payment
