# app/services/kardex.py
"""Kardex: cada cambio de stock deja una fila con cantidades y costo."""
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from app.errors import AppError, ErrorCatalog
from app.logger import log_json
from app.models import MovementType, Product, StockMovement
from app.utils.money import ZERO, money, to_decimal

logger = logging.getLogger(__name__)

COST_PLACES = Decimal("0.0001")

INBOUND = {MovementType.PURCHASE_IN, MovementType.RETURN_IN, MovementType.ADJUSTMENT_IN}


def weighted_average(stock, avg_cost, qty, unit_cost) -> Decimal:
    """Costo promedio ponderado tras ingresar `qty` unidades a `unit_cost`."""
    stock = to_decimal(stock)
    qty = to_decimal(qty)
    unit_cost = to_decimal(unit_cost)
    if stock <= 0:
        return unit_cost.quantize(COST_PLACES)
    new_avg = (stock * to_decimal(avg_cost) + qty * unit_cost) / (stock + qty)
    return new_avg.quantize(COST_PLACES)


def get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise AppError(ErrorCatalog.PRODUCT_NOT_FOUND, details={"product_id": product_id})
    return product


def apply_movement(
    db: Session,
    product: Product,
    type: MovementType,
    qty,
    unit_cost=None,
    user_id: Optional[int] = None,
    ref_table: Optional[str] = None,
    ref_id: Optional[int] = None,
    notes: Optional[str] = None,
) -> StockMovement:
    """
    Aplica un movimiento al stock del producto y registra la fila de kardex.

    `qty` siempre llega positiva; el signo lo decide el tipo. Solo las
    compras recalculan el costo promedio. Las salidas se valorizan al
    costo promedio vigente.
    """
    qty = to_decimal(qty)
    if qty <= 0:
        raise AppError(ErrorCatalog.INVALID_AMOUNT, message="La cantidad debe ser mayor a cero")

    qty_before = to_decimal(product.stock)
    avg_before = to_decimal(product.avg_cost)
    inbound = type in INBOUND
    signed_qty = qty if inbound else -qty
    qty_after = qty_before + signed_qty

    if qty_after < 0:
        raise AppError(
            ErrorCatalog.INSUFFICIENT_STOCK,
            message=f"Stock insuficiente para: {product.sku}. Disponible: {qty_before}",
            details={"product_id": product.id, "available": qty_before, "requested": qty},
        )

    if type == MovementType.PURCHASE_IN:
        cost = to_decimal(unit_cost)
        avg_after = weighted_average(qty_before, avg_before, qty, cost)
    else:
        cost = to_decimal(unit_cost, default=avg_before) if inbound else avg_before
        avg_after = avg_before

    product.stock = qty_after
    product.avg_cost = avg_after

    movement = StockMovement(
        product_id=product.id,
        user_id=user_id,
        type=type,
        qty=signed_qty,
        qty_before=qty_before,
        qty_after=qty_after,
        unit_cost=cost,
        total_cost=money(signed_qty * cost),
        avg_cost_after=avg_after,
        ref_table=ref_table,
        ref_id=ref_id,
        notes=notes,
    )
    db.add(movement)
    db.flush()
    return movement


def adjust_stock(db: Session, product_id: int, qty, reason: str, user=None) -> StockMovement:
    """Ajuste manual: qty positiva suma, negativa resta."""
    qty = to_decimal(qty)
    if qty == ZERO:
        raise AppError(ErrorCatalog.INVALID_AMOUNT, message="La cantidad de ajuste no puede ser cero")

    product = get_product(db, product_id)
    type = MovementType.ADJUSTMENT_IN if qty > 0 else MovementType.ADJUSTMENT_OUT
    movement = apply_movement(
        db,
        product,
        type,
        abs(qty),
        user_id=getattr(user, "id", None),
        ref_table="adjustments",
        notes=reason,
    )

    log_json(
        logger,
        {
            "event": "stock_adjustment",
            "product_id": product.id,
            "qty": movement.qty,
            "qty_after": movement.qty_after,
            "reason": reason,
        },
    )
    return movement
