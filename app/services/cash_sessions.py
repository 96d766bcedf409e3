# app/services/cash_sessions.py
"""
Apertura, movimientos y cierre de sesiones de caja.

Efectivo teórico = fondo inicial + ventas en efectivo + ingresos en
efectivo - egresos en efectivo. La diferencia del cierre es lo contado
menos ese teórico (positivo = sobrante, negativo = faltante).
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.errors import AppError, ErrorCatalog
from app.logger import log_json
from app.models import (
    CashClosure,
    CashClosureType,
    CashMovement,
    CashMovementType,
    CashRegister,
    CashSession,
    CashSessionStatus,
    Payment,
    PaymentMethod,
)
from app.utils.money import ZERO, money, money_str, to_decimal

logger = logging.getLogger(__name__)

# La cuenta corriente no es dinero que entra a la caja
DRAWER_METHODS = [m.value for m in PaymentMethod if m != PaymentMethod.ACCOUNT]


def _empty_by_method() -> Dict[str, Decimal]:
    return {method: ZERO for method in DRAWER_METHODS}


def _method_key(method) -> str:
    value = method.value if isinstance(method, PaymentMethod) else str(method or "")
    return value if value in DRAWER_METHODS else PaymentMethod.OTHER.value


@dataclass
class SessionTotals:
    opening_amount: Decimal
    sales: Dict[str, Decimal] = field(default_factory=_empty_by_method)
    income: Dict[str, Decimal] = field(default_factory=_empty_by_method)
    expenses: Dict[str, Decimal] = field(default_factory=_empty_by_method)

    @property
    def sales_total(self) -> Decimal:
        return money(sum(self.sales.values(), ZERO))

    @property
    def income_total(self) -> Decimal:
        return money(sum(self.income.values(), ZERO))

    @property
    def expenses_total(self) -> Decimal:
        return money(sum(self.expenses.values(), ZERO))

    @property
    def theoretical_cash(self) -> Decimal:
        cash = PaymentMethod.CASH.value
        return money(self.opening_amount + self.sales[cash] + self.income[cash] - self.expenses[cash])

    def by_method_json(self) -> dict:
        return {
            "sales": {k: money_str(v) for k, v in self.sales.items()},
            "income": {k: money_str(v) for k, v in self.income.items()},
            "expenses": {k: money_str(v) for k, v in self.expenses.items()},
        }


def compute_totals(db: Session, session: CashSession) -> SessionTotals:
    """Agrupa pagos de ventas y movimientos de la sesión por medio de pago."""
    totals = SessionTotals(opening_amount=to_decimal(session.opening_amount))

    payments = db.query(Payment).filter(Payment.cash_session_id == session.id).all()
    for p in payments:
        if p.method == PaymentMethod.ACCOUNT:
            continue
        key = _method_key(p.method)
        totals.sales[key] += to_decimal(p.amount)

    movements = db.query(CashMovement).filter(CashMovement.session_id == session.id).all()
    for m in movements:
        key = _method_key(m.payment_method)
        if m.type == CashMovementType.INCOME:
            totals.income[key] += to_decimal(m.amount)
        else:
            totals.expenses[key] += to_decimal(m.amount)

    return totals


def session_summary(db: Session, session: CashSession) -> dict:
    """Totales vivos de la sesión (para detalle y PDF)."""
    totals = compute_totals(db, session)
    return {
        "opening_amount": totals.opening_amount,
        "sales": totals.sales,
        "income": totals.income,
        "expenses": totals.expenses,
        "sales_total": totals.sales_total,
        "income_total": totals.income_total,
        "expenses_total": totals.expenses_total,
        "theoretical_cash": totals.theoretical_cash,
    }


def counted_cash(counts: Optional[List[dict]], closing_amount=None) -> Decimal:
    """Suma denominación x cantidad; sin conteo usa el monto declarado."""
    if counts:
        total = ZERO
        for c in counts:
            total += to_decimal(c["denomination"]) * to_decimal(c["quantity"])
        return money(total)
    return money(closing_amount or 0)


def _serialize_counts(counts: Optional[List[dict]]) -> Optional[List[dict]]:
    if not counts:
        return None
    return [
        {"denomination": format(to_decimal(c["denomination"]), "f"), "quantity": int(c["quantity"])}
        for c in counts
    ]


# --------------------------------------------------------------------------
# Consultas
# --------------------------------------------------------------------------
def get_register(db: Session, cash_register_id: int) -> CashRegister:
    register = db.query(CashRegister).filter(CashRegister.id == cash_register_id).first()
    if not register:
        raise AppError(ErrorCatalog.CASH_REGISTER_NOT_FOUND, details={"cash_register_id": cash_register_id})
    return register


def get_session(db: Session, session_id: int) -> CashSession:
    session = db.query(CashSession).filter(CashSession.id == session_id).first()
    if not session:
        raise AppError(ErrorCatalog.CASH_SESSION_NOT_FOUND, details={"session_id": session_id})
    return session


def get_open_session_for_user(db: Session, user_id: int) -> Optional[CashSession]:
    return (
        db.query(CashSession)
        .filter(CashSession.opened_by_id == user_id, CashSession.status == CashSessionStatus.OPEN)
        .order_by(CashSession.opened_at.desc())
        .first()
    )


def list_sessions(
    db: Session,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    status: Optional[CashSessionStatus] = None,
    cash_register_id: Optional[int] = None,
    opened_by: Optional[int] = None,
) -> List[CashSession]:
    query = db.query(CashSession)
    if date_from:
        query = query.filter(CashSession.opened_at >= date_from)
    if date_to:
        query = query.filter(CashSession.opened_at <= date_to)
    if status:
        query = query.filter(CashSession.status == status)
    if cash_register_id:
        query = query.filter(CashSession.cash_register_id == cash_register_id)
    if opened_by:
        query = query.filter(CashSession.opened_by_id == opened_by)
    return query.order_by(CashSession.opened_at.desc(), CashSession.id.desc()).all()


def list_closures(
    db: Session, date_from: Optional[datetime] = None, date_to: Optional[datetime] = None
) -> List[CashClosure]:
    query = db.query(CashClosure)
    if date_from:
        query = query.filter(CashClosure.created_at >= date_from)
    if date_to:
        query = query.filter(CashClosure.created_at <= date_to)
    return query.order_by(CashClosure.created_at.desc(), CashClosure.id.desc()).all()


# --------------------------------------------------------------------------
# Ciclo de vida
# --------------------------------------------------------------------------
def open_session(db: Session, cash_register_id: int, opening_amount, user=None) -> CashSession:
    opening_amount = money(opening_amount)
    if opening_amount < 0:
        raise AppError(ErrorCatalog.INVALID_AMOUNT, message="El fondo inicial no puede ser negativo")

    get_register(db, cash_register_id)
    existing = (
        db.query(CashSession)
        .filter(CashSession.cash_register_id == cash_register_id, CashSession.status == CashSessionStatus.OPEN)
        .first()
    )
    if existing:
        raise AppError(ErrorCatalog.CASH_SESSION_ALREADY_OPEN, details={"session_id": existing.id})

    session = CashSession(
        cash_register_id=cash_register_id,
        status=CashSessionStatus.OPEN,
        opening_amount=opening_amount,
        opened_at=datetime.utcnow(),
        opened_by_id=getattr(user, "id", None),
    )
    db.add(session)
    db.flush()

    log_json(
        logger,
        {
            "event": "cash_session_open",
            "session_id": session.id,
            "cash_register_id": cash_register_id,
            "opening_amount": opening_amount,
            "user_id": session.opened_by_id,
        },
    )
    return session


def add_movement(
    db: Session,
    session_id: int,
    type: CashMovementType,
    payment_method,
    amount,
    concept: str,
    user=None,
    related_sale_id: Optional[int] = None,
    related_purchase_id: Optional[int] = None,
) -> CashMovement:
    session = get_session(db, session_id)
    if session.status != CashSessionStatus.OPEN:
        raise AppError(ErrorCatalog.CASH_SESSION_NOT_OPEN, details={"session_id": session_id})

    amount = money(amount)
    if amount <= 0:
        raise AppError(ErrorCatalog.INVALID_AMOUNT, details={"amount": amount})

    movement = CashMovement(
        session_id=session.id,
        type=CashMovementType(type),
        payment_method=_method_key(payment_method),
        amount=amount,
        concept=concept,
        related_sale_id=related_sale_id,
        related_purchase_id=related_purchase_id,
        created_by_id=getattr(user, "id", None),
    )
    db.add(movement)
    db.flush()

    log_json(
        logger,
        {
            "event": "cash_movement",
            "session_id": session.id,
            "movement_id": movement.id,
            "type": movement.type.value,
            "payment_method": movement.payment_method,
            "amount": amount,
        },
    )
    return movement


def preview_close(db: Session, session_id: int, closing_amount=None, counts=None) -> dict:
    session = get_session(db, session_id)
    totals = compute_totals(db, session)
    counted = counted_cash(counts, closing_amount)
    return {
        "session_id": session.id,
        "theoretical_cash": totals.theoretical_cash,
        "counted_cash": counted,
        "difference": money(counted - totals.theoretical_cash),
    }


def close_session(
    db: Session,
    session_id: int,
    user=None,
    closing_amount=None,
    counts: Optional[List[dict]] = None,
    counted_by: Optional[str] = None,
    notes: Optional[str] = None,
) -> CashSession:
    session = get_session(db, session_id)
    if session.status == CashSessionStatus.CLOSED:
        raise AppError(ErrorCatalog.CASH_SESSION_ALREADY_CLOSED, details={"session_id": session_id})

    totals = compute_totals(db, session)
    counted = counted_cash(counts, closing_amount)
    difference = money(counted - totals.theoretical_cash)
    by_method = totals.by_method_json()
    user_id = getattr(user, "id", None)

    # Solo gana el primer cierre: la condición sobre el estado la resuelve la base
    result = db.execute(
        update(CashSession)
        .where(CashSession.id == session.id, CashSession.status == CashSessionStatus.OPEN)
        .values(
            status=CashSessionStatus.CLOSED,
            closed_at=datetime.utcnow(),
            closed_by_id=user_id,
            closing_amount=counted,
            counts=_serialize_counts(counts),
            system_sales_total=totals.sales_total,
            system_income_total=totals.income_total,
            system_expenses_total=totals.expenses_total,
            theoretical_cash=totals.theoretical_cash,
            difference=difference,
            by_method=by_method,
            counted_by=counted_by,
            notes=notes,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise AppError(ErrorCatalog.CASH_SESSION_ALREADY_CLOSED, details={"session_id": session_id})

    db.add(
        CashClosure(
            session_id=session.id,
            type=CashClosureType.Z,
            totals_by_method=by_method,
            total_sales=totals.sales_total,
            total_income=totals.income_total,
            total_expense=totals.expenses_total,
            total_cash_calc=totals.theoretical_cash,
            counted_breakdown=_serialize_counts(counts),
            counted_cash=counted,
            difference=difference,
            notes=notes,
            created_by_id=user_id,
        )
    )
    db.flush()
    db.refresh(session)

    log_json(
        logger,
        {
            "event": "cash_session_close",
            "session_id": session.id,
            "theoretical_cash": totals.theoretical_cash,
            "counted_cash": counted,
            "difference": difference,
            "user_id": user_id,
        },
    )
    return session


def closure_x(db: Session, session_id: int, user=None, notes: Optional[str] = None) -> CashClosure:
    """Corte X: foto de los totales sin cerrar la caja."""
    session = get_session(db, session_id)
    if session.status != CashSessionStatus.OPEN:
        raise AppError(ErrorCatalog.CASH_SESSION_NOT_OPEN, details={"session_id": session_id})

    totals = compute_totals(db, session)
    closure = CashClosure(
        session_id=session.id,
        type=CashClosureType.X,
        totals_by_method=totals.by_method_json(),
        total_sales=totals.sales_total,
        total_income=totals.income_total,
        total_expense=totals.expenses_total,
        total_cash_calc=totals.theoretical_cash,
        notes=notes,
        created_by_id=getattr(user, "id", None),
    )
    db.add(closure)
    db.flush()

    log_json(logger, {"event": "cash_closure_x", "session_id": session.id, "closure_id": closure.id})
    return closure


def current_for_user(db: Session, user_id: int) -> Optional[dict]:
    session = get_open_session_for_user(db, user_id)
    if not session:
        return None
    totals = compute_totals(db, session)
    return {
        "session_id": session.id,
        "cash_register_id": session.cash_register_id,
        "cash_register_name": session.cash_register.name if session.cash_register else None,
        "opened_at": session.opened_at,
        "opening_amount": money(session.opening_amount),
        "by_method": totals.sales,
        "income": totals.income,
        "cash_outflows": totals.expenses,
        "theoretical_cash": totals.theoretical_cash,
    }


def last_closed_for_user(db: Session, user_id: int) -> Optional[CashSession]:
    return (
        db.query(CashSession)
        .filter(CashSession.opened_by_id == user_id, CashSession.status == CashSessionStatus.CLOSED)
        .order_by(CashSession.closed_at.desc(), CashSession.id.desc())
        .first()
    )
