# app/services/ledger.py
"""
Cuenta corriente de clientes.

Los movimientos se agregan y nunca se modifican. El saldo no se guarda en
ninguna columna: se recalcula en cada lectura plegando los movimientos en
orden de creación (cargos suman, pagos restan).
"""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.errors import AppError, ErrorCatalog
from app.logger import log_json
from app.models import AccountMovement, AccountMovementType, Client
from app.utils.money import ZERO, money, to_decimal

logger = logging.getLogger(__name__)


def signed_amount(movement) -> Decimal:
    amount = to_decimal(movement.amount)
    return amount if movement.type == AccountMovementType.CHARGE else -amount


def fold_balance(movements: Iterable) -> Decimal:
    balance = ZERO
    for movement in movements:
        balance += signed_amount(movement)
    return money(balance)


def get_client(db: Session, client_id: int) -> Client:
    client = db.query(Client).filter(Client.id == client_id).first()
    if not client:
        raise AppError(ErrorCatalog.CLIENT_NOT_FOUND, details={"client_id": client_id})
    return client


def list_movements(db: Session, client_id: int) -> List[AccountMovement]:
    return (
        db.query(AccountMovement)
        .filter(AccountMovement.client_id == client_id)
        .order_by(AccountMovement.created_at.asc(), AccountMovement.id.asc())
        .all()
    )


def get_balance(db: Session, client_id: int) -> Decimal:
    get_client(db, client_id)
    return fold_balance(list_movements(db, client_id))


def get_account(db: Session, client_id: int) -> dict:
    """Estado de cuenta: movimientos ascendentes con saldo acumulado."""
    client = get_client(db, client_id)
    movements = list_movements(db, client_id)

    rows = []
    running = ZERO
    for m in movements:
        running += signed_amount(m)
        rows.append(
            {
                "id": m.id,
                "type": m.type,
                "amount": m.amount,
                "description": m.description,
                "sale_id": m.sale_id,
                "created_at": m.created_at,
                "running_balance": money(running),
            }
        )

    return {"client": client, "movements": rows, "balance": money(running)}


def record_movement(
    db: Session,
    client_id: int,
    type: AccountMovementType,
    amount,
    description: Optional[str] = None,
    sale_id: Optional[int] = None,
    user_id: Optional[int] = None,
) -> AccountMovement:
    amount = money(amount)
    if amount <= 0:
        raise AppError(ErrorCatalog.INVALID_AMOUNT, details={"amount": amount})
    get_client(db, client_id)

    movement = AccountMovement(
        client_id=client_id,
        type=AccountMovementType(type),
        amount=amount,
        description=description,
        sale_id=sale_id,
        created_by_id=user_id,
    )
    db.add(movement)
    db.flush()

    log_json(
        logger,
        {
            "event": "account_movement",
            "client_id": client_id,
            "type": movement.type.value,
            "amount": amount,
            "movement_id": movement.id,
        },
    )
    return movement


def record_payment(db: Session, client_id: int, amount, description: Optional[str] = None, user_id=None):
    return record_movement(
        db,
        client_id,
        AccountMovementType.PAYMENT,
        amount,
        description or "Pago recibido",
        user_id=user_id,
    )


def record_charge(
    db: Session,
    client_id: int,
    amount,
    description: Optional[str] = None,
    sale_id: Optional[int] = None,
    user_id: Optional[int] = None,
    enforce_credit: bool = True,
) -> AccountMovement:
    """Carga deuda. Con enforce_credit valida cuenta habilitada y límite (0 = sin tope)."""
    if enforce_credit:
        client = get_client(db, client_id)
        if not client.has_credit:
            raise AppError(ErrorCatalog.CREDIT_NOT_ALLOWED, details={"client_id": client_id})

        limit = to_decimal(client.credit_limit)
        if limit > 0:
            current = fold_balance(list_movements(db, client_id))
            if current + money(amount) > limit:
                raise AppError(
                    ErrorCatalog.CREDIT_LIMIT_EXCEEDED,
                    details={"balance": current, "limit": limit, "amount": money(amount)},
                )

    return record_movement(
        db,
        client_id,
        AccountMovementType.CHARGE,
        amount,
        description,
        sale_id=sale_id,
        user_id=user_id,
    )
