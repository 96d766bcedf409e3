# app/routers/accounts.py
from fastapi import APIRouter, Depends, Header, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.schemas.accounts import AccountMovementCreate, AccountMovementRead, AccountRead
from app.security import get_current_user, User
from app.services import ledger
from app.services.idempotency import IdempotencyService
from app.utils.pdf_generator import generate_account_statement_pdf

router = APIRouter()


@router.get("/{client_id}", response_model=AccountRead)
def get_account(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Estado de cuenta: movimientos en orden de creación y saldo actual."""
    return ledger.get_account(db, client_id)


@router.post("/{client_id}/payments", response_model=AccountMovementRead)
def register_payment(
    client_id: int,
    payment_in: AccountMovementCreate,
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Registra un pago del cliente (baja la deuda). Con Idempotency-Key un
    reintento devuelve la respuesta original sin duplicar el pago.
    """
    endpoint = f"POST:/accounts/{client_id}/payments"
    request_hash = IdempotencyService.fingerprint(payment_in.model_dump(mode="json"))
    idempotency = IdempotencyService(db)

    replay = idempotency.lookup(idempotency_key, endpoint, request_hash)
    if replay:
        return JSONResponse(status_code=replay.status_code, content=replay.response_body)

    movement = ledger.record_payment(
        db, client_id, payment_in.amount, payment_in.description, user_id=current_user.id
    )
    body = AccountMovementRead.model_validate(movement).model_dump(mode="json")
    idempotency.save(idempotency_key, endpoint, request_hash, 200, body)

    replay = idempotency.commit(idempotency_key, endpoint, request_hash)
    if replay:
        return JSONResponse(status_code=replay.status_code, content=replay.response_body)
    return body


@router.post("/{client_id}/charges", response_model=AccountMovementRead)
def register_charge(
    client_id: int,
    charge_in: AccountMovementCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Cargo manual (ajuste, saldo inicial). No valida límite de crédito."""
    movement = ledger.record_charge(
        db,
        client_id,
        charge_in.amount,
        charge_in.description or "Cargo manual",
        user_id=current_user.id,
        enforce_credit=False,
    )
    db.commit()
    db.refresh(movement)
    return movement


@router.get("/{client_id}/pdf")
def get_account_pdf(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    account = ledger.get_account(db, client_id)
    pdf_content = generate_account_statement_pdf(account)
    return Response(
        content=pdf_content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=estado_cuenta_{client_id}.pdf"},
    )
