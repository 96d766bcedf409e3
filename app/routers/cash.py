# app/routers/cash.py
from typing import List, Optional
from datetime import date
from fastapi import APIRouter, Depends, Header, Query, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.models import CashMovement, CashRegister, CashSessionStatus
from app.schemas.cash import (
    CashClosureRead,
    CashMovementCreate,
    CashMovementRead,
    CashRegisterCreate,
    CashRegisterRead,
    CashSessionClose,
    CashSessionDetail,
    CashSessionOpen,
    CashSessionRead,
    ClosePreviewRequest,
    ClosePreviewResponse,
    ClosureXRequest,
    CurrentSessionRead,
    SessionSummary,
)
from app.security import get_current_user, User
from app.services import cash_sessions
from app.services.idempotency import IdempotencyService
from app.services.reports import day_bounds
from app.utils.pdf_generator import generate_cash_session_pdf

router = APIRouter()
registers_router = APIRouter()
movements_router = APIRouter()


def _counts(items):
    return [c.model_dump() for c in items] if items else None


# --------------------------------------------------------------------------
# Cajas
# --------------------------------------------------------------------------
@registers_router.get("/", response_model=List[CashRegisterRead])
def list_registers(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return db.query(CashRegister).order_by(CashRegister.id).all()


@registers_router.post("/", response_model=CashRegisterRead)
def create_register(
    register_in: CashRegisterCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    register = CashRegister(name=register_in.name, is_active=True)
    db.add(register)
    db.commit()
    db.refresh(register)
    return register


# --------------------------------------------------------------------------
# Sesiones
# --------------------------------------------------------------------------
@router.post("/open", response_model=CashSessionRead)
def open_session(
    session_in: CashSessionOpen,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    session = cash_sessions.open_session(db, session_in.cash_register_id, session_in.opening_amount, current_user)
    db.commit()
    db.refresh(session)
    return session


@router.post("/close/preview", response_model=ClosePreviewResponse)
def preview_close(
    preview_in: ClosePreviewRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Calcula teórico y diferencia sin cerrar la caja."""
    return cash_sessions.preview_close(
        db, preview_in.session_id, preview_in.closing_amount, _counts(preview_in.counts)
    )


@router.post("/close/{session_id}", response_model=CashSessionRead)
def close_session(
    session_id: int,
    close_in: CashSessionClose,
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    endpoint = f"POST:/cash-sessions/close/{session_id}"
    request_hash = IdempotencyService.fingerprint(close_in.model_dump(mode="json"))
    idempotency = IdempotencyService(db)

    replay = idempotency.lookup(idempotency_key, endpoint, request_hash)
    if replay:
        return JSONResponse(status_code=replay.status_code, content=replay.response_body)

    session = cash_sessions.close_session(
        db,
        session_id,
        user=current_user,
        closing_amount=close_in.closing_amount,
        counts=_counts(close_in.counts),
        counted_by=close_in.counted_by,
        notes=close_in.notes,
    )
    body = CashSessionRead.model_validate(session).model_dump(mode="json")
    idempotency.save(idempotency_key, endpoint, request_hash, 200, body)

    replay = idempotency.commit(idempotency_key, endpoint, request_hash)
    if replay:
        return JSONResponse(status_code=replay.status_code, content=replay.response_body)
    return body


@router.get("/my/current", response_model=Optional[CurrentSessionRead])
def get_my_current(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Sesión abierta del usuario con sus totales vivos, o null."""
    return cash_sessions.current_for_user(db, current_user.id)


@router.get("/my/last-closed", response_model=Optional[CashSessionRead])
def get_my_last_closed(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return cash_sessions.last_closed_for_user(db, current_user.id)


@router.get("/closures", response_model=List[CashClosureRead])
def list_closures(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    start, end = day_bounds(date_from, date_to)
    return cash_sessions.list_closures(db, start, end)


@router.get("/", response_model=List[CashSessionRead])
def list_sessions(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    status: Optional[CashSessionStatus] = None,
    cash_register_id: Optional[int] = None,
    opened_by: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    start, end = day_bounds(date_from, date_to)
    return cash_sessions.list_sessions(db, start, end, status, cash_register_id, opened_by)


@router.get("/{session_id}", response_model=CashSessionDetail)
def get_session(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    session = cash_sessions.get_session(db, session_id)
    detail = CashSessionDetail.model_validate(session)
    detail.summary = SessionSummary(**cash_sessions.session_summary(db, session))
    return detail


@router.post("/{session_id}/closure-x", response_model=CashClosureRead)
def closure_x(
    session_id: int,
    closure_in: Optional[ClosureXRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Corte X: informe parcial, la caja sigue abierta."""
    closure = cash_sessions.closure_x(
        db, session_id, user=current_user, notes=closure_in.notes if closure_in else None
    )
    db.commit()
    db.refresh(closure)
    return closure


@router.get("/{session_id}/pdf")
def get_session_pdf(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    session = cash_sessions.get_session(db, session_id)
    pdf_content = generate_cash_session_pdf(session, cash_sessions.session_summary(db, session))
    return Response(
        content=pdf_content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=caja_{session_id}.pdf"},
    )


# --------------------------------------------------------------------------
# Movimientos manuales (ingresos / egresos)
# --------------------------------------------------------------------------
@movements_router.post("/", response_model=CashMovementRead)
def create_movement(
    movement_in: CashMovementCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    movement = cash_sessions.add_movement(
        db,
        movement_in.session_id,
        movement_in.type,
        movement_in.payment_method,
        movement_in.amount,
        movement_in.concept,
        user=current_user,
        related_sale_id=movement_in.related_sale_id,
        related_purchase_id=movement_in.related_purchase_id,
    )
    db.commit()
    db.refresh(movement)
    return movement


@movements_router.get("/{session_id}", response_model=List[CashMovementRead])
def list_movements(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cash_sessions.get_session(db, session_id)
    return (
        db.query(CashMovement)
        .filter(CashMovement.session_id == session_id)
        .order_by(CashMovement.created_at, CashMovement.id)
        .all()
    )
