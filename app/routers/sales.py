# app/routers/sales.py
from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional

from app.database import get_db
from app.models import SaleType
from app.schemas.sales import SaleCreate, SaleRead, SaleReceipt, SaleReturnCreate, SaleReturnRead
from app.security import get_current_user, User
from app.services import sales
from app.services.idempotency import IdempotencyService
from app.services.reports import day_bounds

router = APIRouter()


@router.post("/", response_model=SaleReceipt)
def create_sale(
    sale_in: SaleCreate,
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Registra una venta, descuenta stock, asocia los pagos a la caja abierta
    del vendedor y carga a cuenta corriente lo pagado con ACCOUNT.
    """
    endpoint = "POST:/sales"
    request_hash = IdempotencyService.fingerprint(sale_in.model_dump(mode="json"))
    idempotency = IdempotencyService(db)

    replay = idempotency.lookup(idempotency_key, endpoint, request_hash)
    if replay:
        return JSONResponse(status_code=replay.status_code, content=replay.response_body)

    sale, change = sales.create_sale(db, sale_in, current_user)
    receipt = SaleReceipt.model_validate(sale)
    receipt.change = change
    body = receipt.model_dump(mode="json")
    idempotency.save(idempotency_key, endpoint, request_hash, 200, body)

    replay = idempotency.commit(idempotency_key, endpoint, request_hash)
    if replay:
        return JSONResponse(status_code=replay.status_code, content=replay.response_body)
    return body


@router.get("/", response_model=List[SaleRead])
def list_sales(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    client_id: Optional[int] = None,
    type: Optional[SaleType] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    start, end = day_bounds(date_from, date_to)
    return sales.list_sales(db, start, end, client_id, type, skip, limit)


@router.get("/{sale_id}", response_model=SaleRead)
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return sales.get_sale(db, sale_id)


@router.post("/{sale_id}/returns", response_model=SaleReturnRead)
def create_return(
    sale_id: int,
    return_in: SaleReturnCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Devolución de mercadería: reingresa stock y reintegra por caja o cuenta corriente."""
    sale_return = sales.create_return(db, sale_id, return_in, current_user)
    db.commit()
    db.refresh(sale_return)
    return sale_return
