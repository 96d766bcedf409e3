# app/routers/orders.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.models import OrderStatus
from app.schemas.documents import OrderCreate, OrderRead, OrderStatusUpdate
from app.security import get_current_user, User
from app.services import documents

router = APIRouter()


@router.post("/", response_model=OrderRead)
def create_order(
    order_in: OrderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    order = documents.create_order(db, order_in)
    db.commit()
    db.refresh(order)
    return order


@router.get("/", response_model=List[OrderRead])
def list_orders(
    status: Optional[OrderStatus] = None,
    client_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return documents.list_orders(db, status, client_id)


@router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return documents.get_order(db, order_id)


@router.patch("/{order_id}/status", response_model=OrderRead)
def update_order_status(
    order_id: int,
    status_in: OrderStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """PENDING -> CONFIRMED -> DELIVERED; cancelable mientras no esté entregado."""
    order = documents.update_order_status(db, order_id, status_in.status)
    db.commit()
    db.refresh(order)
    return order
