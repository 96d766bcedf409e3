# app/routers/inventory.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.models import StockMovement, User
from app.schemas.inventory import AdjustmentCreate, MovementRead
from app.security import get_current_user
from app.services import kardex

router = APIRouter()

@router.post("/adjust", response_model=MovementRead)
def create_adjustment(
    adj: AdjustmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Registra entradas o salidas (mermas) manuales. No permite dejar stock negativo.
    """
    movement = kardex.adjust_stock(db, adj.product_id, adj.quantity, adj.reason, current_user)
    db.commit()
    db.refresh(movement)
    return movement

@router.get("/kardex/{product_id}", response_model=List[MovementRead])
def get_kardex(
    product_id: int,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Últimos movimientos del producto (el reporte paginado está en /reports/kardex)."""
    kardex.get_product(db, product_id)
    return db.query(StockMovement).filter(
        StockMovement.product_id == product_id
    ).order_by(StockMovement.created_at.desc(), StockMovement.id.desc()).limit(limit).all()
