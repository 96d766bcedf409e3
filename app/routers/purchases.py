# app/routers/purchases.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.models import Purchase, Supplier
from app.schemas.purchases import (
    PurchaseCreate,
    PurchaseRead,
    SupplierCreate,
    SupplierPaymentCreate,
    SupplierPaymentRead,
    SupplierRead,
)
from app.security import get_current_user, User
from app.services import purchases

router = APIRouter()
suppliers_router = APIRouter()


@router.post("/", response_model=PurchaseRead)
def create_purchase(
    purchase_in: PurchaseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Registra la entrada de mercadería y actualiza el costo promedio."""
    purchase = purchases.create_purchase(db, purchase_in, current_user)
    db.commit()
    db.refresh(purchase)
    return purchase


@router.get("/", response_model=List[PurchaseRead])
def list_purchases(
    supplier_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    query = db.query(Purchase)
    if supplier_id:
        query = query.filter(Purchase.supplier_id == supplier_id)
    return query.order_by(Purchase.created_at.desc(), Purchase.id.desc()).offset(skip).limit(limit).all()


@router.get("/{purchase_id}", response_model=PurchaseRead)
def get_purchase(purchase_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return purchases.get_purchase(db, purchase_id)


@router.post("/{purchase_id}/payments", response_model=SupplierPaymentRead)
def register_supplier_payment(
    purchase_id: int,
    payment_in: SupplierPaymentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    payment = purchases.register_payment(db, purchase_id, payment_in.amount, payment_in.notes)
    db.commit()
    db.refresh(payment)
    return payment


# --------------------------------------------------------------------------
# Proveedores
# --------------------------------------------------------------------------
@suppliers_router.get("/", response_model=List[SupplierRead])
def list_suppliers(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return db.query(Supplier).order_by(Supplier.name).all()


@suppliers_router.post("/", response_model=SupplierRead)
def create_supplier(
    supplier_in: SupplierCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    supplier = Supplier(**supplier_in.model_dump())
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return supplier
