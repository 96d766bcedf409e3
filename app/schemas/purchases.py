from pydantic import BaseModel, ConfigDict, EmailStr
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

# --- Proveedores ---

class SupplierCreate(BaseModel):
    name: str
    tax_id: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None

class SupplierRead(SupplierCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)

# --- Compras ---

class PurchaseItemCreate(BaseModel):
    product_id: int
    quantity: Decimal
    unit_cost: Decimal

class PurchaseCreate(BaseModel):
    supplier_id: int
    invoice_number: Optional[str] = None
    items: List[PurchaseItemCreate]
    notes: Optional[str] = None

class PurchaseItemRead(BaseModel):
    id: int
    product_id: int
    quantity: Decimal
    unit_cost: Decimal
    subtotal: Decimal

    model_config = ConfigDict(from_attributes=True)

class PurchaseRead(BaseModel):
    id: int
    supplier_id: int
    invoice_number: Optional[str] = None
    total: Decimal
    paid_amount: Decimal
    notes: Optional[str] = None
    created_at: datetime
    items: List[PurchaseItemRead] = []

    model_config = ConfigDict(from_attributes=True)

# --- Pagos a proveedores ---

class SupplierPaymentCreate(BaseModel):
    amount: Decimal
    notes: Optional[str] = None

class SupplierPaymentRead(BaseModel):
    id: int
    supplier_id: int
    purchase_id: int
    amount: Decimal
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
