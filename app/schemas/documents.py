from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from decimal import Decimal
from datetime import datetime
from app.models.documents import OrderStatus, QuotationStatus


class DocumentItemCreate(BaseModel):
    product_id: int
    quantity: Decimal = Decimal("1")
    price: Optional[Decimal] = None
    discount: Decimal = Decimal("0")

class DocumentItemRead(BaseModel):
    id: int
    product_id: int
    quantity: Decimal
    price: Decimal
    discount: Decimal

    model_config = ConfigDict(from_attributes=True)

# --- Pedidos ---

class OrderCreate(BaseModel):
    client_id: Optional[int] = None
    items: List[DocumentItemCreate]
    notes: Optional[str] = None

class OrderStatusUpdate(BaseModel):
    status: OrderStatus

class OrderRead(BaseModel):
    id: int
    client_id: Optional[int] = None
    quotation_id: Optional[int] = None
    status: OrderStatus
    total: Decimal
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[DocumentItemRead] = []

    model_config = ConfigDict(from_attributes=True)

# --- Presupuestos ---

class QuotationCreate(BaseModel):
    client_id: Optional[int] = None
    items: List[DocumentItemCreate]
    notes: Optional[str] = None
    valid_days: int = 15

class QuotationStatusUpdate(BaseModel):
    status: QuotationStatus

class QuotationRead(BaseModel):
    id: int
    client_id: Optional[int] = None
    status: QuotationStatus
    total: Decimal
    notes: Optional[str] = None
    valid_days: int
    created_at: datetime
    items: List[DocumentItemRead] = []

    model_config = ConfigDict(from_attributes=True)
