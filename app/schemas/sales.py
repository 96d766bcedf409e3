from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from decimal import Decimal
from datetime import datetime
from app.models.sales import PaymentMethod, SaleType

# --- Models for Creation ---

class SaleItemCreate(BaseModel):
    product_id: int
    quantity: Decimal = Decimal("1")
    price: Optional[Decimal] = None  # Si no viene, se usa el precio de lista
    discount: Decimal = Decimal("0")

class PaymentCreate(BaseModel):
    method: PaymentMethod
    amount: Decimal
    reference: Optional[str] = None

class SaleCreate(BaseModel):
    type: SaleType = SaleType.TICKET
    client_id: Optional[int] = None
    customer_name: Optional[str] = None
    items: List[SaleItemCreate]
    payments: List[PaymentCreate] = []
    discount: Decimal = Decimal("0")
    notes: Optional[str] = None

# --- Models for Reading (History) ---

class SaleItemRead(BaseModel):
    id: int
    product_id: int
    description: Optional[str] = None
    quantity: Decimal
    price: Decimal
    discount: Decimal
    total: Decimal

    model_config = ConfigDict(from_attributes=True)

class PaymentRead(BaseModel):
    id: int
    method: PaymentMethod
    amount: Decimal
    reference: Optional[str] = None
    cash_session_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class SaleRead(BaseModel):
    id: int
    type: SaleType
    number: Optional[int] = None
    client_id: Optional[int] = None
    customer_name: Optional[str] = None
    seller_id: Optional[int] = None
    cash_session_id: Optional[int] = None

    subtotal: Decimal
    discount: Decimal
    total: Decimal
    paid: Decimal
    notes: Optional[str] = None
    created_at: datetime

    items: List[SaleItemRead] = []
    payments: List[PaymentRead] = []

    model_config = ConfigDict(from_attributes=True)

class SaleReceipt(SaleRead):
    change: Decimal = Decimal("0.00")  # Vuelto entregado

# --- Devoluciones ---

class SaleReturnItemCreate(BaseModel):
    product_id: int
    quantity: Decimal

class SaleReturnCreate(BaseModel):
    items: List[SaleReturnItemCreate]
    refund_method: PaymentMethod = PaymentMethod.CASH
    reason: str

class SaleReturnItemRead(BaseModel):
    id: int
    product_id: int
    quantity: Decimal
    refund_amount: Decimal

    model_config = ConfigDict(from_attributes=True)

class SaleReturnRead(BaseModel):
    id: int
    sale_id: int
    refund_method: PaymentMethod
    total_refunded: Decimal
    reason: str
    created_at: datetime
    items: List[SaleReturnItemRead] = []

    model_config = ConfigDict(from_attributes=True)
