# schemas/cash.py
from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Dict, Any
from decimal import Decimal
from datetime import datetime
from app.models.cash import CashSessionStatus, CashMovementType, CashClosureType
from app.models.sales import PaymentMethod

# --- Cajas ---

class CashRegisterCreate(BaseModel):
    name: str

class CashRegisterRead(BaseModel):
    id: int
    name: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)

# --- Sesiones ---

class CashSessionOpen(BaseModel):
    cash_register_id: int
    opening_amount: Decimal = Decimal("0.00")

class DenominationCount(BaseModel):
    denomination: Decimal  # Valor del billete / moneda
    quantity: int

class CashSessionClose(BaseModel):
    closing_amount: Optional[Decimal] = None  # Lo contado, si no se detalla por billete
    counts: Optional[List[DenominationCount]] = None
    counted_by: Optional[str] = None
    notes: Optional[str] = None

class ClosePreviewRequest(BaseModel):
    session_id: int
    closing_amount: Optional[Decimal] = None
    counts: Optional[List[DenominationCount]] = None

class ClosePreviewResponse(BaseModel):
    session_id: int
    theoretical_cash: Decimal
    counted_cash: Decimal
    difference: Decimal

class CashSessionRead(BaseModel):
    id: int
    cash_register_id: int
    status: CashSessionStatus
    opened_by_id: Optional[int] = None
    closed_by_id: Optional[int] = None
    opened_at: datetime
    closed_at: Optional[datetime] = None
    opening_amount: Decimal

    # Datos de cierre
    closing_amount: Optional[Decimal] = None
    counts: Optional[List[Dict[str, Any]]] = None
    system_sales_total: Optional[Decimal] = None
    system_income_total: Optional[Decimal] = None
    system_expenses_total: Optional[Decimal] = None
    theoretical_cash: Optional[Decimal] = None
    difference: Optional[Decimal] = None  # Sobrante (+) o faltante (-)
    by_method: Optional[Dict[str, Any]] = None
    counted_by: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class SessionSummary(BaseModel):
    opening_amount: Decimal
    sales: Dict[str, Decimal]
    income: Dict[str, Decimal]
    expenses: Dict[str, Decimal]
    sales_total: Decimal
    income_total: Decimal
    expenses_total: Decimal
    theoretical_cash: Decimal

class CashSessionDetail(CashSessionRead):
    summary: Optional[SessionSummary] = None

class CurrentSessionRead(BaseModel):
    session_id: int
    cash_register_id: int
    cash_register_name: Optional[str] = None
    opened_at: datetime
    opening_amount: Decimal
    by_method: Dict[str, Decimal]
    income: Dict[str, Decimal]
    cash_outflows: Dict[str, Decimal]
    theoretical_cash: Decimal

# --- Movimientos ---

class CashMovementCreate(BaseModel):
    session_id: int
    type: CashMovementType
    payment_method: PaymentMethod = PaymentMethod.CASH
    amount: Decimal
    concept: str
    related_sale_id: Optional[int] = None
    related_purchase_id: Optional[int] = None

class CashMovementRead(BaseModel):
    id: int
    session_id: int
    type: CashMovementType
    payment_method: str
    amount: Decimal
    concept: str
    related_sale_id: Optional[int] = None
    related_purchase_id: Optional[int] = None
    created_by_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

# --- Cierres X / Z ---

class ClosureXRequest(BaseModel):
    notes: Optional[str] = None

class CashClosureRead(BaseModel):
    id: int
    session_id: int
    type: CashClosureType
    totals_by_method: Optional[Dict[str, Any]] = None
    total_sales: Decimal
    total_income: Decimal
    total_expense: Decimal
    total_cash_calc: Decimal
    counted_cash: Optional[Decimal] = None
    difference: Optional[Decimal] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
