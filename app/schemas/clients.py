from pydantic import BaseModel, ConfigDict, EmailStr
from typing import Optional
from decimal import Decimal
from datetime import datetime

# --- CLASES BASE ---

class ClientBase(BaseModel):
    name: str
    tax_id: Optional[str] = None         # CUIT / DNI
    tax_condition: Optional[str] = None  # Consumidor Final, Monotributo, RI
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    # Cuenta corriente
    has_credit: bool = False
    credit_limit: Decimal = Decimal("0.00")  # 0 = sin tope
    credit_days: int = 0

    is_active: bool = True
    notes: Optional[str] = None

# --- CREACIÓN ---
class ClientCreate(ClientBase):
    pass

# --- ACTUALIZACIÓN ---
class ClientUpdate(BaseModel):
    name: Optional[str] = None
    tax_id: Optional[str] = None
    tax_condition: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    has_credit: Optional[bool] = None
    credit_limit: Optional[Decimal] = None
    credit_days: Optional[int] = None
    is_active: Optional[bool] = None
    notes: Optional[str] = None

# --- LECTURA ---
class ClientRead(ClientBase):
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class ClientWithBalance(ClientRead):
    balance: Decimal = Decimal("0.00")  # Calculado desde los movimientos
