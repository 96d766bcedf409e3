from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from decimal import Decimal
from datetime import datetime
from app.models.crm import AccountMovementType
from app.schemas.clients import ClientRead


class AccountMovementCreate(BaseModel):
    amount: Decimal
    description: Optional[str] = None

class AccountMovementRead(BaseModel):
    id: int
    client_id: int
    type: AccountMovementType
    amount: Decimal
    description: Optional[str] = None
    sale_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

# Fila del estado de cuenta, con saldo acumulado
class AccountStatementRow(BaseModel):
    id: int
    type: AccountMovementType
    amount: Decimal
    description: Optional[str] = None
    sale_id: Optional[int] = None
    created_at: datetime
    running_balance: Decimal

class AccountRead(BaseModel):
    client: ClientRead
    movements: List[AccountStatementRow] = []
    balance: Decimal
