from pydantic import BaseModel, ConfigDict
from typing import Optional
from decimal import Decimal
from datetime import datetime
from app.models.inventory import MovementType

# Input para crear un ajuste manual
class AdjustmentCreate(BaseModel):
    product_id: int
    quantity: Decimal  # Positivo para entrada, negativo para salida
    reason: str        # "Merma", "Inventario inicial", "Rotura"

# Output para leer el Kardex
class MovementRead(BaseModel):
    id: int
    product_id: int
    type: MovementType
    qty: Decimal
    qty_before: Decimal
    qty_after: Decimal
    unit_cost: Decimal
    total_cost: Decimal
    avg_cost_after: Decimal
    ref_table: Optional[str] = None
    ref_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
