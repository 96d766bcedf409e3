# app/models/inventory.py
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Numeric, DateTime
from sqlalchemy.orm import relationship
from app.database import Base


class MovementType(str, enum.Enum):
    PURCHASE_IN = "PURCHASE_IN"        # Entrada por compra
    SALE_OUT = "SALE_OUT"              # Salida por venta
    RETURN_IN = "RETURN_IN"            # Devolución de cliente
    ADJUSTMENT_IN = "ADJUSTMENT_IN"    # Ajuste de inventario (+)
    ADJUSTMENT_OUT = "ADJUSTMENT_OUT"  # Ajuste de inventario (-)


class StockMovement(Base):
    """Kardex: cada fila es un movimiento de cantidad y costo de un producto."""
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    type = Column(Enum(MovementType), nullable=False)
    qty = Column(Numeric(12, 3), nullable=False)  # +10 o -5
    qty_before = Column(Numeric(12, 3), nullable=False)
    qty_after = Column(Numeric(12, 3), nullable=False)

    unit_cost = Column(Numeric(12, 4), nullable=False, default=0)
    total_cost = Column(Numeric(14, 2), nullable=False, default=0)  # Mismo signo que qty
    avg_cost_after = Column(Numeric(12, 4), nullable=False, default=0)

    ref_table = Column(String, nullable=True)  # sales, purchases, sale_returns...
    ref_id = Column(Integer, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    product = relationship("Product")
    user = relationship("User")
