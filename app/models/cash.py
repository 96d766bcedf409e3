# app/models/cash.py
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Enum, Boolean, Text, JSON
from sqlalchemy.orm import relationship
from app.database import Base


class CashSessionStatus(str, enum.Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class CashMovementType(str, enum.Enum):
    INCOME = "INCOME"    # Ingreso manual (cambio, aporte)
    EXPENSE = "EXPENSE"  # Egreso (gastos, retiros, devoluciones en efectivo)


class CashClosureType(str, enum.Enum):
    X = "X"  # Corte parcial, la caja sigue abierta
    Z = "Z"  # Cierre definitivo


class CashRegister(Base):
    __tablename__ = "cash_registers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    is_active = Column(Boolean, default=True)


class CashSession(Base):
    """
    Turno de una caja. Se abre con un fondo inicial y se cierra con el
    conteo físico; el cierre es definitivo.
    """
    __tablename__ = "cash_sessions"

    id = Column(Integer, primary_key=True, index=True)
    cash_register_id = Column(Integer, ForeignKey("cash_registers.id"), nullable=False, index=True)
    status = Column(Enum(CashSessionStatus), default=CashSessionStatus.OPEN, nullable=False, index=True)

    opened_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    closed_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    opened_at = Column(DateTime, default=datetime.utcnow)
    closed_at = Column(DateTime, nullable=True)

    # Montos
    opening_amount = Column(Numeric(12, 2), nullable=False, default=0)  # Fondo inicial
    closing_amount = Column(Numeric(12, 2), nullable=True)              # Lo contado por el cajero
    counts = Column(JSON, nullable=True)                                # [{denomination, quantity}]

    # Calculados al cerrar
    system_sales_total = Column(Numeric(12, 2), nullable=True)
    system_income_total = Column(Numeric(12, 2), nullable=True)
    system_expenses_total = Column(Numeric(12, 2), nullable=True)
    theoretical_cash = Column(Numeric(12, 2), nullable=True)
    difference = Column(Numeric(12, 2), nullable=True)  # Sobrante (+) o faltante (-)
    by_method = Column(JSON, nullable=True)

    counted_by = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    cash_register = relationship("CashRegister")
    opened_by = relationship("User", foreign_keys=[opened_by_id])
    movements = relationship("CashMovement", back_populates="session", order_by="CashMovement.id")
    payments = relationship("Payment", back_populates="cash_session")
    closures = relationship("CashClosure", back_populates="session", order_by="CashClosure.id")


class CashMovement(Base):
    __tablename__ = "cash_movements"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("cash_sessions.id"), nullable=False, index=True)

    type = Column(Enum(CashMovementType), nullable=False)
    payment_method = Column(String, nullable=False, default="CASH")
    amount = Column(Numeric(12, 2), nullable=False)
    concept = Column(String, nullable=False)

    related_sale_id = Column(Integer, ForeignKey("sales.id"), nullable=True)
    related_purchase_id = Column(Integer, ForeignKey("purchases.id"), nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    session = relationship("CashSession", back_populates="movements")


class CashClosure(Base):
    __tablename__ = "cash_closures"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("cash_sessions.id"), nullable=False, index=True)
    type = Column(Enum(CashClosureType), nullable=False)

    totals_by_method = Column(JSON, nullable=True)
    total_sales = Column(Numeric(12, 2), default=0)
    total_income = Column(Numeric(12, 2), default=0)
    total_expense = Column(Numeric(12, 2), default=0)
    total_cash_calc = Column(Numeric(12, 2), default=0)

    # Solo en cierres Z
    counted_breakdown = Column(JSON, nullable=True)
    counted_cash = Column(Numeric(12, 2), nullable=True)
    difference = Column(Numeric(12, 2), nullable=True)

    notes = Column(Text, nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    session = relationship("CashSession", back_populates="closures")
