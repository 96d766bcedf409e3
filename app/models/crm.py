# app/models/crm.py
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, Numeric, ForeignKey, DateTime, Enum
from sqlalchemy.orm import relationship
from app.database import Base


class AccountMovementType(str, enum.Enum):
    CHARGE = "CHARGE"    # Cargo: la deuda aumenta (venta en cuenta corriente)
    PAYMENT = "PAYMENT"  # Pago / abono: la deuda baja


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)

    # Datos fiscales
    tax_id = Column(String, index=True, nullable=True)  # CUIT / DNI
    tax_condition = Column(String, nullable=True)       # Consumidor Final, Monotributo, RI...

    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    is_active = Column(Boolean, default=True)

    # --- Cuenta corriente ---
    has_credit = Column(Boolean, default=False)
    credit_limit = Column(Numeric(12, 2), default=0)  # 0 = sin tope
    credit_days = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)

    movements = relationship(
        "AccountMovement",
        back_populates="client",
        order_by=lambda: [AccountMovement.created_at, AccountMovement.id],
    )


class AccountMovement(Base):
    """
    Cuenta corriente del cliente. Solo se agregan filas, nunca se editan:
    el saldo es siempre la suma de cargos menos la suma de pagos.
    """
    __tablename__ = "account_movements"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=True)

    type = Column(Enum(AccountMovementType), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)  # Siempre positivo, el signo lo da el tipo
    description = Column(String, nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    client = relationship("Client", back_populates="movements")
