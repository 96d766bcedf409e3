import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, Numeric
from sqlalchemy.orm import relationship
from app.database import Base


# --- Enums ---
class SaleType(str, enum.Enum):
    TICKET = "TICKET"        # Remito X / ticket interno
    INVOICE_C = "INVOICE_C"  # Factura C


class PaymentMethod(str, enum.Enum):
    CASH = "CASH"                # Efectivo
    CARD = "CARD"                # Tarjeta débito / crédito
    TRANSFER = "TRANSFER"        # Transferencia bancaria
    MERCADOPAGO = "MERCADOPAGO"  # QR / link de pago
    ACCOUNT = "ACCOUNT"          # Cuenta corriente del cliente
    OTHER = "OTHER"


# --- Encabezado de venta ---
class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(Enum(SaleType), default=SaleType.TICKET, nullable=False)

    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True)
    customer_name = Column(String, nullable=True)  # Para "Consumidor Final"
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    cash_session_id = Column(Integer, ForeignKey("cash_sessions.id"), nullable=True)

    number = Column(Integer, nullable=True)  # Número correlativo por tipo

    subtotal = Column(Numeric(12, 2), default=0)
    discount = Column(Numeric(12, 2), default=0)
    total = Column(Numeric(12, 2), default=0)
    paid = Column(Numeric(12, 2), default=0)

    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    client = relationship("Client")
    seller = relationship("User")
    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="sale")
    returns = relationship("SaleReturn", back_populates="sale")


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    description = Column(String)
    quantity = Column(Numeric(12, 3), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), default=0)
    unit_cost = Column(Numeric(12, 4), nullable=True)  # Costo promedio al momento de la venta
    total = Column(Numeric(12, 2), nullable=False)

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")


class Payment(Base):
    """
    Pago de una venta. Una venta puede tener varios pagos (mixto); los
    pagos quedan asociados a la sesión de caja abierta del cajero.
    """
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False)
    cash_session_id = Column(Integer, ForeignKey("cash_sessions.id"), nullable=True, index=True)

    method = Column(Enum(PaymentMethod), nullable=False, default=PaymentMethod.CASH)
    amount = Column(Numeric(12, 2), nullable=False)
    reference = Column(String, nullable=True)  # Nro. de autorización / operación

    created_at = Column(DateTime, default=datetime.utcnow)

    sale = relationship("Sale", back_populates="payments")
    cash_session = relationship("CashSession", back_populates="payments")


# --- Devoluciones ---
class SaleReturn(Base):
    __tablename__ = "sale_returns"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    refund_method = Column(Enum(PaymentMethod), nullable=False, default=PaymentMethod.CASH)
    total_refunded = Column(Numeric(12, 2), nullable=False, default=0)
    reason = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    sale = relationship("Sale", back_populates="returns")
    items = relationship("SaleReturnItem", back_populates="parent_return")


class SaleReturnItem(Base):
    __tablename__ = "sale_return_items"

    id = Column(Integer, primary_key=True, index=True)
    return_id = Column(Integer, ForeignKey("sale_returns.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False)
    refund_amount = Column(Numeric(12, 2), nullable=False)

    parent_return = relationship("SaleReturn", back_populates="items")
