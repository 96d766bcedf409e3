# app/models/__init__.py

# 1. Base de datos (origen de la clase declarativa)
from app.database import Base

# 2. Usuarios
from .users import User, Role

# 3. Catálogo e inventario
from .products import Product, Category
from .inventory import StockMovement, MovementType

# 4. Clientes y cuenta corriente
from .crm import Client, AccountMovement, AccountMovementType

# 5. Caja
from .cash import (
    CashRegister,
    CashSession,
    CashMovement,
    CashClosure,
    CashSessionStatus,
    CashMovementType,
    CashClosureType,
)

# 6. Ventas, pedidos y presupuestos
from .sales import Sale, SaleItem, Payment, PaymentMethod, SaleType, SaleReturn, SaleReturnItem
from .documents import Order, OrderItem, OrderStatus, Quotation, QuotationItem, QuotationStatus

# 7. Compras
from .purchases import Supplier, Purchase, PurchaseItem, SupplierPayment

from .idempotency import IdempotencyRecord
