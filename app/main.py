from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import engine
from app.errors import setup_exception_handlers
from app.logger import configure_logging
from app.models import Base
from app.routers import (
    auth, users, clients, accounts, cash, sales, orders,
    quotes, purchases, products, inventory, reports, tickets
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 1. CREACIÓN AUTOMÁTICA DE TABLAS
    Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Punto de venta: caja, cuentas corrientes, inventario y reportes",
        version="2.0.0",
        lifespan=lifespan,
    )

    # 2. CONFIGURACIÓN DE CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 3. ERRORES CON FORMATO {code, detail, details}
    setup_exception_handlers(app)

    # 4. REGISTRO DE ROUTERS
    app.include_router(auth.router, prefix="/auth", tags=["🔑 Autenticación"])
    app.include_router(users.router, prefix="/users", tags=["👤 Usuarios"])
    app.include_router(clients.router, prefix="/clients", tags=["👥 Clientes"])
    app.include_router(accounts.router, prefix="/accounts", tags=["📒 Cuenta corriente"])
    app.include_router(cash.registers_router, prefix="/cash-registers", tags=["💰 Cajas"])
    app.include_router(cash.router, prefix="/cash-sessions", tags=["💰 Sesiones de caja"])
    app.include_router(cash.movements_router, prefix="/cash-movements", tags=["💰 Movimientos de caja"])
    app.include_router(sales.router, prefix="/sales", tags=["🛒 Ventas"])
    app.include_router(orders.router, prefix="/orders", tags=["📦 Pedidos"])
    app.include_router(quotes.router, prefix="/quotations", tags=["📄 Presupuestos"])
    app.include_router(purchases.router, prefix="/purchases", tags=["🚚 Compras"])
    app.include_router(purchases.suppliers_router, prefix="/suppliers", tags=["🚚 Proveedores"])
    app.include_router(products.router, prefix="/products", tags=["🧁 Productos"])
    app.include_router(products.categories_router, prefix="/categories", tags=["🧁 Categorías"])
    app.include_router(inventory.router, prefix="/inventory", tags=["🔄 Inventario & Kardex"])
    app.include_router(reports.router, prefix="/reports", tags=["📊 Reportes"])
    app.include_router(tickets.router, prefix="/tickets", tags=["🧾 Tickets"])

    @app.get("/health", tags=["Sistema"])
    def health():
        return {"status": "ok"}

    return app


app = create_app()
