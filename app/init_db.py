"""
Carga inicial: usuario admin, una caja, categorías y productos de ejemplo.

    python -m app.init_db
"""
import logging
from decimal import Decimal

from app.database import SessionLocal, engine, Base
from app.logger import configure_logging
from app.models import CashRegister, Category, Role, User
from app.schemas.products import ProductCreate
from app.security import get_password_hash
from app.crud.products import create_product, get_product_by_sku

logger = logging.getLogger(__name__)

CATEGORIES = ["Harinas", "Chocolates", "Decoración", "Moldes", "Lácteos"]

# nombre, categoría, precio, costo, sku, unidad, stock inicial
PRODUCTS = [
    ("Harina 0000 1kg", "Harinas", "1200.00", "850.00", "HAR001", "u", 40),
    ("Harina leudante 1kg", "Harinas", "1350.00", "950.00", "HAR002", "u", 30),
    ("Chocolate cobertura semiamargo", "Chocolates", "9800.00", "7200.00", "CHO001", "kg", 10),
    ("Cacao amargo 250g", "Chocolates", "3200.00", "2300.00", "CHO002", "u", 25),
    ("Granas de colores 100g", "Decoración", "900.00", "500.00", "DEC001", "u", 60),
    ("Fondant blanco 1kg", "Decoración", "6500.00", "4600.00", "DEC002", "u", 15),
    ("Molde desmontable 24cm", "Moldes", "8500.00", "5900.00", "MOL001", "u", 8),
    ("Pirotines N°10 x100", "Moldes", "1100.00", "700.00", "MOL002", "u", 50),
    ("Crema de leche 500ml", "Lácteos", "2900.00", "2100.00", "LAC001", "u", 20),
    ("Manteca 200g", "Lácteos", "2400.00", "1750.00", "LAC002", "u", 20),
]


def init_db():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        # 1. Usuario admin
        admin = db.query(User).filter(User.username == "admin").first()
        if not admin:
            admin = User(
                username="admin",
                password_hash=get_password_hash("admin123"),
                full_name="Administrador",
                role=Role.ADMIN,
            )
            db.add(admin)
            db.flush()
            logger.info("Usuario admin creado.")

        # 2. Caja
        if not db.query(CashRegister).first():
            db.add(CashRegister(name="Caja 1", is_active=True))
            logger.info("Caja creada.")

        # 3. Categorías
        category_map = {}
        for name in CATEGORIES:
            category = db.query(Category).filter(Category.name == name).first()
            if not category:
                category = Category(name=name, description=f"Productos de {name}")
                db.add(category)
                db.flush()
            category_map[name] = category.id

        # 4. Productos (el stock inicial entra al kardex)
        count_new = 0
        for name, category, price, cost, sku, unit, stock in PRODUCTS:
            if get_product_by_sku(db, sku):
                continue
            create_product(
                db,
                ProductCreate(
                    sku=sku,
                    barcode=sku,
                    name=name,
                    unit=unit,
                    price=Decimal(price),
                    cost=Decimal(cost),
                    category_id=category_map[category],
                    initial_stock=Decimal(stock),
                    min_stock=Decimal(5),
                ),
                admin,
            )
            count_new += 1

        db.commit()
        logger.info("Seed terminado. Productos nuevos: %s", count_new)
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    init_db()
