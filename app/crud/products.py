from sqlalchemy.orm import Session
from app.models import MovementType, Product
from app.schemas.products import ProductCreate
from app.services import kardex


def create_product(db: Session, product_in: ProductCreate, user=None) -> Product:
    """
    Alta de producto. El costo informado arranca como costo promedio y el
    stock inicial entra al kardex como ajuste.
    """
    db_product = Product(
        sku=product_in.sku,
        barcode=product_in.barcode,
        name=product_in.name,
        description=product_in.description,
        unit=product_in.unit or "u",
        category_id=product_in.category_id,
        price=product_in.price,
        avg_cost=product_in.cost,
        stock=0,
        min_stock=product_in.min_stock,
        is_active=True,
    )
    db.add(db_product)
    db.flush()

    if product_in.initial_stock > 0:
        kardex.apply_movement(
            db,
            db_product,
            MovementType.ADJUSTMENT_IN,
            product_in.initial_stock,
            unit_cost=product_in.cost,
            user_id=getattr(user, "id", None),
            ref_table="products",
            ref_id=db_product.id,
            notes="Inventario inicial",
        )
    return db_product


def get_product_by_sku(db: Session, sku: str):
    return db.query(Product).filter(Product.sku == sku).first()
