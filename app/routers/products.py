# app/routers/products.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
from sqlalchemy import or_

from app.crud.products import create_product, get_product_by_sku
from app.database import get_db
from app.errors import AppError, ErrorCatalog
from app.models import Category, Product, User
from app.schemas.products import CategoryCreate, CategoryRead, ProductCreate, ProductRead, ProductUpdate
from app.security import get_current_user
from app.services import kardex
from app.utils.excel import excel_response

router = APIRouter()
categories_router = APIRouter()


# -----------------------------
# 1. Listar productos
# -----------------------------
@router.get("/", response_model=List[ProductRead])
def read_products(
    skip: int = 0,
    limit: int = 100,
    search: str = "",
    category_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Product).options(joinedload(Product.category)).filter(Product.is_active == True)
    if search:
        s = f"%{search}%"
        query = query.filter(or_(Product.name.ilike(s), Product.sku.ilike(s), Product.barcode.ilike(s)))
    if category_id:
        query = query.filter(Product.category_id == category_id)
    return query.order_by(Product.name).offset(skip).limit(limit).all()


# -----------------------------
# 2. Exportar catálogo a Excel
# -----------------------------
@router.get("/export")
def export_products(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    products = db.query(Product).options(joinedload(Product.category)).order_by(Product.sku).all()
    data = [
        {
            "SKU": p.sku,
            "Código de barras": p.barcode or "",
            "Nombre": p.name,
            "Categoría": p.category.name if p.category else "",
            "Unidad": p.unit,
            "Precio": p.price,
            "Costo promedio": p.avg_cost,
            "Stock": p.stock,
            "Stock mínimo": p.min_stock,
            "Activo": "SI" if p.is_active else "NO",
        }
        for p in products
    ]
    return excel_response({"Productos": data}, "productos.xlsx")


# -----------------------------
# 3. Detalle
# -----------------------------
@router.get("/{product_id}", response_model=ProductRead)
def read_product(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return kardex.get_product(db, product_id)


# -----------------------------
# 4. Crear
# -----------------------------
@router.post("/", response_model=ProductRead)
def create_product_endpoint(
    product_in: ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if get_product_by_sku(db, product_in.sku):
        raise AppError(ErrorCatalog.DUPLICATE_SKU, details={"sku": product_in.sku})

    product = create_product(db, product_in, current_user)
    db.commit()
    db.refresh(product)
    return product


# -----------------------------
# 5. Actualizar (stock y costo solo cambian vía kardex)
# -----------------------------
@router.put("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: int,
    product_in: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = kardex.get_product(db, product_id)
    update_data = product_in.model_dump(exclude_unset=True)

    new_sku = update_data.get("sku")
    if new_sku and new_sku != product.sku:
        existing = get_product_by_sku(db, new_sku)
        if existing and existing.id != product.id:
            raise AppError(ErrorCatalog.DUPLICATE_SKU, details={"sku": new_sku})

    for field, value in update_data.items():
        setattr(product, field, value)

    db.commit()
    db.refresh(product)
    return product


# -----------------------------
# Categorías
# -----------------------------
@categories_router.get("/", response_model=List[CategoryRead])
def read_categories(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return db.query(Category).order_by(Category.name).all()


@categories_router.post("/", response_model=CategoryRead)
def create_category(
    category_in: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    category = Category(name=category_in.name, description=category_in.description)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category
