# app/models/products.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from app.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String, unique=True, index=True, nullable=False)
    barcode = Column(String, index=True, nullable=True)
    name = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)
    unit = Column(String, default="u")  # u, kg, lt

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)

    price = Column(Numeric(12, 2), default=0)     # Precio de lista
    avg_cost = Column(Numeric(12, 4), default=0)  # Costo promedio ponderado
    stock = Column(Numeric(12, 3), default=0)
    min_stock = Column(Numeric(12, 3), default=0)

    is_active = Column(Boolean, default=True)

    category = relationship("Category")
