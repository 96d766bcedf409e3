from typing import Optional
from pydantic import BaseModel, ConfigDict
from decimal import Decimal

# --- Categorías ---
class CategoryCreate(BaseModel):
    name: str
    description: Optional[str] = None

class CategoryRead(CategoryCreate):
    id: int
    model_config = ConfigDict(from_attributes=True)

# --- Producto Crear/Editar (Input) ---
class ProductCreate(BaseModel):
    sku: str
    barcode: Optional[str] = None
    name: str
    description: Optional[str] = None
    unit: Optional[str] = "u"  # u, kg, lt

    price: Decimal
    cost: Decimal = Decimal(0)  # Costo inicial (pasa a ser el promedio)

    category_id: Optional[int] = None
    initial_stock: Decimal = Decimal(0)
    min_stock: Decimal = Decimal(0)

class ProductUpdate(BaseModel):
    sku: Optional[str] = None
    barcode: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    unit: Optional[str] = None
    price: Optional[Decimal] = None
    category_id: Optional[int] = None
    min_stock: Optional[Decimal] = None
    is_active: Optional[bool] = None

# --- Producto Lectura (Output) ---
class ProductRead(BaseModel):
    id: int
    sku: str
    barcode: Optional[str] = None
    name: str
    description: Optional[str] = None
    unit: Optional[str] = None
    price: Decimal
    avg_cost: Decimal
    stock: Decimal
    min_stock: Decimal
    is_active: bool
    category: Optional[CategoryRead] = None

    model_config = ConfigDict(from_attributes=True)
