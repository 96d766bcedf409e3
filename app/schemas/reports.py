from pydantic import BaseModel
from typing import List, Dict, Optional
from datetime import date, datetime
from decimal import Decimal

# --- Ventas ---

class ProductSales(BaseModel):
    quantity: Decimal
    total: Decimal

class SalesReport(BaseModel):
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    count: int
    total_sales: Decimal
    by_client: Dict[str, Decimal]
    by_product: Dict[str, ProductSales]
    by_payment_method: Dict[str, Decimal]
    by_type: Dict[str, Decimal]

class TopProduct(BaseModel):
    name: str
    quantity: Decimal

class DailySummary(BaseModel):
    date: date
    transactions_count: int
    total_revenue: Decimal
    gross_profit: Decimal
    payments: Dict[str, Decimal]
    top_selling_items: List[TopProduct]

# --- Cuenta corriente ---

class ReceivableRow(BaseModel):
    client_id: int
    client_name: str
    balance: Decimal
    last_payment: Optional[datetime] = None
    overdue: Decimal  # Cargos con más de 30 días

class CustomerAging(BaseModel):
    customer_id: int
    customer_name: str
    total_balance: Decimal
    # Cubetas de antigüedad
    current_0_30: Decimal
    overdue_31_60: Decimal
    overdue_61_90: Decimal
    overdue_91_plus: Decimal

class AgingReportResponse(BaseModel):
    report_date: date
    total_receivable: Decimal  # Suma total de lo que deben todos los clientes
    customers: List[CustomerAging]

# --- Stock ---

class ProductStockRow(BaseModel):
    id: int
    sku: str
    name: str
    stock: Decimal
    min_stock: Decimal
    avg_cost: Decimal

class StockReport(BaseModel):
    low_stock: List[ProductStockRow]
    no_movement: List[ProductStockRow]
    stock_value: Decimal

# --- Kardex ---

class KardexRow(BaseModel):
    id: int
    date: datetime
    product_id: int
    sku: Optional[str] = None
    type: str
    qty: Decimal
    qty_before: Decimal
    qty_after: Decimal
    unit_cost: Decimal
    total_cost: Decimal
    avg_cost_after: Decimal
    ref_table: Optional[str] = None
    ref_id: Optional[int] = None
    notes: Optional[str] = None

class KardexTotals(BaseModel):
    qty_in: Decimal
    qty_out: Decimal
    cost_in: Decimal
    cost_out: Decimal

class KardexReport(BaseModel):
    rows: List[KardexRow]
    totals: KardexTotals
    page: int
    page_size: int
    count: int
