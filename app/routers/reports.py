#app/routers/reports.py
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional

from app.database import get_db
from app.errors import AppError, ErrorCatalog
from app.models import MovementType
from app.security import get_current_user, User
from app.schemas.cash import CashSessionRead
from app.schemas.reports import (
    AgingReportResponse,
    DailySummary,
    KardexReport,
    ReceivableRow,
    SalesReport,
    StockReport,
)
from app.services import reports
from app.utils.excel import excel_response
from app.utils.pdf_generator import generate_report_pdf
from app.utils.money import money_str

router = APIRouter()

FORMATS = {"json", "excel", "pdf"}


def _check_format(format: str) -> str:
    fmt = (format or "json").lower()
    if fmt not in FORMATS:
        raise AppError(ErrorCatalog.INVALID_REPORT_FORMAT, details={"format": format})
    return fmt


def _pdf(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def _fmt_date(value) -> str:
    return value.strftime("%d/%m/%Y %H:%M") if value else "-"


@router.get("/sales", response_model=SalesReport)
def get_sales_report(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    format: str = "json",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Ventas del rango agrupadas por cliente, producto, medio de pago y tipo."""
    fmt = _check_format(format)
    data = reports.sales_report(db, date_from, date_to)
    if fmt == "json":
        return data

    groups = [
        ("Por cliente", "Cliente", data["by_client"]),
        ("Por medio de pago", "Medio", data["by_payment_method"]),
        ("Por tipo", "Tipo", data["by_type"]),
    ]
    products = [
        {"Producto": k, "Cantidad": v["quantity"], "Total": v["total"]} for k, v in data["by_product"].items()
    ]
    if fmt == "excel":
        sheets = {"Resumen": [{"Ventas": data["count"], "Total": data["total_sales"]}]}
        for sheet, label, values in groups:
            sheets[sheet] = [{label: k, "Total": v} for k, v in values.items()]
        sheets["Por producto"] = products
        return excel_response(sheets, "reporte_ventas.xlsx")

    rows = [[sheet, k, money_str(v)] for sheet, _, values in groups for k, v in values.items()]
    rows += [["Por producto", p["Producto"], money_str(p["Total"])] for p in products]
    content = generate_report_pdf(
        "Reporte de ventas",
        ["AGRUPACIÓN", "CLAVE", "TOTAL"],
        rows,
        summary=[
            ("Desde:", date_from or "-"),
            ("Hasta:", date_to or "-"),
            ("Ventas:", data["count"]),
            ("Total:", money_str(data["total_sales"])),
        ],
    )
    return _pdf(content, "reporte_ventas.pdf")


@router.get("/daily-summary", response_model=DailySummary)
def get_daily_summary(
    target_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Resumen de ventas, métodos de pago y utilidad del día."""
    return reports.daily_summary(db, target_date or date.today())


@router.get("/accounts-receivable", response_model=List[ReceivableRow])
def get_accounts_receivable(
    format: str = "json",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Clientes con saldo deudor, último pago y monto vencido."""
    fmt = _check_format(format)
    rows = reports.accounts_receivable_report(db)
    if fmt == "json":
        return rows
    if fmt == "excel":
        return excel_response(
            {
                "Cuentas a cobrar": [
                    {
                        "Cliente": r["client_name"],
                        "Saldo": r["balance"],
                        "Último pago": r["last_payment"],
                        "Vencido": r["overdue"],
                    }
                    for r in rows
                ]
            },
            "cuentas_a_cobrar.xlsx",
        )
    content = generate_report_pdf(
        "Cuentas a cobrar",
        ["CLIENTE", "SALDO", "ÚLTIMO PAGO", "VENCIDO"],
        [[r["client_name"], money_str(r["balance"]), _fmt_date(r["last_payment"]), money_str(r["overdue"])] for r in rows],
    )
    return _pdf(content, "cuentas_a_cobrar.pdf")


@router.get("/aging", response_model=AgingReportResponse)
def get_aging_report(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Calcula la antigüedad de saldos: clasifica la deuda de los clientes
    en tramos de OVERDUE_DAYS días (30, 60, 90 y +90 por defecto).
    """
    return reports.aging_report(db)


@router.get("/stock", response_model=StockReport)
def get_stock_report(
    format: str = "json",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    fmt = _check_format(format)
    data = reports.stock_report(db)
    if fmt == "json":
        return data

    def _rows(items):
        return [
            {"SKU": p["sku"], "Producto": p["name"], "Stock": p["stock"], "Mínimo": p["min_stock"], "Costo": p["avg_cost"]}
            for p in items
        ]

    if fmt == "excel":
        return excel_response(
            {
                "Bajo stock": _rows(data["low_stock"]),
                "Sin movimiento": _rows(data["no_movement"]),
                "Valorización": [{"Valor del stock": data["stock_value"]}],
            },
            "reporte_stock.xlsx",
        )
    content = generate_report_pdf(
        "Reporte de stock (bajo mínimo)",
        ["SKU", "PRODUCTO", "STOCK", "MÍNIMO"],
        [[p["sku"], p["name"], p["stock"], p["min_stock"]] for p in data["low_stock"]],
        summary=[
            ("Valor del stock:", money_str(data["stock_value"])),
            ("Sin ventas:", len(data["no_movement"])),
        ],
    )
    return _pdf(content, "reporte_stock.pdf")


@router.get("/kardex", response_model=KardexReport)
def get_kardex_report(
    product_id: Optional[int] = None,
    type: Optional[MovementType] = None,
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    page: int = 1,
    page_size: Optional[int] = None,
    format: str = "json",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    fmt = _check_format(format)
    data = reports.kardex_report(db, product_id, type, date_from, date_to, page, page_size)
    if fmt == "json":
        return data

    if fmt == "excel":
        return excel_response(
            {
                "Kardex": [
                    {
                        "Fecha": r["date"],
                        "SKU": r["sku"],
                        "Tipo": r["type"],
                        "Cantidad": r["qty"],
                        "Antes": r["qty_before"],
                        "Después": r["qty_after"],
                        "Costo unit.": r["unit_cost"],
                        "Costo total": r["total_cost"],
                        "Costo prom.": r["avg_cost_after"],
                        "Referencia": f"{r['ref_table'] or ''} {r['ref_id'] or ''}".strip(),
                    }
                    for r in data["rows"]
                ],
                "Totales": [data["totals"]],
            },
            "kardex.xlsx",
        )
    totals = data["totals"]
    content = generate_report_pdf(
        "Kardex",
        ["FECHA", "SKU", "TIPO", "CANT.", "ANTES", "DESPUÉS", "COSTO UNIT.", "COSTO TOTAL"],
        [
            [_fmt_date(r["date"]), r["sku"], r["type"], r["qty"], r["qty_before"], r["qty_after"],
             r["unit_cost"], money_str(r["total_cost"])]
            for r in data["rows"]
        ],
        summary=[
            ("Entradas:", f"{totals['qty_in']} ({money_str(totals['cost_in'])})"),
            ("Salidas:", f"{totals['qty_out']} ({money_str(totals['cost_out'])})"),
        ],
    )
    return _pdf(content, "kardex.pdf")


@router.get("/cash-discrepancies", response_model=List[CashSessionRead])
def get_cash_discrepancies(
    limit: int = 10,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Lista las últimas sesiones de caja con faltantes o sobrantes."""
    return reports.cash_discrepancies(db, limit)
