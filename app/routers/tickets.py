from decimal import Decimal
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.security import get_current_user, User
from app.services import sales as sales_service

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

PAYMENT_LABELS = {
    "CASH": "Efectivo",
    "CARD": "Tarjeta",
    "TRANSFER": "Transferencia",
    "MERCADOPAGO": "Mercado Pago",
    "ACCOUNT": "Cuenta corriente",
    "OTHER": "Otro",
}


def _money(value) -> str:
    return f"${Decimal(str(value or 0)):,.2f}"


def _qty(value) -> str:
    # 2.000 -> 2, 0.250 -> 0.25
    return f"{Decimal(str(value or 0)).normalize():f}"


templates.env.filters["money"] = _money
templates.env.filters["qty"] = _qty


@router.get("/{sale_id}/print", response_class=HTMLResponse)
def print_ticket(
    sale_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Ticket HTML de 58 mm listo para imprimir desde el navegador."""
    sale = sales_service.get_sale(db, sale_id)
    if sale.client:
        customer_name = sale.client.name
    else:
        customer_name = sale.customer_name or "Consumidor Final"
    cashier_name = (sale.seller.full_name or sale.seller.username) if sale.seller else "-"

    return templates.TemplateResponse(
        request,
        "ticket.html",
        {
            "sale": sale,
            "store_name": settings.STORE_NAME,
            "store_slogan": settings.STORE_SLOGAN,
            "customer_name": customer_name,
            "cashier_name": cashier_name,
            "payment_labels": PAYMENT_LABELS,
        },
    )
