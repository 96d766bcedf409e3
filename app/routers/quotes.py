# app/routers/quotes.py
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.models import QuotationStatus
from app.schemas.documents import OrderRead, QuotationCreate, QuotationRead, QuotationStatusUpdate
from app.security import get_current_user, User
from app.services import documents
from app.utils.pdf_generator import generate_quotation_pdf

router = APIRouter()


@router.post("/", response_model=QuotationRead)
def create_quotation(
    quotation_in: QuotationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Crea un presupuesto (no afecta stock ni caja)."""
    quotation = documents.create_quotation(db, quotation_in)
    db.commit()
    db.refresh(quotation)
    return quotation


@router.get("/", response_model=List[QuotationRead])
def list_quotations(
    status: Optional[QuotationStatus] = None,
    client_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return documents.list_quotations(db, status, client_id)


@router.get("/{quotation_id}", response_model=QuotationRead)
def get_quotation(quotation_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return documents.get_quotation(db, quotation_id)


@router.patch("/{quotation_id}/status", response_model=QuotationRead)
def update_quotation_status(
    quotation_id: int,
    status_in: QuotationStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    quotation = documents.update_quotation_status(db, quotation_id, status_in.status)
    db.commit()
    db.refresh(quotation)
    return quotation


@router.get("/{quotation_id}/pdf")
def get_quotation_pdf(quotation_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Genera el PDF descargable del presupuesto."""
    quotation = documents.get_quotation(db, quotation_id)
    pdf_content = generate_quotation_pdf(quotation)
    return Response(
        content=pdf_content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=Presupuesto_{quotation.id}.pdf"}
    )


@router.post("/{quotation_id}/convert-to-order", response_model=OrderRead)
def convert_quotation_to_order(
    quotation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Toma un presupuesto y genera el pedido con las mismas líneas."""
    order = documents.convert_to_order(db, quotation_id)
    db.commit()
    db.refresh(order)
    return order
