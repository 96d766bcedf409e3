from sqlalchemy.orm import Session
from sqlalchemy import func
from app.models import Sale, SaleType


def get_next_number(db: Session, sale_type: SaleType = SaleType.TICKET) -> int:
    """
    Obtiene el siguiente número correlativo para el tipo de comprobante.
    Realiza una consulta MAX(number) en la base de datos.
    """
    max_number = db.query(func.max(Sale.number)).filter(Sale.type == sale_type).scalar()

    # Si no hay ventas de este tipo, empezamos en 1
    if max_number is None:
        return 1
    return max_number + 1
