# app/routers/clients.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.models import Client
from app.schemas.clients import ClientCreate, ClientRead, ClientUpdate, ClientWithBalance
from app.security import get_current_user, User
from app.services import ledger

router = APIRouter()

# --------------------------------------------------------------------------
# 1. LISTAR CLIENTES
# --------------------------------------------------------------------------
@router.get("/", response_model=List[ClientRead])
def get_clients(
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,  # Búsqueda por nombre o CUIT
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    query = db.query(Client).filter(Client.is_active == True)
    if search:
        search_fmt = f"%{search}%"
        query = query.filter((Client.name.ilike(search_fmt)) | (Client.tax_id.ilike(search_fmt)))
    return query.order_by(Client.name).offset(skip).limit(limit).all()

# --------------------------------------------------------------------------
# 2. DETALLE (con saldo de cuenta corriente)
# --------------------------------------------------------------------------
@router.get("/{client_id}", response_model=ClientWithBalance)
def get_client(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    client = ledger.get_client(db, client_id)
    data = ClientRead.model_validate(client).model_dump()
    return ClientWithBalance(**data, balance=ledger.get_balance(db, client_id))

# --------------------------------------------------------------------------
# 3. CREAR CLIENTE
# --------------------------------------------------------------------------
@router.post("/", response_model=ClientRead)
def create_client(
    client_in: ClientCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    # CUIT único cuando se informa
    if client_in.tax_id:
        exists = db.query(Client).filter(Client.tax_id == client_in.tax_id).first()
        if exists:
            raise HTTPException(status_code=400, detail=f"El CUIT/DNI {client_in.tax_id} ya está registrado.")

    new_client = Client(**client_in.model_dump())
    db.add(new_client)
    db.commit()
    db.refresh(new_client)
    return new_client

# --------------------------------------------------------------------------
# 4. ACTUALIZAR CLIENTE
# --------------------------------------------------------------------------
@router.put("/{client_id}", response_model=ClientRead)
def update_client(
    client_id: int,
    client_in: ClientUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    client = ledger.get_client(db, client_id)
    for field, value in client_in.model_dump(exclude_unset=True).items():
        setattr(client, field, value)
    db.commit()
    db.refresh(client)
    return client

# --------------------------------------------------------------------------
# 5. ELIMINAR (SOFT DELETE)
# --------------------------------------------------------------------------
@router.delete("/{client_id}", response_model=ClientRead)
def delete_client(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    client = ledger.get_client(db, client_id)

    # No eliminar si tiene deuda
    balance = ledger.get_balance(db, client_id)
    if balance > 0:
        raise HTTPException(
            status_code=400,
            detail=f"No se puede eliminar. El cliente tiene una deuda pendiente de ${balance}"
        )

    client.is_active = False
    db.commit()
    db.refresh(client)
    return client
