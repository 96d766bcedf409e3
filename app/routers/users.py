from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.models import User
from app.schemas.users import UserCreate, UserRead, UserUpdate
from app.security import get_current_user, get_password_hash
from app.crud.users import get_user_by_username

router = APIRouter()

# --- 1. LEER TODOS ---
@router.get("/", response_model=List[UserRead])
def read_users(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return db.query(User).order_by(User.id).offset(skip).limit(limit).all()

# --- 2. USUARIO ACTUAL ---
@router.get("/me", response_model=UserRead)
def read_user_me(current_user: User = Depends(get_current_user)):
    return current_user

# --- 3. CREAR USUARIO ---
@router.post("/", response_model=UserRead)
def create_user(
    user: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if get_user_by_username(db, user.username):
        raise HTTPException(status_code=400, detail="El nombre de usuario ya existe")

    new_user = User(
        username=user.username,
        full_name=user.full_name,
        email=user.email,
        role=user.role,
        is_active=user.is_active,
        password_hash=get_password_hash(user.password),
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    return new_user

# --- 4. ACTUALIZAR (rol, nombre, contraseña) ---
@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user_db = db.query(User).filter(User.id == user_id).first()
    if not user_db:
        raise HTTPException(status_code=404, detail="Usuario no encontrado")

    update_data = user_in.model_dump(exclude_unset=True)
    password_raw = update_data.pop("password", None)
    if password_raw:
        user_db.password_hash = get_password_hash(password_raw)

    for field, value in update_data.items():
        setattr(user_db, field, value)

    db.commit()
    db.refresh(user_db)
    return user_db

# --- 5. DESACTIVAR (SOFT DELETE) ---
@router.delete("/{user_id}", response_model=UserRead)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user_db = db.query(User).filter(User.id == user_id).first()
    if not user_db:
        raise HTTPException(status_code=404, detail="Usuario no encontrado")
    if not user_db.is_active:
        raise HTTPException(status_code=400, detail="Este usuario ya estaba desactivado")

    user_db.is_active = False
    db.commit()
    db.refresh(user_db)
    return user_db
