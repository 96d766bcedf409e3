from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from datetime import timedelta

from app.config import settings
from app.database import get_db
from app.errors import AppError, ErrorCatalog
from app.security import verify_password, create_access_token
from app.schemas.users import Token
from app.crud.users import get_user_by_username

router = APIRouter()

@router.post("/login", response_model=Token)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    # 1. Buscar usuario activo y verificar contraseña
    user = get_user_by_username(db, username=form_data.username)
    if not user or not user.is_active or not verify_password(form_data.password, user.password_hash):
        raise AppError(ErrorCatalog.INVALID_CREDENTIALS)

    # 2. Generar Token
    access_token = create_access_token(
        data={"sub": user.username, "role": user.role.value},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return {"access_token": access_token, "token_type": "bearer", "role": user.role, "username": user.username}
