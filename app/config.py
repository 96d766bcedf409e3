# app/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "Punto Pastelero"
    STORE_NAME: str = "Punto Pastelero"
    STORE_SLOGAN: str = "Insumos para pastelería y repostería"

    # Cambia la URL si usas PostgreSQL o MySQL
    DATABASE_URL: str = "sqlite:///./punto_pastelero.db"

    SECRET_KEY: str = "punto_pastelero_secret_key_change_me_in_prod"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12  # 12 horas

    # Reportes
    OVERDUE_DAYS: int = 30
    KARDEX_DEFAULT_PAGE_SIZE: int = 50
    KARDEX_MAX_PAGE_SIZE: int = 5000
    LOW_STOCK_REPORT_LIMIT: int = 500

    LOG_LEVEL: str = "INFO"


settings = Settings()
