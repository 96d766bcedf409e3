# app/errors.py
import logging
from dataclasses import dataclass
from decimal import Decimal

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    status_code: int


class ErrorCatalog:
    VALIDATION_ERROR = ErrorDefinition("VALIDATION_ERROR", "Datos inválidos", status.HTTP_400_BAD_REQUEST)
    INTERNAL_ERROR = ErrorDefinition("INTERNAL_ERROR", "Error interno del servidor", status.HTTP_500_INTERNAL_SERVER_ERROR)

    # --- No encontrados ---
    CLIENT_NOT_FOUND = ErrorDefinition("CLIENT_NOT_FOUND", "Cliente no encontrado", status.HTTP_404_NOT_FOUND)
    CASH_REGISTER_NOT_FOUND = ErrorDefinition("CASH_REGISTER_NOT_FOUND", "Caja no encontrada", status.HTTP_404_NOT_FOUND)
    CASH_SESSION_NOT_FOUND = ErrorDefinition("CASH_SESSION_NOT_FOUND", "Sesión de caja no encontrada", status.HTTP_404_NOT_FOUND)
    SALE_NOT_FOUND = ErrorDefinition("SALE_NOT_FOUND", "Venta no encontrada", status.HTTP_404_NOT_FOUND)
    PRODUCT_NOT_FOUND = ErrorDefinition("PRODUCT_NOT_FOUND", "Producto no encontrado", status.HTTP_404_NOT_FOUND)
    ORDER_NOT_FOUND = ErrorDefinition("ORDER_NOT_FOUND", "Pedido no encontrado", status.HTTP_404_NOT_FOUND)
    QUOTATION_NOT_FOUND = ErrorDefinition("QUOTATION_NOT_FOUND", "Presupuesto no encontrado", status.HTTP_404_NOT_FOUND)
    PURCHASE_NOT_FOUND = ErrorDefinition("PURCHASE_NOT_FOUND", "Compra no encontrada", status.HTTP_404_NOT_FOUND)
    SUPPLIER_NOT_FOUND = ErrorDefinition("SUPPLIER_NOT_FOUND", "Proveedor no encontrado", status.HTTP_404_NOT_FOUND)

    # --- Montos y documentos ---
    INVALID_AMOUNT = ErrorDefinition("INVALID_AMOUNT", "El monto debe ser mayor a cero", status.HTTP_400_BAD_REQUEST)
    EMPTY_DOCUMENT = ErrorDefinition("EMPTY_DOCUMENT", "El documento no tiene ítems", status.HTTP_400_BAD_REQUEST)
    DUPLICATE_SKU = ErrorDefinition("DUPLICATE_SKU", "El SKU ya existe", status.HTTP_400_BAD_REQUEST)
    INSUFFICIENT_STOCK = ErrorDefinition("INSUFFICIENT_STOCK", "Stock insuficiente", status.HTTP_400_BAD_REQUEST)
    INVALID_RETURN_QUANTITY = ErrorDefinition(
        "INVALID_RETURN_QUANTITY", "Cantidad a devolver inválida", status.HTTP_400_BAD_REQUEST
    )
    INVALID_STATUS_TRANSITION = ErrorDefinition(
        "INVALID_STATUS_TRANSITION", "Cambio de estado no permitido", status.HTTP_409_CONFLICT
    )
    INVALID_REPORT_FORMAT = ErrorDefinition(
        "INVALID_REPORT_FORMAT", "Formato no soportado (json, excel, pdf)", status.HTTP_400_BAD_REQUEST
    )

    # --- Cuenta corriente ---
    CLIENT_REQUIRED = ErrorDefinition(
        "CLIENT_REQUIRED", "Se requiere un cliente para vender en cuenta corriente", status.HTTP_400_BAD_REQUEST
    )
    CREDIT_NOT_ALLOWED = ErrorDefinition(
        "CREDIT_NOT_ALLOWED", "El cliente no tiene cuenta corriente habilitada", status.HTTP_400_BAD_REQUEST
    )
    CREDIT_LIMIT_EXCEEDED = ErrorDefinition(
        "CREDIT_LIMIT_EXCEEDED", "Límite de crédito excedido", status.HTTP_400_BAD_REQUEST
    )

    # --- Caja ---
    CASH_SESSION_ALREADY_OPEN = ErrorDefinition("CASH_SESSION_ALREADY_OPEN", "Caja ya abierta", status.HTTP_409_CONFLICT)
    CASH_SESSION_NOT_OPEN = ErrorDefinition("CASH_SESSION_NOT_OPEN", "Sesión no abierta", status.HTTP_409_CONFLICT)
    CASH_SESSION_ALREADY_CLOSED = ErrorDefinition(
        "CASH_SESSION_ALREADY_CLOSED", "La sesión de caja ya fue cerrada", status.HTTP_409_CONFLICT
    )
    CASH_SESSION_REQUIRED = ErrorDefinition("CASH_SESSION_REQUIRED", "Debe abrir caja", status.HTTP_409_CONFLICT)

    # --- Idempotencia ---
    IDEMPOTENCY_KEY_REUSED = ErrorDefinition(
        "IDEMPOTENCY_KEY_REUSED",
        "La clave de idempotencia ya fue usada con otro contenido",
        status.HTTP_409_CONFLICT,
    )

    # --- Auth ---
    INVALID_CREDENTIALS = ErrorDefinition("INVALID_CREDENTIALS", "Credenciales no válidas", status.HTTP_401_UNAUTHORIZED)


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, details: object = None, message: str | None = None):
        super().__init__(message or error.message)
        self.error = error
        self.details = details
        self.message = message or error.message


def _json_safe(value):
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return value


def _validation_error_details(exc: RequestValidationError) -> dict:
    errors = []
    for error in exc.errors():
        loc = list(error.get("loc", []))
        field = ".".join(str(item) for item in loc if item not in {"body", "query", "path", "header"}) or None
        errors.append(
            {
                "field": field,
                "message": error.get("msg", "Valor inválido"),
                "type": error.get("type", "validation_error"),
            }
        )
    return {"errors": errors}


def error_response(code: str, message: str, details: object, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"code": code, "detail": message, "details": _json_safe(details)},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return error_response(exc.error.code, exc.message, exc.details, exc.error.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
        response = error_response(code, str(exc.detail), None, exc.status_code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(
            ErrorCatalog.VALIDATION_ERROR.code,
            ErrorCatalog.VALIDATION_ERROR.message,
            _validation_error_details(exc),
            ErrorCatalog.VALIDATION_ERROR.status_code,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Error no controlado en %s %s", request.method, request.url.path)
        return error_response(
            ErrorCatalog.INTERNAL_ERROR.code,
            ErrorCatalog.INTERNAL_ERROR.message,
            {"type": exc.__class__.__name__},
            ErrorCatalog.INTERNAL_ERROR.status_code,
        )
