import importlib
import inspect
from decimal import Decimal

from pydantic import BaseModel

from app.models import Client
from app.schemas.clients import ClientRead

MODULES = ["accounts", "cash", "clients", "documents", "inventory", "products", "purchases", "reports", "sales", "users"]

# esquemas que se arman directamente desde filas del ORM
ORM_READS = {"ClientRead", "SaleRead", "CashSessionRead", "MovementRead", "ProductRead", "PurchaseRead", "OrderRead", "UserRead"}


def _models():
    for name in MODULES:
        module = importlib.import_module(f"app.schemas.{name}")
        for _, cls in inspect.getmembers(module, inspect.isclass):
            if issubclass(cls, BaseModel) and cls.__module__ == module.__name__:
                yield cls


def test_schemas_use_model_config():
    for cls in _models():
        assert "Config" not in vars(cls), cls.__name__
        if cls.__name__ in ORM_READS:
            assert cls.model_config.get("from_attributes") is True, cls.__name__


def test_read_schema_from_orm_object():
    client = Client(
        id=7, name="Panadería Norte", has_credit=True, credit_limit=Decimal("500.00"), credit_days=30, is_active=True
    )

    data = ClientRead.model_validate(client)

    assert data.id == 7
    assert data.credit_limit == Decimal("500.00")
