from decimal import Decimal

import pytest

from app.errors import AppError
from app.models import Client
from app.services import ledger


def _client(db_session, name="Cliente", **kwargs):
    client = Client(name=name, **kwargs)
    db_session.add(client)
    db_session.commit()
    return client


def test_balance_is_charges_minus_payments(db_session):
    client = _client(db_session)
    ledger.record_charge(db_session, client.id, Decimal("1000"), "Venta", enforce_credit=False)
    ledger.record_payment(db_session, client.id, Decimal("300"))
    db_session.commit()

    assert ledger.get_balance(db_session, client.id) == Decimal("700.00")


def test_balance_does_not_depend_on_how_movements_are_committed(db_session):
    one_batch = _client(db_session, "En un lote")
    many_batches = _client(db_session, "En varios lotes")
    operations = [("charge", "150.10"), ("charge", "49.90"), ("payment", "120.00"), ("charge", "0.35")]

    for kind, amount in operations:
        if kind == "charge":
            ledger.record_charge(db_session, one_batch.id, Decimal(amount), enforce_credit=False)
        else:
            ledger.record_payment(db_session, one_batch.id, Decimal(amount))
    db_session.commit()

    for kind, amount in operations:
        if kind == "charge":
            ledger.record_charge(db_session, many_batches.id, Decimal(amount), enforce_credit=False)
        else:
            ledger.record_payment(db_session, many_batches.id, Decimal(amount))
        db_session.commit()

    assert ledger.get_balance(db_session, one_batch.id) == Decimal("80.35")
    assert ledger.get_balance(db_session, many_batches.id) == ledger.get_balance(db_session, one_batch.id)


def test_statement_carries_running_balance(db_session):
    client = _client(db_session)
    ledger.record_charge(db_session, client.id, Decimal("500"), enforce_credit=False)
    ledger.record_payment(db_session, client.id, Decimal("200"))
    ledger.record_charge(db_session, client.id, Decimal("50"), enforce_credit=False)
    db_session.commit()

    account = ledger.get_account(db_session, client.id)

    assert [row["running_balance"] for row in account["movements"]] == [
        Decimal("500.00"),
        Decimal("300.00"),
        Decimal("350.00"),
    ]
    assert account["balance"] == Decimal("350.00")


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-10")])
def test_non_positive_amounts_are_rejected(db_session, amount):
    client = _client(db_session)

    with pytest.raises(AppError) as exc:
        ledger.record_payment(db_session, client.id, amount)

    assert exc.value.error.code == "INVALID_AMOUNT"
    assert ledger.list_movements(db_session, client.id) == []


def test_unknown_client(db_session):
    with pytest.raises(AppError) as exc:
        ledger.get_balance(db_session, 9999)
    assert exc.value.error.code == "CLIENT_NOT_FOUND"


def test_charge_requires_enabled_account(db_session):
    client = _client(db_session, has_credit=False)

    with pytest.raises(AppError) as exc:
        ledger.record_charge(db_session, client.id, Decimal("10"))

    assert exc.value.error.code == "CREDIT_NOT_ALLOWED"


def test_charge_respects_credit_limit(db_session):
    client = _client(db_session, has_credit=True, credit_limit=Decimal("1000"))
    ledger.record_charge(db_session, client.id, Decimal("800"))
    db_session.commit()

    with pytest.raises(AppError) as exc:
        ledger.record_charge(db_session, client.id, Decimal("300"))

    assert exc.value.error.code == "CREDIT_LIMIT_EXCEEDED"
    assert ledger.get_balance(db_session, client.id) == Decimal("800.00")
