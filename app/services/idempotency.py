# app/services/idempotency.py
import hashlib
import json
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import AppError, ErrorCatalog
from app.models import IdempotencyRecord

IDEMPOTENCY_HEADER = "Idempotency-Key"


@dataclass
class IdempotencyReplay:
    status_code: int
    response_body: object


class IdempotencyService:
    """
    Reintentos seguros para operaciones de dinero. La respuesta original se
    guarda en la misma transacción que la operación; la unicidad
    (clave + endpoint) la garantiza la base.
    """

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def fingerprint(payload: object) -> str:
        payload_bytes = json.dumps(payload, sort_keys=True, default=str).encode("utf-8")
        return hashlib.sha256(payload_bytes).hexdigest()

    def _get(self, key: str, endpoint: str) -> Optional[IdempotencyRecord]:
        return (
            self.db.query(IdempotencyRecord)
            .filter(IdempotencyRecord.key == key, IdempotencyRecord.endpoint == endpoint)
            .first()
        )

    def lookup(self, key: Optional[str], endpoint: str, request_hash: str) -> Optional[IdempotencyReplay]:
        if not key:
            return None
        existing = self._get(key, endpoint)
        if existing is None:
            return None
        if existing.request_hash != request_hash:
            raise AppError(ErrorCatalog.IDEMPOTENCY_KEY_REUSED, details={"key": key, "endpoint": endpoint})
        return IdempotencyReplay(status_code=existing.status_code, response_body=json.loads(existing.response_body))

    def save(self, key: Optional[str], endpoint: str, request_hash: str, status_code: int, response_body) -> None:
        if not key:
            return
        self.db.add(
            IdempotencyRecord(
                key=key,
                endpoint=endpoint,
                request_hash=request_hash,
                status_code=status_code,
                response_body=json.dumps(response_body, default=str),
            )
        )

    def commit(self, key: Optional[str], endpoint: str, request_hash: str) -> Optional[IdempotencyReplay]:
        """
        Confirma la transacción. Si otro pedido con la misma clave confirmó
        antes, se descarta el trabajo propio y se devuelve la respuesta ganadora.
        """
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if not key:
                raise
            replay = self.lookup(key, endpoint, request_hash)
            if replay is None:
                raise
            return replay
        return None
