# app/core/crypto.py
from __future__ import annotations

from datetime import datetime, timezone
import json
import re
import secrets

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

VALIDATION_CODE_BYTES = 16
_CODE_RE = re.compile(r"^[0-9A-Fa-f]{32}$")


def new_validation_code() -> str:
    return secrets.token_hex(VALIDATION_CODE_BYTES).upper()


def is_well_formed_code(code: object) -> bool:
    return isinstance(code, str) and _CODE_RE.fullmatch(code) is not None


def to_millis(dt: datetime) -> datetime:
    """Normaliza a UTC con precisión de milisegundos (SQLite devuelve naive)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.replace(microsecond=dt.microsecond // 1000 * 1000)


def isoformat_z(dt: datetime) -> str:
    """2025-01-01T12:00:00.000Z"""
    dt = to_millis(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def canonical_payload(
    subject_id: str,
    credential_type: str,
    age: int,
    issued_at: datetime,
    validation_code: str,
) -> bytes:
    # El orden de las claves forma parte del formato firmado
    data = {
        "subjectId": subject_id,
        "credentialType": credential_type,
        "age": age,
        "issuedAt": isoformat_z(issued_at),
        "validationCode": validation_code,
    }
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _mac(secret: bytes, payload: bytes) -> hmac.HMAC:
    h = hmac.HMAC(secret, hashes.SHA256())
    h.update(payload)
    return h


def sign_payload(payload: bytes, secret: bytes) -> str:
    return _mac(secret, payload).finalize().hex()


def verify_signature(payload: bytes, signature: str, keys: list[bytes]) -> bool:
    """
    Recalcula el HMAC con cada secreto aceptado (actual y retirados).
    HMAC.verify compara en tiempo constante.
    """
    try:
        expected = bytes.fromhex(signature)
    except (TypeError, ValueError):
        return False

    for key in keys:
        try:
            _mac(key, payload).verify(expected)
            return True
        except InvalidSignature:
            continue
    return False
