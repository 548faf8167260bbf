"""
Emisión de credenciales de mayoría de edad (proof-of-age).

La credencial se firma con HMAC-SHA256 sobre la carga canónica y se guarda
en la tabla ``credentials`` indexada por ``validation_code``. La inserción es
atómica: si el código colisiona con uno existente se regenera y se vuelve a
firmar.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedIdentity
from app.core.config import settings
from app.core.crypto import (
    canonical_payload,
    is_well_formed_code,
    isoformat_z,
    new_validation_code,
    sign_payload,
    to_millis,
)
from app.core.errors import (
    CredentialNotFound,
    InvalidInput,
    Unauthorized,
    UnsupportedCredentialType,
)
from app.db.models import Credential, CredentialStatus, CredentialType

logger = logging.getLogger(__name__)

MAX_AGE = 150


class IssuanceFailed(RuntimeError):
    """No se pudo obtener un código de validación único."""


def _parse_type(credential_type: object) -> CredentialType:
    try:
        return CredentialType(credential_type)
    except ValueError:
        raise UnsupportedCredentialType(
            f"Unsupported credential type: {credential_type!r}"
        ) from None


def _check_age(age: object) -> int:
    # bool es subclase de int: se rechaza explícitamente
    if age is None:
        raise InvalidInput("age is required")
    if isinstance(age, bool) or not isinstance(age, int):
        raise InvalidInput("age must be an integer")
    if age < 0:
        raise InvalidInput("age must be non-negative")
    if age > MAX_AGE:
        raise InvalidInput("age out of range")
    return age


def _build(subject_id: str, ctype: CredentialType, age: int, issued_at: datetime) -> Credential:
    code = new_validation_code()
    payload = canonical_payload(subject_id, ctype.value, age, issued_at, code)
    return Credential(
        id=str(uuid.uuid4()),
        subject_id=subject_id,
        credential_type=ctype.value,
        age=age,
        issued_at=issued_at,
        expires_at=issued_at + timedelta(hours=settings.credential_ttl_hours),
        is_over_18=age >= 18,
        is_over_21=age >= 21,
        validation_code=code,
        issuer=settings.issuer_name,
        signature=sign_payload(payload, settings.issuer_secret.get_secret_value().encode()),
        status=CredentialStatus.VALID.value,
    )


async def issue_credential(
    session: AsyncSession,
    identity: AuthenticatedIdentity | None,
    subject_id: str | None,
    credential_type: object,
    age: object,
    now: datetime | None = None,
) -> Credential:
    if identity is None or not subject_id or subject_id != identity.subject_id:
        raise Unauthorized()
    ctype = _parse_type(credential_type)
    age = _check_age(age)

    issued_at = to_millis(now or datetime.now(timezone.utc))

    for attempt in range(1, settings.issuance_max_attempts + 1):
        cred = _build(subject_id, ctype, age, issued_at)
        session.add(cred)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            logger.warning("Validation code collision on attempt %d, regenerating", attempt)
            continue
        logger.info(
            "Issued %s credential id=%s expires_at=%s",
            ctype.value, cred.id, cred.expires_at.isoformat(),
        )
        return cred

    raise IssuanceFailed(
        f"could not allocate a unique validation code after {settings.issuance_max_attempts} attempts"
    )


async def revoke_credential(
    session: AsyncSession,
    identity: AuthenticatedIdentity,
    validation_code: str,
) -> Credential:
    if not is_well_formed_code(validation_code):
        raise CredentialNotFound()
    res = await session.execute(
        select(Credential).where(Credential.validation_code == validation_code.upper())
    )
    cred = res.scalar_one_or_none()
    # Una credencial ajena se trata igual que una inexistente
    if not cred or cred.subject_id != identity.subject_id:
        raise CredentialNotFound()
    if cred.status != CredentialStatus.REVOKED.value:
        cred.status = CredentialStatus.REVOKED.value
        await session.commit()
        logger.info("Revoked credential id=%s", cred.id)
    return cred


async def list_credentials(session: AsyncSession, identity: AuthenticatedIdentity) -> list[Credential]:
    res = await session.execute(
        select(Credential)
        .where(Credential.subject_id == identity.subject_id)
        .order_by(Credential.issued_at.desc())
    )
    return list(res.scalars().all())


async def get_own_credential(
    session: AsyncSession, identity: AuthenticatedIdentity, credential_id: str
) -> Credential:
    cred = await session.get(Credential, credential_id)
    if not cred or cred.subject_id != identity.subject_id:
        raise CredentialNotFound()
    return cred


def serialize_credential(cred: Credential) -> dict:
    """Representación JSON devuelta al titular (sin edad ni estado interno)."""
    return {
        "id": cred.id,
        "subjectId": cred.subject_id,
        "credentialType": cred.credential_type,
        "issuedAt": isoformat_z(cred.issued_at),
        "expiresAt": isoformat_z(cred.expires_at),
        "isOver18": cred.is_over_18,
        "isOver21": cred.is_over_21,
        "validationCode": cred.validation_code,
        "issuer": cred.issuer,
        "signature": cred.signature,
    }
