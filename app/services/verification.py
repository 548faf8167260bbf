from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.crypto import (
    canonical_payload,
    is_well_formed_code,
    isoformat_z,
    to_millis,
    verify_signature,
)
from app.db.models import Credential, CredentialStatus

logger = logging.getLogger(__name__)


class VerificationStatus(str, Enum):
    VALID = "valid"
    EXPIRED = "expired"
    REVOKED = "revoked"
    NOT_FOUND = "not-found"


@dataclass(frozen=True)
class VerificationResult:
    status: VerificationStatus
    validation_code: str | None = None
    is_over_18: bool | None = None
    is_over_21: bool | None = None
    issuer: str | None = None
    expires_at: datetime | None = None
    verified_at: datetime | None = None

    @property
    def is_valid(self) -> bool:
        return self.status is VerificationStatus.VALID

    def to_dict(self) -> dict:
        if self.status is VerificationStatus.NOT_FOUND:
            return {"isValid": False, "status": self.status.value}
        return {
            "isValid": self.is_valid,
            "status": self.status.value,
            "validationCode": self.validation_code,
            "isOver18": self.is_over_18,
            "isOver21": self.is_over_21,
            "issuer": self.issuer,
            "expiresAt": isoformat_z(self.expires_at),
            "verifiedAt": isoformat_z(self.verified_at),
        }


NOT_FOUND = VerificationResult(status=VerificationStatus.NOT_FOUND)


def signature_matches(cred: Credential) -> bool:
    payload = canonical_payload(
        cred.subject_id, cred.credential_type, cred.age, cred.issued_at, cred.validation_code
    )
    return verify_signature(payload, cred.signature, settings.verification_secrets())


async def verify_code(
    session: AsyncSession,
    validation_code: str,
    now: datetime | None = None,
) -> VerificationResult:
    # 1) Formato: no se consulta la BD
    if not is_well_formed_code(validation_code):
        return NOT_FOUND

    code = validation_code.upper()
    res = await session.execute(select(Credential).where(Credential.validation_code == code))
    cred = res.scalar_one_or_none()
    if not cred:
        logger.info("Verification miss for unknown code")
        return NOT_FOUND

    # 2) Firma: un desajuste se trata como inexistente
    if not signature_matches(cred):
        logger.warning("Signature mismatch for credential id=%s", cred.id)
        return NOT_FOUND

    now = to_millis(now or datetime.now(timezone.utc))
    expires_at = to_millis(cred.expires_at)

    if cred.status == CredentialStatus.REVOKED.value:
        status = VerificationStatus.REVOKED
    elif now > expires_at:
        status = VerificationStatus.EXPIRED
    else:
        status = VerificationStatus.VALID

    logger.info("Verified credential id=%s status=%s", cred.id, status.value)
    return VerificationResult(
        status=status,
        validation_code=cred.validation_code,
        is_over_18=cred.is_over_18,
        is_over_21=cred.is_over_21,
        issuer=cred.issuer,
        expires_at=expires_at,
        verified_at=now,
    )
