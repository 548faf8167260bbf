# app/db/models.py
from enum import Enum

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, Integer, Boolean, DateTime
from datetime import datetime


class Base(DeclarativeBase):
    pass


class CredentialType(str, Enum):
    PROOF_OF_AGE = "proof-of-age"


class CredentialStatus(str, Enum):
    VALID = "valid"
    REVOKED = "revoked"


class Credential(Base):
    __tablename__ = "credentials"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    subject_id: Mapped[str] = mapped_column(String(255), index=True)
    credential_type: Mapped[str] = mapped_column(String(32))
    # Necesaria para recalcular la firma; nunca sale en la verificación
    age: Mapped[int] = mapped_column(Integer)

    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    is_over_18: Mapped[bool] = mapped_column(Boolean)
    is_over_21: Mapped[bool] = mapped_column(Boolean)

    validation_code: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    issuer: Mapped[str] = mapped_column(String(128))
    signature: Mapped[str] = mapped_column(String(64))

    status: Mapped[str] = mapped_column(String(16), default=CredentialStatus.VALID.value)
