# app/api/issuer.py
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, StrictInt
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedIdentity, get_identity
from app.core.errors import CredentialError
from app.db.session import get_session
from app.services.issuance import (
    issue_credential,
    list_credentials,
    revoke_credential,
    serialize_credential,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class GenerateInput(BaseModel):
    subjectId: str | None = None
    credentialType: str | None = None
    # Estricto: "20", 20.0 o true no se convierten; el rango se valida en el servicio
    age: StrictInt | None = None


@router.post("/generate")
async def generate_credential(
    body: GenerateInput,
    identity: AuthenticatedIdentity = Depends(get_identity),
    s: AsyncSession = Depends(get_session),
):
    try:
        cred = await issue_credential(s, identity, body.subjectId, body.credentialType, body.age)
    except CredentialError:
        raise
    except Exception:
        logger.exception("Credential generation error")
        return JSONResponse(status_code=500, content={"error": "Failed to generate credential"})
    return serialize_credential(cred)


class RevokeInput(BaseModel):
    validationCode: str


@router.post("/revoke")
async def revoke(
    body: RevokeInput,
    identity: AuthenticatedIdentity = Depends(get_identity),
    s: AsyncSession = Depends(get_session),
):
    cred = await revoke_credential(s, identity, body.validationCode)
    return {"ok": True, "validationCode": cred.validation_code, "status": cred.status}


@router.get("")
async def list_own(
    identity: AuthenticatedIdentity = Depends(get_identity),
    s: AsyncSession = Depends(get_session),
):
    rows = await list_credentials(s, identity)
    return [
        {k: v for k, v in serialize_credential(r).items() if k != "signature"} | {"status": r.status}
        for r in rows
    ]
