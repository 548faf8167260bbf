from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedIdentity, get_identity
from app.core.config import settings
from app.db.session import get_session
from app.services.issuance import get_own_credential
from app.services.qr import build_qr_payload, render_qr_png

router = APIRouter()


@router.get("/credentials/{credential_id}/payload")
async def qr_payload(
    credential_id: str,
    identity: AuthenticatedIdentity = Depends(get_identity),
    s: AsyncSession = Depends(get_session),
):
    cred = await get_own_credential(s, identity, credential_id)
    return build_qr_payload(cred, settings.public_base_url)


@router.get("/credentials/{credential_id}/qr")
async def qr_png(
    credential_id: str,
    identity: AuthenticatedIdentity = Depends(get_identity),
    s: AsyncSession = Depends(get_session),
):
    cred = await get_own_credential(s, identity, credential_id)
    png = render_qr_png(build_qr_payload(cred, settings.public_base_url))
    return Response(content=png, media_type="image/png")
