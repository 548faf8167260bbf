from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_session
from app.services.verification import VerificationStatus, verify_code

router = APIRouter()


@router.get("/{code}")
async def verify(code: str, s: AsyncSession = Depends(get_session)):
    # Válida, caducada o revocada -> 200 con los claims; cualquier otra cosa -> 404
    result = await verify_code(s, code)
    if result.status is VerificationStatus.NOT_FOUND:
        return JSONResponse(status_code=404, content=result.to_dict())
    return result.to_dict()
