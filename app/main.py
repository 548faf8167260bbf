# app/main.py
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager

from app.api.issuer import router as issuer_router
from app.api.verifier import router as verifier_router
from app.api.holder import router as holder_router

from app.core.config import settings
from app.core.errors import CredentialError, credential_error_handler, validation_error_handler
from app.core.logging_config import configure_logging
from app.db.session import engine
from app.db.models import Base

@asynccontextmanager
async def lifespan(app: FastAPI):
    # === STARTUP ===
    configure_logging(settings.log_level)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    # === SHUTDOWN ===
    await engine.dispose()

app = FastAPI(title="Manx ID credentials", lifespan=lifespan)

app.add_exception_handler(CredentialError, credential_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)

app.include_router(issuer_router, prefix="/api/credentials", tags=["issuer"])
app.include_router(verifier_router, prefix="/verify", tags=["verifier"])
app.include_router(holder_router,   prefix="/holder",   tags=["holder"])

@app.get("/")
def root():
    return {"ok": True}
