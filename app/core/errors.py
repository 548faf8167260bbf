# app/core/errors.py
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class CredentialError(Exception):
    status_code = 500
    default_message = "Credential error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(CredentialError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidInput(CredentialError):
    status_code = 400
    default_message = "Invalid input"


class UnsupportedCredentialType(CredentialError):
    status_code = 400
    default_message = "Unsupported credential type"


class CredentialNotFound(CredentialError):
    status_code = 404
    default_message = "Credential not found"


async def credential_error_handler(request: Request, exc: CredentialError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Mismo formato que el resto de errores: 400 en lugar del 422 de FastAPI
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg", "Invalid request body")
    return JSONResponse(
        status_code=400,
        content={"error": f"{field}: {msg}" if field else msg},
    )
