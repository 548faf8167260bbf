from io import BytesIO
import json

import qrcode

from app.core.crypto import isoformat_z
from app.db.models import Credential


def verify_url(base_url: str, validation_code: str) -> str:
    return f"{base_url.rstrip('/')}/verify/{validation_code}"


def build_qr_payload(cred: Credential, base_url: str) -> dict:
    return {
        "id": cred.id,
        "type": cred.credential_type,
        "validationCode": cred.validation_code,
        "isOver18": cred.is_over_18,
        "isOver21": cred.is_over_21,
        "issuer": cred.issuer,
        "issuedAt": isoformat_z(cred.issued_at),
        "expiresAt": isoformat_z(cred.expires_at),
        "verifyUrl": verify_url(base_url, cred.validation_code),
    }


def render_qr_png(payload: dict) -> bytes:
    img = qrcode.make(json.dumps(payload, separators=(",", ":")))
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
