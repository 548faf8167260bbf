# tests/conftest.py
import asyncio
import os
import secrets
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# --- Asegurar que podemos importar 'app' desde la raíz del repo ---
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _prepare_test_env() -> None:
    tmp = (ROOT / ".pytest_tmp").absolute()
    tmp.mkdir(exist_ok=True)

    # BD SQLite temporal para pruebas (se parte de cero en cada ejecución)
    db_file = tmp / "test.sqlite3"
    if db_file.exists():
        db_file.unlink()
    os.environ["DB_URL"] = f"sqlite+aiosqlite:///{db_file.as_posix()}"

    # Secretos efímeros, sin depender de .env
    os.environ["ISSUER_SECRET"] = secrets.token_hex(32)
    os.environ["ISSUER_RETIRED_SECRETS"] = ""
    os.environ["SESSION_SECRET"] = secrets.token_hex(32)
    os.environ["PUBLIC_BASE_URL"] = "https://id.example.im"
    os.environ["CREDENTIAL_TTL_HOURS"] = "4"


# Settings se instancia al importar app.core.config: el entorno debe estar listo antes
_prepare_test_env()


@pytest.fixture(scope="session")
def client():
    """
    Cliente de pruebas con entorno efímero:
    - BD sqlite en .pytest_tmp/test.sqlite3
    - Secretos de emisor y de sesión generados al vuelo
    """
    from app.main import app
    # Con 'with' forzamos lifespan: crea tablas en startup y cierra engine en shutdown
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth():
    """Cabeceras Authorization para un sujeto dado."""
    from app.core.auth import create_session_token

    def _auth(subject_id: str = "u1") -> dict:
        return {"Authorization": f"Bearer {create_session_token(subject_id)}"}

    return _auth


@pytest.fixture
def run_db(tmp_path):
    """
    Ejecuta una corrutina fn(session) contra una BD sqlite desechable.
    Los servicios son async; los tests no necesitan plugin de asyncio.
    """
    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
    from app.db.models import Base

    url = f"sqlite+aiosqlite:///{(tmp_path / 'services.sqlite3').as_posix()}"

    def _run(fn):
        async def _main():
            engine = create_async_engine(url)
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            maker = async_sessionmaker(engine, expire_on_commit=False)
            try:
                async with maker() as s:
                    return await fn(s)
            finally:
                await engine.dispose()

        return asyncio.run(_main())

    return _run


# --- Reset de settings después de cada test (autouse) ---
@pytest.fixture(autouse=True)
def _reset_settings_between_tests():
    from app.core.config import settings
    snapshot = (
        settings.issuer_secret,
        settings.issuer_retired_secrets,
        settings.issuance_max_attempts,
        settings.public_base_url,
    )
    yield
    (
        settings.issuer_secret,
        settings.issuer_retired_secrets,
        settings.issuance_max_attempts,
        settings.public_base_url,
    ) = snapshot
