from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, SecretStr


class Settings(BaseSettings):
    # Base de datos
    db_url: str = Field("sqlite+aiosqlite:///./manxid.sqlite3", alias="DB_URL")

    # Firma de credenciales (HMAC). Sin valor por defecto: debe provisionarse.
    issuer_secret: SecretStr = Field(..., alias="ISSUER_SECRET")
    # Secretos retirados aún aceptados al verificar (rotación), separados por comas
    issuer_retired_secrets: str = Field("", alias="ISSUER_RETIRED_SECRETS")
    issuer_name: str = Field("Isle of Man Government", alias="ISSUER_NAME")

    credential_ttl_hours: int = Field(4, alias="CREDENTIAL_TTL_HOURS")
    issuance_max_attempts: int = Field(3, alias="ISSUANCE_MAX_ATTEMPTS")

    # Base pública para construir verifyUrl (QR)
    public_base_url: str = Field("http://127.0.0.1:8000", alias="PUBLIC_BASE_URL")

    # Sesión del monedero (JWT)
    session_secret: SecretStr = Field(..., alias="SESSION_SECRET")
    session_alg: str = Field("HS256", alias="SESSION_ALG")
    session_ttl_hours: int = Field(24, alias="SESSION_TTL_HOURS")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,  # permite defaults si no hay variable de entorno
    )

    def verification_secrets(self) -> list[bytes]:
        """Secreto actual primero, después los retirados."""
        keys = [self.issuer_secret.get_secret_value().encode()]
        for item in self.issuer_retired_secrets.split(","):
            item = item.strip()
            if item:
                keys.append(item.encode())
        return keys


settings = Settings()
