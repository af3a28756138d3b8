"""
Configuration centrale de l'application via variables d'environnement.
Charger depuis un fichier .env en développement.

Les identifiants AWS, la table, le bucket et le port n'ont pas de valeur par
défaut : leur absence fait échouer le démarrage.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # AWS
    ACCESS_KEY: str
    SECRET_ACCESS_KEY: str
    REGION: str
    AWS_CONNECT_TIMEOUT: float = 5.0
    AWS_READ_TIMEOUT: float = 30.0
    AWS_MAX_ATTEMPTS: int = 1

    # Table des élèves (DynamoDB) et bucket des avatars (S3)
    DYNAMODB_NAME: str
    S3_NAME: str
    PUBLIC_BASE_URL: Optional[str] = None

    # Stockage alternatif des fiches élèves (SQLAlchemy)
    RECORD_STORE_BACKEND: Literal["dynamodb", "sql"] = "dynamodb"
    DATABASE_URL: Optional[str] = None

    # Uploads
    MAX_UPLOAD_BYTES: int = 2_000_000

    # Serveur
    PORT: int
    LOG_LEVEL: str = "INFO"
    ENV: str = "development"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @model_validator(mode="after")
    def database_url_for_sql(self) -> "Settings":
        if self.RECORD_STORE_BACKEND == "sql" and not self.DATABASE_URL:
            raise ValueError("DATABASE_URL est obligatoire avec RECORD_STORE_BACKEND=sql.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Lit la configuration une seule fois par processus."""
    return Settings()
