"""
Client S3 pour les avatars des élèves.

Clé générée : <préfixe>_<timestamp en ms>.<extension d'origine>.
Deux envois pour le même préfixe dans la même milliseconde produisent la même clé.
"""

import logging
import time
from typing import Callable, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from student_admin.config import Settings
from student_admin.exceptions import StorageError
from student_admin.services.upload_validator import file_extension

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class ObjectStorage:
    """Envoie des fichiers dans un bucket et retourne leur URL publique."""

    def __init__(
        self,
        s3_client,
        bucket: str,
        region: str,
        public_base_url: Optional[str] = None,
        clock: Callable[[], int] = _now_ms,
    ):
        self.s3_client = s3_client
        self.bucket = bucket
        self.region = region
        self.public_base_url = public_base_url
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "ObjectStorage":
        client = boto3.client(
            "s3",
            aws_access_key_id=settings.ACCESS_KEY,
            aws_secret_access_key=settings.SECRET_ACCESS_KEY,
            region_name=settings.REGION,
            config=Config(
                connect_timeout=settings.AWS_CONNECT_TIMEOUT,
                read_timeout=settings.AWS_READ_TIMEOUT,
                retries={"max_attempts": settings.AWS_MAX_ATTEMPTS},
            ),
        )
        return cls(client, settings.S3_NAME, settings.REGION, settings.PUBLIC_BASE_URL)

    def build_key(self, key_prefix: str, filename: str) -> str:
        return f"{key_prefix}_{self.clock()}.{file_extension(filename)}"

    def location(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def store(self, content: bytes, content_type: str, key_prefix: str, filename: str) -> str:
        """
        Envoie le contenu dans le bucket et retourne l'URL utilisable comme avatar.
        Lève StorageError si S3 refuse ou est injoignable.
        """
        key = self.build_key(key_prefix, filename)
        try:
            await run_in_threadpool(
                self.s3_client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Envoi de {key} vers S3 impossible : {exc}") from exc

        logger.info("Avatar envoyé dans %s sous la clé %s", self.bucket, key)
        return self.location(key)
