"""
Construction des clients longue durée (table des élèves, S3) et dépendances FastAPI.

Les clients sont créés une fois au démarrage (lifespan), gardés sur app.state
et remplaçables dans les tests via app.dependency_overrides.
"""

from fastapi import Request

from student_admin.config import Settings
from student_admin.database import create_session_factory
from student_admin.services.dynamodb_store import DynamoRecordStore
from student_admin.services.object_storage import ObjectStorage
from student_admin.services.record_store import RecordStore
from student_admin.services.sql_store import SqlRecordStore


def build_record_store(settings: Settings) -> RecordStore:
    if settings.RECORD_STORE_BACKEND == "sql":
        return SqlRecordStore(create_session_factory(settings.DATABASE_URL))
    return DynamoRecordStore.from_settings(settings)


def build_object_storage(settings: Settings) -> ObjectStorage:
    return ObjectStorage.from_settings(settings)


def get_record_store(request: Request) -> RecordStore:
    """Dépendance FastAPI : table des élèves partagée par toutes les requêtes."""
    return request.app.state.record_store


def get_object_storage(request: Request) -> ObjectStorage:
    """Dépendance FastAPI : client S3 partagé par toutes les requêtes."""
    return request.app.state.object_storage


def get_max_upload_bytes(request: Request) -> int:
    return request.app.state.settings.MAX_UPLOAD_BYTES
