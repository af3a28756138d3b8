"""
Configuration partagée pour tous les tests.
Variables d'environnement factices (aucun appel AWS réel), table des élèves en SQLite
et client S3 mocké injectés via app.dependency_overrides.
"""

import itertools
import os

os.environ.setdefault("ACCESS_KEY", "test-access-key")
os.environ.setdefault("SECRET_ACCESS_KEY", "test-secret-key")
os.environ.setdefault("REGION", "eu-west-1")
os.environ.setdefault("DYNAMODB_NAME", "students-test")
os.environ.setdefault("S3_NAME", "avatars-test")
os.environ.setdefault("PORT", "8080")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

from student_admin.database import create_session_factory  # noqa: E402
from student_admin.dependencies import get_object_storage, get_record_store  # noqa: E402
from student_admin.main import app  # noqa: E402
from student_admin.services.object_storage import ObjectStorage  # noqa: E402
from student_admin.services.sql_store import SqlRecordStore  # noqa: E402

BUCKET = "avatars-test"
REGION = "eu-west-1"
FIRST_TIMESTAMP = 1_700_000_000_000


@pytest.fixture
def s3_client():
    """Client boto3 S3 mocké : put_object réussit sans réseau."""
    return MagicMock()


@pytest.fixture
def storage(s3_client):
    """Stockage S3 avec horloge déterministe (1 ms de plus à chaque envoi)."""
    clock = itertools.count(FIRST_TIMESTAMP).__next__
    return ObjectStorage(s3_client, BUCKET, REGION, clock=clock)


@pytest.fixture
def sql_store(tmp_path):
    """Table des élèves sur un fichier SQLite temporaire."""
    return SqlRecordStore(create_session_factory(f"sqlite:///{tmp_path / 'students.db'}"))


@pytest.fixture
def client(sql_store, storage):
    """Client HTTP de test avec table SQLite et S3 mocké."""
    app.dependency_overrides[get_record_store] = lambda: sql_store
    app.dependency_overrides[get_object_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
