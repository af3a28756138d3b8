"""
Service d'orchestration des fiches élèves.

Flux d'écriture :
  1. Valider l'avatar (type, taille) s'il est fourni
  2. Envoyer l'avatar sur S3 (clé préfixée par l'id de l'élève)
  3. Écrire la fiche dans la table, avec l'URL retournée par S3

Aucune transaction entre S3 et la table : un avatar peut rester orphelin si l'écriture échoue.
"""

import logging
from typing import Iterable, List, Optional

from fastapi import UploadFile

from student_admin.schemas.student import BatchDeleteReport, StudentForm, StudentRecord
from student_admin.services.object_storage import ObjectStorage
from student_admin.services.record_store import RecordStore
from student_admin.services.upload_validator import DEFAULT_MAX_BYTES, validate_image_upload

logger = logging.getLogger(__name__)


async def list_students(store: RecordStore) -> List[StudentRecord]:
    return await store.scan_all()


async def list_male_students(store: RecordStore) -> List[StudentRecord]:
    return await store.scan_where("gender", True)


async def find_student(store: RecordStore, student_id: str) -> Optional[StudentRecord]:
    """Retourne la première fiche dont l'id correspond, ou None."""
    matches = await store.scan_where("id", student_id)
    return matches[0] if matches else None


async def store_avatar(
    storage: ObjectStorage,
    student_id: str,
    upload: UploadFile,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> str:
    """Valide puis envoie l'avatar ; retourne son URL. Rien n'est envoyé si la validation échoue."""
    content = await upload.read()
    validate_image_upload(upload.filename, upload.content_type, len(content), max_bytes)
    return await storage.store(content, upload.content_type, student_id, upload.filename)


async def create_student(
    store: RecordStore,
    storage: ObjectStorage,
    form: StudentForm,
    upload: UploadFile,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> StudentRecord:
    """Crée (ou remplace) la fiche `form.id` ; l'avatar est obligatoire."""
    avatar = await store_avatar(storage, form.id, upload, max_bytes)
    record = StudentRecord(
        id=form.id,
        name=form.name,
        dob=form.dob,
        gender=form.is_male,
        avatar=avatar,
    )
    await store.put(record)
    logger.info("Élève %s créé", record.id)
    return record


async def update_student(
    store: RecordStore,
    storage: ObjectStorage,
    form: StudentForm,
    upload: Optional[UploadFile] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> StudentRecord:
    """
    Met à jour name, dob et gender. L'avatar n'est modifié que si un nouveau fichier
    est fourni : sinon l'attribut est absent du patch et l'ancien avatar est conservé.
    """
    patch = {"name": form.name, "dob": form.dob, "gender": form.is_male}
    if upload is not None and upload.filename:
        patch["avatar"] = await store_avatar(storage, form.id, upload, max_bytes)

    return await store.update(form.id, patch)


async def delete_students(store: RecordStore, student_ids: Iterable[str]) -> BatchDeleteReport:
    report = await store.delete_many(student_ids)
    if report.deleted:
        logger.info("Élèves supprimés : %s", ", ".join(report.deleted))
    return report
