"""
Router des pages d'administration des élèves.
Listage complet et filtré, détail, formulaire d'édition,
création (avatar obligatoire), mise à jour (avatar optionnel), suppression groupée.

Les erreurs des collaborateurs sont journalisées et renvoyées en 500
avec un message fixe indiquant l'étape en échec.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from student_admin.dependencies import get_max_upload_bytes, get_object_storage, get_record_store
from student_admin.exceptions import RecordStoreError, StorageError, ValidationError
from student_admin.schemas.student import StudentForm
from student_admin.services import student_service
from student_admin.services.object_storage import ObjectStorage
from student_admin.services.record_store import RecordStore

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

router = APIRouter(tags=["Élèves"])

READ_ERROR = "Erreur : lecture des élèves dans la table impossible."
UPLOAD_ERROR = "Erreur : envoi de l'avatar vers S3 impossible."
WRITE_ERROR = "Erreur : enregistrement de l'élève dans la table impossible."
UPDATE_ERROR = "Erreur : mise à jour de l'élève dans la table impossible."
DELETE_ERROR = "Erreur : suppression des élèves dans la table impossible."


def _server_error(message: str, exc: Exception) -> PlainTextResponse:
    logger.error("%s (%s)", message, exc, exc_info=True)
    return PlainTextResponse(message, status_code=500)


def _not_found(request: Request, student_id: Optional[str]):
    return templates.TemplateResponse(
        request, "404.html", {"student_id": student_id}, status_code=404
    )


def _redirect_home() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=302)


@router.get("/", summary="Lister tous les élèves")
async def list_students(request: Request, store: RecordStore = Depends(get_record_store)):
    try:
        students = await student_service.list_students(store)
    except RecordStoreError as exc:
        return _server_error(READ_ERROR, exc)
    return templates.TemplateResponse(request, "index.html", {"students": students})


@router.get("/student-male", summary="Lister les élèves de genre masculin")
async def list_male_students(request: Request, store: RecordStore = Depends(get_record_store)):
    try:
        students = await student_service.list_male_students(store)
    except RecordStoreError as exc:
        return _server_error(READ_ERROR, exc)
    return templates.TemplateResponse(request, "male_students.html", {"students": students})


@router.get("/student-detail", summary="Détail d'un élève")
async def student_detail(
    request: Request,
    id: str = "",
    store: RecordStore = Depends(get_record_store),
):
    """Affiche la fiche dont l'id est passé en query string, ou la page 404."""
    try:
        student = await student_service.find_student(store, id)
    except RecordStoreError as exc:
        return _server_error(READ_ERROR, exc)
    if student is None:
        return _not_found(request, id)
    return templates.TemplateResponse(request, "student_detail.html", {"student": student})


@router.get("/students/{student_id}", summary="Formulaire d'édition d'un élève")
async def edit_form(
    request: Request,
    student_id: str,
    store: RecordStore = Depends(get_record_store),
):
    try:
        student = await student_service.find_student(store, student_id)
    except RecordStoreError as exc:
        return _server_error(READ_ERROR, exc)
    if student is None:
        return _not_found(request, student_id)
    return templates.TemplateResponse(request, "edit.html", {"student": student})


@router.post("/add", summary="Créer un élève")
async def add_student(
    id: str = Form(...),
    name: str = Form(...),
    dob: str = Form(...),
    gender: str = Form(""),
    avatar: UploadFile = File(...),
    store: RecordStore = Depends(get_record_store),
    storage: ObjectStorage = Depends(get_object_storage),
    max_bytes: int = Depends(get_max_upload_bytes),
):
    """
    Crée une fiche élève à partir du formulaire multipart.
    L'avatar est validé puis envoyé sur S3 avant l'écriture de la fiche.
    """
    form = StudentForm(id=id, name=name, dob=dob, gender=gender)
    try:
        await student_service.create_student(store, storage, form, avatar, max_bytes)
    except ValidationError as exc:
        return PlainTextResponse(str(exc), status_code=400)
    except StorageError as exc:
        return _server_error(UPLOAD_ERROR, exc)
    except RecordStoreError as exc:
        return _server_error(WRITE_ERROR, exc)
    return _redirect_home()


@router.post("/edit", summary="Modifier un élève")
async def edit_student(
    id: str = Form(...),
    name: str = Form(...),
    dob: str = Form(...),
    gender: str = Form(""),
    avatar: Optional[UploadFile] = File(None),
    store: RecordStore = Depends(get_record_store),
    storage: ObjectStorage = Depends(get_object_storage),
    max_bytes: int = Depends(get_max_upload_bytes),
):
    """
    Met à jour name, dob et gender. Un nouvel avatar remplace l'ancien ;
    sans fichier, l'avatar existant est conservé.
    """
    form = StudentForm(id=id, name=name, dob=dob, gender=gender)
    try:
        await student_service.update_student(store, storage, form, avatar, max_bytes)
    except ValidationError as exc:
        return PlainTextResponse(str(exc), status_code=400)
    except StorageError as exc:
        return _server_error(UPLOAD_ERROR, exc)
    except RecordStoreError as exc:
        return _server_error(UPDATE_ERROR, exc)
    return _redirect_home()


@router.post("/delete", summary="Supprimer des élèves")
async def delete_students(request: Request, store: RecordStore = Depends(get_record_store)):
    """
    Les noms des champs du formulaire sont les ids à supprimer (les valeurs sont ignorées).
    Si une seule suppression échoue, la réponse est une erreur 500, même si les autres ont réussi.
    """
    form = await request.form()
    student_ids = list(form.keys())

    report = await student_service.delete_students(store, student_ids)
    if report.failed:
        logger.error("Suppression échouée pour les élèves : %s", ", ".join(report.failed))
        return PlainTextResponse(DELETE_ERROR, status_code=500)
    return _redirect_home()
