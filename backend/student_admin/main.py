"""
Point d'entrée principal de l'application d'administration des élèves.
Démarrage : uvicorn student_admin.main:app --reload  (ou python -m student_admin)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from student_admin.config import get_settings
from student_admin.dependencies import build_object_storage, build_record_store
from student_admin.routers import students

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Cycle de vie de l'application : lit la configuration (échoue si une variable
    obligatoire manque) et crée les clients S3 / table partagés par toutes les requêtes.
    """
    settings = get_settings()
    app.state.settings = settings
    app.state.record_store = build_record_store(settings)
    app.state.object_storage = build_object_storage(settings)
    logger.info(
        "Clients prêts : table %s (%s), bucket %s",
        settings.DYNAMODB_NAME, settings.RECORD_STORE_BACKEND, settings.S3_NAME,
    )
    yield


app = FastAPI(
    title="Student Admin",
    description="Administration des fiches élèves (DynamoDB + avatars S3)",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(students.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Intercepte toutes les exceptions non gérées : log complet, message générique."""
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return PlainTextResponse("Erreur : une erreur interne est survenue.", status_code=500)


@app.get("/health", tags=["Santé"])
def health_check():
    """Vérifie que l'application est opérationnelle."""
    return {"status": "ok", "service": "Student Admin", "version": "0.1.0"}
