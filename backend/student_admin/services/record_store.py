"""
Interface commune des stockages de fiches élèves (DynamoDB ou SQL).

Toutes les opérations sont asynchrones : les appels bloquants (boto3, SQLAlchemy)
tournent dans le pool de threads de Starlette.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List

from student_admin.exceptions import RecordStoreError
from student_admin.schemas.student import BatchDeleteReport, DeleteOutcome, StudentRecord

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Table de fiches élèves adressées par leur `id`."""

    @abstractmethod
    async def scan_all(self) -> List[StudentRecord]:
        """Lecture complète de la table."""

    @abstractmethod
    async def scan_where(self, attribute: str, value: Any) -> List[StudentRecord]:
        """Lecture complète filtrée côté serveur sur `attribute == value`."""

    @abstractmethod
    async def put(self, record: StudentRecord) -> None:
        """Insère ou remplace entièrement la fiche `record.id`."""

    @abstractmethod
    async def update(self, record_id: str, patch: Dict[str, Any]) -> StudentRecord:
        """Modifie uniquement les attributs présents dans `patch` et retourne la fiche complète."""

    @abstractmethod
    async def delete(self, record_id: str) -> None:
        """Supprime la fiche ; aucune erreur si elle n'existe pas."""

    async def delete_many(self, record_ids: Iterable[str]) -> BatchDeleteReport:
        """
        Lance une suppression indépendante par id, en parallèle.
        Un échec n'annule pas les autres suppressions : le rapport indique le résultat de chaque id.
        """
        outcomes = await asyncio.gather(*(self._delete_outcome(rid) for rid in record_ids))
        return BatchDeleteReport(outcomes=list(outcomes))

    async def _delete_outcome(self, record_id: str) -> DeleteOutcome:
        try:
            await self.delete(record_id)
        except RecordStoreError as exc:
            logger.warning("Suppression de l'élève %s échouée : %s", record_id, exc)
            return DeleteOutcome(id=record_id, deleted=False, error=str(exc))
        return DeleteOutcome(id=record_id, deleted=True)


def check_patch(patch: Dict[str, Any]) -> None:
    if not patch:
        raise ValueError("Aucun attribut à mettre à jour.")
    if "id" in patch:
        raise ValueError("L'attribut id ne peut pas être modifié.")
