"""
Schémas Pydantic pour les élèves.
"""

from typing import List, Optional
from pydantic import BaseModel

MALE = "male"


def gender_from_form(value: Optional[str]) -> bool:
    """Convertit le champ `gender` du formulaire : "male" → True, tout le reste → False."""
    return value == MALE


class StudentRecord(BaseModel):
    """Fiche élève telle que stockée dans la table."""
    id: str
    name: str
    dob: str
    gender: bool
    avatar: Optional[str] = None

    model_config = {"from_attributes": True}

    def to_item(self) -> dict:
        """Attributs à écrire ; avatar absent plutôt que null s'il n'y a pas d'image."""
        return self.model_dump(exclude_none=True)


class StudentForm(BaseModel):
    """Champs texte des formulaires POST /add et POST /edit."""
    id: str
    name: str
    dob: str
    gender: str

    @property
    def is_male(self) -> bool:
        return gender_from_form(self.gender)


class DeleteOutcome(BaseModel):
    """Résultat de la suppression d'une fiche dans un lot."""
    id: str
    deleted: bool
    error: Optional[str] = None


class BatchDeleteReport(BaseModel):
    """Rapport d'une suppression groupée (best-effort, sans rollback)."""
    outcomes: List[DeleteOutcome]

    @property
    def failed(self) -> List[str]:
        return [o.id for o in self.outcomes if not o.deleted]

    @property
    def deleted(self) -> List[str]:
        return [o.id for o in self.outcomes if o.deleted]
