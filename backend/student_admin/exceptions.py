"""
Exceptions métier levées par les collaborateurs (validation, S3, table des élèves).
Les routers les traduisent en réponses HTTP.
"""


class StudentAdminError(Exception):
    """Classe de base des erreurs de l'application."""


class ValidationError(StudentAdminError):
    """Fichier refusé avant tout envoi (type ou taille)."""


class StorageError(StudentAdminError):
    """Échec d'un appel au stockage objet."""


class RecordStoreError(StudentAdminError):
    """Échec d'une lecture ou écriture dans la table des élèves."""
