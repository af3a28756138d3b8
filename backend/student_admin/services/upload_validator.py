"""
Validation des avatars avant envoi vers S3.

Contrôle uniquement les métadonnées déclarées par le client (nom de fichier,
Content-Type, taille) : ce n'est pas une barrière de sécurité.
"""

from typing import Optional

from student_admin.exceptions import ValidationError

ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "gif"}
DEFAULT_MAX_BYTES = 2_000_000


def file_extension(filename: str) -> str:
    """Extension après le dernier point, telle qu'écrite par le client."""
    return filename.rsplit(".", 1)[-1]


def validate_image_upload(
    filename: Optional[str],
    content_type: Optional[str],
    size: int,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> None:
    """
    Accepte le fichier si l'extension (insensible à la casse) ET le Content-Type
    correspondent à png, jpg, jpeg ou gif, et si la taille ne dépasse pas max_bytes.

    Lève ValidationError sinon.
    """
    if not filename or "." not in filename:
        raise ValidationError("Seules les images sont acceptées (png, jpg, jpeg, gif).")

    if file_extension(filename).lower() not in ALLOWED_EXTENSIONS:
        raise ValidationError(
            f"Extension refusée pour {filename} : seules les images sont acceptées (png, jpg, jpeg, gif)."
        )

    main_type, _, subtype = (content_type or "").lower().partition("/")
    if main_type != "image" or subtype not in ALLOWED_EXTENSIONS:
        raise ValidationError(
            f"Type de contenu refusé ({content_type}) : seules les images sont acceptées."
        )

    if size > max_bytes:
        raise ValidationError(
            f"Fichier trop volumineux ({size} octets). Taille maximale : {max_bytes} octets."
        )
