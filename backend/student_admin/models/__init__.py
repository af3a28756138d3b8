# Importe les modèles pour enregistrer leurs tables dans Base.metadata
# avant Base.metadata.create_all().

from student_admin.models.student import Student  # noqa: F401
