"""
Modèle SQLAlchemy pour la table students (stockage SQL).
Mêmes attributs que les items DynamoDB : id fourni par le client, avatar optionnel.
"""

from sqlalchemy import Boolean, Column, String

from student_admin.database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(String(100), primary_key=True)
    name = Column(String(255), nullable=False)
    dob = Column(String(50), nullable=False)
    gender = Column(Boolean, nullable=False, default=False)
    avatar = Column(String(1024), nullable=True)
