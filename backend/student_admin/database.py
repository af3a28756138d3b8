"""
Configuration de la connexion SQLAlchemy pour le stockage SQL des fiches élèves.
Utilisé quand RECORD_STORE_BACKEND=sql (développement local, tests).
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

Base = declarative_base()


def create_session_factory(database_url: str, **engine_kwargs) -> sessionmaker:
    """Crée le moteur, les tables manquantes et retourne la fabrique de sessions."""
    engine = create_engine(database_url, **engine_kwargs)
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
