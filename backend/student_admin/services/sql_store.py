"""
Stockage des fiches élèves dans une table SQL via SQLAlchemy.
Même contrat que DynamoRecordStore : put remplace, update crée la fiche si elle n'existe pas.
"""

from typing import Any, Dict, List

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from starlette.concurrency import run_in_threadpool

from student_admin.exceptions import RecordStoreError
from student_admin.models.student import Student
from student_admin.schemas.student import StudentRecord
from student_admin.services.record_store import RecordStore, check_patch


class SqlRecordStore(RecordStore):

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def _run(self, action: str, func, *args):
        try:
            return await run_in_threadpool(func, *args)
        except SQLAlchemyError as exc:
            raise RecordStoreError(f"SQL {action} : {exc}") from exc

    def _select(self, statement) -> List[StudentRecord]:
        with self.session_factory() as db:
            students = db.execute(statement.order_by(Student.id)).scalars().all()
            return [StudentRecord.model_validate(s) for s in students]

    async def scan_all(self) -> List[StudentRecord]:
        return await self._run("select", self._select, select(Student))

    async def scan_where(self, attribute: str, value: Any) -> List[StudentRecord]:
        if attribute not in Student.__table__.columns:
            raise ValueError(f"Attribut inconnu : {attribute}")
        column = Student.__table__.columns[attribute]
        return await self._run("select", self._select, select(Student).where(column == value))

    def _put(self, record: StudentRecord) -> None:
        with self.session_factory() as db:
            # model_dump (avatar=None compris) : la fiche est remplacée entièrement
            db.merge(Student(**record.model_dump()))
            db.commit()

    async def put(self, record: StudentRecord) -> None:
        await self._run("merge", self._put, record)

    def _update(self, record_id: str, patch: Dict[str, Any]) -> StudentRecord:
        with self.session_factory() as db:
            student = db.get(Student, record_id)
            if student is None:
                student = Student(id=record_id)
                db.add(student)
            for field, value in patch.items():
                setattr(student, field, value)
            db.commit()
            db.refresh(student)
            return StudentRecord.model_validate(student)

    async def update(self, record_id: str, patch: Dict[str, Any]) -> StudentRecord:
        check_patch(patch)
        return await self._run("update", self._update, record_id, patch)

    def _delete(self, record_id: str) -> None:
        with self.session_factory() as db:
            db.execute(delete(Student).where(Student.id == record_id))
            db.commit()

    async def delete(self, record_id: str) -> None:
        await self._run("delete", self._delete, record_id)
