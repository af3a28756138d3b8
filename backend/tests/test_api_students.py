"""
Tests d'intégration API pour les pages élèves.
GET  /, /student-male, /student-detail, /students/{id}
POST /add, /edit, /delete
Table SQLite réelle, S3 mocké (voir conftest.py).
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

from botocore.exceptions import EndpointConnectionError

from student_admin.dependencies import get_record_store
from student_admin.exceptions import RecordStoreError
from student_admin.main import app
from student_admin.schemas.student import StudentRecord
from student_admin.services.record_store import RecordStore
from student_admin.services.sql_store import SqlRecordStore

JPG = ("alice.jpg", b"\xff\xd8\xff\xe0jpeg", "image/jpeg")
PNG = ("alice.png", b"\x89PNGpng", "image/png")


# --- Helpers ---

def add_student(client, files=None, **fields):
    data = {"id": "1", "name": "Alice", "dob": "2000-01-01", "gender": "male"}
    data.update(fields)
    return client.post(
        "/add", data=data, files={"avatar": files or JPG}, follow_redirects=False,
    )


def stored(sql_store, student_id="1"):
    matches = asyncio.run(sql_store.scan_where("id", student_id))
    return matches[0] if matches else None


def failing_store() -> MagicMock:
    store = MagicMock(spec=RecordStore)
    error = RecordStoreError("table indisponible")
    store.scan_all = AsyncMock(side_effect=error)
    store.scan_where = AsyncMock(side_effect=error)
    store.put = AsyncMock(side_effect=error)
    store.update = AsyncMock(side_effect=error)
    return store


# ============================================================
# POST /add
# ============================================================

class TestAdd:
    def test_creation_puis_detail(self, client, sql_store, s3_client):
        """Création → 302 vers /, fiche lisible via /student-detail avec gender=True."""
        resp = add_student(client)

        assert resp.status_code == 302
        assert resp.headers["location"] == "/"
        assert stored(sql_store) == StudentRecord(
            id="1",
            name="Alice",
            dob="2000-01-01",
            gender=True,
            avatar="https://avatars-test.s3.eu-west-1.amazonaws.com/1_1700000000000.jpg",
        )
        s3_client.put_object.assert_called_once()
        assert s3_client.put_object.call_args.kwargs["Key"] == "1_1700000000000.jpg"

        detail = client.get("/student-detail", params={"id": "1"})
        assert detail.status_code == 200
        assert "Alice" in detail.text
        assert "2000-01-01" in detail.text

    def test_genre_autre_que_male(self, client, sql_store):
        add_student(client, gender="female")
        assert stored(sql_store).gender is False

    def test_fichier_non_image_refuse(self, client, sql_store, s3_client):
        """PDF → 400, rien n'est envoyé sur S3 ni écrit dans la table."""
        resp = add_student(client, files=("cv.pdf", b"%PDF", "application/pdf"))

        assert resp.status_code == 400
        s3_client.put_object.assert_not_called()
        assert stored(sql_store) is None

    def test_fichier_trop_volumineux(self, client, sql_store, s3_client):
        resp = add_student(client, files=("big.png", b"x" * 2_000_001, "image/png"))

        assert resp.status_code == 400
        assert "trop volumineux" in resp.text
        s3_client.put_object.assert_not_called()
        assert stored(sql_store) is None

    def test_avatar_obligatoire(self, client):
        resp = client.post("/add", data={"id": "1", "name": "Alice", "dob": "2000-01-01", "gender": "male"})
        assert resp.status_code == 422

    def test_echec_s3(self, client, sql_store, s3_client):
        s3_client.put_object.side_effect = EndpointConnectionError(endpoint_url="https://s3")
        resp = add_student(client)

        assert resp.status_code == 500
        assert "S3" in resp.text
        assert stored(sql_store) is None

    def test_echec_table(self, client):
        app.dependency_overrides[get_record_store] = failing_store
        resp = add_student(client)

        assert resp.status_code == 500
        assert "enregistrement" in resp.text


# ============================================================
# POST /edit
# ============================================================

class TestEdit:
    def test_sans_avatar_conserve_l_avatar(self, client, sql_store):
        add_student(client)
        avatar = stored(sql_store).avatar

        resp = client.post(
            "/edit",
            data={"id": "1", "name": "Alice", "dob": "2000-01-01", "gender": "female"},
            follow_redirects=False,
        )

        assert resp.status_code == 302
        student = stored(sql_store)
        assert student.gender is False
        assert student.avatar == avatar

    def test_avec_avatar_remplace_l_avatar(self, client, sql_store):
        add_student(client)
        old_avatar = stored(sql_store).avatar

        resp = client.post(
            "/edit",
            data={"id": "1", "name": "Alice Martin", "dob": "2000-01-02", "gender": "male"},
            files={"avatar": PNG},
            follow_redirects=False,
        )

        assert resp.status_code == 302
        student = stored(sql_store)
        assert student.name == "Alice Martin"
        assert student.dob == "2000-01-02"
        assert student.avatar != old_avatar
        assert student.avatar.endswith("/1_1700000000001.png")

    def test_avatar_refuse(self, client, sql_store, s3_client):
        add_student(client)
        s3_client.put_object.reset_mock()

        resp = client.post(
            "/edit",
            data={"id": "1", "name": "Bob", "dob": "2000-01-01", "gender": "male"},
            files={"avatar": ("x.txt", b"text", "text/plain")},
        )

        assert resp.status_code == 400
        s3_client.put_object.assert_not_called()
        assert stored(sql_store).name == "Alice"

    def test_echec_table(self, client):
        app.dependency_overrides[get_record_store] = failing_store
        resp = client.post("/edit", data={"id": "1", "name": "Bob", "dob": "2000-01-01", "gender": "male"})

        assert resp.status_code == 500
        assert "mise à jour" in resp.text


# ============================================================
# GET
# ============================================================

class TestRead:
    def test_liste_vide(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "Aucun élève" in resp.text

    def test_liste_complete(self, client):
        add_student(client, id="1", name="Alice")
        add_student(client, id="2", name="Claire", gender="female")

        resp = client.get("/")

        assert "Alice" in resp.text
        assert "Claire" in resp.text

    def test_liste_masculin(self, client):
        add_student(client, id="1", name="Alice", gender="female")
        add_student(client, id="2", name="Bruno", gender="male")

        resp = client.get("/student-male")

        assert resp.status_code == 200
        assert "Bruno" in resp.text
        assert "Alice" not in resp.text

    def test_detail_introuvable(self, client):
        resp = client.get("/student-detail", params={"id": "99"})
        assert resp.status_code == 404
        assert "introuvable" in resp.text

    def test_formulaire_edition_pre_rempli(self, client):
        add_student(client)
        resp = client.get("/students/1")

        assert resp.status_code == 200
        assert 'value="Alice"' in resp.text
        assert 'action="/edit"' in resp.text

    def test_formulaire_edition_introuvable(self, client):
        resp = client.get("/students/99")
        assert resp.status_code == 404

    def test_lecture_en_echec(self, client):
        app.dependency_overrides[get_record_store] = failing_store
        for path in ("/", "/student-male", "/student-detail?id=1", "/students/1"):
            resp = client.get(path)
            assert resp.status_code == 500
            assert "lecture" in resp.text


# ============================================================
# POST /delete
# ============================================================

class FlakySqlStore(SqlRecordStore):
    """Échoue systématiquement sur l'id B."""

    async def delete(self, record_id: str) -> None:
        if record_id == "B":
            raise RecordStoreError("suppression de B refusée")
        await super().delete(record_id)


class TestDelete:
    def test_suppression_puis_introuvable(self, client, sql_store):
        add_student(client, id="1")
        add_student(client, id="2")

        resp = client.post("/delete", data={"1": "on"}, follow_redirects=False)

        assert resp.status_code == 302
        assert stored(sql_store, "1") is None
        assert stored(sql_store, "2") is not None
        assert client.get("/student-detail", params={"id": "1"}).status_code == 404

    def test_suppression_groupee_echec_partiel(self, client, sql_store):
        """B échoue : A et C sont supprimés malgré tout, la réponse est une erreur."""
        for sid in ("A", "B", "C"):
            add_student(client, id=sid)

        flaky = FlakySqlStore(sql_store.session_factory)
        app.dependency_overrides[get_record_store] = lambda: flaky

        resp = client.post("/delete", data={"A": "on", "B": "on", "C": "on"}, follow_redirects=False)

        assert resp.status_code == 500
        assert "suppression" in resp.text
        assert stored(sql_store, "A") is None
        assert stored(sql_store, "C") is None
        assert stored(sql_store, "B") is not None

    def test_suppression_id_inconnu(self, client):
        resp = client.post("/delete", data={"inconnu": "on"}, follow_redirects=False)
        assert resp.status_code == 302


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"
