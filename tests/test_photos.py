"""Tests for photo upload, download and delete: ownership and file/row consistency."""
import os
from io import BytesIO

import pytest

from cleancity_api.errors import ErrorKind, ServiceError
from cleancity_api.models import Photo
from cleancity_api.services.photo_service import PhotoService, make_stored_name
from tests.conftest import auth_headers, create_occurrence

JPEG = b"\xff\xd8\xff\xe0fake-jpeg-content"


def _upload(client, token, occurrence_id, content=JPEG, name="pic.jpg", mime="image/jpeg"):
    return client.post(
        f"/api/photos/{occurrence_id}",
        files={"photo": (name, BytesIO(content), mime)},
        headers=auth_headers(token),
    )


class TestUpload:
    def test_owner_upload_success(self, client, alice, file_store, db_session, notifier):
        user_id, token = alice
        occ = create_occurrence(client, token)

        resp = _upload(client, token, occ["id"])
        assert resp.status_code == 201
        photo = resp.json()["data"]
        assert photo["occurrenceId"] == occ["id"]
        assert photo["userId"] == user_id
        assert photo["fileName"] == "pic.jpg"
        assert photo["fileSize"] == len(JPEG)
        assert photo["mimeType"] == "image/jpeg"

        assert file_store.exists(photo["filePath"])
        with open(photo["filePath"], "rb") as f:
            assert f.read() == JPEG
        assert db_session.get(Photo, photo["id"]) is not None

        notifier.photo_uploaded.assert_awaited_once()
        assert notifier.photo_uploaded.call_args.args[0] == user_id

    def test_grantee_cannot_upload(self, client, alice, bob, file_store):
        _, alice_token = alice
        _, bob_token = bob
        occ = create_occurrence(client, alice_token)
        client.post(
            "/api/shares",
            json={"occurrenceId": occ["id"], "userEmail": "bob@example.com", "permission": "ADMIN"},
            headers=auth_headers(alice_token),
        )

        resp = _upload(client, bob_token, occ["id"])
        assert resp.status_code == 403
        assert os.listdir(file_store.root) == []

    def test_upload_to_missing_occurrence(self, client, alice):
        _, token = alice
        resp = _upload(client, token, "missing")
        assert resp.status_code == 403

    def test_rejects_unsupported_type(self, client, alice):
        _, token = alice
        occ = create_occurrence(client, token)
        resp = _upload(client, token, occ["id"], content=b"GIF89a", name="x.gif", mime="image/gif")
        assert resp.status_code == 400
        assert "Invalid file type" in resp.json()["error"]

    def test_rejects_missing_file(self, client, alice):
        _, token = alice
        occ = create_occurrence(client, token)
        resp = client.post(f"/api/photos/{occ['id']}", headers=auth_headers(token))
        assert resp.status_code == 400
        assert resp.json()["error"] == "No file provided"

    def test_rejects_oversized_file(self, client, alice, monkeypatch):
        from cleancity_api.config import settings

        monkeypatch.setattr(settings, "MAX_FILE_SIZE", 8)
        _, token = alice
        occ = create_occurrence(client, token)
        resp = _upload(client, token, occ["id"], content=b"0123456789")
        assert resp.status_code == 400

    def test_requires_token(self, client, alice):
        _, token = alice
        occ = create_occurrence(client, token)
        resp = client.post(
            f"/api/photos/{occ['id']}",
            files={"photo": ("pic.jpg", BytesIO(JPEG), "image/jpeg")},
        )
        assert resp.status_code == 401


class TestListAndDownload:
    def test_list_photos(self, client, alice):
        _, token = alice
        occ = create_occurrence(client, token)
        _upload(client, token, occ["id"], name="a.jpg")
        _upload(client, token, occ["id"], name="b.png", mime="image/png")
        resp = client.get(f"/api/photos/{occ['id']}", headers=auth_headers(token))
        assert resp.status_code == 200
        assert {p["fileName"] for p in resp.json()["data"]} == {"a.jpg", "b.png"}

    def test_download(self, client, alice):
        _, token = alice
        occ = create_occurrence(client, token)
        photo = _upload(client, token, occ["id"]).json()["data"]
        resp = client.get(f"/api/photos/download/{photo['id']}", headers=auth_headers(token))
        assert resp.status_code == 200
        assert resp.content == JPEG
        assert resp.headers["content-type"] == "image/jpeg"
        assert "attachment" in resp.headers["content-disposition"]

    def test_download_unknown_photo(self, client, alice):
        _, token = alice
        resp = client.get("/api/photos/download/nope", headers=auth_headers(token))
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Photo not found"}

    def test_download_when_file_missing(self, client, alice, file_store):
        _, token = alice
        occ = create_occurrence(client, token)
        photo = _upload(client, token, occ["id"]).json()["data"]
        os.remove(photo["filePath"])
        resp = client.get(f"/api/photos/download/{photo['id']}", headers=auth_headers(token))
        assert resp.status_code == 404


class TestDelete:
    def test_owner_delete_removes_file_and_row(self, client, alice, file_store, db_session):
        _, token = alice
        occ = create_occurrence(client, token)
        photo = _upload(client, token, occ["id"]).json()["data"]

        resp = client.delete(f"/api/photos/{photo['id']}", headers=auth_headers(token))
        assert resp.status_code == 200
        assert resp.json()["message"] == "Photo deleted successfully"
        assert not file_store.exists(photo["filePath"])
        db_session.expire_all()
        assert db_session.get(Photo, photo["id"]) is None

    def test_delete_when_file_already_gone(self, client, alice, db_session):
        _, token = alice
        occ = create_occurrence(client, token)
        photo = _upload(client, token, occ["id"]).json()["data"]
        os.remove(photo["filePath"])

        resp = client.delete(f"/api/photos/{photo['id']}", headers=auth_headers(token))
        assert resp.status_code == 200
        db_session.expire_all()
        assert db_session.get(Photo, photo["id"]) is None

    def test_non_owner_delete(self, client, alice, bob, file_store):
        _, alice_token = alice
        _, bob_token = bob
        occ = create_occurrence(client, alice_token)
        photo = _upload(client, alice_token, occ["id"]).json()["data"]

        resp = client.delete(f"/api/photos/{photo['id']}", headers=auth_headers(bob_token))
        assert resp.status_code == 403
        assert file_store.exists(photo["filePath"])

    def test_delete_unknown_photo(self, client, alice):
        _, token = alice
        resp = client.delete("/api/photos/nope", headers=auth_headers(token))
        assert resp.status_code == 403


class TestPhotoService:
    def test_failed_row_insert_removes_file(self, db_session, file_store, monkeypatch):
        from cleancity_api.models import Occurrence, User

        user = User(email="svc@example.com", full_name="Svc", password_hash="x")
        db_session.add(user)
        db_session.commit()
        occ = Occurrence(user_id=user.id, title="t", description="d", latitude=0, longitude=0)
        db_session.add(occ)
        db_session.commit()

        service = PhotoService(db_session, file_store)

        def failing_commit():
            raise RuntimeError("insert failed")

        monkeypatch.setattr(db_session, "commit", failing_commit)
        with pytest.raises(RuntimeError):
            service.upload(occ.id, user.id, "a.jpg", "image/jpeg", JPEG)
        assert os.listdir(file_store.root) == []

    def test_resolve_missing(self, db_session, file_store):
        service = PhotoService(db_session, file_store)
        with pytest.raises(ServiceError) as exc:
            service.resolve("missing")
        assert exc.value.kind == ErrorKind.NOT_FOUND

    def test_stored_name_keeps_extension(self):
        name = make_stored_name("Holiday.JPG")
        assert name.startswith("photo-")
        assert name.endswith(".jpg")
        assert make_stored_name(None).startswith("photo-")
