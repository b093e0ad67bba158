"""Tests for the service layer: auth, folder tree and file handling."""

import io

import pytest

from drive import storage
from drive.auth import hash_password, verify_password
from drive.exceptions import (
    DuplicateNameError,
    DuplicateUsernameError,
    FileTooLargeError,
    FolderNotFoundError,
    HasChildrenError,
    NotFoundError,
    StorageIOError,
    ValidationError,
)
from drive.repositories.file_repository import FileRepository
from drive.repositories.folder_repository import FolderRepository
from drive.services.auth_service import AuthService
from drive.services.drive_service import DriveService
from drive.services.file_service import FileService


def upload(owner_id, folder_id, name="report.pdf", data=b"%PDF-1.4 test", content_type="application/pdf", **kwargs):
    return FileService().upload_file(owner_id, folder_id, name, content_type, io.BytesIO(data), **kwargs)


class TestPasswordHashing:
    def test_hash_and_verify(self):
        password_hash = hash_password("pw1")

        assert password_hash != "pw1"
        assert verify_password("pw1", password_hash)
        assert not verify_password("pw2", password_hash)

    def test_hashes_are_salted(self):
        assert hash_password("pw1") != hash_password("pw1")


class TestAuthService:
    def test_register_and_authenticate(self, test_db):
        service = AuthService()
        user = service.register_user("alice", "pw1")

        assert user.password_hash != "pw1"
        assert service.authenticate("alice", "pw1").user_id == user.user_id

    def test_register_trims_username(self, test_db):
        user = AuthService().register_user("  alice ", "pw1")
        assert user.username == "alice"

    @pytest.mark.parametrize("username,password", [("", "pw1"), ("   ", "pw1"), ("alice", "")])
    def test_register_requires_credentials(self, test_db, username, password):
        with pytest.raises(ValidationError):
            AuthService().register_user(username, password)

    def test_register_rejects_oversized_password(self, test_db):
        with pytest.raises(ValidationError):
            AuthService().register_user("alice", "x" * 73)

    def test_register_duplicate(self, test_db):
        AuthService().register_user("alice", "pw1")

        with pytest.raises(DuplicateUsernameError):
            AuthService().register_user("alice", "other")

    def test_authenticate_wrong_password(self, test_db):
        AuthService().register_user("alice", "pw1")
        assert AuthService().authenticate("alice", "wrong") is None

    def test_authenticate_unknown_user(self, test_db):
        assert AuthService().authenticate("nobody", "pw1") is None

    def test_authenticate_empty_credentials(self, test_db):
        assert AuthService().authenticate("", "") is None


class TestDriveService:
    def test_root_listing(self, alice, docs_folder):
        listing = DriveService().root_listing(alice.user_id)

        assert listing.current_folder is None
        assert listing.parent_chain == []
        assert listing.files == []
        assert [f.name for f in listing.folders] == ["Docs"]

    def test_folder_listing(self, alice, docs_folder, uploads_dir):
        service = DriveService()
        year = service.create_folder("2024", alice.user_id, docs_folder.folder_id)
        upload(alice.user_id, year.folder_id)

        listing = service.folder_listing(year.folder_id, alice.user_id)

        assert listing.current_folder.name == "2024"
        assert listing.current_folder.parent.name == "Docs"
        assert [f.name for f in listing.parent_chain] == ["Docs"]
        assert listing.folders == []
        assert [f.original_name for f in listing.files] == ["report.pdf"]

    def test_folder_listing_not_found(self, alice, bob, docs_folder):
        with pytest.raises(NotFoundError):
            DriveService().folder_listing(docs_folder.folder_id, bob.user_id)

    def test_create_folder_empty_parent_means_root(self, alice):
        folder = DriveService().create_folder("Docs", alice.user_id, "")
        assert folder.parent_id is None

    def test_delete_folder_removes_records_and_blobs(self, alice, docs_folder, uploads_dir):
        file = upload(alice.user_id, docs_folder.folder_id)

        parent_id = DriveService().delete_folder(docs_folder.folder_id, alice.user_id)

        assert parent_id is None
        assert FileRepository.get_file_meta(file.file_id, alice.user_id) is None
        assert not storage.blob_exists(docs_folder.folder_id, file.key)
        assert not (uploads_dir / docs_folder.folder_id).exists()

    def test_delete_subfolder_returns_parent(self, alice, docs_folder):
        child = DriveService().create_folder("2024", alice.user_id, docs_folder.folder_id)
        assert DriveService().delete_folder(child.folder_id, alice.user_id) == docs_folder.folder_id

    def test_delete_folder_with_children(self, alice, docs_folder, uploads_dir):
        DriveService().create_folder("2024", alice.user_id, docs_folder.folder_id)
        file = upload(alice.user_id, docs_folder.folder_id)

        with pytest.raises(HasChildrenError):
            DriveService().delete_folder(docs_folder.folder_id, alice.user_id)

        assert storage.blob_exists(docs_folder.folder_id, file.key)
        assert FileRepository.get_file_meta(file.file_id, alice.user_id) is not None

    def test_delete_folder_survives_blob_cleanup_failure(self, alice, docs_folder, uploads_dir, monkeypatch):
        upload(alice.user_id, docs_folder.folder_id)

        def fail(folder_id, keys):
            raise StorageIOError("disk gone")

        monkeypatch.setattr(storage, "delete_folder_blobs", fail)

        assert DriveService().delete_folder(docs_folder.folder_id, alice.user_id) is None
        assert FolderRepository.get_folder(docs_folder.folder_id, alice.user_id) is None

    def test_delete_folder_not_found(self, alice):
        with pytest.raises(NotFoundError):
            DriveService().delete_folder("missing", alice.user_id)


class TestFileService:
    def test_upload_stores_blob_and_record(self, alice, docs_folder, uploads_dir):
        file = upload(alice.user_id, docs_folder.folder_id, data=b"abc")

        assert file.original_name == "report.pdf"
        assert file.ext == ".pdf"
        assert file.size_bytes == 3
        assert file.mime_type == "application/pdf"
        assert file.key != "report.pdf"
        assert (uploads_dir / docs_folder.folder_id / file.key).read_bytes() == b"abc"

    def test_upload_without_content_type(self, alice, docs_folder, uploads_dir):
        file = upload(alice.user_id, docs_folder.folder_id, content_type=None)
        assert file.mime_type == "application/octet-stream"

    def test_upload_requires_folder(self, alice, uploads_dir):
        with pytest.raises(ValidationError):
            upload(alice.user_id, "")

    def test_upload_requires_file(self, alice, docs_folder, uploads_dir):
        with pytest.raises(ValidationError):
            FileService().upload_file(alice.user_id, docs_folder.folder_id, None, None, None)

    def test_upload_to_foreign_folder_writes_nothing(self, bob, docs_folder, uploads_dir):
        with pytest.raises(FolderNotFoundError):
            upload(bob.user_id, docs_folder.folder_id)

        assert list(uploads_dir.iterdir()) == []

    def test_upload_too_large(self, alice, docs_folder, uploads_dir):
        with pytest.raises(FileTooLargeError):
            upload(alice.user_id, docs_folder.folder_id, data=b"x" * 20, max_bytes=10)

        assert FileRepository.list_files_in_folder(docs_folder.folder_id, alice.user_id) == []
        assert list((uploads_dir / docs_folder.folder_id).iterdir()) == []

    def test_duplicate_upload_removes_blob(self, alice, docs_folder, uploads_dir):
        first = upload(alice.user_id, docs_folder.folder_id)

        with pytest.raises(DuplicateNameError):
            upload(alice.user_id, docs_folder.folder_id)

        assert [p.name for p in (uploads_dir / docs_folder.folder_id).iterdir()] == [first.key]

    def test_upload_trims_name(self, alice, docs_folder, uploads_dir):
        file = upload(alice.user_id, docs_folder.folder_id, name="  report.pdf ")
        assert file.original_name == "report.pdf"

    def test_padded_name_collides_with_existing(self, alice, docs_folder, uploads_dir):
        upload(alice.user_id, docs_folder.folder_id, name="report.pdf")

        with pytest.raises(DuplicateNameError):
            upload(alice.user_id, docs_folder.folder_id, name=" report.pdf")

        assert len(FileRepository.list_files_in_folder(docs_folder.folder_id, alice.user_id)) == 1

    def test_upload_blank_name(self, alice, docs_folder, uploads_dir):
        with pytest.raises(ValidationError):
            upload(alice.user_id, docs_folder.folder_id, name="   ")

        assert list(uploads_dir.iterdir()) == []

    def test_upload_long_extension(self, alice, docs_folder, uploads_dir):
        name = "notes." + "x" * 240

        file = upload(alice.user_id, docs_folder.folder_id, name=name, data=b"abc")

        assert file.original_name == name
        assert len(file.key) == 32
        assert storage.blob_exists(docs_folder.folder_id, file.key)

    def test_open_download(self, alice, docs_folder, uploads_dir):
        file = upload(alice.user_id, docs_folder.folder_id, data=b"payload")

        download = FileService().open_download(file.file_id, alice.user_id)

        assert download.meta.original_name == "report.pdf"
        assert download.size_bytes == 7
        assert b"".join(download.content) == b"payload"

    def test_open_download_missing_blob(self, alice, docs_folder, uploads_dir):
        file = upload(alice.user_id, docs_folder.folder_id)
        storage.delete_blob(docs_folder.folder_id, file.key)

        with pytest.raises(NotFoundError):
            FileService().open_download(file.file_id, alice.user_id)

    def test_open_download_other_owner(self, alice, bob, docs_folder, uploads_dir):
        file = upload(alice.user_id, docs_folder.folder_id)

        with pytest.raises(NotFoundError):
            FileService().open_download(file.file_id, bob.user_id)

    def test_rename_keeps_blob(self, alice, docs_folder, uploads_dir):
        file = upload(alice.user_id, docs_folder.folder_id)

        renamed = FileService().rename_file(file.file_id, alice.user_id, "final.pdf")

        assert renamed.original_name == "final.pdf"
        assert storage.blob_exists(docs_folder.folder_id, file.key)

    def test_delete_file(self, alice, docs_folder, uploads_dir):
        file = upload(alice.user_id, docs_folder.folder_id)

        meta = FileService().delete_file(file.file_id, alice.user_id)

        assert meta.folder_id == docs_folder.folder_id
        assert not storage.blob_exists(docs_folder.folder_id, file.key)
        assert FileRepository.get_file_meta(file.file_id, alice.user_id) is None

    def test_delete_file_with_missing_blob(self, alice, docs_folder, uploads_dir):
        file = upload(alice.user_id, docs_folder.folder_id)
        storage.delete_blob(docs_folder.folder_id, file.key)

        FileService().delete_file(file.file_id, alice.user_id)

        assert FileRepository.get_file_meta(file.file_id, alice.user_id) is None

    def test_delete_file_disk_error_keeps_record(self, alice, docs_folder, uploads_dir, monkeypatch):
        file = upload(alice.user_id, docs_folder.folder_id)

        def fail(folder_id, key):
            raise StorageIOError("permission denied")

        monkeypatch.setattr(storage, "delete_blob", fail)

        with pytest.raises(StorageIOError):
            FileService().delete_file(file.file_id, alice.user_id)

        assert FileRepository.get_file_meta(file.file_id, alice.user_id) is not None

    def test_delete_file_other_owner(self, alice, bob, docs_folder, uploads_dir):
        file = upload(alice.user_id, docs_folder.folder_id)

        with pytest.raises(NotFoundError):
            FileService().delete_file(file.file_id, bob.user_id)

        assert storage.blob_exists(docs_folder.folder_id, file.key)
