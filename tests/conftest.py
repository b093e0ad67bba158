"""Shared pytest fixtures for all tests."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from drive.database import init_database
from drive.main import app
from drive.repositories.folder_repository import Folder, FolderRepository
from drive.repositories.user_repository import User, UserRepository


@pytest.fixture
def test_db(monkeypatch, tmp_path) -> Path:
    """
    Create a temporary test database for each test.
    """
    db_path = tmp_path / "test.db"
    monkeypatch.setattr("drive.database.DATABASE_PATH", str(db_path))
    monkeypatch.setattr("drive.config.DATABASE_PATH", str(db_path))
    init_database()
    return db_path


@pytest.fixture
def uploads_dir(monkeypatch, tmp_path) -> Path:
    """
    Point blob storage at a temporary uploads directory.
    """
    path = tmp_path / "uploads"
    path.mkdir()
    monkeypatch.setattr("drive.storage.UPLOADS_DIR", path)
    return path


@pytest.fixture
def alice(test_db) -> User:
    return UserRepository.create_user("alice", "hash-a")


@pytest.fixture
def bob(test_db) -> User:
    return UserRepository.create_user("bob", "hash-b")


@pytest.fixture
def docs_folder(alice) -> Folder:
    return FolderRepository.create_folder("Docs", alice.user_id)


@pytest.fixture
def client(test_db, uploads_dir):
    """
    Create FastAPI test client backed by the temporary database and uploads dir.
    """
    return TestClient(app)


def sign_up_and_login(client: TestClient, username: str, password: str) -> None:
    """
    Register through the HTTP surface and leave the client holding a session cookie.
    """
    response = client.post("/sign-up", data={"username": username, "password": password},
                           follow_redirects=False)
    assert response.status_code == 303
    response = client.post("/login", data={"username": username, "password": password},
                           follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/after-login"


@pytest.fixture
def login_as(client):
    """
    Return a callable that signs up and logs in a user on the shared client.
    """
    def _login_as(username: str, password: str = "pw1") -> TestClient:
        client.cookies.clear()
        sign_up_and_login(client, username, password)
        return client
    return _login_as


@pytest.fixture
def logged_in_client(login_as) -> TestClient:
    return login_as("alice")
