import os
import tempfile
from pathlib import Path

# Set environment variables BEFORE any imports that might use settings
# Use a temporary directory for test database to avoid permission issues
_test_db_dir = tempfile.mkdtemp()
_test_db_path = os.path.join(_test_db_dir, "test_rentify.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_test_db_path}"
os.environ["SECRET_KEY"] = "test-secret-key-min-32-characters-long-for-testing"
os.environ["ALGORITHM"] = "HS256"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ["FIRST_ADMIN_EMAIL"] = "admin@test.example.com"
os.environ["FIRST_ADMIN_PASSWORD"] = "AdminTest123!"
os.environ["DEFAULT_CURRENCY"] = "PHP"
os.environ["MAX_CONTRACT_DOCUMENTS"] = "3"
os.environ["MAX_DOCUMENT_SIZE_MB"] = "1"
os.environ["STORAGE_CONTRACTS_FOLDER"] = "contracts"
os.environ["PDF_APP_NAME"] = "Rentify"

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session

from rentify.main import app
from rentify.api.deps import get_blob_storage_factory, get_db, get_session_factory
from rentify.core.security import create_access_token, get_password_hash
from rentify.db.models.user import User as UserModel
from rentify.db.models.role import Role as RoleModel
from rentify.errors import StorageError
from rentify.services.storage import StoredObject, build_object_key

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class FakeBlobStorage:
    """In-memory blob store. Set ``fail_after`` to make the n-th upload onwards fail."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str | None] = {}
        self.deleted: list[str] = []
        self.uploads = 0
        self.fail_after: int | None = None

    def upload(self, data, folder, filename, content_type=None, key=None):
        if self.fail_after is not None and self.uploads >= self.fail_after:
            raise StorageError("Blob storage unavailable")
        storage_key = key or build_object_key(folder, filename)
        self.objects[storage_key] = data
        self.content_types[storage_key] = content_type
        self.uploads += 1
        return StoredObject(url=f"https://files.test/{storage_key}", storage_key=storage_key)

    def delete(self, storage_key):
        self.deleted.append(storage_key)
        self.objects.pop(storage_key, None)


@pytest.fixture(scope="function")
def session_factory():
    """Create a fresh database for each test and run migrations."""
    temp_db_dir = tempfile.mkdtemp()
    test_db_path = os.path.join(temp_db_dir, "test.db")
    test_db_url = f"sqlite:///{test_db_path}"

    test_engine = create_engine(
        test_db_url,
        connect_args={"check_same_thread": False},
    )

    # Enable WAL mode to reduce locking issues
    @event.listens_for(test_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine
    )

    # Run Alembic migrations to set up the database schema and seed data
    alembic_cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", test_db_url)
    command.upgrade(alembic_cfg, "head")

    try:
        yield TestingSessionLocal
    finally:
        test_engine.dispose()

        try:
            for suffix in ["", "-wal", "-shm"]:
                path = f"{test_db_path}{suffix}"
                if os.path.exists(path):
                    os.remove(path)
            if os.path.exists(temp_db_dir):
                os.rmdir(temp_db_dir)
        except OSError as e:
            print(f"Cleanup failed: {e}")


@pytest.fixture(scope="function")
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session to match test naming conventions."""
    return db_session


@pytest.fixture(scope="function")
def blob_storage() -> FakeBlobStorage:
    return FakeBlobStorage()


@pytest.fixture(scope="function")
def client(session_factory, blob_storage):
    """
    Test client with a session per request, the test session factory for
    background tasks, and the in-memory blob store.
    """

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_blob_storage_factory] = lambda: (lambda: blob_storage)

    yield TestClient(app)

    app.dependency_overrides.clear()


def _create_user(
    db: Session, email: str, name: str, password: str, role_name: str, phone: str | None = None
) -> dict:
    role = db.query(RoleModel).filter(RoleModel.name == role_name).first()
    if not role:
        raise RuntimeError(f"{role_name} role not found")

    user = UserModel(
        email=email,
        name=name,
        phone=phone,
        password_hash=get_password_hash(password),
        role_id=role.id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    return {
        "id": user.id,
        "email": user.email,
        "name": name,
        "phone": phone,
        "password": password,
        "role_id": user.role_id,
    }


@pytest.fixture(scope="function")
def admin_user(db: Session) -> dict:
    """The admin seeded by migration 002."""
    from rentify.repositories.user import get_user_by_email
    from rentify.core.config import settings

    user = get_user_by_email(db, settings.first_admin_email)
    if not user:
        raise RuntimeError("Admin user not found. Check migration 002.")

    return {
        "id": user.id,
        "email": user.email,
        "password": settings.first_admin_password,
        "role_id": user.role_id,
    }


@pytest.fixture(scope="function")
def admin_token(admin_user: dict) -> str:
    return create_access_token(admin_user["id"])


@pytest.fixture(scope="function")
def owner_user(db: Session) -> dict:
    return _create_user(
        db, "owner@example.com", "Olivia Owner", "OwnerPass123!", "owner", phone="+63 900 111 2222"
    )


@pytest.fixture(scope="function")
def owner_token(owner_user: dict) -> str:
    return create_access_token(owner_user["id"])


@pytest.fixture(scope="function")
def renter_user(db: Session) -> dict:
    return _create_user(
        db, "renter@example.com", "Ramon Renter", "RenterPass123!", "renter", phone="+63 900 333 4444"
    )


@pytest.fixture(scope="function")
def renter_token(renter_user: dict) -> str:
    return create_access_token(renter_user["id"])


@pytest.fixture(scope="function")
def other_renter_user(db: Session) -> dict:
    return _create_user(db, "stranger@example.com", "Sam Stranger", "StrangerPass123!", "renter")


@pytest.fixture(scope="function")
def other_renter_token(other_renter_user: dict) -> str:
    return create_access_token(other_renter_user["id"])


@pytest.fixture(scope="function")
def listing(db: Session, owner_user: dict):
    """A property listed by owner_user."""
    from rentify.repositories.property import create_property

    return create_property(
        db,
        name="Sunny Loft",
        address="12 Mabini St, Makati",
        owner_id=owner_user["id"],
        created_by_id=owner_user["id"],
        description="Two-bedroom loft with balcony",
        city="Makati",
        property_type="apartment",
        price=25000,
    )
