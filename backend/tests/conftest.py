# Standard Library
import os
from typing import AsyncGenerator, List, Optional

# Base de test en mémoire (avant tout import de budget_manager)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DB_CREATE_TABLES", "false")

# Third-Party Libraries
import pytest
import pytest_asyncio

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

# First-Party Libraries
from budget_manager.main import app
from budget_manager.database import get_db_session
from budget_manager.users.models import User
from budget_manager.clients.models import Client
from budget_manager.auth.security import create_access_token
from budget_manager.pdf.dependencies import get_pdf_generator
from budget_manager.pdf.generator import AbstractPDFGenerator
from budget_manager.pdf.exceptions import PDFGenerationException
from budget_manager.pdf.models import PDFBudgetData
from budget_manager.storage.dependencies import get_object_store
from budget_manager.storage.exceptions import ObjectStoreException
from budget_manager.storage.store import AbstractObjectStore

TEST_DATABASE_BASE_URL = "sqlite+aiosqlite:///:memory:"

# --- Fixtures de Base ---

@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Crée un engine, des tables, et fournit une session DB en mémoire pour chaque test."""
    engine: AsyncEngine = create_async_engine(TEST_DATABASE_BASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with TestingSessionLocal() as session:
        yield session

    await engine.dispose()

# --- Collaborateurs simulés ---

class FakeObjectStore(AbstractObjectStore):
    """Stockage d'objets en mémoire ; fail=True simule une panne."""

    def __init__(self):
        self.uploads: List[str] = []
        self.fail = False

    async def upload(self, filename: str, content: bytes, content_type: Optional[str] = None) -> str:
        if self.fail:
            raise ObjectStoreException(f"upload simulé en échec pour {filename}")
        url = f"http://test/static/budget-images/{len(self.uploads) + 1}-{filename}"
        self.uploads.append(url)
        return url


class MockPDFGenerator(AbstractPDFGenerator):
    """Un générateur PDF simulé pour les tests."""

    def __init__(self):
        self.calls: List[PDFBudgetData] = []
        self.fail = False

    async def generate_budget_pdf(self, budget_data: PDFBudgetData, output_path: Optional[str] = None) -> bytes:
        if self.fail:
            raise PDFGenerationException("Mock generation failed intentionally.")
        self.calls.append(budget_data)
        return f"%PDF-mock budget {budget_data.id}".encode("utf-8")


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def pdf_generator() -> MockPDFGenerator:
    return MockPDFGenerator()


@pytest_asyncio.fixture(scope="function")
async def test_client(
    db_session: AsyncSession,
    object_store: FakeObjectStore,
    pdf_generator: MockPDFGenerator,
) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient httpx utilisant la session DB de test, le stockage et le générateur PDF simulés."""
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_object_store] = lambda: object_store
    app.dependency_overrides[get_pdf_generator] = lambda: pdf_generator
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()

# --- Fixtures Utilisateur et Authentification ---

async def _create_user(db_session: AsyncSession, email: str, full_name: str, is_admin: bool = False) -> User:
    user = User(email=email, full_name=full_name, is_admin=is_admin)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


def _auth_headers(user: User) -> dict[str, str]:
    access_token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {access_token}"}


@pytest_asyncio.fixture(scope="function")
async def test_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "testuser@example.com", "Test User")


@pytest_asyncio.fixture(scope="function")
async def test_user_2(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "testuser2@example.com", "Test User 2")


@pytest_asyncio.fixture(scope="function")
async def admin_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "admin@example.com", "Admin User", is_admin=True)


@pytest.fixture
def auth_headers_user(test_user: User) -> dict[str, str]:
    return _auth_headers(test_user)


@pytest.fixture
def auth_headers_user_2(test_user_2: User) -> dict[str, str]:
    return _auth_headers(test_user_2)


@pytest.fixture
def auth_headers_admin(admin_user: User) -> dict[str, str]:
    return _auth_headers(admin_user)

# --- Fixtures Clients ---

@pytest_asyncio.fixture(scope="function")
async def test_client_record(db_session: AsyncSession, test_user: User) -> Client:
    """Client appartenant à test_user."""
    client = Client(name="Atelier Dupont", brand="Dupont & Fils", email="contact@dupont.fr", user_id=test_user.id)
    db_session.add(client)
    await db_session.commit()
    await db_session.refresh(client)
    return client
