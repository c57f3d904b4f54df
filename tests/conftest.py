import os
import sys
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

# SQLite pour les tests AVANT d'importer l'app
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///./test.db"
os.environ["DATABASE_URL"] = SQLALCHEMY_TEST_DATABASE_URL

import uuid
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

test_engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

# PATCH: remplacer le engine et SessionLocal du core.database AVANT d'importer app
import biolink.core.database
biolink.core.database.engine = test_engine
biolink.core.database.SessionLocal = TestingSessionLocal

from biolink.core.database import Base, get_db
from biolink.core.security import create_access_token
from biolink.main import app
from biolink.models.user import User

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_teardown():
    """Crée et nettoie la DB avant/après chaque test"""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client():
    """Client de test FastAPI"""
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture
def db():
    """Session DB pour les tests"""
    db = TestingSessionLocal()
    yield db
    db.close()


def create_test_user(plan: str = "free", email: str = None) -> User:
    unique_id = str(uuid.uuid4())[:8]
    db = TestingSessionLocal()
    user = User(
        email=email or f"user{unique_id}@test.com",
        username=f"user{unique_id}",
        plan=plan
    )
    user.set_password("Password123")
    db.add(user)
    db.commit()
    db.refresh(user)
    db.close()
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


@pytest.fixture
def free_user():
    return create_test_user("free")


@pytest.fixture
def pro_user():
    return create_test_user("pro")


@pytest.fixture
def free_headers(free_user):
    return auth_headers(free_user)


@pytest.fixture
def pro_headers(pro_user):
    return auth_headers(pro_user)
