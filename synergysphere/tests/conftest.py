import os
from typing import Any, Callable, Dict, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Переменные окружения должны быть выставлены ДО импорта settings/приложения
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "testsecretkey"
os.environ["REFRESH_SECRET_KEY"] = "testrefreshsecretkey"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

import synergysphere.models  # noqa: E402,F401
from synergysphere.models.base import Base  # noqa: E402
from synergysphere.main import app  # noqa: E402
from synergysphere.dependencies import get_db  # noqa: E402
from synergysphere.crud.user import create_user  # noqa: E402
from synergysphere.crud.project import create_project, add_member  # noqa: E402
from synergysphere.core.policy import Principal  # noqa: E402
from synergysphere.tests.utils import TEST_PASSWORD  # noqa: E402

engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Чистая схема на каждый тест: CRUD-функции сами делают commit,
    поэтому откат внешней транзакции здесь не подходит.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture(scope="function")
def make_user(db: Session) -> Callable[..., Any]:
    def _make_user(name: str, email: str = None, password: str = TEST_PASSWORD, role: str = "user"):
        email = email or f"{name.lower()}@example.com"
        return create_user(db, {"name": name, "email": email, "password": password, "role": role})
    return _make_user


@pytest.fixture(scope="function")
def manager(make_user) -> Any:
    return make_user("Manager")


@pytest.fixture(scope="function")
def admin_member(make_user) -> Any:
    return make_user("Admin")


@pytest.fixture(scope="function")
def member(make_user) -> Any:
    return make_user("Member")


@pytest.fixture(scope="function")
def outsider(make_user) -> Any:
    return make_user("Outsider")


@pytest.fixture(scope="function")
def project(db: Session, manager, admin_member, member) -> Any:
    """
    Проект менеджера с одним ADMIN и одним MEMBER участником.
    """
    owner = Principal(id=manager.id)
    created = create_project(db, owner, {"name": "Website Redesign", "description": "Q3 launch", "tags": ["web", "design"]})
    add_member(db, owner, created.id, admin_member.email, "ADMIN")
    add_member(db, owner, created.id, member.email, "MEMBER")
    db.refresh(created)
    return created
