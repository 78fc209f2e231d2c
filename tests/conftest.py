"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database, rebuilt for every test
- Seeded accounts (admin, manager, caregiver) with live session tokens
- TestClient sending JSON content type by default
"""

import os

# Must be set before the application modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["ZIP_GEOCODE_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from homecare_api.constants import AuthStatus, PatientStatus, Role
from homecare_api.database import Base, SessionLocal, engine, get_db
from homecare_api.main import app
from homecare_api.models import Auth, Patient, User, Visit
from homecare_api.security_utils import hash_password
from homecare_api.services.token_service import token_service

DEFAULT_PASSWORD = "Sup3r-secret"


@dataclass
class Account:
    id: int
    username: str
    token: str

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
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
    with_json = {"Content-Type": "application/json"}
    yield TestClient(app, headers=with_json)
    app.dependency_overrides.clear()


# =============================================================================
# Seed helpers
# =============================================================================


def create_account(
    db: Session,
    username: str,
    role: Role = Role.CAREGIVER,
    status: AuthStatus = AuthStatus.ACTIVE,
    password: str = DEFAULT_PASSWORD,
    firstname: str = "Test",
    lastname: str = "User",
    logged_in: bool = True,
) -> Account:
    """Insert auth + user rows directly, optionally with a live session token"""
    auth = Auth(
        username=username,
        password_hash=hash_password(password),
        role=int(role),
        status=int(status),
    )
    auth.user = User(firstname=firstname, lastname=lastname, email=username)
    db.add(auth)
    db.commit()

    token = ""
    if logged_in:
        expiration = token_service.generate_expiration()
        token = token_service.create_token(auth.id, auth.username, auth.role, expiration)
        auth.token = token
        auth.expiration = expiration
        db.commit()

    return Account(id=auth.id, username=username, token=token)


def create_patient(db: Session, firstname: str = "Pat", lastname: str = "Smith", **fields) -> Patient:
    patient = Patient(
        firstname=firstname,
        lastname=lastname,
        phone=fields.pop("phone", "555-0100"),
        status=int(fields.pop("status", PatientStatus.ACTIVE)),
        **fields,
    )
    db.add(patient)
    db.commit()
    db.refresh(patient)
    return patient


def create_visit(db: Session, user_id: int, patient_id: int, **fields) -> Visit:
    start = fields.pop("start_time", datetime(2030, 1, 15, 9, 0))
    visit = Visit(
        user_id=user_id,
        patient_id=patient_id,
        start_time=start,
        end_time=fields.pop("end_time", start + timedelta(hours=2)),
        scheduled_by=fields.pop("scheduled_by", user_id),
        **fields,
    )
    db.add(visit)
    db.commit()
    db.refresh(visit)
    return visit


@pytest.fixture
def admin(db: Session) -> Account:
    return create_account(db, "admin@maxmila.test", Role.ADMINISTRATOR, firstname="Ada", lastname="Admin")


@pytest.fixture
def manager(db: Session) -> Account:
    return create_account(db, "manager@maxmila.test", Role.MANAGER, firstname="Mona", lastname="Manager")


@pytest.fixture
def caregiver(db: Session) -> Account:
    return create_account(db, "carla@maxmila.test", Role.CAREGIVER, firstname="Carla", lastname="Care")


@pytest.fixture
def other_caregiver(db: Session) -> Account:
    return create_account(db, "oscar@maxmila.test", Role.CAREGIVER, firstname="Oscar", lastname="Other")


@pytest.fixture
def patient(db: Session) -> Patient:
    return create_patient(db)
