import os
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("EVENT_PUBLISHING_ENABLED", "false")

from hotel_common.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from hotel_common.database import Base, SessionLocal, engine  # noqa: E402
from hotel_common.models import Profile, RoleEnum, UserRole  # noqa: E402
from hotel_common.seed import seed_catalog  # noqa: E402
from hotel_services.bookings.app import app as bookings_app  # noqa: E402
from hotel_services.payments.app import app as payments_app  # noqa: E402
from hotel_services.rooms.app import app as rooms_app  # noqa: E402
from hotel_services.rooms.app import catalog_cache  # noqa: E402
from hotel_services.users.app import app as users_app  # noqa: E402

DEFAULT_PASSWORD = "secret123"


def signup_payload(email: str, full_name: str = "Ana Torres") -> dict[str, str]:
    return {
        "full_name": full_name,
        "email": email,
        "dni": "12345678",
        "phone": "987654321",
        "address": "Av. Larco 123, Miraflores",
        "password": DEFAULT_PASSWORD,
    }


@pytest.fixture(autouse=True, scope="function")
def _create_test_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    catalog_cache.clear()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def catalog(db_session) -> dict[str, int]:
    return seed_catalog(db_session)


@pytest.fixture()
def users_client() -> Generator[TestClient, None, None]:
    with TestClient(users_app) as client:
        yield client


@pytest.fixture()
def rooms_client() -> Generator[TestClient, None, None]:
    with TestClient(rooms_app) as client:
        yield client


@pytest.fixture()
def bookings_client() -> Generator[TestClient, None, None]:
    with TestClient(bookings_app) as client:
        yield client


@pytest.fixture()
def payments_client() -> Generator[TestClient, None, None]:
    with TestClient(payments_app) as client:
        yield client


@pytest.fixture()
def register(users_client, db_session) -> Callable[..., dict[str, str]]:
    """Sign a user up (optionally granting extra roles) and return bearer headers."""

    def _register(email: str, *roles: RoleEnum, full_name: str = "Ana Torres") -> dict[str, str]:
        response = users_client.post("/users/register", json=signup_payload(email, full_name))
        assert response.status_code == 201, response.text
        if roles:
            profile = db_session.query(Profile).filter(Profile.email == email).one()
            for role in roles:
                db_session.add(UserRole(user_id=profile.id, role=role))
            db_session.commit()
        login = users_client.post(
            "/users/login",
            data={"username": email, "password": DEFAULT_PASSWORD},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        token = login.json()["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _register


@pytest.fixture()
def client_headers(register) -> dict[str, str]:
    return register("guest@example.com")


@pytest.fixture()
def staff_headers(register) -> dict[str, str]:
    return register("frontdesk@example.com", RoleEnum.RECEPTIONIST, full_name="Front Desk")
