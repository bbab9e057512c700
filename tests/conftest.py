from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sidebets.core.database import get_db, init_db, make_engine
from sidebets.core.security import create_access_token
from sidebets.main import app
from sidebets.services import bet_service, membership_service
from sidebets.services.bet_service import OptionSpec

ADMIN = "user-admin"
ALICE = "user-alice"
BOB = "user-bob"
OUTSIDER = "user-outsider"


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    yield session
    session.close()


@pytest.fixture
def group(db):
    """Group with 1000 default credits: ADMIN owns it, ALICE and BOB are members."""
    group = membership_service.create_group(db, ADMIN, "Sunday League", default_credits=Decimal("1000"))
    membership_service.admit_member(db, group.id, ALICE, ADMIN)
    membership_service.admit_member(db, group.id, BOB, ADMIN)
    return group


@pytest.fixture
def make_bet(db, group):
    def _make(odds=(150, -180), creator=ADMIN, locks_at=None, title="Chiefs vs Bills"):
        options = [OptionSpec(name=f"Option {i + 1}", american_odds=o) for i, o in enumerate(odds)]
        return bet_service.create_bet(db, creator, group.id, title, options, locks_at=locks_at)
    return _make


@pytest.fixture
def client(db):
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}
