# tests/conftest.py
from datetime import datetime, timezone

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from careshare.app import create_app
from careshare.config.settings import Settings
from careshare.core.errors import InvalidZipError
from careshare.database.config import Base, build_engine
from careshare.database.models import Appointment, Senior, Skill, SkillName, Volunteer
from careshare.services.outbound_call_service import ElevenLabsOutboundService

# Miles from each origin zip; anything not listed is out of range
ZIP_DISTANCES = {
    "90210": {"90210": 0.0, "90211": 1.2, "90212": 2.1, "90401": 7.8, "90045": 13.4, "91101": 23.9},
    "10001": {"10001": 0.0, "10002": 2.4, "10011": 0.9},
}


class FakeZipRadius:
    """Stands in for ZipRadiusService with a fixed distance table"""

    def __init__(self, distances=None):
        self.distances = distances or ZIP_DISTANCES
        self.calls = []

    def radius(self, zip_code, miles):
        self.calls.append((zip_code, miles))
        if zip_code not in self.distances:
            raise InvalidZipError()
        ring = self.distances[zip_code]
        return sorted((z for z, d in ring.items() if d <= miles), key=ring.get)


class ElevenLabsStub:
    """Records outbound-call requests and answers with a canned response"""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.body = {"success": True, "message": "Call initiated", "callSid": "CA123"}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, str):
            return httpx.Response(self.status_code, text=self.body)
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        elevenlabs_api_key="xi-test-key-9876",
        elevenlabs_agent_id="agent_123",
        agent_phone_number_id="phnum_456",
        elevenlabs_webhook_secret=None,
        log_level="INFO",
    )


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def zip_radius():
    return FakeZipRadius()


@pytest.fixture
def elevenlabs():
    return ElevenLabsStub()


@pytest.fixture
def outbound_service(settings, elevenlabs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(elevenlabs.handler))
    return ElevenLabsOutboundService(settings, client=client)


@pytest.fixture
def app(settings, session_factory, zip_radius, outbound_service):
    return create_app(
        settings=settings,
        session_factory=session_factory,
        zip_radius=zip_radius,
        outbound_service=outbound_service,
    )


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def skills(db):
    rows = {name.value: Skill(name=name.value) for name in SkillName}
    db.add_all(rows.values())
    db.commit()
    return rows


@pytest.fixture
def make_volunteer(db, skills):
    def _make(first_name, zip_code, skill_names=(), phone_number=None, is_active=True):
        volunteer = Volunteer(
            first_name=first_name,
            last_name="Tester",
            email=f"{first_name.lower()}@example.com",
            phone_number=phone_number,
            zip_code=zip_code,
            is_active=is_active,
            skills=[skills[name] for name in skill_names],
        )
        db.add(volunteer)
        db.commit()
        return volunteer
    return _make


@pytest.fixture
def make_senior(db):
    def _make(phone_number="+12127365000", zip_code="90210", **fields):
        senior = Senior(
            first_name=fields.pop("first_name", "Arthur"),
            last_name=fields.pop("last_name", "Pendragon"),
            phone_number=phone_number,
            zip_code=zip_code,
            is_active=fields.pop("is_active", True),
            **fields
        )
        db.add(senior)
        db.commit()
        return senior
    return _make


@pytest.fixture
def make_appointment(db):
    def _make(senior, volunteer=None, status="Scheduled", when=None):
        appointment = Appointment(
            senior_id=senior.id,
            volunteer_id=volunteer.id if volunteer else None,
            appointment_datetime=when or datetime(2030, 5, 1, 15, 0, tzinfo=timezone.utc),
            status=status,
        )
        db.add(appointment)
        db.commit()
        return appointment
    return _make
