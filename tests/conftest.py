import pytest
import os
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["OPENAI_API_KEY"] = ""
os.environ["EMAIL_API_KEY"] = ""
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["REVIEW_GENERATION_RATE"] = "1000/minute"

from appraze.database import Base, create_db_engine, get_db, init_db
from appraze.main import app
from appraze.routers.auth_deps import get_mailer
from appraze.routers.reviews import get_review_workflow
from appraze.services.audit import AuditService
from appraze.services.record_store import RecordStore
from appraze.services.review_workflow import ReviewWorkflow
from fastapi.testclient import TestClient
from tests.fakes import ADMIN_PASSWORD, FakeGenerator, FakeMailer


@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory schema per test; every store call commits for real."""
    engine = create_db_engine("sqlite:///:memory:", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def org(db_session):
    """Create a default organization for tests."""
    from appraze.models.organization import Organization
    import uuid
    org = Organization(name="Alpha Corp", slug=f"alpha-corp-{uuid.uuid4().hex[:6]}")
    db_session.add(org)
    db_session.commit()
    return org


@pytest.fixture(scope="function")
def admin_user(db_session, org):
    """Create a default admin profile for tests."""
    from appraze.models.profile import Profile, ProfileRole
    from appraze.services import auth as auth_service

    user = Profile(
        email="admin@alphacorp.com",
        hashed_password=auth_service.get_password_hash(ADMIN_PASSWORD),
        role=ProfileRole.ADMIN.value,
        organization_id=org.id,
        is_active=True,
        full_name="Avery Admin"
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope="function")
def member_user(db_session, org):
    from appraze.models.profile import Profile, ProfileRole
    from appraze.services import auth as auth_service

    user = Profile(
        email="member@alphacorp.com",
        hashed_password=auth_service.get_password_hash("MemberPassword123!"),
        role=ProfileRole.MEMBER.value,
        organization_id=org.id,
        is_active=True,
        full_name="Morgan Member"
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope="function")
def employee(db_session, org, admin_user):
    from appraze.models.employee import Employee
    emp = Employee(
        organization_id=org.id,
        user_id=admin_user.id,
        name="Jordan Lee",
        position="Senior Engineer",
        department="Platform",
        email="jordan@alphacorp.com",
    )
    db_session.add(emp)
    db_session.commit()
    return emp


@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens for a profile."""
    from appraze.services.auth import create_access_token, token_claims

    def _get_token(user):
        return create_access_token(data=token_claims(user))
    return _get_token


@pytest.fixture(scope="function")
def auth_headers(admin_user, get_token):
    return {"Authorization": f"Bearer {get_token(admin_user)}"}


@pytest.fixture(scope="function")
def fake_generator():
    return FakeGenerator()


@pytest.fixture(scope="function")
def fake_mailer():
    return FakeMailer()


@pytest.fixture(scope="function")
def client(db_session, fake_generator, fake_mailer):
    """TestClient on the test session, with fake generation and email collaborators."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    def override_workflow():
        return ReviewWorkflow(
            RecordStore(db_session),
            fake_generator,
            fake_mailer,
            audit=AuditService(db_session),
        )

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: fake_mailer
    app.dependency_overrides[get_review_workflow] = override_workflow
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
