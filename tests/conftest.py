import pytest
from datetime import datetime, timezone
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.main import app
from app.database import get_db, Base
from app.models.profile import Profile, UserRole
from app.models.coach import CoachProfile
from app.models.subscription import PricingPlan, UserSubscription
from app.middleware.auth import get_current_user_id

# Create test database
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_USER_ID = "test_user_123"


def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


def mock_get_current_user_id():
    return TEST_USER_ID


@pytest.fixture(scope="function")
def db_session():
    # Create tables
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()

    yield session

    # Clean up
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db_session):
    return TestingSessionLocal


@pytest.fixture(scope="function")
def client(db_session):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user_id] = mock_get_current_user_id
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_profile_data():
    return {
        "username": "johndoe",
        "display_name": "John Doe",
        "email": "john@example.com",
        "bio": "Intermediate table tennis player working on footwork and backhand loops",
        "sport": "table-tennis",
        "role": "player"
    }


@pytest.fixture
def test_profile(db_session):
    profile = Profile(
        id=TEST_USER_ID,
        username="johndoe",
        display_name="John Doe",
        email="john@example.com",
        bio="Intermediate table tennis player working on footwork and backhand loops",
        role="player"
    )
    db_session.add(profile)
    db_session.add(UserRole(user_id=TEST_USER_ID, role="player"))
    db_session.commit()
    db_session.refresh(profile)
    return profile


@pytest.fixture
def make_coach(db_session):
    def _make_coach(user_id="coach_456", username="coachkim", bio="Patient coach for footwork and backhand loops", years=5):
        coach = Profile(
            id=user_id,
            username=username,
            display_name=username.title(),
            bio=bio,
            role="coach",
            years_coaching=years
        )
        db_session.add(coach)
        db_session.add(UserRole(user_id=user_id, role="coach"))
        db_session.add(CoachProfile(user_id=user_id, years_coaching=years, languages=["English"]))
        db_session.commit()
        db_session.refresh(coach)
        return coach
    return _make_coach


@pytest.fixture
def make_subscription(db_session):
    """Create a plan with the given limit and an active subscription for a user."""
    def _make_subscription(user_id=TEST_USER_ID, limit=3, plan_name="Free", status="active"):
        plan = db_session.query(PricingPlan).filter(PricingPlan.name == plan_name).first()
        if plan is None:
            plan = PricingPlan(name=plan_name, description=f"{plan_name} plan", analysis_limit=limit)
            db_session.add(plan)
            db_session.commit()
        subscription = UserSubscription(
            user_id=user_id,
            pricing_plan_id=plan.id,
            subscription_type="monthly",
            status=status,
            created_at=datetime.now(timezone.utc)
        )
        db_session.add(subscription)
        db_session.commit()
        db_session.refresh(subscription)
        return subscription
    return _make_subscription


@pytest.fixture
def admin_user(db_session, test_profile):
    db_session.add(UserRole(user_id=TEST_USER_ID, role="admin"))
    db_session.commit()
    return test_profile
