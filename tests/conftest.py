import pytest
from datetime import datetime
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from civicops.core.db import Base, get_db
from civicops.main import app
from civicops.models.report import Report
from civicops.models.user import User
from civicops.schemas.report import Actor

# Setup a file-backed SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_civicops.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="function")
def db_session():
    # Create the tables
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        # Drop the tables after the test
        Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def client(db_session):
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.pop(get_db, None)

@pytest.fixture
def actor():
    return Actor(uid="admin-1", email="admin@city.gov", user_type="ADMIN")

@pytest.fixture
def make_user(db_session):
    def _make(**fields):
        values = {
            "email": f"{fields.get('full_name', 'user').split()[0].lower()}@city.gov",
            "full_name": "Staff Member",
            "user_type": "EMPLOYEE",
            "is_active": True,
            "current_workload": 0,
            "max_workload": 5,
        }
        values.update(fields)
        user = User(**values)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make

@pytest.fixture
def make_report(db_session):
    def _make(**fields):
        values = {
            "title": "Pothole on Main St",
            "description": "Large pothole near the crossing",
            "issue_type": "pothole",
            "status": "submitted",
            "priority": "medium",
            "created_at": datetime.utcnow(),
        }
        values.update(fields)
        values.setdefault("updated_at", values["created_at"])
        report = Report(**values)
        db_session.add(report)
        db_session.commit()
        db_session.refresh(report)
        return report
    return _make
