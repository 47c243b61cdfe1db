import os
from datetime import timedelta

TEST_DB_FILE = "test_classsync.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"

# point the app's own engine at the test file before anything imports it
os.environ.setdefault("CLASSSYNC_DATABASE_URL", TEST_DB_URL)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from classsync.core.deps import get_db  # noqa: E402
from classsync.db.base_class import Base  # noqa: E402
from classsync.db.init_db import init_db  # noqa: E402
from classsync.main import app  # noqa: E402
from classsync.models.assignment import Assignment  # noqa: E402
from classsync.models.course import Course  # noqa: E402
from classsync.models.enrollment import Enrollment  # noqa: E402
from classsync.models.submission import Submission  # noqa: E402
from classsync.models.user import User  # noqa: E402
from classsync.schemas.course import CourseRead  # noqa: E402
from classsync.schemas.user import UserRead  # noqa: E402
from classsync.services.cache import GradebookCache  # noqa: E402
from classsync.services.gradebook import GradebookService  # noqa: E402
from tests.fakes import (  # noqa: E402
    FakeAssignmentRepository,
    FakeCourseRepository,
    FakeSubmissionRepository,
    FakeUserRepository,
    NOW,
    make_assignment,
    make_student,
    make_submission,
)

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    init_db(engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture()
def seed_data():
    """
    Seed a small class for API tests.

    Teacher 1 runs Algebra I (Math) and Biology (Science).
    Alice (2) is in both, Bob (3) only in Algebra I, Cara (4) in neither.
    Assignment 3 is due before assignment 2, so display order is 1, 3, 2.
    Alice has 90/100 on assignment 1 and an ungraded submission for 2.
    """
    db = TestingSessionLocal()
    try:
        # Clear tables (child -> parent)
        db.query(Submission).delete()
        db.query(Enrollment).delete()
        db.query(Assignment).delete()
        db.query(Course).delete()
        db.query(User).delete()
        db.commit()

        db.add_all(
            [
                User(id=1, name="Maria Rivera", email="rivera@example.com", role="teacher"),
                User(id=2, name="Alice Adams", email="alice@example.com", role="student"),
                User(id=3, name="Bob Brown", email="bob@example.com", role="student"),
                User(id=4, name="Cara Cole", email="cara@example.com", role="student"),
            ]
        )
        db.commit()

        db.add_all(
            [
                Course(id=1, name="Algebra I", subject="Math", teacher_id=1),
                Course(id=2, name="Biology", subject="Science", teacher_id=1),
            ]
        )
        db.commit()

        db.add_all(
            [
                Enrollment(course_id=1, student_id=2),
                Enrollment(course_id=2, student_id=2),
                Enrollment(course_id=1, student_id=3),
            ]
        )
        db.add_all(
            [
                Assignment(id=1, course_id=1, title="Quiz 1", subject="Math", points=100, due_at=NOW + timedelta(days=1)),
                Assignment(id=2, course_id=2, title="Cell Essay", subject="Science", points=50, due_at=NOW + timedelta(days=3)),
                Assignment(id=3, course_id=1, title="Quiz 2", subject="Math", points=100, due_at=NOW + timedelta(days=2)),
            ]
        )
        db.commit()

        db.add_all(
            [
                Submission(id=1, assignment_id=1, student_id=2, content="x = 4", status="graded", grade=90, feedback="Nice"),
                Submission(id=2, assignment_id=2, student_id=2, content="Mitochondria...", status="submitted"),
            ]
        )
        db.commit()

        yield
    finally:
        db.close()


@pytest.fixture()
def client(seed_data):
    """Test client that uses the test DB session via dependency override."""
    app.dependency_overrides[get_db] = override_get_db
    # the snapshot cache outlives requests; start every test cold
    app.state.gradebook_cache.invalidate()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ----------------------------------------------------------------------
# In-memory fixtures for service-level tests
# ----------------------------------------------------------------------

@pytest.fixture()
def teacher():
    return UserRead(id=100, name="Maria Rivera", email="rivera@example.com", role="teacher")


@pytest.fixture()
def repos(teacher):
    """Two students, two 100-point assignments; Ann has 90 on the first one."""
    users = FakeUserRepository([teacher, make_student(1, "Ann"), make_student(2, "Ben")])
    assignments = FakeAssignmentRepository([make_assignment(20, days=5), make_assignment(10, days=1)])
    submissions = FakeSubmissionRepository([make_submission(1, student_id=1, assignment_id=10, grade=90)])
    courses = FakeCourseRepository(
        [CourseRead(id=1, name="Algebra I", subject="Math", teacher_id=teacher.id)],
        enrollments={1: [1, 2]},
    )
    return {"users": users, "assignments": assignments, "submissions": submissions, "courses": courses}


@pytest.fixture()
def service(repos):
    return GradebookService(
        assignments=repos["assignments"],
        users=repos["users"],
        submissions=repos["submissions"],
        courses=repos["courses"],
        cache=GradebookCache(),
    )


@pytest.fixture()
def db_session(seed_data):
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
