import copy
import os
import tempfile

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="resume-tailor-tests-"))
os.environ.setdefault("OPENROUTER_API_KEY", "test-key")

from resume_tailor.core.config import settings
from resume_tailor.core.exceptions import AIError
from resume_tailor.database import Base, get_db
from resume_tailor.main import app
from resume_tailor.schemas.customization import CustomizedResume
from resume_tailor.schemas.job import JobAnalysis
from resume_tailor.schemas.resume import ParsedResume
from resume_tailor.services.ai_orchestrator import AIDomain, AIOrchestrator
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


PARSED_RESUME = {
    "summary": "Backend engineer with 5 years of experience building APIs.",
    "skills": ["Python", "FastAPI", "PostgreSQL", "Docker", "React"],
    "experience": [
        {
            "company": "Acme Corp",
            "role": "Senior Engineer",
            "duration": "2020-2024",
            "bullets": [
                "Built REST APIs serving 1M requests per day",
                "Led migration from MySQL to PostgreSQL",
            ],
        }
    ],
    "projects": [
        {
            "name": "Invoice Parser",
            "description": "OCR pipeline for supplier invoices",
            "technologies": ["Python", "Docker"],
        }
    ],
    "education": [
        {
            "institution": "State University",
            "degree": "BS Computer Science",
            "field": "Software Engineering",
            "year": "2019",
        }
    ],
}

JOB_ANALYSIS = {
    "required_skills": ["Python", "PostgreSQL", "REST APIs"],
    "nice_to_have_skills": ["Docker"],
    "responsibilities": ["Design backend services"],
    "keywords": ["python", "api", "postgresql"],
    "soft_skills": ["communication"],
}

MATCH_SCORE = {
    "overall_match": 82,
    "strengths": ["Strong Python background"],
    "gaps": ["No Kubernetes experience"],
    "skill_overlap": 80,
    "experience_relevance": 85,
    "keyword_alignment": 78,
}

CUSTOMIZATION = {
    "summary": {
        "original": PARSED_RESUME["summary"],
        "revised": "Backend engineer with 5 years of experience building Python REST APIs.",
        "reason": "Front-loads the required stack",
    },
    "experience": [
        {
            "company": "Acme Corp",
            "role": "Senior Engineer",
            "duration": "2020-2024",
            "bullets": [
                {
                    "original": "Built REST APIs serving 1M requests per day",
                    "revised": "Designed Python REST APIs serving 1M requests per day",
                    "reason": "Mentions Python",
                },
                {
                    "original": "Led migration from MySQL to PostgreSQL",
                    "revised": "Led the MySQL to PostgreSQL migration with zero downtime",
                    "reason": "Clearer outcome",
                },
            ],
        }
    ],
    # Ignored: list sections always come from the parsed resume
    "skills": ["Kubernetes"],
    "explanation": {
        "skill_emphasis": ["Python and PostgreSQL moved forward"],
        "wording_changes": ["Stronger verbs"],
        "ats_improvements": ["Exact keyword matches for REST APIs"],
    },
}

ATS_ANALYSIS = {
    "ats_score": 87,
    "keyword_analysis": {
        "matched": ["python", "postgresql"],
        "missing": ["kubernetes"],
        "weak": ["api"],
    },
    "formatting_warnings": [],
    "suggestions": [
        {
            "original": "Designed Python REST APIs",
            "suggestion": "Designed Python REST APIs and PostgreSQL schemas",
            "reason": "Repeats a required keyword",
        }
    ],
    "risk_level": "low",
}

COVER_LETTER = (
    "Dear Hiring Manager,\n\n"
    "I am excited to apply for this role.\n\n"
    "Sincerely,\nJane Doe"
)


class FakeAI:
    """Stands in for the LLM: canned JSON per domain, plain text for completions."""

    def __init__(self):
        self.responses = {
            AIDomain.RESUME: PARSED_RESUME,
            AIDomain.JOB: JOB_ANALYSIS,
            AIDomain.MATCH: MATCH_SCORE,
            AIDomain.CUSTOMIZATION: CUSTOMIZATION,
            AIDomain.ATS: ATS_ANALYSIS,
        }
        self.texts = {
            AIDomain.COVER_LETTER: COVER_LETTER,
            AIDomain.ATS: "PROFESSIONAL SUMMARY:\nReworded resume",
        }
        self.calls = []

    def analyze_text(self, system_prompt, user_content, task, schema_name=None, schema=None,
                     temperature=0.3, domain=AIDomain.GENERAL):
        self.calls.append(domain)
        response = self.responses.get(domain)
        if callable(response):
            response = response(user_content)
        if not response:
            raise AIError(f"Failed to {task}: No response from AI")
        return copy.deepcopy(response)

    def complete_text(self, system_prompt, user_content, temperature=0.7, domain=AIDomain.GENERAL):
        self.calls.append(domain)
        return self.texts.get(domain, "")


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def storage_root(tmp_path, monkeypatch):
    """Point object storage at a per-test directory."""
    root = tmp_path / "storage"
    root.mkdir()
    monkeypatch.setattr(settings.storage, "root_dir", str(root))
    return root


@pytest.fixture
def fake_ai(monkeypatch):
    fake = FakeAI()
    monkeypatch.setattr(AIOrchestrator, "analyze_text", fake.analyze_text)
    monkeypatch.setattr(AIOrchestrator, "complete_text", fake.complete_text)
    return fake


@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def user(db_session):
    from resume_tailor.models.user import User, UserRole
    from resume_tailor.services import auth as auth_service

    user = User(
        email="jane@example.com",
        hashed_password=auth_service.get_password_hash("Password123!"),
        role=UserRole.USER,
        is_active=True,
        full_name="Jane Doe"
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope="function")
def other_user(db_session):
    from resume_tailor.models.user import User, UserRole
    from resume_tailor.services import auth as auth_service

    user = User(
        email="mallory@example.com",
        hashed_password=auth_service.get_password_hash("Password123!"),
        role=UserRole.USER,
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens."""
    from resume_tailor.services.auth import create_access_token

    def _get_token(user):
        return create_access_token(data={"sub": user.email, "role": user.role.value, "user_id": user.id})
    return _get_token


@pytest.fixture
def auth_headers(user, get_token):
    return {"Authorization": f"Bearer {get_token(user)}"}


@pytest.fixture
def parsed_resume():
    return ParsedResume.model_validate(PARSED_RESUME)


@pytest.fixture
def job_analysis():
    return JobAnalysis.model_validate(JOB_ANALYSIS)


@pytest.fixture
def customized_resume(parsed_resume):
    data = {k: v for k, v in CUSTOMIZATION.items() if k not in ("explanation", "skills")}
    return CustomizedResume.model_validate({
        **data,
        "skills": PARSED_RESUME["skills"],
        "projects": PARSED_RESUME["projects"],
        "education": PARSED_RESUME["education"],
    })


@pytest.fixture
def resume_record(db_session, user, parsed_resume):
    from resume_tailor.services import store
    return store.create_resume(
        db_session,
        user_id=user.id,
        original_file_name="resume.pdf",
        file_url="/files/resumes/1/resume.pdf",
        file_key="resumes/1/resume.pdf",
        parsed_content=parsed_resume,
    )


@pytest.fixture
def job_record(db_session, user, job_analysis):
    from resume_tailor.services import store
    return store.create_job_description(
        db_session,
        user_id=user.id,
        description="We need a Python engineer who knows PostgreSQL and REST APIs.",
        analysis=job_analysis,
        company_name="Globex",
        role_name="Backend Engineer",
    )


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
