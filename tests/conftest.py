import hashlib
import hmac
import itertools
import json
import time
from typing import Any, Dict, List, Optional

import fakeredis
import mongomock
import pytest
from fastapi.testclient import TestClient

from main import app
from src.api.dependencies import (
    get_app_settings,
    get_db,
    get_notifier,
    get_payment_gateway,
    get_redis,
)
from src.config.database import ensure_indexes
from src.config.settings import Settings
from src.repositories.session_repository import SessionRepository
from src.repositories.user_repository import UserRepository
from src.services.course_service import CourseService
from src.services.payment_gateway import PaymentGateway
from src.utils.security import hash_password

WEBHOOK_SECRET = "whsec_test_secret"
PASSWORD = "secret123"


class FakeNotifier:
    """Guarda los emails en memoria en lugar de hablar con SMTP."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent: List[Dict[str, str]] = []

    def send_templated_email(self, to_address: str, subject: str, html_body: str) -> bool:
        self.sent.append({"to": to_address, "subject": subject, "html": html_body})
        return self.succeed


class FakeGateway(PaymentGateway):
    """Checkout falso; la verificación de webhooks es la real."""

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.checkouts: List[Dict[str, Any]] = []

    def create_checkout_session(self, **kwargs: Any) -> Dict[str, str]:
        self.checkouts.append(kwargs)
        return {"id": "cs_test_123", "url": "https://checkout.stripe.test/cs_test_123"}


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    timestamp = timestamp or int(time.time())
    signature = hmac.new(
        secret.encode("utf-8"), f"{timestamp}.{payload}".encode("utf-8"), hashlib.sha256
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


def checkout_event(user_id: str, course_id: str, event_id: str = "evt_test_1") -> str:
    return json.dumps({
        "id": event_id,
        "type": "checkout.session.completed",
        "data": {"object": {"id": "cs_test_123", "metadata": {"userId": user_id, "courseId": course_id}}},
    })


@pytest.fixture
def settings():
    return Settings(stripe_webhook_secret=WEBHOOK_SECRET, frontend_url="http://frontend.test")


@pytest.fixture
def db():
    database = mongomock.MongoClient()["learnhub_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def gateway(settings):
    return FakeGateway(settings)


@pytest.fixture
def user_factory(db):
    repo = UserRepository(db)
    counter = itertools.count(1)

    def _make(role: str = "Student", enrolled: Optional[List[str]] = None, **extra: Any) -> Dict[str, Any]:
        n = next(counter)
        doc = {
            "firstName": extra.pop("firstName", f"User{n}"),
            "lastName": "Tester",
            "email": extra.pop("email", f"user{n}@learnhub.io"),
            "password": hash_password(PASSWORD),
            "mobileNumber": f"90000000{n:02d}",
            "gender": "Male",
            "role": role,
            "otpVerified": True,
            "createdCourses": [],
            "enrolledCourses": list(enrolled or []),
        }
        doc.update(extra)
        return repo.create(doc)

    return _make


@pytest.fixture
def course_factory(db):
    """
    Arma un curso con topics/subtopics: `layout` es una lista de topics,
    cada uno una lista de videoPlaybackTime.
    """
    service = CourseService(db)

    def _make(instructor: Dict[str, Any], layout: Optional[List[List[str]]] = None,
              public: bool = True, price: float = 499.0) -> Dict[str, Any]:
        course = service.create(instructor, {
            "title": "Python from Zero",
            "description": "Learn Python step by step",
            "price": price,
            "category": "cat-programming",
            "tags": ["python"],
            "image": "https://cdn.test/python.png",
            "benefits": "Write real programs",
            "requirements": ["A computer"],
        })
        topic_ids, subtopic_ids = [], []
        for i, times in enumerate(layout or []):
            topic = service.add_topic(instructor, course["id"], f"Topic {i + 1}")
            topic_ids.append(topic["id"])
            for j, playback in enumerate(times):
                sub = service.add_subtopic(instructor, topic["id"], {
                    "videoUrl": f"https://cdn.test/v{i}{j}.mp4",
                    "title": f"Lesson {i + 1}.{j + 1}",
                    "description": "Video lesson",
                    "videoPlaybackTime": playback,
                })
                subtopic_ids.append(sub["id"])
        if public:
            service.set_state(instructor, course["id"], "Public")
        return {"id": course["id"], "topics": topic_ids, "subtopics": subtopic_ids}

    return _make


@pytest.fixture
def client(settings, db, redis_client, notifier, gateway):
    app.dependency_overrides[get_app_settings] = lambda: settings
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_redis] = lambda: redis_client
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(redis_client):
    """Crea una sesión en Redis para el usuario y devuelve el header Authorization."""
    sessions = SessionRepository(redis_client)

    def _headers(user: Dict[str, Any]) -> Dict[str, str]:
        token = f"token-{user['_id']}"
        sessions.create_session(token, user["_id"], 3600)
        return {"Authorization": f"Bearer {token}"}

    return _headers
