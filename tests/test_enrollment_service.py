import json

import pytest

from src.repositories.mongo_repository import MongoRepository
from src.services.cart_service import CartService
from src.services.enrollment_service import EnrollmentService
from src.utils.errors import ConflictError, WebhookSignatureError

from conftest import checkout_event, sign_payload


@pytest.fixture
def service(settings, gateway, notifier, db):
    return EnrollmentService(settings, gateway, notifier, db)


@pytest.fixture
def course_id(user_factory, course_factory):
    instructor = user_factory(role="Instructor")
    return course_factory(instructor, [["00:10:00"]], price=499.0)["id"]


def _enrolled(db, user_id):
    return MongoRepository("users", db).find_one(user_id)["enrolledCourses"]


def test_enroll_is_idempotent(db, service, user_factory, course_id):
    student = user_factory()

    assert service.enroll(student["_id"], course_id)["status"] == "enrolled"
    assert service.enroll(student["_id"], course_id)["status"] == "already_enrolled"
    assert _enrolled(db, student["_id"]) == [course_id]


def test_enroll_clears_course_from_cart(db, service, user_factory, course_id):
    student = user_factory()
    CartService(db).add_to_cart(student["_id"], course_id)

    service.enroll(student["_id"], course_id)
    assert db["carts"].count_documents({"userId": student["_id"]}) == 0


def test_signed_webhook_enrolls_once(db, service, user_factory, course_id):
    student = user_factory()
    payload = checkout_event(student["_id"], course_id)

    first = service.handle_webhook(payload.encode(), sign_payload(payload))
    replay = service.handle_webhook(payload.encode(), sign_payload(payload))

    assert first["status"] == "enrolled"
    assert replay["status"] == "already_enrolled"
    assert _enrolled(db, student["_id"]) == [course_id]


def test_bad_signature_does_not_enroll(db, service, user_factory, course_id):
    student = user_factory()
    payload = checkout_event(student["_id"], course_id)

    with pytest.raises(WebhookSignatureError):
        service.handle_webhook(payload.encode(), sign_payload(payload, secret="whsec_wrong"))
    with pytest.raises(WebhookSignatureError):
        service.handle_webhook(payload.encode(), None)

    assert _enrolled(db, student["_id"]) == []


def test_tampered_payload_is_rejected(db, service, user_factory, course_id):
    student = user_factory()
    payload = checkout_event(student["_id"], course_id)
    tampered = payload.replace(course_id, "000000000000000000000000")

    with pytest.raises(WebhookSignatureError):
        service.handle_webhook(tampered.encode(), sign_payload(payload))


def test_other_event_types_are_acknowledged(service):
    payload = json.dumps({"id": "evt_2", "type": "payment_intent.created", "data": {"object": {}}})
    assert service.handle_webhook(payload.encode(), sign_payload(payload))["status"] == "ignored"


def test_event_without_metadata_is_ignored(service):
    payload = json.dumps({"id": "evt_3", "type": "checkout.session.completed", "data": {"object": {"metadata": {}}}})
    assert service.handle_webhook(payload.encode(), sign_payload(payload))["status"] == "ignored"


def test_event_for_unknown_user_is_ignored(service, course_id):
    payload = checkout_event("000000000000000000000000", course_id)
    result = service.handle_webhook(payload.encode(), sign_payload(payload))
    assert result["status"] == "ignored"
    assert result["reason"] == "User not found"


def test_checkout_uses_course_price(service, gateway, user_factory, course_id):
    student = user_factory()
    session = service.create_checkout(student, course_id)

    assert session["url"].startswith("https://checkout.stripe.test/")
    call = gateway.checkouts[0]
    assert call["amount_minor_units"] == 49900
    assert call["currency"] == "inr"
    assert call["metadata"] == {"courseId": course_id, "userId": student["_id"]}
    assert call["success_url"].startswith("http://frontend.test/success")


def test_checkout_rejects_draft_and_already_enrolled(service, user_factory, course_factory):
    instructor = user_factory(role="Instructor")
    draft = course_factory(instructor, [["00:10:00"]], public=False)["id"]
    public = course_factory(instructor, [["00:10:00"]])["id"]

    with pytest.raises(ConflictError):
        service.create_checkout(user_factory(), draft)
    with pytest.raises(ConflictError):
        service.create_checkout(user_factory(enrolled=[public]), public)


def test_notify_enrollment_sends_confirmation(service, notifier, user_factory, course_id):
    student = user_factory()
    assert service.notify_enrollment(student["_id"], course_id) is True
    assert notifier.sent[0]["to"] == student["email"]
    assert "Python from Zero" in notifier.sent[0]["html"]


def test_notify_failure_does_not_raise(service, notifier, user_factory, course_id):
    notifier.succeed = False
    assert service.notify_enrollment(user_factory()["_id"], course_id) is False
