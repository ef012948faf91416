# src/services/enrollment_service.py
import logging
from typing import Any, Dict, Optional

from pymongo.database import Database
from pymongo.errors import PyMongoError

from src.config.settings import Settings
from src.models.base import CourseState
from src.repositories.user_repository import UserRepository
from src.services.cart_service import CartService
from src.services.course_service import CourseService
from src.services.notification_service import NotificationService, enrollment_email
from src.services.payment_gateway import PaymentGateway
from src.utils.errors import ConflictError, NotFoundError

CHECKOUT_COMPLETED = "checkout.session.completed"


class EnrollmentService:
    """
    NotEnrolled -> Enrolled (terminal), disparado por el webhook de pago.
    El webhook puede llegar más de una vez: enroll() es idempotente.
    """

    def __init__(
        self,
        settings: Settings,
        gateway: PaymentGateway,
        notifier: NotificationService,
        db: Optional[Database] = None,
    ):
        self.settings = settings
        self.gateway = gateway
        self.notifier = notifier
        self.users = UserRepository(db)
        self.courses = CourseService(db)
        self.cart = CartService(db)

    # -------------------- checkout --------------------

    def create_checkout(self, user: Dict[str, Any], course_id: str) -> Dict[str, str]:
        course = self.courses.get_or_404(course_id)
        if course.get("coursetype") != CourseState.PUBLIC.value:
            raise ConflictError("Course is not available for purchase")
        if course_id in user.get("enrolledCourses", []):
            raise ConflictError("You are already enrolled in this course")

        # el precio sale del curso, nunca del cliente
        amount_minor_units = int(round(float(course["price"]) * 100))
        session = self.gateway.create_checkout_session(
            amount_minor_units=amount_minor_units,
            currency=self.settings.currency,
            success_url=f"{self.settings.frontend_url}/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{self.settings.frontend_url}/cancel",
            metadata={"courseId": course_id, "userId": user["_id"]},
            product_name=course.get("title") or "Course Purchase",
        )
        logging.info(f"[payments.checkout] sesión {session['id']} user={user['_id']} course={course_id}")
        return session

    # -------------------- webhook --------------------

    def handle_webhook(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        # Sin firma válida no se toca ningún estado
        event = self.gateway.construct_event(payload, signature)
        event_type = event.get("type")

        if event_type != CHECKOUT_COMPLETED:
            logging.info(f"[enrollment.webhook] Evento no manejado: {event_type}")
            return {"status": "ignored", "type": event_type}

        session = (event.get("data") or {}).get("object") or {}
        metadata = session.get("metadata") or {}
        user_id, course_id = metadata.get("userId"), metadata.get("courseId")
        if not user_id or not course_id:
            logging.warning(f"[enrollment.webhook] Evento {event.get('id')} sin userId/courseId en metadata")
            return {"status": "ignored", "type": event_type}

        try:
            return self.enroll(user_id, course_id)
        except NotFoundError as e:
            # reintentar no lo arregla: se reconoce el evento y se deja registro
            logging.warning(f"[enrollment.webhook] Evento {event.get('id')} descartado: {e.message}")
            return {"status": "ignored", "type": event_type, "reason": e.message}

    def enroll(self, user_id: str, course_id: str) -> Dict[str, Any]:
        if not self.users.find_one(user_id, {"_id": 1}):
            raise NotFoundError("User not found")
        self.courses.get_or_404(course_id)

        if not self.users.add_enrolled_course(user_id, course_id):
            logging.info(f"[enrollment] user={user_id} ya inscripto en course={course_id}")
            return {"status": "already_enrolled", "message": "Already enrolled",
                    "userId": user_id, "courseId": course_id}

        logging.info(f"[enrollment] ✅ user={user_id} inscripto en course={course_id}")
        try:
            self.cart.clear_course(user_id, course_id)
        except PyMongoError as e:
            logging.warning(f"[enrollment] No se pudo limpiar el carrito: {e}")
        return {"status": "enrolled", "message": "Enrolled successfully",
                "userId": user_id, "courseId": course_id}

    # -------------------- notificación (best-effort) --------------------

    def notify_enrollment(self, user_id: str, course_id: str) -> bool:
        try:
            user = self.users.find_public(user_id)
            course = self.courses.repo.find_one(course_id, {"title": 1})
        except PyMongoError as e:
            logging.warning(f"[enrollment.notify] No se pudo leer user/course: {e}")
            return False
        if not user or not course:
            logging.warning(f"[enrollment.notify] user={user_id} o course={course_id} no existe")
            return False

        sent = self.notifier.send_templated_email(
            user["email"],
            "Course Enrollment Confirmation",
            enrollment_email(course.get("title", ""), user.get("firstName", "")),
        )
        if not sent:
            logging.warning(f"[enrollment.notify] Falló el email de inscripción a {user['email']}")
        return sent
