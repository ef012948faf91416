# payment_routes.py
from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.concurrency import run_in_threadpool

from src.api.dependencies import get_current_user, get_enrollment_service
from src.models.base import ok
from src.models.learning_model import CheckoutIn
from src.services.enrollment_service import EnrollmentService

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/checkout-session", status_code=status.HTTP_201_CREATED)
def create_checkout_session(
    body: CheckoutIn,
    user: Dict[str, Any] = Depends(get_current_user),
    svc: EnrollmentService = Depends(get_enrollment_service),
):
    return ok("Checkout session created", svc.create_checkout(user, body.courseId))


@router.post("/webhook")
async def payment_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    svc: EnrollmentService = Depends(get_enrollment_service),
):
    """
    Webhook de Stripe - SIN sesión (se verifica la firma sobre el body crudo).
    Reentregas del mismo evento responden "already_enrolled".
    """
    payload = await request.body()
    # handle_webhook usa pymongo (bloqueante): fuera del event loop
    result = await run_in_threadpool(svc.handle_webhook, payload, request.headers.get("stripe-signature"))

    # el email no bloquea ni condiciona la inscripción
    if result["status"] == "enrolled":
        background_tasks.add_task(svc.notify_enrollment, result["userId"], result["courseId"])

    return ok(result.get("message", "Event received"), result)
