# src/services/payment_gateway.py
import json
import logging
from typing import Any, Dict, Optional

import stripe

from src.config.settings import Settings
from src.utils.errors import ExternalServiceError, WebhookSignatureError


class PaymentGateway:
    """Checkout hospedado + verificación de webhooks (Stripe)."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def create_checkout_session(
        self,
        amount_minor_units: int,
        currency: str,
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str],
        product_name: str = "Course Purchase",
    ) -> Dict[str, str]:
        try:
            session = stripe.checkout.Session.create(
                api_key=self.settings.stripe_secret_key,
                payment_method_types=["card"],
                mode="payment",
                line_items=[{
                    "price_data": {
                        "currency": currency,
                        "product_data": {"name": product_name},
                        "unit_amount": amount_minor_units,
                    },
                    "quantity": 1,
                }],
                success_url=success_url,
                cancel_url=cancel_url,
                # Stripe sólo acepta strings en metadata
                metadata={k: str(v) for k, v in metadata.items()},
            )
        except stripe.StripeError as e:
            logging.error(f"[payments.checkout] Stripe rechazó la sesión: {e}")
            raise ExternalServiceError("Error creating checkout session")
        return {"id": session.id, "url": session.url}

    def construct_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """
        Verifica la firma `Stripe-Signature` sobre el body crudo y devuelve el evento.
        Cualquier falla es WebhookSignatureError: nunca se procesa un evento sin firma válida.
        """
        if not signature:
            raise WebhookSignatureError("Missing Stripe-Signature header")
        if not self.settings.stripe_webhook_secret:
            logging.error("[payments.webhook] STRIPE_WEBHOOK_SECRET no configurado")
            raise WebhookSignatureError()

        try:
            body = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(
                body,
                signature,
                self.settings.stripe_webhook_secret,
                tolerance=stripe.Webhook.DEFAULT_TOLERANCE,
            )
            event = json.loads(body)
        except stripe.SignatureVerificationError as e:
            logging.warning(f"[payments.webhook] Firma inválida: {e}")
            raise WebhookSignatureError()
        except (UnicodeDecodeError, ValueError) as e:
            logging.warning(f"[payments.webhook] Payload inválido: {e}")
            raise WebhookSignatureError("Invalid webhook payload")

        if not isinstance(event, dict):
            raise WebhookSignatureError("Invalid webhook payload")
        return event
