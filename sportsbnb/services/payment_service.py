"""
Payment Service with Stripe Integration
Hosted Checkout for venue bookings and paid games, plus refunds
"""

import logging
import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Optional

import stripe

from sportsbnb.config import settings
from sportsbnb.core.exceptions import PaymentError, ExternalServiceError
from sportsbnb.core.metrics import record_payment_failure

logger = logging.getLogger(__name__)

DEMO_PREFIX = "demo_"
# Stripe only accepts session expiries at least 30 minutes out
MIN_SESSION_LIFETIME = timedelta(minutes=31)


def _to_minor_units(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).to_integral_value())


class PaymentService:
    """Service for handling payment operations"""

    @staticmethod
    def demo_reference() -> str:
        """Stand-in payment reference for bookings confirmed without Stripe"""
        return f"{DEMO_PREFIX}{int(time.time() * 1000)}"

    @staticmethod
    def is_demo_reference(reference: Optional[str]) -> bool:
        return bool(reference) and reference.startswith(DEMO_PREFIX)

    @staticmethod
    def owner_can_receive(profile) -> bool:
        """Whether payments for this owner go through Stripe"""
        return (
            settings.stripe_enabled
            and profile is not None
            and bool(profile.stripe_account_id)
            and profile.stripe_onboarding_completed
        )

    @staticmethod
    def create_checkout_session(
        amount: Decimal,
        name: str,
        description: str,
        success_path: str,
        cancel_path: str,
        customer_email: str,
        metadata: Dict[str, str],
        destination_account: Optional[str] = None,
        application_fee: Optional[Decimal] = None,
        expires_at: Optional[datetime] = None,
    ) -> Dict[str, str]:
        """
        Create a hosted Checkout Session. With a destination account the
        charge is forwarded to the owner minus the application fee.
        ``expires_at`` closes the session once the matching hold lapses.
        """
        payment_intent_data = {"metadata": metadata}
        if destination_account:
            payment_intent_data["transfer_data"] = {"destination": destination_account}
            if application_fee:
                payment_intent_data["application_fee_amount"] = _to_minor_units(application_fee)

        session_expiry = {}
        if expires_at is not None:
            earliest = datetime.now(timezone.utc) + MIN_SESSION_LIFETIME
            session_expiry["expires_at"] = int(max(expires_at, earliest).timestamp())

        try:
            session = stripe.checkout.Session.create(
                api_key=settings.STRIPE_SECRET_KEY,
                mode="payment",
                customer_email=customer_email,
                line_items=[{
                    "price_data": {
                        "currency": settings.STRIPE_CURRENCY,
                        "product_data": {"name": name, "description": description},
                        "unit_amount": _to_minor_units(amount),
                    },
                    "quantity": 1,
                }],
                payment_intent_data=payment_intent_data,
                success_url=f"{settings.FRONTEND_URL}{success_path}?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{settings.FRONTEND_URL}{cancel_path}",
                metadata=metadata,
                **session_expiry,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe error creating checkout session: {e}")
            record_payment_failure("checkout")
            raise ExternalServiceError("stripe", "Could not start checkout, please try again")

        logger.info("Checkout session created", extra={"session_id": session.id})
        return {"id": session.id, "url": session.url}

    @staticmethod
    def retrieve_session(session_id: str) -> Dict[str, Optional[str]]:
        """
        Fetch a Checkout Session.
        Returns its id, session and payment status, and payment intent reference.
        """
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=settings.STRIPE_SECRET_KEY)
        except stripe.StripeError as e:
            logger.error(f"Stripe error retrieving session {session_id}: {e}")
            record_payment_failure("verify")
            raise ExternalServiceError("stripe", "Could not verify payment, please try again")

        payment_intent = session.payment_intent
        if payment_intent is not None and not isinstance(payment_intent, str):
            payment_intent = payment_intent.id
        return {
            "id": session.id,
            "status": session.status,
            "payment_status": session.payment_status,
            "payment_intent": payment_intent,
        }

    @staticmethod
    def retrieve_paid_session(session_id: str) -> Dict[str, Optional[str]]:
        """Fetch a Checkout Session and require it to be paid"""
        session = PaymentService.retrieve_session(session_id)
        if session["payment_status"] != "paid":
            raise PaymentError("Payment not completed", details={"payment_status": session["payment_status"]})
        return session

    @staticmethod
    def close_unpaid_session(session_id: str) -> bool:
        """
        Make sure an abandoned session can no longer be paid.
        Returns False when the customer has already paid it.
        """
        session = PaymentService.retrieve_session(session_id)
        if session["payment_status"] == "paid":
            return False
        if session["status"] != "open":
            return True
        try:
            stripe.checkout.Session.expire(session_id, api_key=settings.STRIPE_SECRET_KEY)
        except stripe.StripeError as e:
            logger.error(f"Stripe error expiring session {session_id}: {e}")
            record_payment_failure("expire")
            raise ExternalServiceError("stripe", "Could not restart checkout, please try again")
        logger.info("Checkout session expired", extra={"session_id": session_id})
        return True

    @staticmethod
    def refund_session(session_id: str) -> bool:
        """
        Refund whatever a session collected, used when its hold lapsed or
        its game closed before the payment was verified
        """
        session = PaymentService.retrieve_session(session_id)
        if session["payment_status"] != "paid" or not session["payment_intent"]:
            return False
        PaymentService.refund(session["payment_intent"])
        return True

    @staticmethod
    def refund(payment_intent_id: str) -> str:
        """Refund a payment in full and return the refund id"""
        try:
            refund = stripe.Refund.create(
                api_key=settings.STRIPE_SECRET_KEY,
                payment_intent=payment_intent_id,
                reason="requested_by_customer",
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe refund failed for {payment_intent_id}: {e}")
            record_payment_failure("refund")
            raise PaymentError("Refund failed", details={"payment_intent_id": payment_intent_id})

        logger.info("Refund created", extra={"refund_id": refund.id, "payment_intent_id": payment_intent_id})
        return refund.id


# Initialize global payment service
payment_service = PaymentService()
