"""Checkout sessions and idempotent payment confirmation."""
import logging
from datetime import datetime, timezone
from typing import List, Optional

import stripe
from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from scholarstream.auth import get_settings, verify_token
from scholarstream.config import Settings
from scholarstream.database import get_by_id, get_db
from scholarstream.errors import BadRequest, NotFound, PaymentNotCompleted
from scholarstream.models import Application, ApplicationStatus, Payment, PaymentStatus, Scholarship
from scholarstream.schemas import (
    CheckoutOut, CheckoutRequest, PaymentFailedOut, PaymentOut, PaymentSuccessOut, PaymentSummary,
)
from scholarstream.stripe_service import (
    create_checkout_session, from_minor_units, retrieve_checkout_session, session_field, session_metadata,
)

router = APIRouter()

logger = logging.getLogger(__name__)


def start_checkout(settings: Settings, request: CheckoutRequest, payer_email: str) -> str:
    if not request.application_id:
        raise BadRequest("applicationId is required")
    if request.application_fees <= 0:
        raise BadRequest("applicationFees must be greater than zero")

    session = create_checkout_session(
        settings,
        amount=request.application_fees,
        application_id=request.application_id,
        payer_email=request.applicant_email or payer_email,
        scholarship_name=request.scholarship_name,
        university_name=request.university_name,
    )
    logger.info("Created checkout session %s for application %s", session.id, request.application_id)
    return session.url


def transaction_id_of(session) -> str:
    payment_intent = session_field(session, "payment_intent")
    if payment_intent is not None and not isinstance(payment_intent, str):
        payment_intent = getattr(payment_intent, "id", None)
    return payment_intent or session.id


def scholarship_name_for(db: Session, application: Application) -> Optional[str]:
    scholarship = get_by_id(db, Scholarship, application.scholarship_id)
    if scholarship is not None:
        return scholarship.scholarship_name
    return application.scholarship_name


def mark_paid(application: Application):
    application.payment_status = PaymentStatus.PAID.value
    application.application_status = ApplicationStatus.PENDING.value


def upsert_payment(
    db: Session, transaction_id: str, fields: dict, application: Optional[Application] = None
) -> Payment:
    """Insert or refresh the ledger row, marking ``application`` paid in the same commit."""
    payment = db.query(Payment).filter_by(transaction_id=transaction_id).first()
    if payment is None:
        payment = Payment(transaction_id=transaction_id, **fields)
        db.add(payment)
    else:
        for field, value in fields.items():
            setattr(payment, field, value)
    if application is not None:
        mark_paid(application)

    try:
        db.commit()
    except IntegrityError:
        # Another confirmation of the same transaction inserted first.
        db.rollback()
        payment = db.query(Payment).filter_by(transaction_id=transaction_id).one()
        for field, value in fields.items():
            setattr(payment, field, value)
        if application is not None:
            mark_paid(application)
        db.commit()

    db.refresh(payment)
    return payment


def confirm_payment(db: Session, settings: Settings, session_id: Optional[str]) -> Payment:
    if not session_id:
        raise BadRequest("session_id is required")

    session = retrieve_checkout_session(settings, session_id)
    if session_field(session, "payment_status") != PaymentStatus.PAID.value:
        raise PaymentNotCompleted()

    application_id = session_metadata(session, "applicationId")
    application = get_by_id(db, Application, application_id) if application_id else None
    if application is None:
        raise NotFound("Application not found")

    scholarship_name = scholarship_name_for(db, application) or session_metadata(session, "scholarshipName")
    university_name = application.university_name or session_metadata(session, "universityName")
    customer_details = session_field(session, "customer_details")
    payer_email = (
        session_field(session, "customer_email")
        or getattr(customer_details, "email", None)
        or application.applicant_email
    )

    transaction_id = transaction_id_of(session)
    payment = upsert_payment(db, transaction_id, {
        "application_id": application.id,
        "scholarship_name": scholarship_name,
        "university_name": university_name,
        "amount": from_minor_units(session_field(session, "amount_total")),
        "currency": session_field(session, "currency"),
        "payer_email": payer_email.lower() if payer_email else None,
        "payment_status": PaymentStatus.PAID.value,
        "paid_at": datetime.now(timezone.utc),
    }, application=application)
    logger.info("Confirmed payment %s for application %s", transaction_id, application.id)
    return payment


def get_failure_info(db: Session, settings: Settings, session_id: Optional[str]) -> Optional[str]:
    """Best-effort scholarship name for a failed or cancelled checkout, or None."""
    if not session_id:
        return None
    try:
        session = retrieve_checkout_session(settings, session_id)
        name = session_metadata(session, "scholarshipName")
        if name:
            return name
        application_id = session_metadata(session, "applicationId")
        application = get_by_id(db, Application, application_id) if application_id else None
        if application is None:
            return None
        return scholarship_name_for(db, application)
    except (stripe.StripeError, SQLAlchemyError) as e:
        logger.warning("Could not resolve failed session %s: %s", session_id, e)
        return None


@router.post("/create-checkout-session", response_model=CheckoutOut)
def create_checkout(
    request: CheckoutRequest,
    claims=Depends(verify_token),
    settings: Settings = Depends(get_settings),
):
    return CheckoutOut(url=start_checkout(settings, request, claims["email"]))


@router.patch("/payment-success", response_model=PaymentSuccessOut)
def payment_success(
    session_id: Optional[str] = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    payment = confirm_payment(db, settings, session_id)
    return PaymentSuccessOut(
        success=True,
        message="Payment successful",
        payment=PaymentSummary.model_validate(payment),
    )


@router.get("/payment-failed", response_model=PaymentFailedOut)
def payment_failed(
    session_id: Optional[str] = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return PaymentFailedOut(
        success=False,
        scholarship_name=get_failure_info(db, settings, session_id),
        message="Payment was not completed",
    )


@router.get("/payments", response_model=List[PaymentOut])
def list_payments(
    email: Optional[str] = None,
    claims=Depends(verify_token),
    db: Session = Depends(get_db),
):
    query = db.query(Payment)
    if email:
        query = query.filter_by(payer_email=email.lower())
    return query.order_by(Payment.paid_at.desc()).all()
