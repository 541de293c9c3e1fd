import stripe

from scholarstream.config import Settings


def to_minor_units(amount: float) -> int:
    return int(round(float(amount) * 100))


def from_minor_units(amount) -> float:
    return (amount or 0) / 100


def create_checkout_session(
    settings: Settings,
    amount: float,
    application_id: str,
    payer_email: str = None,
    scholarship_name: str = None,
    university_name: str = None,
):
    return stripe.checkout.Session.create(
        api_key=settings.stripe_secret_key,
        mode="payment",
        customer_email=payer_email,
        line_items=[
            {
                "price_data": {
                    "currency": settings.stripe_currency,
                    "unit_amount": to_minor_units(amount),
                    "product_data": {"name": scholarship_name or "Scholarship application fee"},
                },
                "quantity": 1,
            }
        ],
        metadata={
            "applicationId": application_id,
            "scholarshipName": scholarship_name or "",
            "universityName": university_name or "",
        },
        success_url=f"{settings.site_domain}/dashboard/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{settings.site_domain}/dashboard/payment-failed?session_id={{CHECKOUT_SESSION_ID}}",
    )


def retrieve_checkout_session(settings: Settings, session_id: str):
    return stripe.checkout.Session.retrieve(session_id, api_key=settings.stripe_secret_key)


def session_field(session, name: str):
    return getattr(session, name, None)


def session_metadata(session, key: str):
    metadata = getattr(session, "metadata", None)
    if metadata is None:
        return None
    return getattr(metadata, key, None) or None
