import enum
from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, Integer, DateTime, Text

from scholarstream.database import Base, new_id


def utcnow():
    return datetime.now(timezone.utc)


class Role(str, enum.Enum):
    STUDENT = "Student"
    MODERATOR = "Moderator"
    ADMIN = "Admin"
    SUPER_ADMIN = "SuperAdmin"

    @property
    def rank(self) -> int:
        return ROLE_RANK[self]


ROLE_RANK = {
    Role.STUDENT: 0,
    Role.MODERATOR: 1,
    Role.ADMIN: 2,
    Role.SUPER_ADMIN: 3,
}


class ApplicationStatus(str, enum.Enum):
    SUBMITTED = "submitted"
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class PaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String)
    photo = Column(String)
    role = Column(String, nullable=False, default=Role.STUDENT.value)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class Scholarship(Base):
    __tablename__ = "scholarships"

    id = Column(String, primary_key=True, default=new_id)
    scholarship_name = Column(String, nullable=False)
    university_name = Column(String)
    university_image = Column(String)
    university_country = Column(String)
    university_city = Column(String)
    university_world_rank = Column(Float, default=0)
    subject_category = Column(String)
    scholarship_category = Column(String)
    degree = Column(String)
    tuition_fees = Column(Float, default=0)
    application_fees = Column(Float, default=0)
    service_charge = Column(Float, default=0)
    application_deadline = Column(DateTime(timezone=True))
    scholarship_post_date = Column(DateTime(timezone=True), default=utcnow)
    posted_user_email = Column(String)


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String, primary_key=True, default=new_id)
    scholarship_id = Column(String, index=True, nullable=False)
    scholarship_name = Column(String)
    university_name = Column(String)
    reviewer_email = Column(String, index=True, nullable=False)
    reviewer_name = Column(String)
    reviewer_image = Column(String)
    rating = Column(Integer, nullable=False)
    comment = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class Application(Base):
    __tablename__ = "applications"

    id = Column(String, primary_key=True, default=new_id)
    applicant_email = Column(String, index=True, nullable=False)
    applicant_name = Column(String)
    scholarship_id = Column(String, index=True, nullable=False)
    scholarship_name = Column(String)
    university_name = Column(String)
    scholarship_category = Column(String)
    subject_category = Column(String)
    degree = Column(String)
    application_fees = Column(Float, default=0)
    service_charge = Column(Float, default=0)
    application_status = Column(String, nullable=False, default=ApplicationStatus.SUBMITTED.value)
    payment_status = Column(String, nullable=False, default=PaymentStatus.UNPAID.value)
    feedback = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String, primary_key=True, default=new_id)
    transaction_id = Column(String, unique=True, index=True, nullable=False)  # Stripe PaymentIntent ID
    application_id = Column(String, index=True)
    scholarship_name = Column(String)
    university_name = Column(String)
    amount = Column(Float, nullable=False)
    currency = Column(String)
    payer_email = Column(String, index=True)
    payment_status = Column(String, nullable=False)                          # paid
    paid_at = Column(DateTime(timezone=True), default=utcnow)
