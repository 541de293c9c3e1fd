from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from scholarstream.models import ApplicationStatus, Role


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class ResponseModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _blank_to_zero(value):
    if value is None or value == "":
        return 0
    return value


# --- users ---

class TokenRequest(RequestModel):
    email: str = Field(..., min_length=3)
    name: Optional[str] = None
    photo: Optional[str] = None


class UserCreate(RequestModel):
    email: str = Field(..., min_length=3)
    name: Optional[str] = None
    photo: Optional[str] = None


class RoleUpdate(RequestModel):
    role: Role


class UserOut(ResponseModel):
    id: str
    email: str
    name: Optional[str] = None
    photo: Optional[str] = None
    role: Role
    created_at: Optional[datetime] = None


class MessageOut(ResponseModel):
    message: str


class RoleChangeOut(ResponseModel):
    message: str
    result: UserOut


class RoleOut(ResponseModel):
    role: Role


# --- scholarships ---

class ScholarshipFields(RequestModel):
    university_name: Optional[str] = None
    university_image: Optional[str] = None
    university_country: Optional[str] = None
    university_city: Optional[str] = None
    subject_category: Optional[str] = None
    scholarship_category: Optional[str] = None
    degree: Optional[str] = None
    application_deadline: Optional[datetime] = None
    scholarship_post_date: Optional[datetime] = None
    posted_user_email: Optional[str] = None

    university_world_rank: float = 0
    tuition_fees: float = 0
    application_fees: float = 0
    service_charge: float = 0

    @field_validator(
        "university_world_rank", "tuition_fees", "application_fees", "service_charge",
        mode="before",
    )
    @classmethod
    def coerce_numeric(cls, value):
        return _blank_to_zero(value)


class ScholarshipCreate(ScholarshipFields):
    scholarship_name: str = Field(..., min_length=1)


class ScholarshipUpdate(ScholarshipFields):
    scholarship_name: Optional[str] = Field(None, min_length=1)


class ScholarshipOut(ResponseModel):
    id: str
    scholarship_name: str
    university_name: Optional[str] = None
    university_image: Optional[str] = None
    university_country: Optional[str] = None
    university_city: Optional[str] = None
    university_world_rank: float = 0
    subject_category: Optional[str] = None
    scholarship_category: Optional[str] = None
    degree: Optional[str] = None
    tuition_fees: float = 0
    application_fees: float = 0
    service_charge: float = 0
    application_deadline: Optional[datetime] = None
    scholarship_post_date: Optional[datetime] = None
    posted_user_email: Optional[str] = None


class ScholarshipPage(ResponseModel):
    total: int
    result: List[ScholarshipOut]


# --- reviews ---

class ReviewCreate(RequestModel):
    scholarship_id: str = Field(..., min_length=1)
    scholarship_name: Optional[str] = None
    university_name: Optional[str] = None
    reviewer_name: Optional[str] = None
    reviewer_image: Optional[str] = None
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class ReviewUpdate(RequestModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = None


class ReviewOut(ResponseModel):
    id: str
    scholarship_id: str
    scholarship_name: Optional[str] = None
    university_name: Optional[str] = None
    reviewer_email: str
    reviewer_name: Optional[str] = None
    reviewer_image: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --- applications ---

class ApplicationCreate(RequestModel):
    scholarship_id: str = Field(..., min_length=1)
    applicant_name: Optional[str] = None
    scholarship_name: Optional[str] = None
    university_name: Optional[str] = None
    scholarship_category: Optional[str] = None
    subject_category: Optional[str] = None
    degree: Optional[str] = None
    application_fees: Optional[float] = None
    service_charge: Optional[float] = None


class ApplicationUpdate(RequestModel):
    applicant_name: Optional[str] = None
    degree: Optional[str] = None
    application_status: Optional[ApplicationStatus] = None
    feedback: Optional[str] = None


class ApplicationOut(ResponseModel):
    id: str
    applicant_email: str
    applicant_name: Optional[str] = None
    scholarship_id: str
    scholarship_name: Optional[str] = None
    university_name: Optional[str] = None
    scholarship_category: Optional[str] = None
    subject_category: Optional[str] = None
    degree: Optional[str] = None
    application_fees: Optional[float] = None
    service_charge: Optional[float] = None
    application_status: str
    payment_status: str
    feedback: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --- payments ---

class CheckoutRequest(RequestModel):
    application_fees: float = 0
    application_id: Optional[str] = None
    applicant_email: Optional[str] = None
    scholarship_name: Optional[str] = None
    university_name: Optional[str] = None

    @field_validator("application_fees", mode="before")
    @classmethod
    def coerce_fee(cls, value):
        return _blank_to_zero(value)


class CheckoutOut(ResponseModel):
    url: str


class PaymentOut(ResponseModel):
    id: str
    transaction_id: str
    application_id: Optional[str] = None
    scholarship_name: Optional[str] = None
    university_name: Optional[str] = None
    amount: float
    currency: Optional[str] = None
    payer_email: Optional[str] = None
    payment_status: str
    paid_at: Optional[datetime] = None


class PaymentSummary(ResponseModel):
    scholarship_name: Optional[str] = None
    university_name: Optional[str] = None
    amount: float
    currency: Optional[str] = None


class PaymentSuccessOut(ResponseModel):
    success: bool
    message: str
    payment: PaymentSummary


class PaymentFailedOut(ResponseModel):
    success: bool = False
    scholarship_name: Optional[str] = None
    message: str


# --- analytics ---

class CategoryCount(ResponseModel):
    category: str
    count: int


class AnalyticsOut(ResponseModel):
    total_users: int
    total_scholarships: int
    total_fees_collected: float
    applications_per_category: List[CategoryCount]
