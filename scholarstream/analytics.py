from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from scholarstream.auth import require_role
from scholarstream.database import get_db
from scholarstream.models import Application, Payment, PaymentStatus, Role, Scholarship, User
from scholarstream.schemas import AnalyticsOut, CategoryCount

router = APIRouter()

UNKNOWN_CATEGORY = "Unknown"


def compute_summary(db: Session) -> AnalyticsOut:
    total_users = db.query(func.count(User.id)).scalar()
    total_scholarships = db.query(func.count(Scholarship.id)).scalar()
    total_fees = (
        db.query(func.coalesce(func.sum(Payment.amount), 0))
        .filter(Payment.payment_status == PaymentStatus.PAID.value)
        .scalar()
    )

    category = func.coalesce(func.nullif(Application.scholarship_category, ""), UNKNOWN_CATEGORY)
    count = func.count(Application.id)
    rows = db.query(category, count).group_by(category).order_by(count.desc(), category).all()

    return AnalyticsOut(
        total_users=total_users,
        total_scholarships=total_scholarships,
        total_fees_collected=float(total_fees),
        applications_per_category=[CategoryCount(category=c, count=n) for c, n in rows],
    )


@router.get("/analytics", response_model=AnalyticsOut)
def analytics(_admin: User = Depends(require_role(Role.ADMIN)), db: Session = Depends(get_db)):
    return compute_summary(db)
