import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from scholarstream.auth import current_rank, require_role, verify_token
from scholarstream.database import get_by_id, get_db
from scholarstream.errors import Forbidden, NotFound
from scholarstream.models import Application, Role, Scholarship, User
from scholarstream.schemas import ApplicationCreate, ApplicationOut, ApplicationUpdate

router = APIRouter()

logger = logging.getLogger(__name__)

MODERATED_FIELDS = {"application_status", "feedback"}

# Copied from the scholarship when the applicant leaves them out.
SCHOLARSHIP_FIELDS = (
    "scholarship_name", "university_name", "scholarship_category",
    "subject_category", "degree", "application_fees", "service_charge",
)


def get_application(db: Session, application_id: str) -> Application:
    application = get_by_id(db, Application, application_id)
    if application is None:
        raise NotFound("Application not found")
    return application


def owned_application(db: Session, application_id: str, email: str) -> Application:
    application = get_application(db, application_id)
    if application.applicant_email != email and current_rank(db, email) < Role.MODERATOR.rank:
        raise Forbidden("Only the applicant or a moderator can access this application")
    return application


@router.post("/applications", response_model=ApplicationOut)
def create_application(
    request: ApplicationCreate,
    claims=Depends(verify_token),
    db: Session = Depends(get_db),
):
    fields = request.model_dump(exclude_none=True)
    scholarship = get_by_id(db, Scholarship, request.scholarship_id)
    if scholarship is not None:
        fields["scholarship_id"] = scholarship.id
        for name in SCHOLARSHIP_FIELDS:
            fields.setdefault(name, getattr(scholarship, name))

    application = Application(applicant_email=claims["email"], **fields)
    db.add(application)
    db.commit()
    db.refresh(application)
    logger.info("%s applied for scholarship %s", application.applicant_email, application.scholarship_id)
    return application


@router.get("/applications", response_model=List[ApplicationOut])
def list_applications(
    _moderator: User = Depends(require_role(Role.MODERATOR)),
    db: Session = Depends(get_db),
):
    return db.query(Application).order_by(Application.created_at.desc()).all()


@router.get("/applications/user/{email}", response_model=List[ApplicationOut])
def list_user_applications(email: str, claims=Depends(verify_token), db: Session = Depends(get_db)):
    return db.query(Application).filter_by(applicant_email=email.lower()).all()


@router.get("/applications/{application_id}", response_model=ApplicationOut)
def read_application(application_id: str, claims=Depends(verify_token), db: Session = Depends(get_db)):
    return owned_application(db, application_id, claims["email"])


@router.patch("/applications/{application_id}", response_model=ApplicationOut)
def update_application(
    application_id: str,
    request: ApplicationUpdate,
    claims=Depends(verify_token),
    db: Session = Depends(get_db),
):
    changes = {k: v for k, v in request.model_dump(exclude_unset=True).items() if v is not None}
    if MODERATED_FIELDS & changes.keys() and current_rank(db, claims["email"]) < Role.MODERATOR.rank:
        raise Forbidden("Only moderators can change the application status or feedback")

    application = owned_application(db, application_id, claims["email"])
    for field, value in changes.items():
        setattr(application, field, getattr(value, "value", value))
    db.commit()
    db.refresh(application)
    return application


@router.delete("/applications/{application_id}")
def delete_application(application_id: str, claims=Depends(verify_token), db: Session = Depends(get_db)):
    application = owned_application(db, application_id, claims["email"])
    db.delete(application)
    db.commit()
    logger.info("%s deleted application %s", claims["email"], application_id)
    return {"deletedCount": 1}
