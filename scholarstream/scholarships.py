import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from scholarstream.auth import verify_token
from scholarstream.database import get_by_id, get_db
from scholarstream.errors import NotFound
from scholarstream.models import Scholarship
from scholarstream.schemas import ScholarshipCreate, ScholarshipOut, ScholarshipPage, ScholarshipUpdate

router = APIRouter()

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 9

SORT_ORDERS = {
    "fee_asc": Scholarship.application_fees.asc(),
    "fee_desc": Scholarship.application_fees.desc(),
    "date_desc": Scholarship.scholarship_post_date.desc(),
}


def search_scholarships(
    db: Session,
    search: Optional[str] = None,
    scholarship_category: Optional[str] = None,
    subject_category: Optional[str] = None,
    location: Optional[str] = None,
    sort: Optional[str] = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
):
    """Return ``(total, items)`` for one page of the filtered catalog."""
    query = db.query(Scholarship)

    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Scholarship.scholarship_name.ilike(pattern),
            Scholarship.university_name.ilike(pattern),
            Scholarship.degree.ilike(pattern),
        ))
    if scholarship_category:
        query = query.filter(Scholarship.scholarship_category == scholarship_category)
    if subject_category:
        query = query.filter(Scholarship.subject_category == subject_category)
    if location:
        query = query.filter(Scholarship.university_country == location)

    total = query.count()

    if sort in SORT_ORDERS:
        query = query.order_by(SORT_ORDERS[sort])

    page = max(page, 1)
    limit = max(limit, 1)
    items = query.offset((page - 1) * limit).limit(limit).all()
    return total, items


def get_scholarship(db: Session, scholarship_id: str) -> Scholarship:
    scholarship = get_by_id(db, Scholarship, scholarship_id)
    if scholarship is None:
        raise NotFound("Scholarship not found")
    return scholarship


@router.get("/scholarships", response_model=ScholarshipPage)
def list_scholarships(
    search: Optional[str] = None,
    scholarship_category: Optional[str] = Query(None, alias="scholarshipCategory"),
    subject_category: Optional[str] = Query(None, alias="subjectCategory"),
    location: Optional[str] = None,
    sort: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1),
    db: Session = Depends(get_db),
):
    total, items = search_scholarships(
        db, search, scholarship_category, subject_category, location, sort, page, limit
    )
    return ScholarshipPage(total=total, result=[ScholarshipOut.model_validate(s) for s in items])


@router.get("/scholarships/top", response_model=List[ScholarshipOut])
def top_scholarships(limit: int = Query(6, ge=1), db: Session = Depends(get_db)):
    return (
        db.query(Scholarship)
        .order_by(Scholarship.application_fees.asc(), Scholarship.scholarship_post_date.desc())
        .limit(limit)
        .all()
    )


@router.get("/scholarships/{scholarship_id}", response_model=ScholarshipOut)
def read_scholarship(scholarship_id: str, db: Session = Depends(get_db)):
    return get_scholarship(db, scholarship_id)


@router.post("/scholarships", response_model=ScholarshipOut)
def create_scholarship(
    request: ScholarshipCreate,
    claims=Depends(verify_token),
    db: Session = Depends(get_db),
):
    fields = request.model_dump(exclude_none=True)
    fields.setdefault("posted_user_email", claims["email"])

    scholarship = Scholarship(**fields)
    db.add(scholarship)
    db.commit()
    db.refresh(scholarship)
    logger.info("%s posted scholarship %s", claims["email"], scholarship.id)
    return scholarship


@router.patch("/scholarships/{scholarship_id}", response_model=ScholarshipOut)
def update_scholarship(
    scholarship_id: str,
    request: ScholarshipUpdate,
    claims=Depends(verify_token),
    db: Session = Depends(get_db),
):
    scholarship = get_scholarship(db, scholarship_id)
    changes = request.model_dump(exclude_unset=True)
    if changes.get("scholarship_name") is None:
        changes.pop("scholarship_name", None)
    for field, value in changes.items():
        setattr(scholarship, field, value)
    db.commit()
    db.refresh(scholarship)
    return scholarship


@router.delete("/scholarships/{scholarship_id}")
def delete_scholarship(
    scholarship_id: str,
    claims=Depends(verify_token),
    db: Session = Depends(get_db),
):
    scholarship = get_scholarship(db, scholarship_id)
    db.delete(scholarship)
    db.commit()
    logger.info("%s deleted scholarship %s", claims["email"], scholarship_id)
    return {"deletedCount": 1}
