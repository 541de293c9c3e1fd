import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from scholarstream.auth import current_rank, verify_token
from scholarstream.database import get_by_id, get_db
from scholarstream.errors import Forbidden, NotFound
from scholarstream.models import Review, Role
from scholarstream.schemas import ReviewCreate, ReviewOut, ReviewUpdate

router = APIRouter()

logger = logging.getLogger(__name__)


def editable_review(db: Session, review_id: str, email: str) -> Review:
    """Load a review the caller may change: their own, or any if Moderator+."""
    review = get_by_id(db, Review, review_id)
    if review is None:
        raise NotFound("Review not found")
    if review.reviewer_email != email and current_rank(db, email) < Role.MODERATOR.rank:
        raise Forbidden("Only the author or a moderator can change this review")
    return review


@router.post("/reviews", response_model=ReviewOut)
def create_review(request: ReviewCreate, claims=Depends(verify_token), db: Session = Depends(get_db)):
    review = Review(reviewer_email=claims["email"], **request.model_dump(exclude_none=True))
    db.add(review)
    db.commit()
    db.refresh(review)
    return review


@router.get("/reviews", response_model=List[ReviewOut])
def list_reviews(db: Session = Depends(get_db)):
    return db.query(Review).order_by(Review.created_at.desc()).all()


@router.get("/reviews/user/{email}", response_model=List[ReviewOut])
def list_user_reviews(email: str, claims=Depends(verify_token), db: Session = Depends(get_db)):
    return db.query(Review).filter_by(reviewer_email=email.lower()).all()


@router.get("/reviews/{scholarship_id}", response_model=List[ReviewOut])
def list_scholarship_reviews(scholarship_id: str, db: Session = Depends(get_db)):
    return db.query(Review).filter_by(scholarship_id=scholarship_id).all()


@router.patch("/reviews/{review_id}", response_model=ReviewOut)
def update_review(
    review_id: str,
    request: ReviewUpdate,
    claims=Depends(verify_token),
    db: Session = Depends(get_db),
):
    review = editable_review(db, review_id, claims["email"])
    for field, value in request.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(review, field, value)
    db.commit()
    db.refresh(review)
    return review


@router.delete("/reviews/{review_id}")
def delete_review(review_id: str, claims=Depends(verify_token), db: Session = Depends(get_db)):
    review = editable_review(db, review_id, claims["email"])
    db.delete(review)
    db.commit()
    logger.info("%s deleted review %s", claims["email"], review_id)
    return {"deletedCount": 1}
