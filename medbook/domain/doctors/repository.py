"""Doctor repository - Database operations for doctor profiles and reviews"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ...models import Appointment, AppointmentStatus, DoctorProfile, Review, User, UserRole


class DoctorRepository:
    """Repository for doctor database operations"""

    @staticmethod
    def _listing_query(db: Session) -> Query:
        """Doctor rows joined with identity, mean rating and review count"""
        ratings = (
            db.query(
                Review.doctor_id.label("doctor_id"),
                func.avg(Review.rating).label("rating"),
                func.count(Review.id).label("reviews_count"),
            )
            .group_by(Review.doctor_id)
            .subquery()
        )
        return (
            db.query(
                DoctorProfile,
                User,
                func.coalesce(ratings.c.rating, 0).label("rating"),
                func.coalesce(ratings.c.reviews_count, 0).label("reviews_count"),
            )
            .join(User, DoctorProfile.user_id == User.id)
            .outerjoin(ratings, ratings.c.doctor_id == DoctorProfile.id)
            .filter(User.role == UserRole.DOCTOR.value)
        )

    @staticmethod
    def search_doctors(
        db: Session,
        search: Optional[str] = None,
        city: Optional[str] = None,
    ) -> list[tuple]:
        """Search doctors by name/specialty text and city substring"""
        query = DoctorRepository._listing_query(db)

        if search:
            search_term = f"%{search.strip()}%"
            query = query.filter(
                (User.first_name.ilike(search_term))
                | (User.last_name.ilike(search_term))
                | (DoctorProfile.specialty.ilike(search_term))
            )

        if city:
            query = query.filter(DoctorProfile.city.ilike(f"%{city.strip()}%"))

        return query.order_by(DoctorProfile.id.asc()).all()

    @staticmethod
    def get_doctor_row(db: Session, doctor_id: int) -> Optional[tuple]:
        """Single doctor with identity and rating aggregate"""
        return DoctorRepository._listing_query(db).filter(DoctorProfile.id == doctor_id).first()

    @staticmethod
    def get_doctor(db: Session, doctor_id: int) -> Optional[DoctorProfile]:
        return (
            db.query(DoctorProfile)
            .options(joinedload(DoctorProfile.user))
            .filter(DoctorProfile.id == doctor_id)
            .first()
        )

    @staticmethod
    def update_profile(db: Session, doctor: DoctorProfile, user_updates: dict, **updates) -> DoctorProfile:
        """Update profile fields and user contact fields in one commit"""
        for key, value in updates.items():
            if value is not None and hasattr(doctor, key):
                setattr(doctor, key, value)
        for key, value in user_updates.items():
            if value is not None and hasattr(doctor.user, key):
                setattr(doctor.user, key, value)

        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(doctor)
        return doctor

    # Review Methods
    @staticmethod
    def get_reviews(db: Session, doctor_id: int, limit: Optional[int] = None) -> list[Review]:
        """Reviews with reviewer identity, newest first"""
        query = (
            db.query(Review)
            .options(joinedload(Review.patient))
            .filter(Review.doctor_id == doctor_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def has_completed_appointment(db: Session, doctor_id: int, patient_id: int) -> bool:
        return (
            db.query(Appointment.id)
            .filter(
                Appointment.doctor_id == doctor_id,
                Appointment.patient_id == patient_id,
                Appointment.status == AppointmentStatus.COMPLETED.value,
            )
            .first()
            is not None
        )

    @staticmethod
    def create_review(db: Session, **review_data) -> Review:
        review = Review(**review_data)
        db.add(review)
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(review)
        return review

    # Consultation Request Methods
    @staticmethod
    def get_pending_requests(db: Session, doctor_id: int) -> list[Appointment]:
        """Pending appointments awaiting the doctor's decision, earliest first"""
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.patient))
            .filter(
                Appointment.doctor_id == doctor_id,
                Appointment.status == AppointmentStatus.PENDING.value,
            )
            .order_by(Appointment.date.asc(), Appointment.time.asc())
            .all()
        )

    @staticmethod
    def get_pending_request(db: Session, doctor_id: int, appointment_id: int) -> Optional[Appointment]:
        return (
            db.query(Appointment)
            .filter(
                Appointment.id == appointment_id,
                Appointment.doctor_id == doctor_id,
                Appointment.status == AppointmentStatus.PENDING.value,
            )
            .first()
        )
