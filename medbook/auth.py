import logging
from dataclasses import dataclass
from typing import Literal, Optional, Union

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session, joinedload

from .database import get_db
from .models import User, UserRole
from .security_utils import verify_access_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class PatientActor:
    user: User
    role: Literal[UserRole.PATIENT] = UserRole.PATIENT

    @property
    def user_id(self) -> int:
        return self.user.id


@dataclass(frozen=True)
class DoctorActor:
    user: User
    doctor_id: int
    role: Literal[UserRole.DOCTOR] = UserRole.DOCTOR

    @property
    def user_id(self) -> int:
        return self.user.id


Actor = Union[PatientActor, DoctorActor]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Actor:
    """Resolve the bearer token into a patient or doctor actor"""
    if not credentials:
        raise _unauthorized("No token, authorization denied")

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise _unauthorized("Token is not valid")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        logger.warning(f"⚠️ Token missing user id claim. Claims: {list(payload.keys())}")
        raise _unauthorized("Token is not valid") from None

    user = (
        db.query(User)
        .options(joinedload(User.doctor_profile))
        .filter(User.id == user_id)
        .first()
    )
    if not user:
        logger.warning(f"⚠️ Token refers to unknown user {user_id}")
        raise _unauthorized("Token is not valid")

    # The stored role wins over the claim in case the token is stale
    if user.role == UserRole.DOCTOR.value:
        if not user.doctor_profile:
            logger.error(f"❌ Doctor user {user.id} has no doctor profile")
            raise HTTPException(status_code=404, detail="Doctor profile not found")
        return DoctorActor(user=user, doctor_id=user.doctor_profile.id)

    return PatientActor(user=user)


async def get_current_doctor(actor: Actor = Depends(get_current_actor)) -> DoctorActor:
    """Require the authenticated actor to be a doctor"""
    if actor.role is not UserRole.DOCTOR:
        logger.warning(f"⚠️ User {actor.user_id} attempted a doctor-only action")
        raise HTTPException(status_code=403, detail="Only doctors can perform this action")
    return actor


async def get_current_patient(actor: Actor = Depends(get_current_actor)) -> PatientActor:
    """Require the authenticated actor to be a patient"""
    if actor.role is not UserRole.PATIENT:
        logger.warning(f"⚠️ User {actor.user_id} attempted a patient-only action")
        raise HTTPException(status_code=403, detail="Only patients can perform this action")
    return actor
