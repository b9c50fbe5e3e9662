"""Auth service - account creation and credential checks"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import DoctorProfile, User, UserRole
from ...security_utils import create_access_token, hash_password_bcrypt, verify_password_bcrypt
from .schemas import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

EMAIL_TAKEN_MESSAGE = "User already exists"
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def _issue_token(self, user: User) -> dict:
        return {
            "token": create_access_token(user.id, user.role),
            "userType": user.role,
        }

    def register(self, data: RegisterRequest) -> dict:
        """Create a user (and its doctor profile) in a single transaction"""
        if self.db.query(User.id).filter(User.email == data.email).first():
            logger.warning(f"⚠️ Registration attempt with existing email: {data.email}")
            raise HTTPException(status_code=409, detail=EMAIL_TAKEN_MESSAGE)

        user = User(
            email=data.email,
            hashed_password=hash_password_bcrypt(data.password),
            first_name=data.firstName,
            last_name=data.lastName,
            phone=data.phone,
            role=data.userType.value,
        )
        self.db.add(user)

        try:
            self.db.flush()
            if data.userType == UserRole.DOCTOR:
                self.db.add(
                    DoctorProfile(
                        user_id=user.id,
                        specialty=data.specialty.strip(),
                        license=data.license.strip(),
                        address=data.address,
                        city=data.city,
                    )
                )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"⚠️ Concurrent registration for email: {data.email}")
            raise HTTPException(status_code=409, detail=EMAIL_TAKEN_MESSAGE) from None

        self.db.refresh(user)
        logger.info(f"✅ Registered {user.role} user {user.id}")
        return self._issue_token(user)

    def login(self, data: LoginRequest) -> dict:
        user = self.db.query(User).filter(User.email == data.email).first()
        if not user or not verify_password_bcrypt(data.password, user.hashed_password):
            logger.warning(f"🚫 Failed login for email: {data.email}")
            raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS_MESSAGE)

        logger.info(f"🔑 User {user.id} logged in")
        return self._issue_token(user)
