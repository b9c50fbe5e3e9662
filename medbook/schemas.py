from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class MessageResponse(BaseModel):
    message: str


class UserResponse(BaseModel):
    id: int
    email: str
    firstName: str
    lastName: str
    phone: Optional[str] = None
    userType: str
    photoUrl: Optional[str] = None
    createdAt: Optional[datetime] = None
