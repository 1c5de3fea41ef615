from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field
from src.shared.models.user_dto import UserBriefDTO


class MessageDTO(BaseModel):
    id: UUID
    ride_id: UUID
    sender_id: UUID
    message: str
    created_at: datetime

    sender: Optional[UserBriefDTO] = None

    class Config:
        from_attributes = True


class SendMessageRequest(BaseModel):
    ride_id: UUID
    message: str = Field(min_length=1, max_length=2000)
