from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.services.accounts.dependencies import get_current_user
from src.services.messages.dependencies import get_message_service
from src.services.messages.service import MessageService
from src.shared.models.common import ApiResponse
from src.shared.models.message_dto import MessageDTO, SendMessageRequest
from src.shared.models.user_dto import UserDTO

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.post("/", response_model=ApiResponse[MessageDTO], status_code=status.HTTP_201_CREATED)
async def send_message(
    request: SendMessageRequest,
    current_user: UserDTO = Depends(get_current_user),
    service: MessageService = Depends(get_message_service)
):
    message = await service.send(request.ride_id, current_user.id, request.message)
    return ApiResponse(message="Message sent", data=message)


@router.get("/ride/{ride_id}", response_model=ApiResponse[List[MessageDTO]])
async def get_ride_messages(
    ride_id: UUID,
    _: UserDTO = Depends(get_current_user),
    service: MessageService = Depends(get_message_service)
):
    messages = await service.list(ride_id)
    return ApiResponse(message="Messages fetched successfully", data=messages)
