"""应用层用例"""

from scrawl.application.use_cases.create_room import CreateRoomInput, CreateRoomUseCase
from scrawl.application.use_cases.join_room_by_code import (
    JoinRoomByCodeInput,
    JoinRoomByCodeUseCase,
)
from scrawl.application.use_cases.list_my_rooms import ListMyRoomsUseCase
from scrawl.application.use_cases.upload_image import UploadImageInput, UploadImageUseCase

__all__ = [
    "CreateRoomInput",
    "CreateRoomUseCase",
    "JoinRoomByCodeInput",
    "JoinRoomByCodeUseCase",
    "ListMyRoomsUseCase",
    "UploadImageInput",
    "UploadImageUseCase",
]
