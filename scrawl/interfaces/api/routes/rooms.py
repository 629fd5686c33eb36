"""Rooms 路由

定义房间相关的 API 端点：
- POST /api/rooms - 创建房间（创建者自动成为成员）
- GET /api/rooms - 列出当前身份所属的房间
- POST /api/rooms/join - 通过邀请码加入房间
- GET /api/rooms/{room_id} - 获取房间详情（仅成员）

异常映射：
- 400: 业务规则违反
- 404: 房间不存在
- 409: 房间已满 / 已是成员
- 503: 存储暂时不可用
"""

from fastapi import APIRouter, Depends, HTTPException, status

from scrawl.application.use_cases import (
    CreateRoomInput,
    CreateRoomUseCase,
    JoinRoomByCodeInput,
    JoinRoomByCodeUseCase,
    ListMyRoomsUseCase,
)
from scrawl.domain.exceptions import (
    AlreadyMemberError,
    DomainError,
    NotFoundError,
    RoomFullError,
    RoomNotFoundError,
    StoreUnavailableError,
)
from scrawl.domain.value_objects.identity import Identity
from scrawl.interfaces.api.container import ApiContainer
from scrawl.interfaces.api.dependencies import get_container, get_current_identity
from scrawl.interfaces.api.dto import JoinRoomRequest, RoomListResponse, RoomResponse

router = APIRouter(prefix="/rooms", tags=["rooms"])


def _store_unavailable(exc: StoreUnavailableError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(
    identity: Identity = Depends(get_current_identity),
    container: ApiContainer = Depends(get_container),
) -> RoomResponse:
    """创建房间

    业务流程：
    1. 生成唯一邀请码
    2. 写入房间与创建者的成员记录
    3. 返回房间信息
    """
    try:
        room = CreateRoomUseCase(container.store).execute(
            CreateRoomInput(owner_id=identity.user_id)
        )
    except StoreUnavailableError as e:
        raise _store_unavailable(e) from e
    except DomainError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return RoomResponse.from_entity(room)


@router.get("", response_model=RoomListResponse)
def list_my_rooms(
    identity: Identity = Depends(get_current_identity),
    container: ApiContainer = Depends(get_container),
) -> RoomListResponse:
    try:
        rooms = ListMyRoomsUseCase(container.store).execute(identity.user_id)
    except StoreUnavailableError as e:
        raise _store_unavailable(e) from e

    return RoomListResponse(rooms=[RoomResponse.from_entity(r) for r in rooms], total=len(rooms))


@router.post("/join", response_model=RoomResponse)
def join_room(
    request: JoinRoomRequest,
    identity: Identity = Depends(get_current_identity),
    container: ApiContainer = Depends(get_container),
) -> RoomResponse:
    """通过邀请码加入房间"""
    use_case = JoinRoomByCodeUseCase(container.store, capacity=container.room_capacity)
    try:
        room = use_case.execute(JoinRoomByCodeInput(code=request.code, user_id=identity.user_id))
    except RoomNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except (RoomFullError, AlreadyMemberError) as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail={"code": e.code, "message": str(e)}
        ) from e
    except StoreUnavailableError as e:
        raise _store_unavailable(e) from e

    return RoomResponse.from_entity(room)


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(
    room_id: str,
    identity: Identity = Depends(get_current_identity),
    container: ApiContainer = Depends(get_container),
) -> RoomResponse:
    """获取房间详情；非成员与不存在的房间同样返回 404"""
    try:
        if not container.store.is_member(room_id, identity.user_id):
            raise NotFoundError("Room", room_id)
        room = container.store.find_room_by_id(room_id)
        if room is None:
            raise NotFoundError("Room", room_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except StoreUnavailableError as e:
        raise _store_unavailable(e) from e

    return RoomResponse.from_entity(room)
