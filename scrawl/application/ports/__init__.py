"""应用层 Ports"""

from scrawl.application.ports.room_broadcaster import RoomBroadcaster

__all__ = ["RoomBroadcaster"]
