"""In-memory session store; the only owner of Room objects."""

from typing import Dict, List, Optional

from chessrelay.models import DEFAULT_CLOCK_SECONDS, Participant, Room, generate_room_code


class SessionStore:
    def __init__(self, clock_seconds: float = DEFAULT_CLOCK_SECONDS) -> None:
        self._rooms: Dict[str, Room] = {}
        self.clock_seconds = clock_seconds

    def create(self, admin_id: str, admin_name: str) -> Room:
        # Retry until the code is free so an existing room is never overwritten
        code = generate_room_code(self._rooms)
        room = Room(code, admin_id, clock_seconds=self.clock_seconds)
        room.participants.append(Participant(admin_id, admin_name))
        self._rooms[code] = room
        return room

    def get(self, code) -> Optional[Room]:
        if code is None:
            return None
        return self._rooms.get(str(code))

    def delete(self, code) -> bool:
        return self._rooms.pop(str(code), None) is not None

    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, code) -> bool:
        return str(code) in self._rooms
