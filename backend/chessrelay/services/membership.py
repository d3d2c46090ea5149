from typing import Optional

from chessrelay.models import SIDES, Participant, Room, SlotHolder


def find_participant(room: Room, identity) -> Optional[Participant]:
    for participant in room.participants:
        if participant.id == identity:
            return participant
    return None


def is_admin(room: Room, identity) -> bool:
    return room.admin == identity


def slot_of(room: Room, identity) -> Optional[str]:
    """Return the side whose slot holds `identity`, if any."""
    for side in SIDES:
        holder = room.slots[side]
        if holder is not None and holder.id == identity:
            return side
    return None


def vacate(room: Room, identity) -> Optional[str]:
    """Clear `identity` from whichever slot holds it; returns that side."""
    side = slot_of(room, identity)
    if side is not None:
        room.slots[side] = None
    return side


def join(room: Room, identity, name) -> bool:
    """Add a participant once; returns whether the joiner is the admin."""
    if find_participant(room, identity) is None:
        room.participants.append(Participant(identity, name))
    return is_admin(room, identity)


def remove_participant(room: Room, identity) -> bool:
    participant = find_participant(room, identity)
    if participant is None:
        return False
    vacate(room, identity)
    room.participants.remove(participant)
    return True


def assign_slot(room: Room, acting, target, slot) -> bool:
    if not is_admin(room, acting) or slot not in SIDES:
        return False
    vacate(room, target)
    participant = find_participant(room, target)
    if participant is None:
        return False
    room.slots[slot] = SlotHolder.from_participant(participant)
    return True


def unassign_slot(room: Room, acting, slot) -> bool:
    if not is_admin(room, acting) or room.slots.get(slot) is None:
        return False
    room.slots[slot] = None
    return True


def set_shine(room: Room, acting, target, color) -> bool:
    if not is_admin(room, acting):
        return False
    participant = find_participant(room, target)
    if participant is None:
        return False
    participant.shine_color = color or None
    return True


def kick(room: Room, acting, target) -> bool:
    # The admin leaving is handled as a room close, never as a kick
    if not is_admin(room, acting) or target == room.admin:
        return False
    return remove_participant(room, target)
