import random

WHITE = 'white'
BLACK = 'black'
SIDES = (WHITE, BLACK)

START_FEN = 'start'
DEFAULT_CLOCK_SECONDS = 600.0


def opposite(side):
    return BLACK if side == WHITE else WHITE


class Participant:
    def __init__(self, id, name, shine_color=None):
        self.id = id
        self.name = name
        self.shine_color = shine_color

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'shineColor': self.shine_color,
        }


class SlotHolder:
    """Copy of a participant taken when it was placed in a slot.

    Later edits to the participant record are not reflected here.
    """

    __slots__ = ('id', 'name')

    def __init__(self, id, name):
        self.id = id
        self.name = name

    @classmethod
    def from_participant(cls, participant):
        return cls(participant.id, participant.name)

    def __eq__(self, other):
        return isinstance(other, SlotHolder) and (self.id, self.name) == (other.id, other.name)

    def __repr__(self):
        return f"SlotHolder(id={self.id!r}, name={self.name!r})"

    def to_dict(self):
        return {'id': self.id, 'name': self.name}


def generate_room_code(taken=()):
    """Generate a 6 digit numeric room code not present in `taken`."""
    while True:
        code = str(random.randint(100000, 999999))
        if code not in taken:
            return code


class Room:
    def __init__(self, code, admin, clock_seconds=DEFAULT_CLOCK_SECONDS):
        self.code = code
        self.admin = admin
        self.participants = []
        self.slots = {WHITE: None, BLACK: None}
        self.started = False
        self.fen = START_FEN
        self.turn = WHITE
        self.white_time = float(clock_seconds)
        self.black_time = float(clock_seconds)
        self.last_event_time = 0
        self.draw_offer_side = None
        self.last_result = None

    @property
    def status(self):
        if self.started:
            return 'active'
        if self.last_result is not None:
            return 'ended'
        return 'lobby'

    def time_for(self, side):
        return self.white_time if side == WHITE else self.black_time

    def set_time(self, side, value):
        if side == WHITE:
            self.white_time = value
        else:
            self.black_time = value

    def slot_id(self, side):
        holder = self.slots.get(side)
        return holder.id if holder else None

    def to_dict(self):
        return {
            'code': self.code,
            'admin': self.admin,
            'players': [p.to_dict() for p in self.participants],
            'slots': {side: (h.to_dict() if h else None) for side, h in self.slots.items()},
            'gameStarted': self.started,
            'status': self.status,
            'fen': self.fen,
            # chess.js style side-to-move marker used by clients
            'turn': self.turn[0],
            'whiteTime': self.white_time,
            'blackTime': self.black_time,
            'lastMoveTime': self.last_event_time,
            'lastResult': self.last_result,
        }
