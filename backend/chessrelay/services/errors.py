class SessionError(Exception):
    """A request was rejected and the sender should be told why."""

    def __init__(self, message):
        self.message = message
        super().__init__(message)


class RoomNotFound(SessionError):
    def __init__(self, message='Invalid Room Code'):
        super().__init__(message)


class StartRejected(SessionError):
    def __init__(self, message='Both slots must be filled to start.'):
        super().__init__(message)
