class SocketIOChannel:
    """Outbound side of the Socket.IO server as seen by the session services.

    Socket.IO rooms double as the broadcast channel of a game room (keyed by
    its code) and every connection is also addressable by its own sid.
    """

    def __init__(self, socketio, namespace='/'):
        self.socketio = socketio
        self.namespace = namespace

    def emit(self, event, data=None, to=None, skip_sid=None):
        self.socketio.emit(event, data, to=to, skip_sid=skip_sid, namespace=self.namespace)

    def enter(self, sid, room):
        self.socketio.server.enter_room(sid, room, namespace=self.namespace)

    def leave(self, sid, room):
        self.socketio.server.leave_room(sid, room, namespace=self.namespace)

    def close(self, room):
        self.socketio.close_room(room, namespace=self.namespace)
