import logging


logger = logging.getLogger(__name__)

NAMESPACE = '/ws'


def room_for(game_code: str) -> str:
    return f"session:{game_code.upper()}"


class SocketIOAnnouncer:
    """Pushes narration and state for one table to its Socket.IO room.

    ``interrupt`` tells clients to cut off whatever they are still saying so
    speech never lags behind the round clock.
    """

    def __init__(self, socketio, game_code: str, namespace: str = NAMESPACE):
        self.socketio = socketio
        self.game_code = game_code.upper()
        self.namespace = namespace

    def announce(self, text: str) -> None:
        logger.debug(f"[announce] table={self.game_code} text={text!r}")
        self.socketio.emit(
            'announce',
            {'game_code': self.game_code, 'text': text, 'interrupt': True},
            to=room_for(self.game_code),
            namespace=self.namespace,
        )

    def publish_state(self, snapshot: dict) -> None:
        self.socketio.emit('state_update', snapshot, to=room_for(self.game_code), namespace=self.namespace)
