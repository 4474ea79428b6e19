from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from typing import Dict, Any

from commander import socketio
from commander.services.announcer import room_for
from commander.services.games.errors import GameError
from commander.services.games.registry import get_registry


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*args):
    # If the player's own socket drops, abandon the session (no score
    # recorded) and close the table; nobody is left to play at it
    ctx = _sid_to_ctx.pop(_get_sid(), None)
    if not ctx or not ctx.get('is_player'):
        return
    registry = get_registry()
    table = registry.get(ctx.get('game_code'))
    if table is None:
        return
    if table.quit():
        current_app.logger.info(f"[disconnect] game={table.code} player left mid-round, session abandoned")
    registry.drop(table.code)


def handle_join_session(data):
    game_code = (data or {}).get('game_code')
    is_player = bool((data or {}).get('is_player'))
    if not game_code:
        emit('error', {'message': 'game_code is required'})
        return
    table = get_registry().get(game_code)
    if table is None:
        emit('error', {'message': 'Session not found'})
        return
    room = room_for(table.code)
    join_room(room)
    _sid_to_ctx[_get_sid()] = {'game_code': table.code, 'is_player': is_player}
    emit('joined', {'room': room, 'state': table.snapshot()})


def handle_leave_session(data):
    game_code = (data or {}).get('game_code')
    if not game_code:
        emit('error', {'message': 'game_code is required'})
        return
    room = room_for(game_code)
    leave_room(room)
    _sid_to_ctx.pop(_get_sid(), None)
    emit('left', {'room': room})


def handle_player_input(data):
    data = data or {}
    try:
        table = get_registry().require(data.get('game_code'))
        accepted = table.submit_input(data.get('color'), data.get('direction'))
    except GameError as exc:
        emit('error', {'message': exc.message})
        return
    emit('input_result', {'accepted': accepted, 'state': table.snapshot()})


def handle_quit_session(data):
    try:
        table = get_registry().require((data or {}).get('game_code'))
    except GameError as exc:
        emit('error', {'message': exc.message})
        return
    table.quit()
    emit('quit', {'state': table.snapshot()})


def handle_ping(data):
    emit('pong', data or {})

# ---- Socket context ----

_sid_to_ctx: Dict[str, Dict[str, Any]] = {}

def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
        socketio.on_event('join_session', handle_join_session, namespace=namespace)
        socketio.on_event('leave_session', handle_leave_session, namespace=namespace)
        socketio.on_event('player_input', handle_player_input, namespace=namespace)
        socketio.on_event('quit_session', handle_quit_session, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
