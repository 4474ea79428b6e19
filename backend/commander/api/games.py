from flask import Blueprint, current_app, jsonify, request

from commander.services.games.errors import GameError, GameValidationError
from commander.services.games.registry import get_registry

games = Blueprint('games', __name__)

def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise GameValidationError('Request body must be a JSON object')
    return data

@games.errorhandler(GameError)
def handle_game_error(exc):
    return jsonify({'error': exc.message}), exc.status_code

@games.route('/create', methods=['POST'])
def create_game():
    """
    Opens a new table in the menu and returns its code.
    """
    table = get_registry().create()
    return jsonify({
        'message': 'New game created!',
        'game_code': table.code,
        'state': table.snapshot(),
    }), 201

@games.route('/<string:game_code>/start', methods=['POST'])
def start_game(game_code):
    """
    Starts a session for the named player at the chosen difficulty.
    """
    table = get_registry().require(game_code)
    data = _json_body()
    state = table.start(data.get('name'), data.get('difficulty'))
    current_app.logger.info(
        f"[start] game={table.code} name={state['player_name']} difficulty={state['difficulty']}"
    )
    return jsonify(state)

@games.route('/<string:game_code>/input', methods=['POST'])
def submit_input(game_code):
    """
    Presses one of the four controls. Presses outside the input window are
    ignored and reported with accepted=False.
    """
    table = get_registry().require(game_code)
    data = _json_body()
    accepted = table.submit_input(data.get('color'), data.get('direction'))
    return jsonify({'accepted': accepted, 'state': table.snapshot()})

@games.route('/<string:game_code>/quit', methods=['POST'])
def quit_game(game_code):
    """
    Abandons the running session; nothing is recorded.
    """
    table = get_registry().require(game_code)
    table.quit()
    return jsonify(table.snapshot())

@games.route('/<string:game_code>/menu', methods=['POST'])
def back_to_menu(game_code):
    table = get_registry().require(game_code)
    table.return_to_menu()
    return jsonify(table.snapshot())

@games.route('/<string:game_code>/restart', methods=['POST'])
def restart_game(game_code):
    table = get_registry().require(game_code)
    return jsonify(table.restart())

@games.route('/<string:game_code>/state', methods=['GET'])
def get_game_state(game_code):
    table = get_registry().require(game_code)
    return jsonify(table.snapshot())

@games.route('/<string:game_code>', methods=['DELETE'])
def close_game(game_code):
    registry = get_registry()
    registry.require(game_code)
    registry.drop(game_code)
    return jsonify({'message': f'Game {game_code.upper()} closed'})
