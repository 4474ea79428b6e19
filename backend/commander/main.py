from flask import Blueprint, jsonify

from commander.services.games.difficulty import catalog
from commander.services.games.registry import get_registry

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Octopus Commander game server!'})

@main.route('/difficulties', methods=['GET'])
def list_difficulties():
    return jsonify(catalog())

@main.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    """
    Returns the top scores, best first.
    """
    return jsonify(get_registry().store.load())
