from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


def _coordinator():
    return current_app.extensions['gridduel']


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the gridduel game server!'})


@main.route('/lobby')
def lobby():
    return jsonify({'users': _coordinator().lobby()})


@main.route('/games/<string:game_id>')
def game_state(game_id):
    """
    Returns a snapshot of a live game session.
    """
    session = _coordinator().get_game(game_id)
    if session is None:
        return jsonify({'error': 'Game not found'}), 404
    return jsonify(session.to_dict()), 200
