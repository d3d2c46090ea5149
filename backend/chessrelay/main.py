from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the chess relay server!'})

@main.route('/health')
def health():
    controller = current_app.extensions['game_sessions']
    return jsonify({'status': 'ok', 'rooms': len(controller.store)})
