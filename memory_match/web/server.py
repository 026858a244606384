"""
Web server for Memory Match.

Provides a Flask + Socket.IO server: browsers send game actions and receive
session snapshots in real time. A small JSON API mirrors the same actions.
"""

from flask import Flask, jsonify, request
from flask_socketio import SocketIO
import logging
from typing import Any

from ..input_manager import ACTIONS

logger = logging.getLogger(__name__)

# Actions a client may trigger (the timer is driven server-side)
CLIENT_ACTIONS = tuple(action for action in ACTIONS if action != 'tick')

# Global references
app = Flask(__name__)
app.config['SECRET_KEY'] = 'memory-match-secret'
socketio = SocketIO(app, cors_allowed_origins="*")

_web_frontend = None


def set_web_frontend(frontend) -> None:
    """
    Set reference to WebFrontEnd instance.

    Args:
        frontend: WebFrontEnd instance, or None to detach
    """
    global _web_frontend
    _web_frontend = frontend
    logger.info("WebFrontEnd reference set in server")


def _forward(action: str, value: Any = None) -> bool:
    """Hand a client action to the attached front end."""
    if _web_frontend is None:
        logger.warning(f"[INCOMING] '{action}' received but no WebFrontEnd set")
        return False
    return _web_frontend._on_client_event(action, value)


@app.route('/')
def index():
    """List the available API endpoints."""
    return jsonify({
        'name': 'Memory Match',
        'endpoints': ['/api/health', '/api/state', '/api/best-scores', '/api/events/<action>'],
        'actions': list(CLIENT_ACTIONS),
    })


@app.route('/api/health')
def health():
    """Liveness probe."""
    return jsonify({'status': 'ok', 'frontend': _web_frontend is not None})


@app.route('/api/state')
def get_state():
    """Latest session snapshot."""
    state = _web_frontend.last_state if _web_frontend else None
    if state is None:
        return jsonify({'error': 'Game not running'}), 503
    return jsonify(state)


@app.route('/api/best-scores')
def get_best_scores():
    """Best score records for all difficulties."""
    state = _web_frontend.last_state if _web_frontend else None
    if state is None:
        return jsonify({'error': 'Game not running'}), 503
    return jsonify(state['best_scores'])


@app.route('/api/events/<action>', methods=['POST'])
def post_event(action: str):
    """Queue a game action. Optional JSON body: {"value": ...}."""
    if action not in CLIENT_ACTIONS:
        return jsonify({'error': f'Unknown action: {action}'}), 404

    if _web_frontend is None:
        return jsonify({'error': 'Game not running'}), 503

    data = request.get_json(silent=True) or {}
    value = data.get('value') if isinstance(data, dict) else None

    if not _forward(action, value):
        return jsonify({'error': 'Event rejected'}), 503

    return jsonify({'queued': action}), 202


@socketio.on('connect')
def handle_connect(auth=None):
    """Handle client connection."""
    logger.info("[INCOMING] Client connected")
    if _web_frontend:
        _web_frontend.on_client_connected()
    else:
        logger.warning("[INCOMING] Client connected but no WebFrontEnd set")


@socketio.on('disconnect')
def handle_disconnect(*args):
    """Handle client disconnection."""
    logger.info("[INCOMING] Client disconnected")


@socketio.on('click_card')
def handle_click_card(data):
    """Handle a card click from a client."""
    logger.debug(f"[INCOMING] click_card: {data}")

    index = data.get('index') if isinstance(data, dict) else None
    if index is None:
        logger.warning(f"Invalid click_card data: {data}")
        return

    _forward('click_card', index)


@socketio.on('select_difficulty')
def handle_select_difficulty(data):
    """Handle a difficulty change from a client."""
    logger.debug(f"[INCOMING] select_difficulty: {data}")

    difficulty = data.get('difficulty') if isinstance(data, dict) else None
    if difficulty is None:
        logger.warning(f"Invalid select_difficulty data: {data}")
        return

    _forward('select_difficulty', difficulty)


@socketio.on('start_game')
def handle_start_game(data=None):
    _forward('start_game')


@socketio.on('play_again')
def handle_play_again(data=None):
    _forward('play_again')


@socketio.on('reset_game')
def handle_reset_game(data=None):
    _forward('reset_game')


@socketio.on('return_to_menu')
def handle_return_to_menu(data=None):
    _forward('return_to_menu')


def emit_state_update(snapshot: dict) -> None:
    """
    Emit session snapshot to all connected clients.

    Args:
        snapshot: Dictionary from GameSession.snapshot()
    """
    logger.debug(f"[OUTGOING] state_update: state={snapshot.get('state')}, moves={snapshot.get('moves')}")
    socketio.emit('state_update', snapshot)


def run_server(host: str = '0.0.0.0', port: int = 5000) -> None:
    """
    Run the web server (blocking).

    Args:
        host: Host address to bind
        port: Port to listen on
    """
    logger.info(f"Starting web server on {host}:{port}")
    socketio.run(app, host=host, port=port, debug=False, allow_unsafe_werkzeug=True)
