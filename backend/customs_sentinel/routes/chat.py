"""
Sentinel Assistant Chat Routes
"""
import logging
from flask import Blueprint, current_app, request, jsonify

from customs_sentinel.errors import EmptyInputError
from customs_sentinel.orchestrator import run_async
from customs_sentinel.serializers import chat_to_dict

logger = logging.getLogger('customs_sentinel.routes.chat')

bp = Blueprint('chat', __name__, url_prefix='/api/chat')


@bp.route('', methods=['GET'])
def get_transcript():
    sentinel = current_app.extensions['sentinel']
    return jsonify(chat_to_dict(sentinel.store.state.chat)), 200


@bp.route('', methods=['POST'])
def send_message():
    """
    Send one operator message to the assistant

    Expects JSON body:
    {
        "message": "Which declarations need a physical inspection?"
    }

    Returns:
        The updated transcript. If the assistant is unreachable the reply
        is the fixed connection-error message.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Expected a JSON object'}), 400
    message = data.get('message') or ''
    if not isinstance(message, str):
        return jsonify({'error': 'message must be a string'}), 400

    sentinel = current_app.extensions['sentinel']
    try:
        chat = run_async(sentinel.send_chat_message(message))
    except EmptyInputError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify(chat_to_dict(chat)), 200
