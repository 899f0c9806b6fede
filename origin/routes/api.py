from flask import Blueprint, request, jsonify, current_app
from origin.config import config
from origin.errors import NoMessageProvided, NoTextProvided
from origin.services.ai_service import ai_service
from origin.services.scan_service import scan_service, resolve_user_id
from origin.services.tts_service import tts_service
from origin.services.vocabulary_service import vocabulary_store

api_bp = Blueprint('api', __name__, url_prefix='/api')

def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}

@api_bp.route('/scan', methods=['POST'])
def scan():
    data = _json_body()
    result = scan_service.scan(data.get('image'), data.get('userId'))
    return jsonify(result)

@api_bp.route('/vocabulary/<user_id>')
def vocabulary(user_id):
    words = scan_service.vocabulary(user_id)
    return jsonify([w.to_dict() for w in words])

@api_bp.route('/review/<user_id>')
def review(user_id):
    words = scan_service.due_for_review(user_id)
    return jsonify([w.to_dict() for w in words])

@api_bp.route('/chat', methods=['POST'])
def chat():
    data = _json_body()
    message = str(data.get('message') or '').strip()
    if not message:
        raise NoMessageProvided()
    user_id = resolve_user_id(data.get('userId'))
    history = data.get('conversationHistory') or []
    if not isinstance(history, list):
        history = []

    current_app.logger.info(f'Chat request from user: {user_id}')
    words = vocabulary_store.list_by_user(user_id, limit=config.CHAT_CONTEXT_LIMIT)
    reply = ai_service.chat(message, history=history, words=words)
    return jsonify({"response": reply})

@api_bp.route('/tts', methods=['POST'])
def tts():
    data = _json_body()
    text = str(data.get('text') or '').strip()
    if not text:
        raise NoTextProvided()
    return jsonify({"audio": tts_service.synthesize_b64(text)})
