"""
LaserZone Hub - Onboarding Config Routes
Manager-edited onboarding content and the training video upload/stream
"""
import os
import logging

from flask import Blueprint, request, jsonify, send_file

from laserzone_hub.models.db_models import DBOnboardingDocument, DBOnboardingQuizQuestion
from laserzone_hub.routes.auth import token_required, manager_required
from laserzone_hub.services.onboarding_config_service import onboarding_config_service
from laserzone_hub.utils import safe_int

logger = logging.getLogger(__name__)

onboarding_config_bp = Blueprint('onboarding_config', __name__)


@onboarding_config_bp.route('', methods=['GET'])
@manager_required
def get_config(current_user):
    """Full config including correct quiz answers"""
    return jsonify(onboarding_config_service.get_config().to_dict())


@onboarding_config_bp.route('', methods=['PUT'])
@manager_required
def update_config(current_user):
    """
    Update config settings

    PUT /api/onboarding/config
    {
        "ndaContent": "<p>...</p>",
        "quizPassThreshold": 80,
        "quizMaxAttempts": 3,
        "videoDescription": "Reguli de siguranta in arena"
    }
    """
    data = request.get_json(silent=True) or {}
    config = onboarding_config_service.update_config(data, current_user)
    return jsonify(config.to_dict())


@onboarding_config_bp.route('/public', methods=['GET'])
@token_required
def get_public_config(current_user):
    """Config for the employee wizard, without correct answers"""
    return jsonify(onboarding_config_service.get_config().to_dict(include_answers=False))


# ==========================================
# DOCUMENTS
# ==========================================

@onboarding_config_bp.route('/documents', methods=['POST'])
@manager_required
def add_document(current_user):
    """
    POST /api/onboarding/config/documents
    {"title": "Regulament intern", "content": "<p>...</p>", "minReadingSeconds": 60}
    """
    data = request.get_json(silent=True) or {}
    document = onboarding_config_service.add_document(data)
    return jsonify(document.to_dict()), 201


@onboarding_config_bp.route('/documents/reorder', methods=['PUT'])
@manager_required
def reorder_documents(current_user):
    """PUT /api/onboarding/config/documents/reorder {"orderedIds": [...]}"""
    data = request.get_json(silent=True) or {}
    documents = onboarding_config_service.reorder(DBOnboardingDocument, data.get('orderedIds'))
    return jsonify([d.to_dict() for d in documents])


@onboarding_config_bp.route('/documents/<document_id>', methods=['PUT'])
@manager_required
def update_document(current_user, document_id):
    data = request.get_json(silent=True) or {}
    document = onboarding_config_service.update_document(document_id, data)
    return jsonify(document.to_dict())


@onboarding_config_bp.route('/documents/<document_id>', methods=['DELETE'])
@manager_required
def delete_document(current_user, document_id):
    onboarding_config_service.delete_document(document_id)
    return jsonify({'success': True})


# ==========================================
# QUIZ QUESTIONS
# ==========================================

@onboarding_config_bp.route('/quiz', methods=['POST'])
@manager_required
def add_question(current_user):
    """
    POST /api/onboarding/config/quiz
    {
        "type": "multiple_choice",
        "text": "Care este distanta minima de tragere?",
        "options": [{"id": "a", "text": "1 metru"}, {"id": "b", "text": "3 metri"}],
        "correctAnswer": "b"
    }
    """
    data = request.get_json(silent=True) or {}
    question = onboarding_config_service.add_question(data)
    return jsonify(question.to_dict()), 201


@onboarding_config_bp.route('/quiz/reorder', methods=['PUT'])
@manager_required
def reorder_questions(current_user):
    data = request.get_json(silent=True) or {}
    questions = onboarding_config_service.reorder(DBOnboardingQuizQuestion, data.get('orderedIds'))
    return jsonify([q.to_dict() for q in questions])


@onboarding_config_bp.route('/quiz/<question_id>', methods=['PUT'])
@manager_required
def update_question(current_user, question_id):
    data = request.get_json(silent=True) or {}
    question = onboarding_config_service.update_question(question_id, data)
    return jsonify(question.to_dict())


@onboarding_config_bp.route('/quiz/<question_id>', methods=['DELETE'])
@manager_required
def delete_question(current_user, question_id):
    onboarding_config_service.delete_question(question_id)
    return jsonify({'success': True})


# ==========================================
# VIDEO CHAPTERS
# ==========================================

@onboarding_config_bp.route('/video/chapters', methods=['POST'])
@manager_required
def add_chapter(current_user):
    """POST /api/onboarding/config/video/chapters {"title": "Echipament", "timestamp": 95}"""
    data = request.get_json(silent=True) or {}
    chapter = onboarding_config_service.add_chapter(data)
    return jsonify(chapter.to_dict()), 201


@onboarding_config_bp.route('/video/chapters/<chapter_id>', methods=['PUT'])
@manager_required
def update_chapter(current_user, chapter_id):
    data = request.get_json(silent=True) or {}
    chapter = onboarding_config_service.update_chapter(chapter_id, data)
    return jsonify(chapter.to_dict())


@onboarding_config_bp.route('/video/chapters/<chapter_id>', methods=['DELETE'])
@manager_required
def delete_chapter(current_user, chapter_id):
    onboarding_config_service.delete_chapter(chapter_id)
    return jsonify({'success': True})


# ==========================================
# TRAINING VIDEO
# ==========================================

@onboarding_config_bp.route('/video', methods=['DELETE'])
@manager_required
def delete_video(current_user):
    config = onboarding_config_service.delete_video(current_user)
    return jsonify(config.to_dict())


@onboarding_config_bp.route('/video/upload', methods=['POST'])
@manager_required
def upload_video(current_user):
    """
    Chunked upload

    POST /api/onboarding/config/video/upload?action=chunk
        multipart: uploadId, chunkIndex, totalChunks, totalSize, chunk=<file>
    POST /api/onboarding/config/video/upload?action=finalize
        {"uploadId": "up_123", "fileName": "training.mp4", "totalSize": 52428800}
    """
    action = request.args.get('action') or request.form.get('action')

    if action == 'chunk':
        chunk = request.files.get('chunk')
        upload_id = request.form.get('uploadId')
        if chunk is None or not upload_id or request.form.get('chunkIndex') is None:
            return jsonify({'error': 'Date lipsa'}), 400

        result = onboarding_config_service.save_chunk(
            upload_id,
            safe_int(request.form.get('chunkIndex'), 0, min_val=0),
            safe_int(request.form.get('totalChunks'), 1, min_val=1),
            safe_int(request.form.get('totalSize'), 0, min_val=0),
            chunk.stream
        )
        return jsonify(result)

    if action == 'finalize':
        data = request.get_json(silent=True) or request.form.to_dict()
        if not data.get('uploadId') or not data.get('fileName'):
            return jsonify({'error': 'Date lipsa'}), 400

        result = onboarding_config_service.finalize_upload(
            data['uploadId'],
            data['fileName'],
            safe_int(data.get('totalSize'), 0, min_val=0),
            current_user
        )
        return jsonify(result)

    return jsonify({'error': 'Actiune necunoscuta'}), 400


@onboarding_config_bp.route('/video/stream', methods=['GET'])
@token_required
def stream_video(current_user):
    """Serve the training video; Range requests get 206 so the player can seek"""
    config = onboarding_config_service.get_config()
    path = onboarding_config_service.video_path(config)
    if not path:
        return jsonify({'error': 'Niciun video configurat'}), 404
    if not os.path.exists(path):
        return jsonify({'error': 'Fisierul video nu a fost gasit pe disk'}), 404

    return send_file(
        os.path.abspath(path),
        mimetype=onboarding_config_service.mime_type(path),
        conditional=True,
        max_age=3600
    )
