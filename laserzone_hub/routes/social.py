"""
LaserZone Hub - Social Media Routes
Post planning for Facebook, Instagram and TikTok plus reusable content
"""
from flask import Blueprint, request, jsonify
import logging

from laserzone_hub.models.db_models import PostStatus
from laserzone_hub.routes.auth import token_required
from laserzone_hub.services.social_service import social_service

logger = logging.getLogger(__name__)

social_bp = Blueprint('social', __name__)


# ==========================================
# POSTS
# ==========================================

@social_bp.route('/posts', methods=['GET'])
@token_required
def list_posts(current_user):
    """
    Posts, newest first

    GET /api/social/posts?status=scheduled&from=2026-03-01&to=2026-03-31
    """
    status = request.args.get('status')
    if status and status not in PostStatus.ALL:
        return jsonify({'error': 'Status invalid'}), 400

    posts = social_service.list_posts(
        status=status,
        date_from=request.args.get('from'),
        date_to=request.args.get('to')
    )
    return jsonify([social_service.serialize_post(p) for p in posts])


@social_bp.route('/posts', methods=['POST'])
@token_required
def create_post(current_user):
    """
    Create a post

    POST /api/social/posts
    {
        "caption": "Weekend de laser tag! #laserzone",
        "platforms": ["facebook", "instagram"],
        "hashtags": ["#weekend"],
        "mediaIds": ["lib_abc"],
        "scheduledAt": "2026-03-14T10:00:00Z"
    }
    """
    data = request.get_json(silent=True) or {}
    result = social_service.create_post(data, current_user)

    body = social_service.serialize_post(result['post'])
    body['warnings'] = result['warnings']
    return jsonify(body), 201


@social_bp.route('/posts/<post_id>', methods=['GET'])
@token_required
def get_post(current_user, post_id):
    post = social_service.get_post(post_id)
    return jsonify(social_service.serialize_post(post))


@social_bp.route('/posts/<post_id>', methods=['PUT'])
@token_required
def update_post(current_user, post_id):
    """Edit a draft or scheduled post"""
    post = social_service.get_post(post_id)
    data = request.get_json(silent=True) or {}
    post = social_service.update_post(post, data)
    return jsonify(social_service.serialize_post(post))


@social_bp.route('/posts/<post_id>', methods=['DELETE'])
@token_required
def delete_post(current_user, post_id):
    post = social_service.get_post(post_id)
    social_service.delete_post(post)
    return jsonify({'success': True})


@social_bp.route('/posts/<post_id>/publish', methods=['POST'])
@token_required
def publish_post(current_user, post_id):
    post = social_service.get_post(post_id)
    post = social_service.publish_post(post)
    logger.info(f"Post {post.id} published by {current_user.id}")
    return jsonify(social_service.serialize_post(post))


@social_bp.route('/posts/<post_id>/schedule', methods=['POST'])
@token_required
def schedule_post(current_user, post_id):
    """POST /api/social/posts/<id>/schedule {"scheduledAt": "2026-03-14T10:00:00Z"}"""
    post = social_service.get_post(post_id)
    data = request.get_json(silent=True) or {}
    post = social_service.schedule_post(post, data.get('scheduledAt'))
    return jsonify(social_service.serialize_post(post))


# ==========================================
# TEMPLATES
# ==========================================

@social_bp.route('/templates', methods=['GET'])
@token_required
def list_templates(current_user):
    templates = social_service.list_templates(category=request.args.get('category'))
    return jsonify([t.to_dict() for t in templates])


@social_bp.route('/templates', methods=['POST'])
@token_required
def create_template(current_user):
    """
    POST /api/social/templates
    {"name": "Petrecere copii", "content": "La multi ani, {nume}!", "category": "petrecere"}
    """
    data = request.get_json(silent=True) or {}
    template = social_service.create_template(data)
    return jsonify(template.to_dict()), 201


@social_bp.route('/templates/<template_id>', methods=['GET'])
@token_required
def get_template(current_user, template_id):
    return jsonify(social_service.get_template(template_id).to_dict())


@social_bp.route('/templates/<template_id>', methods=['PUT'])
@token_required
def update_template(current_user, template_id):
    template = social_service.get_template(template_id)
    data = request.get_json(silent=True) or {}
    template = social_service.update_template(template, data)
    return jsonify(template.to_dict())


@social_bp.route('/templates/<template_id>', methods=['DELETE'])
@token_required
def delete_template(current_user, template_id):
    template = social_service.get_template(template_id)
    social_service.delete_template(template)
    return jsonify({'success': True})


# ==========================================
# HASHTAG SETS
# ==========================================

@social_bp.route('/hashtags', methods=['GET'])
@token_required
def list_hashtag_sets(current_user):
    return jsonify([s.to_dict() for s in social_service.list_hashtag_sets()])


@social_bp.route('/hashtags', methods=['POST'])
@token_required
def create_hashtag_set(current_user):
    """POST /api/social/hashtags {"name": "Weekend", "hashtags": ["#laser", "#weekend"]}"""
    data = request.get_json(silent=True) or {}
    hashtag_set = social_service.create_hashtag_set(data)
    return jsonify(hashtag_set.to_dict()), 201


@social_bp.route('/hashtags/<set_id>', methods=['GET'])
@token_required
def get_hashtag_set(current_user, set_id):
    return jsonify(social_service.get_hashtag_set(set_id).to_dict())


@social_bp.route('/hashtags/<set_id>', methods=['PUT'])
@token_required
def update_hashtag_set(current_user, set_id):
    hashtag_set = social_service.get_hashtag_set(set_id)
    data = request.get_json(silent=True) or {}
    hashtag_set = social_service.update_hashtag_set(hashtag_set, data)
    return jsonify(hashtag_set.to_dict())


@social_bp.route('/hashtags/<set_id>', methods=['DELETE'])
@token_required
def delete_hashtag_set(current_user, set_id):
    hashtag_set = social_service.get_hashtag_set(set_id)
    social_service.delete_hashtag_set(hashtag_set)
    return jsonify({'success': True})


# ==========================================
# CONTENT LIBRARY
# ==========================================

@social_bp.route('/library', methods=['GET'])
@token_required
def list_library(current_user):
    """GET /api/social/library?type=image&tag=arena"""
    items = social_service.list_library(item_type=request.args.get('type'), tag=request.args.get('tag'))
    return jsonify([i.to_dict() for i in items])


@social_bp.route('/library', methods=['POST'])
@token_required
def add_library_item(current_user):
    """
    POST /api/social/library
    {
        "name": "Arena",
        "type": "image",
        "url": "https://cdn.example.com/arena.jpg",
        "thumbnailUrl": "https://cdn.example.com/arena-thumb.jpg",
        "mimeType": "image/jpeg",
        "size": 204800,
        "tags": ["arena"]
    }
    """
    data = request.get_json(silent=True) or {}
    item = social_service.add_library_item(data)
    return jsonify(item.to_dict()), 201
