"""
LaserZone Hub - Social Media Service
Post scheduling, caption templates, hashtag sets and the media library
"""
import re
import json
import logging
from datetime import datetime
from typing import Optional, List, Dict

from laserzone_hub.database import db
from laserzone_hub.models.db_models import (
    DBSocialPost, DBSocialTemplate, DBHashtagSet, DBContentLibraryItem, DBUser, PostStatus
)
from laserzone_hub.services.errors import ServiceError, NotFoundError
from laserzone_hub.utils import parse_datetime

logger = logging.getLogger(__name__)

PLATFORMS = ['facebook', 'instagram', 'tiktok']

# caption characters / recommended hashtag count per platform
PLATFORM_LIMITS = {
    'facebook': {'captionLimit': 63206, 'hashtagLimit': 3},
    'instagram': {'captionLimit': 2200, 'hashtagLimit': 15},
    'tiktok': {'captionLimit': 4000, 'hashtagLimit': 5},
}

TEMPLATE_CATEGORIES = ['promotie', 'eveniment', 'petrecere', 'corporate', 'general']
LIBRARY_TYPES = ['image', 'video']

MAX_CAPTION_LENGTH = 4000
MAX_MEDIA = 10
MAX_TEMPLATE_NAME = 50
MAX_HASHTAG_SET_NAME = 30

HASHTAG_PATTERN = re.compile(r'#\w+', re.UNICODE)


def _commit():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def count_hashtags(caption: str, hashtags: List[str]) -> int:
    """Distinct hashtags across the caption body and the attached list"""
    found = {tag.lower() for tag in HASHTAG_PATTERN.findall(caption or '')}
    for tag in hashtags or []:
        found.add(('#' + tag.lstrip('#')).lower())
    return len(found)


def platform_warnings(caption: str, hashtags: List[str], platforms: List[str]) -> List[Dict]:
    """Soft limits that do not block saving but are shown to the author"""
    warnings = []
    tag_count = count_hashtags(caption, hashtags)
    for platform in platforms:
        limits = PLATFORM_LIMITS.get(platform)
        if not limits:
            continue
        if len(caption) > limits['captionLimit']:
            warnings.append({
                'platform': platform,
                'message': f"Caption-ul depaseste limita de {limits['captionLimit']} caractere pentru {platform}"
            })
        if tag_count > limits['hashtagLimit']:
            warnings.append({
                'platform': platform,
                'message': f"Recomandat maxim {limits['hashtagLimit']} hashtag-uri pentru {platform} ({tag_count} folosite)"
            })
    return warnings


class SocialService:
    """Posts and their supporting content"""

    # ============================================
    # Posts
    # ============================================

    def serialize_post(self, post: DBSocialPost) -> Dict:
        data = post.to_dict()
        author = db.session.get(DBUser, post.created_by_id) if post.created_by_id else None
        data['createdBy'] = {
            'id': author.id, 'name': author.name, 'email': author.email, 'avatar': author.avatar
        } if author else None
        return data

    def _validate_post_fields(self, data: dict, partial: bool = False):
        caption = data.get('caption')
        platforms = data.get('platforms')

        if not partial or 'caption' in data:
            if not caption:
                raise ServiceError('Caption-ul este obligatoriu')
            if len(caption) > MAX_CAPTION_LENGTH:
                raise ServiceError(f'Maxim {MAX_CAPTION_LENGTH} caractere')
        if not partial or 'platforms' in data:
            if not isinstance(platforms, list) or not platforms:
                raise ServiceError('Selecteaza cel putin o platforma')
            if any(p not in PLATFORMS for p in platforms):
                raise ServiceError(f"Platforma invalida. Valori valide: {', '.join(PLATFORMS)}")
        if 'mediaIds' in data and data['mediaIds'] is not None:
            if not isinstance(data['mediaIds'], list) or len(data['mediaIds']) > MAX_MEDIA:
                raise ServiceError(f'Maxim {MAX_MEDIA} fisiere media')
        if 'hashtags' in data and data['hashtags'] is not None and not isinstance(data['hashtags'], list):
            raise ServiceError('hashtags trebuie sa fie o lista')

    def list_posts(self, status: str = None, date_from: str = None, date_to: str = None) -> List[DBSocialPost]:
        query = DBSocialPost.query
        if status:
            query = query.filter(DBSocialPost.status == status)
        start = parse_datetime(date_from) if date_from else None
        end = parse_datetime(date_to) if date_to else None
        if start:
            query = query.filter(DBSocialPost.scheduled_at >= start)
        if end:
            query = query.filter(DBSocialPost.scheduled_at <= end)
        return query.order_by(DBSocialPost.created_at.desc()).all()

    def get_post(self, post_id: str) -> DBSocialPost:
        post = db.session.get(DBSocialPost, post_id)
        if not post:
            raise NotFoundError('Postare negasita')
        return post

    def create_post(self, data: dict, user: DBUser) -> Dict:
        """
        Create a draft, or a scheduled post when scheduledAt is given

        Returns:
            {'post': DBSocialPost, 'warnings': [...]}
        """
        self._validate_post_fields(data)

        scheduled_at = None
        if data.get('scheduledAt'):
            scheduled_at = parse_datetime(data['scheduledAt'])
            if scheduled_at is None:
                raise ServiceError('scheduledAt invalid')

        post = DBSocialPost(
            caption=data['caption'],
            platforms=data['platforms'],
            media_ids=data.get('mediaIds') or [],
            hashtags=data.get('hashtags') or [],
            scheduled_at=scheduled_at,
            created_by_id=user.id
        )
        db.session.add(post)
        _commit()

        logger.info(f"Social post {post.id} created ({post.status}) by {user.id}")
        return {
            'post': post,
            'warnings': platform_warnings(post.caption, post.get_hashtags(), post.get_platforms())
        }

    def update_post(self, post: DBSocialPost, data: dict) -> DBSocialPost:
        if post.status not in (PostStatus.DRAFT, PostStatus.SCHEDULED):
            raise ServiceError('Doar postarile draft sau programate pot fi actualizate')
        self._validate_post_fields(data, partial=True)

        if 'caption' in data:
            post.caption = data['caption']
        if 'platforms' in data:
            post.platforms = json.dumps(data['platforms'])
        if 'mediaIds' in data:
            post.media_ids = json.dumps(data['mediaIds'] or [])
        if 'hashtags' in data:
            post.hashtags = json.dumps(data['hashtags'] or [])
        post.updated_at = datetime.utcnow()
        _commit()
        return post

    def delete_post(self, post: DBSocialPost):
        if post.status != PostStatus.DRAFT:
            raise ServiceError('Doar postarile draft pot fi sterse')
        db.session.delete(post)
        _commit()

    def publish_post(self, post: DBSocialPost) -> DBSocialPost:
        if post.status == PostStatus.PUBLISHED:
            raise ServiceError('Postarea este deja publicata')
        post.mark_published()
        post.metrics = json.dumps({'likes': 0, 'comments': 0, 'shares': 0, 'views': 0})
        _commit()
        logger.info(f"Social post {post.id} published")
        return post

    def schedule_post(self, post: DBSocialPost, scheduled_at_value) -> DBSocialPost:
        if not scheduled_at_value:
            raise ServiceError('scheduledAt este obligatoriu')
        if post.status == PostStatus.PUBLISHED:
            raise ServiceError('Postarea este deja publicata')
        scheduled_at = parse_datetime(scheduled_at_value)
        if scheduled_at is None:
            raise ServiceError('scheduledAt invalid')

        post.scheduled_at = scheduled_at
        post.status = PostStatus.SCHEDULED
        post.updated_at = datetime.utcnow()
        _commit()
        return post

    def publish_due_posts(self, now: Optional[datetime] = None) -> int:
        """
        Publish every scheduled post whose time has come

        Called from the background scheduler. Returns the number of posts published.
        """
        now = now or datetime.utcnow()
        due = DBSocialPost.query.filter(
            DBSocialPost.status == PostStatus.SCHEDULED,
            DBSocialPost.scheduled_at.isnot(None),
            DBSocialPost.scheduled_at <= now
        ).all()

        for post in due:
            post.mark_published(now)
        if due:
            _commit()
            logger.info(f"Published {len(due)} scheduled social post(s)")
        return len(due)

    # ============================================
    # Caption templates
    # ============================================

    def _validate_template(self, data: dict, partial: bool = False):
        if not partial or 'name' in data:
            if not data.get('name'):
                raise ServiceError('Numele este obligatoriu')
            if len(data['name']) > MAX_TEMPLATE_NAME:
                raise ServiceError(f'Maxim {MAX_TEMPLATE_NAME} caractere')
        if not partial or 'content' in data:
            if not data.get('content'):
                raise ServiceError('Continutul este obligatoriu')
        if not partial or 'category' in data:
            if data.get('category') not in TEMPLATE_CATEGORIES:
                raise ServiceError(f"Categorie invalida. Valori valide: {', '.join(TEMPLATE_CATEGORIES)}")

    def list_templates(self, category: str = None) -> List[DBSocialTemplate]:
        query = DBSocialTemplate.query
        if category:
            query = query.filter(DBSocialTemplate.category == category)
        return query.order_by(DBSocialTemplate.created_at.desc()).all()

    def get_template(self, template_id: str) -> DBSocialTemplate:
        template = db.session.get(DBSocialTemplate, template_id)
        if not template:
            raise NotFoundError('Template negasit')
        return template

    def create_template(self, data: dict) -> DBSocialTemplate:
        self._validate_template(data)
        template = DBSocialTemplate(name=data['name'], content=data['content'], category=data['category'])
        db.session.add(template)
        _commit()
        return template

    def update_template(self, template: DBSocialTemplate, data: dict) -> DBSocialTemplate:
        self._validate_template(data, partial=True)
        for field in ('name', 'content', 'category'):
            if field in data:
                setattr(template, field, data[field])
        _commit()
        return template

    def delete_template(self, template: DBSocialTemplate):
        db.session.delete(template)
        _commit()

    # ============================================
    # Hashtag sets
    # ============================================

    def _validate_hashtag_set(self, data: dict, partial: bool = False):
        if not partial or 'name' in data:
            if not data.get('name'):
                raise ServiceError('Numele este obligatoriu')
            if len(data['name']) > MAX_HASHTAG_SET_NAME:
                raise ServiceError(f'Maxim {MAX_HASHTAG_SET_NAME} caractere')
        if not partial or 'hashtags' in data:
            if not isinstance(data.get('hashtags'), list) or not data['hashtags']:
                raise ServiceError('Adauga cel putin un hashtag')

    def list_hashtag_sets(self) -> List[DBHashtagSet]:
        return DBHashtagSet.query.order_by(DBHashtagSet.created_at.desc()).all()

    def get_hashtag_set(self, set_id: str) -> DBHashtagSet:
        hashtag_set = db.session.get(DBHashtagSet, set_id)
        if not hashtag_set:
            raise NotFoundError('Set de hashtag-uri negasit')
        return hashtag_set

    def create_hashtag_set(self, data: dict) -> DBHashtagSet:
        self._validate_hashtag_set(data)
        hashtag_set = DBHashtagSet(name=data['name'], hashtags=data['hashtags'])
        db.session.add(hashtag_set)
        _commit()
        return hashtag_set

    def update_hashtag_set(self, hashtag_set: DBHashtagSet, data: dict) -> DBHashtagSet:
        self._validate_hashtag_set(data, partial=True)
        if 'name' in data:
            hashtag_set.name = data['name']
        if 'hashtags' in data:
            hashtag_set.set_hashtags(data['hashtags'])
        _commit()
        return hashtag_set

    def delete_hashtag_set(self, hashtag_set: DBHashtagSet):
        db.session.delete(hashtag_set)
        _commit()

    # ============================================
    # Content library
    # ============================================

    def list_library(self, item_type: str = None, tag: str = None) -> List[DBContentLibraryItem]:
        query = DBContentLibraryItem.query
        if item_type:
            query = query.filter(DBContentLibraryItem.type == item_type)
        items = query.order_by(DBContentLibraryItem.created_at.desc()).all()
        if tag:
            items = [item for item in items if tag in item.get_tags()]
        return items

    def add_library_item(self, data: dict) -> DBContentLibraryItem:
        required = ('name', 'type', 'url', 'thumbnailUrl', 'mimeType')
        if any(not data.get(field) for field in required) or data.get('size') is None:
            raise ServiceError('name, type, url, thumbnailUrl, mimeType si size sunt obligatorii')
        if data['type'] not in LIBRARY_TYPES:
            raise ServiceError('Tip invalid. Valori valide: image, video')

        item = DBContentLibraryItem(
            name=data['name'],
            type=data['type'],
            url=data['url'],
            thumbnail_url=data['thumbnailUrl'],
            mime_type=data['mimeType'],
            size=data['size'],
            width=data.get('width') or None,
            height=data.get('height') or None,
            duration=data.get('duration') or None,
            tags=data.get('tags') or []
        )
        db.session.add(item)
        _commit()
        return item


social_service = SocialService()
