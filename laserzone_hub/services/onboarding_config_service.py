"""
LaserZone Hub - Onboarding Config Service
NDA text, reading documents, quiz bank, training video chapters and the
chunked training-video upload.
"""
import os
import re
import shutil
import logging
import time
import uuid
from datetime import datetime
from typing import Optional, List

from flask import current_app

from laserzone_hub.database import db
from laserzone_hub.models.db_models import (
    DBOnboardingConfig, DBOnboardingDocument, DBOnboardingVideoChapter, DBOnboardingQuizQuestion,
    DBUser, QuestionType
)
from laserzone_hub.services.errors import ServiceError, NotFoundError
from laserzone_hub.utils import safe_int, is_number

logger = logging.getLogger(__name__)

VIDEO_URL_PREFIX = '/uploads/onboarding/'
UPLOAD_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]{1,64}$')

VIDEO_MIME_TYPES = {
    'mp4': 'video/mp4',
    'webm': 'video/webm',
    'ogg': 'video/ogg',
    'mov': 'video/quicktime',
    'avi': 'video/x-msvideo',
}


def _commit():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


class OnboardingConfigService:
    """CRUD over the singleton onboarding config and its child collections"""

    def get_config(self) -> DBOnboardingConfig:
        """Load the config row, creating it with defaults on first use"""
        config = db.session.get(DBOnboardingConfig, DBOnboardingConfig.DEFAULT_ID)
        if config is None:
            config = DBOnboardingConfig()
            db.session.add(config)
            _commit()
            logger.info("Created default onboarding config")
        return config

    def update_config(self, data: dict, user: DBUser) -> DBOnboardingConfig:
        config = self.get_config()

        if 'quizPassThreshold' in data:
            threshold = data['quizPassThreshold']
            if not is_number(threshold) or threshold < 0 or threshold > 100:
                raise ServiceError('Pragul de promovare trebuie sa fie intre 0 si 100')
            config.quiz_pass_threshold = int(threshold)
        if 'quizMaxAttempts' in data:
            attempts = data['quizMaxAttempts']
            if not is_number(attempts) or attempts < 1:
                raise ServiceError('Numarul de incercari trebuie sa fie cel putin 1')
            config.quiz_max_attempts = int(attempts)
        if 'ndaContent' in data:
            config.nda_content = data['ndaContent'] or ''
        if 'videoDescription' in data:
            config.video_description = data['videoDescription']

        config.updated_by = user.id
        config.updated_at = datetime.utcnow()
        _commit()
        return config

    # ============================================
    # Documents
    # ============================================

    def add_document(self, data: dict) -> DBOnboardingDocument:
        if not data.get('title') or not data.get('content'):
            raise ServiceError('Titlu si continut sunt obligatorii')

        config = self.get_config()
        last = config.documents[-1].sort_order if config.documents else 0
        document = DBOnboardingDocument(
            title=data['title'],
            content=data['content'],
            min_reading_seconds=safe_int(data.get('minReadingSeconds'), 30, min_val=0),
            sort_order=last + 1
        )
        config.documents.append(document)
        _commit()
        return document

    def get_document(self, document_id: str) -> DBOnboardingDocument:
        document = db.session.get(DBOnboardingDocument, document_id)
        if not document:
            raise NotFoundError('Document negasit')
        return document

    def update_document(self, document_id: str, data: dict) -> DBOnboardingDocument:
        document = self.get_document(document_id)
        if 'title' in data:
            document.title = data['title']
        if 'content' in data:
            document.content = data['content']
        if 'minReadingSeconds' in data:
            document.min_reading_seconds = safe_int(data['minReadingSeconds'], document.min_reading_seconds, min_val=0)
        _commit()
        return document

    def delete_document(self, document_id: str):
        db.session.delete(self.get_document(document_id))
        _commit()

    # ============================================
    # Quiz questions
    # ============================================

    def _validate_question(self, question_type: str, options, correct_answer):
        if question_type not in QuestionType.ALL:
            raise ServiceError('Tip intrebare invalid')
        if options is not None and not isinstance(options, list):
            raise ServiceError('Optiunile trebuie sa fie o lista')
        if correct_answer is not None and not isinstance(correct_answer, (str, list)):
            raise ServiceError('Raspunsul corect trebuie sa fie text sau lista')

    def add_question(self, data: dict) -> DBOnboardingQuizQuestion:
        if not data.get('type') or not data.get('text'):
            raise ServiceError('Tip si text sunt obligatorii')
        self._validate_question(data['type'], data.get('options'), data.get('correctAnswer'))

        config = self.get_config()
        last = config.questions[-1].sort_order if config.questions else 0
        question = DBOnboardingQuizQuestion(
            type=data['type'],
            text=data['text'],
            options=data.get('options') or [],
            correct_answer=data.get('correctAnswer'),
            sort_order=last + 1
        )
        config.questions.append(question)
        _commit()
        return question

    def get_question(self, question_id: str) -> DBOnboardingQuizQuestion:
        question = db.session.get(DBOnboardingQuizQuestion, question_id)
        if not question:
            raise NotFoundError('Intrebare negasita')
        return question

    def update_question(self, question_id: str, data: dict) -> DBOnboardingQuizQuestion:
        question = self.get_question(question_id)
        self._validate_question(data.get('type', question.type), data.get('options'), data.get('correctAnswer'))
        if 'type' in data:
            question.type = data['type']
        if 'text' in data:
            question.text = data['text']
        if 'options' in data:
            question.set_options(data['options'])
        if 'correctAnswer' in data:
            question.set_correct_answer(data['correctAnswer'])
        _commit()
        return question

    def delete_question(self, question_id: str):
        db.session.delete(self.get_question(question_id))
        _commit()

    # ============================================
    # Reordering
    # ============================================

    def reorder(self, model, ordered_ids) -> List:
        """Assign sort_order 1..n following ordered_ids"""
        if not isinstance(ordered_ids, list) or not ordered_ids:
            raise ServiceError('orderedIds este obligatoriu')
        rows = {row.id: row for row in model.query.filter(model.id.in_(ordered_ids)).all()}
        for index, row_id in enumerate(ordered_ids, start=1):
            if row_id in rows:
                rows[row_id].sort_order = index
        _commit()
        return model.query.order_by(model.sort_order.asc()).all()

    # ============================================
    # Video chapters
    # ============================================

    def add_chapter(self, data: dict) -> DBOnboardingVideoChapter:
        timestamp = data.get('timestamp')
        if not data.get('title') or timestamp is None:
            raise ServiceError('Titlu si timestamp sunt obligatorii')

        config = self.get_config()
        last = config.chapters[-1].sort_order if config.chapters else 0
        chapter = DBOnboardingVideoChapter(
            title=data['title'],
            timestamp=safe_int(timestamp, 0, min_val=0),
            sort_order=safe_int(data.get('sortOrder'), last + 1)
        )
        config.chapters.append(chapter)
        _commit()
        return chapter

    def get_chapter(self, chapter_id: str) -> DBOnboardingVideoChapter:
        chapter = db.session.get(DBOnboardingVideoChapter, chapter_id)
        if not chapter:
            raise NotFoundError('Capitol negasit')
        return chapter

    def update_chapter(self, chapter_id: str, data: dict) -> DBOnboardingVideoChapter:
        chapter = self.get_chapter(chapter_id)
        if 'title' in data:
            chapter.title = data['title']
        if 'timestamp' in data:
            chapter.timestamp = safe_int(data['timestamp'], chapter.timestamp, min_val=0)
        if 'sortOrder' in data:
            chapter.sort_order = safe_int(data['sortOrder'], chapter.sort_order)
        _commit()
        return chapter

    def delete_chapter(self, chapter_id: str):
        db.session.delete(self.get_chapter(chapter_id))
        _commit()

    # ============================================
    # Training video files
    # ============================================

    @staticmethod
    def _video_dir() -> str:
        return os.path.join(current_app.config['UPLOAD_FOLDER'], 'onboarding')

    @staticmethod
    def _chunk_dir(upload_id: str) -> str:
        if not upload_id or not UPLOAD_ID_PATTERN.match(upload_id):
            raise ServiceError('Date lipsa')
        return os.path.join(current_app.config['VIDEO_CHUNK_FOLDER'], upload_id)

    def video_path(self, config: DBOnboardingConfig) -> Optional[str]:
        if not config.video_url or not config.video_url.startswith(VIDEO_URL_PREFIX):
            return None
        return os.path.join(self._video_dir(), os.path.basename(config.video_url))

    def _remove_video_file(self, config: DBOnboardingConfig):
        path = self.video_path(config)
        if path and os.path.exists(path):
            try:
                os.remove(path)
            except OSError as e:
                logger.warning(f"Could not delete old training video {path}: {e}")

    def save_chunk(self, upload_id: str, chunk_index: int, total_chunks: int, total_size: int, stream) -> dict:
        if total_size > current_app.config['MAX_VIDEO_SIZE']:
            raise ServiceError('Fisierul depaseste limita de 1GB')

        chunk_dir = self._chunk_dir(upload_id)
        os.makedirs(chunk_dir, exist_ok=True)
        with open(os.path.join(chunk_dir, f"chunk-{chunk_index:05d}"), 'wb') as fh:
            shutil.copyfileobj(stream, fh)

        return {'chunkIndex': chunk_index, 'totalChunks': total_chunks, 'received': True}

    def finalize_upload(self, upload_id: str, file_name: str, total_size: int, user: DBUser) -> dict:
        """Concatenate the chunks into the final video file and point the config at it"""
        if not file_name:
            raise ServiceError('Date lipsa')
        chunk_dir = self._chunk_dir(upload_id)
        if not os.path.isdir(chunk_dir):
            raise NotFoundError('Upload negasit')

        video_dir = self._video_dir()
        os.makedirs(video_dir, exist_ok=True)

        ext = file_name.rsplit('.', 1)[-1].lower() if '.' in file_name else 'mp4'
        if ext not in VIDEO_MIME_TYPES:
            ext = 'mp4'
        output_name = f"training-video-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}.{ext}"
        output_path = os.path.join(video_dir, output_name)

        # Chunk names are zero-padded so lexical order is upload order
        with open(output_path, 'wb') as out:
            for chunk_name in sorted(os.listdir(chunk_dir)):
                with open(os.path.join(chunk_dir, chunk_name), 'rb') as chunk:
                    shutil.copyfileobj(chunk, out)
        shutil.rmtree(chunk_dir, ignore_errors=True)

        config = self.get_config()
        self._remove_video_file(config)

        config.video_url = f"{VIDEO_URL_PREFIX}{output_name}"
        config.video_file_name = file_name
        config.video_file_size = total_size or os.path.getsize(output_path)
        config.updated_by = user.id
        _commit()

        logger.info(f"Training video uploaded: {output_name} ({config.video_file_size} bytes)")
        return {'videoUrl': config.video_url, 'fileName': file_name, 'fileSize': config.video_file_size}

    def delete_video(self, user: DBUser) -> DBOnboardingConfig:
        config = self.get_config()
        self._remove_video_file(config)
        config.video_url = None
        config.video_file_name = None
        config.video_file_size = None
        config.updated_by = user.id
        _commit()
        return config

    @staticmethod
    def mime_type(path: str) -> str:
        ext = path.rsplit('.', 1)[-1].lower()
        return VIDEO_MIME_TYPES.get(ext, 'video/mp4')


onboarding_config_service = OnboardingConfigService()
