"""
LaserZone Hub - Onboarding Service
Wizard steps for new employees: NDA, documents, video, quiz, equipment handoff.
Every step change appends an entry to the progress audit log (JSON array).
"""
import logging
import math
import uuid
from datetime import datetime
from typing import Optional, List, Dict, Any

from laserzone_hub.database import db
from laserzone_hub.models.db_models import (
    DBOnboardingProgress, DBOnboardingConfig, DBOnboardingQuizQuestion, DBUser,
    OnboardingStep, QuestionType, UserRole
)
from laserzone_hub.services.audit_service import audit_service
from laserzone_hub.services.errors import ServiceError, NotFoundError, ForbiddenError

logger = logging.getLogger(__name__)


def _commit():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def _now_iso() -> str:
    return datetime.utcnow().isoformat()


# ============================================
# Quiz scoring
# ============================================

def _normalize_text(value) -> str:
    return ' '.join(str(value).split()).lower()


def is_answer_correct(question: DBOnboardingQuizQuestion, answer) -> bool:
    """
    Compare one submitted answer with the stored correct answer.

    multiple_choice / true_false: the selected option id must match.
    multi_select: the selected set must equal the correct set (order ignored).
    open_text: case-insensitive match when a correct answer is stored,
    otherwise any non-empty answer counts.
    """
    correct = question.get_correct_answer()

    if question.type == QuestionType.MULTI_SELECT:
        if not isinstance(answer, list):
            return False
        expected = correct if isinstance(correct, list) else [correct]
        return set(map(str, answer)) == set(map(str, expected))

    if question.type == QuestionType.OPEN_TEXT:
        if not isinstance(answer, str) or not answer.strip():
            return False
        if not correct:
            return True
        accepted = correct if isinstance(correct, list) else [correct]
        return _normalize_text(answer) in {_normalize_text(a) for a in accepted}

    if isinstance(answer, list):
        answer = answer[0] if len(answer) == 1 else None
    if answer is None:
        return False
    if isinstance(correct, list):
        return str(answer) in map(str, correct)
    return str(answer) == str(correct)


def score_quiz(questions: List[DBOnboardingQuizQuestion], answers: Dict[str, Any],
               pass_threshold: int) -> Dict:
    """
    Score a submitted quiz.

    Returns:
        {score (0-100), passed, correctCount, totalQuestions, results: {questionId: bool}}
    """
    results = {q.id: is_answer_correct(q, answers.get(q.id)) for q in questions}
    total = len(questions)
    correct_count = sum(1 for ok in results.values() if ok)
    # An empty question bank cannot be failed
    score = math.floor(100 * correct_count / total + 0.5) if total else 100
    return {
        'score': score,
        'passed': score >= pass_threshold,
        'correctCount': correct_count,
        'totalQuestions': total,
        'results': results
    }


class OnboardingService:
    """Progress lookups and step transitions"""

    # ============================================
    # Access
    # ============================================

    @staticmethod
    def ensure_access(user: DBUser, employee_id: str):
        """Employees may only touch their own record; managers may touch any"""
        if user.id != employee_id and user.role != UserRole.MANAGER:
            raise ForbiddenError('Acces interzis')

    def get_progress(self, employee_id: str) -> Optional[DBOnboardingProgress]:
        return DBOnboardingProgress.query.filter_by(employee_id=employee_id).first()

    def require_progress(self, employee_id: str) -> DBOnboardingProgress:
        progress = self.get_progress(employee_id)
        if not progress:
            raise NotFoundError('Progres onboarding negasit')
        return progress

    def list_progress(self, incomplete_only: bool = False) -> List[DBOnboardingProgress]:
        query = DBOnboardingProgress.query
        if incomplete_only:
            query = query.filter(DBOnboardingProgress.is_complete.is_(False))
        return query.order_by(DBOnboardingProgress.created_at.desc()).all()

    # ============================================
    # Audit log
    # ============================================

    @staticmethod
    def append_audit(progress: DBOnboardingProgress, step: str, action: str,
                     performed_by: str, details: Optional[dict] = None) -> dict:
        entry = {
            'id': str(uuid.uuid4()),
            'timestamp': _now_iso(),
            'step': step,
            'action': action,
            'performedBy': performed_by,
        }
        if details is not None:
            entry['details'] = details
        entries = progress.get_audit_log()
        entries.append(entry)
        progress.set_audit_log(entries)
        return entry

    # ============================================
    # Lifecycle
    # ============================================

    def initialize(self, employee_id: str, employee_name: str, manager: DBUser) -> DBOnboardingProgress:
        if not employee_name:
            raise ServiceError('employeeName este obligatoriu')
        if self.get_progress(employee_id):
            raise ServiceError('Onboarding deja initializat pentru acest angajat')
        if not db.session.get(DBUser, employee_id):
            raise NotFoundError('Angajat negasit')

        progress = DBOnboardingProgress(employee_id=employee_id, employee_name=employee_name)
        self.append_audit(progress, OnboardingStep.NDA, 'Onboarding initializat', manager.id)
        db.session.add(progress)
        _commit()

        logger.info(f"Onboarding initialized for {employee_id} by {manager.id}")
        return progress

    def update(self, progress: DBOnboardingProgress, data: dict) -> DBOnboardingProgress:
        step = data.get('currentStep')
        if step is not None:
            if step not in OnboardingStep.ORDER:
                raise ServiceError('Pas onboarding invalid')
            progress.current_step = step
        if 'managerId' in data:
            progress.manager_id = data['managerId']
        _commit()
        return progress

    def sign_nda(self, progress: DBOnboardingProgress, data: dict, user: DBUser) -> DBOnboardingProgress:
        signature_url = data.get('signatureDataUrl')
        signed_by_name = data.get('signedByName')
        if not signature_url or not signed_by_name:
            raise ServiceError('signatureDataUrl si signedByName sunt obligatorii')
        if progress.nda_signed:
            raise ServiceError('NDA deja semnat')

        progress.nda_signed = True
        progress.set_nda_signature({
            'signatureDataUrl': signature_url,
            'signedAt': _now_iso(),
            'signedBy': user.id,
            'signedByName': signed_by_name,
        })
        self.append_audit(progress, OnboardingStep.NDA, 'NDA semnat', user.id)
        _commit()
        return progress

    def update_document(self, progress: DBOnboardingProgress, data: dict, user: DBUser) -> DBOnboardingProgress:
        document_id = data.get('documentId')
        if not document_id:
            raise ServiceError('documentId este obligatoriu')

        time_spent = data.get('timeSpentSeconds')
        confirmed = data.get('confirmed')
        now = _now_iso()

        documents = progress.get_documents()
        entry = next((d for d in documents if d.get('documentId') == document_id), None)
        if entry is not None:
            if time_spent is not None:
                entry['timeSpentSeconds'] = time_spent
            if confirmed is not None:
                entry['confirmed'] = bool(confirmed)
                if confirmed:
                    entry['completedAt'] = now
        else:
            entry = {
                'documentId': document_id,
                'startedAt': now,
                'timeSpentSeconds': time_spent or 0,
                'confirmed': bool(confirmed),
            }
            if confirmed:
                entry['completedAt'] = now
            documents.append(entry)
        progress.set_documents(documents)

        if confirmed:
            self.append_audit(progress, OnboardingStep.DOCUMENTS, f"Document confirmat: {document_id}",
                              user.id, details={'documentId': document_id})
        _commit()
        return progress

    def update_video(self, progress: DBOnboardingProgress, data: dict, user: DBUser) -> DBOnboardingProgress:
        last_position = data.get('lastPosition')
        furthest = data.get('furthestReached')
        if last_position is None or furthest is None:
            raise ServiceError('lastPosition si furthestReached sunt obligatorii')

        completed = bool(data.get('completed'))
        existing = progress.get_video_progress() or {}
        video = {
            'startedAt': existing.get('startedAt') or _now_iso(),
            'lastPosition': last_position,
            'totalDuration': data.get('totalDuration') or existing.get('totalDuration') or 0,
            'furthestReached': max(furthest, existing.get('furthestReached') or 0),
            'completed': completed or bool(existing.get('completed')),
        }
        if existing.get('completedAt'):
            video['completedAt'] = existing['completedAt']
        if completed and not existing.get('completedAt'):
            video['completedAt'] = _now_iso()
        progress.set_video_progress(video)

        if completed and not progress.video_completed:
            progress.video_completed = True
            progress.current_step = OnboardingStep.QUIZ
            self.append_audit(progress, OnboardingStep.VIDEO, 'Video de training completat', user.id)
        _commit()
        return progress

    def submit_quiz(self, progress: DBOnboardingProgress, answers, user: DBUser,
                    config: DBOnboardingConfig) -> Dict:
        """
        Score answers against the stored questions and record the attempt

        Returns:
            {'progress': DBOnboardingProgress, 'result': {score, passed, ...}}
        """
        if not isinstance(answers, dict):
            raise ServiceError('answers este obligatoriu')

        attempts = progress.get_quiz_attempts()
        if len(attempts) >= config.quiz_max_attempts:
            raise ServiceError('Numarul maxim de incercari a fost atins')
        if progress.quiz_passed:
            raise ServiceError('Quiz-ul a fost deja trecut')

        result = score_quiz(config.questions, answers, config.quiz_pass_threshold)
        score, passed = result['score'], result['passed']
        attempt_number = len(attempts) + 1
        now = _now_iso()

        attempts.append({
            'attemptNumber': attempt_number,
            'startedAt': now,
            'completedAt': now,
            'answers': answers,
            'score': score,
            'passed': passed,
        })
        progress.set_quiz_attempts(attempts)

        label = 'Quiz trecut' if passed else 'Quiz nereusit'
        self.append_audit(
            progress, OnboardingStep.QUIZ, f"{label} ({score}% - incercarea {attempt_number})", user.id,
            details={'score': score, 'passed': passed, 'attemptNumber': attempt_number}
        )

        if passed:
            progress.quiz_passed = True
            progress.quiz_best_score = score
            progress.current_step = OnboardingStep.NOTIFICATION
        elif score > (progress.quiz_best_score or 0):
            progress.quiz_best_score = score
        _commit()

        logger.info(f"Quiz attempt {attempt_number} for {progress.employee_id}: {score}% passed={passed}")
        return {'progress': progress, 'result': result}

    def record_handoff(self, progress: DBOnboardingProgress, data: dict, user: DBUser) -> DBOnboardingProgress:
        handoff_type = data.get('type')
        if handoff_type not in ('manager', 'employee'):
            raise ServiceError('type trebuie sa fie "manager" sau "employee"')

        handoff = progress.get_physical_handoff()
        if handoff_type == 'manager':
            if user.role != UserRole.MANAGER:
                raise ForbiddenError('Acces interzis')
            signature = data.get('signature')
            if not signature:
                raise ServiceError('Semnatura managerului este obligatorie')
            if isinstance(signature, str):
                signature = {'dataUrl': signature}
            handoff['markedByManager'] = True
            handoff['managerSignature'] = {
                'dataUrl': signature.get('dataUrl'),
                'signedAt': _now_iso(),
                'signedBy': user.id,
                'signerName': signature.get('signerName') or user.name,
            }
            progress.manager_id = user.id
            action = 'Predare echipamente marcata de manager'
        else:
            self.ensure_access(user, progress.employee_id)
            if not handoff.get('markedByManager'):
                raise ServiceError('Managerul trebuie sa marcheze predarea mai intai')
            handoff['confirmedByEmployee'] = True
            handoff['employeeConfirmedAt'] = _now_iso()
            action = 'Primire echipamente confirmata de angajat'

        progress.set_physical_handoff(handoff)
        self.append_audit(progress, OnboardingStep.HANDOFF, action, user.id)

        if handoff.get('markedByManager') and handoff.get('confirmedByEmployee'):
            progress.handoff_completed = True
            progress.current_step = OnboardingStep.CONFIRMATION
        _commit()
        return progress

    def complete(self, progress: DBOnboardingProgress, user: DBUser) -> DBOnboardingProgress:
        """Finish onboarding and clear the user's isNew flag in the same transaction"""
        if progress.is_complete:
            raise ServiceError('Onboarding deja finalizat')

        progress.is_complete = True
        progress.completed_at = datetime.utcnow()
        progress.current_step = OnboardingStep.COMPLETE
        self.append_audit(progress, OnboardingStep.COMPLETE, 'Onboarding finalizat cu succes', user.id)

        employee = db.session.get(DBUser, progress.employee_id)
        if employee:
            employee.is_new = False

        audit_service.log(
            action=audit_service.ACTION_ONBOARDING_COMPLETED,
            entity_type=audit_service.ENTITY_ONBOARDING,
            entity_id=progress.id,
            user=user,
            details={'employeeId': progress.employee_id, 'employeeName': progress.employee_name},
            commit=False
        )
        _commit()

        logger.info(f"Onboarding completed for {progress.employee_id}")
        return progress

    def reset(self, progress: DBOnboardingProgress, manager: DBUser) -> DBOnboardingProgress:
        """Restart the wizard; the audit log survives and the user is flagged new again"""
        previous_step = progress.current_step
        was_complete = progress.is_complete

        progress.reset()
        self.append_audit(
            progress, OnboardingStep.NDA, 'Onboarding resetat de manager', manager.id,
            details={'managerName': manager.name, 'previousStep': previous_step, 'wasComplete': was_complete}
        )

        employee = db.session.get(DBUser, progress.employee_id)
        if employee:
            employee.is_new = True

        audit_service.log(
            action=audit_service.ACTION_ONBOARDING_RESET,
            entity_type=audit_service.ENTITY_ONBOARDING,
            entity_id=progress.id,
            user=manager,
            details={'employeeId': progress.employee_id, 'previousStep': previous_step},
            commit=False
        )
        _commit()

        logger.info(f"Onboarding reset for {progress.employee_id} by {manager.id}")
        return progress


onboarding_service = OnboardingService()
