"""
LaserZone Hub - Model Tests
"""
from datetime import datetime

from laserzone_hub.models.db_models import (
    DBUser, DBCustomer, DBReservation, DBChecklistTemplate, DBChecklistItem, DBOnboardingProgress,
    DBOnboardingQuizQuestion, DBSocialPost, DBHashtagSet, DBWarning, UserRole, PostStatus,
    WarningStatus, OnboardingStep
)


class TestUserModel:
    """Test DBUser"""

    def test_email_is_lowercased(self):
        user = DBUser('Manager@LaserZone.ro', 'Alexandru', 'secret1', role=UserRole.MANAGER)
        assert user.email == 'manager@laserzone.ro'

    def test_password_verification(self):
        user = DBUser('a@laserzone.ro', 'Ana', 'secret1')

        assert user.verify_password('secret1') is True
        assert user.verify_password('wrong') is False

    def test_set_password_changes_salt(self):
        user = DBUser('a@laserzone.ro', 'Ana', 'secret1')
        old_salt = user.password_salt

        user.set_password('secret2')

        assert user.password_salt != old_salt
        assert user.verify_password('secret2')
        assert not user.verify_password('secret1')

    def test_is_manager(self):
        assert DBUser('m@x.ro', 'M', 'p', role=UserRole.MANAGER).is_manager
        assert not DBUser('e@x.ro', 'E', 'p').is_manager

    def test_to_dict_hides_password(self):
        data = DBUser('a@laserzone.ro', 'Ana', 'secret1', is_new=True).to_dict()

        assert data['email'] == 'a@laserzone.ro'
        assert data['role'] == UserRole.EMPLOYEE
        assert data['isNew'] is True
        assert 'passwordHash' not in data
        assert 'password_hash' not in data


class TestCalendarModels:
    """Test customers and reservations"""

    def test_reservation_defaults(self):
        reservation = DBReservation('cust-1', '2026-03-14', '14:00', '15:00', 8)

        assert reservation.id.startswith('res')
        assert reservation.status == 'confirmed'
        assert reservation.occasion == 'regular'
        assert reservation.has_conflict is False

    def test_reservation_to_dict_keys(self):
        data = DBReservation('cust-1', '2026-03-14', '14:00', '15:00', 8, is_walkup=True).to_dict()

        assert data['customerId'] == 'cust-1'
        assert data['startTime'] == '14:00'
        assert data['partySize'] == 8
        assert data['isWalkup'] is True

    def test_customer_without_tags(self):
        customer = DBCustomer('Ionescu Alexandru', '0722123456')
        data = customer.to_dict()

        assert data['tags'] == []
        assert 'reservations' not in data


class TestChecklistModels:
    """Test checklist templates"""

    def test_assigned_to_plain_values(self):
        assert DBChecklistTemplate('Deschidere', 'deschidere').get_assigned_to() == 'all'
        assert DBChecklistTemplate('Deschidere', 'deschidere', assigned_to='shift').get_assigned_to() == 'shift'

    def test_assigned_to_json(self):
        template = DBChecklistTemplate('Deschidere', 'deschidere', assigned_to='{"userIds": ["u1"]}')
        assert template.get_assigned_to() == {'userIds': ['u1']}

    def test_item_required_by_default(self):
        item = DBChecklistItem('Porneste sistemele audio', 2)

        assert item.is_required is True
        assert item.order == 2


class TestOnboardingModels:
    """Test onboarding progress and quiz questions"""

    def test_new_progress_starts_at_nda(self):
        progress = DBOnboardingProgress('user-1', 'Ion Vasile')

        assert progress.current_step == OnboardingStep.NDA
        assert progress.get_documents() == []
        assert progress.get_quiz_attempts() == []
        assert progress.get_audit_log() == []

    def test_reset_keeps_audit_log(self):
        progress = DBOnboardingProgress('user-1', 'Ion Vasile')
        progress.set_audit_log([{'action': 'NDA semnat'}])
        progress.nda_signed = True
        progress.quiz_passed = True

        progress.reset()

        assert progress.nda_signed is False
        assert progress.quiz_passed is False
        assert progress.get_audit_log() == [{'action': 'NDA semnat'}]

    def test_question_hides_answer(self):
        question = DBOnboardingQuizQuestion('multi_select', 'Ce verifici?', correct_answer=['a', 'b'])

        assert question.get_correct_answer() == ['a', 'b']
        assert 'correctAnswer' not in question.to_dict(include_answer=False)

    def test_question_without_answer(self):
        question = DBOnboardingQuizQuestion('open_text', 'Descrie procedura')
        assert question.get_correct_answer() is None


class TestSocialModels:
    """Test social posts"""

    def test_status_follows_schedule(self):
        assert DBSocialPost('Salut', ['facebook']).status == PostStatus.DRAFT
        scheduled = DBSocialPost('Salut', ['facebook'], scheduled_at=datetime(2026, 3, 14, 10, 0))
        assert scheduled.status == PostStatus.SCHEDULED

    def test_mark_published_sets_platform_statuses(self):
        post = DBSocialPost('Salut', ['facebook', 'instagram'])
        when = datetime(2026, 3, 14, 10, 0)

        post.mark_published(when)

        assert post.status == PostStatus.PUBLISHED
        assert post.published_at == when
        statuses = post.get_platform_statuses()
        assert set(statuses) == {'facebook', 'instagram'}
        assert statuses['facebook']['status'] == PostStatus.PUBLISHED

    def test_hashtag_set_round_trip(self):
        hashtag_set = DBHashtagSet('Weekend', ['#laserzone', '#weekend'])
        assert hashtag_set.to_dict()['hashtags'] == ['#laserzone', '#weekend']


class TestWarningModel:
    """Test DBWarning"""

    def test_new_warning_is_pending(self):
        warning = DBWarning(
            'user-3', 'Ion Vasile', 'user-1', 'Alexandru Popescu', 'verbal', 'tardiness',
            'Intarziere', datetime(2026, 3, 10), manager_signature={'dataUrl': 'data:x'}
        )

        assert warning.is_pending
        assert warning.status == WarningStatus.PENDING
        assert warning.get_manager_signature() == {'dataUrl': 'data:x'}
        assert warning.get_employee_signature() is None
        assert warning.to_dict()['isCleared'] is False
