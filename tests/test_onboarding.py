"""
LaserZone Hub - Onboarding Tests
Wizard steps, server-side quiz scoring, config management and the training video
"""
import io
import os

import pytest

from laserzone_hub.models.db_models import DBAuditLog, DBOnboardingQuizQuestion, OnboardingStep
from laserzone_hub.services.errors import ServiceError
from laserzone_hub.services.onboarding_config_service import onboarding_config_service
from laserzone_hub.services.onboarding_service import onboarding_service, is_answer_correct, score_quiz
from tests.conftest import SIGNATURE


def question(question_type, correct, question_id):
    return DBOnboardingQuizQuestion(question_type, 'Intrebare', correct_answer=correct, id=question_id)


@pytest.fixture
def quiz_bank(app):
    onboarding_config_service.add_question({
        'type': 'multiple_choice',
        'text': 'Care este varsta minima a jucatorilor?',
        'options': [{'id': 'a', 'text': '5 ani'}, {'id': 'b', 'text': '7 ani'}],
        'correctAnswer': 'b'
    })
    onboarding_config_service.add_question({
        'type': 'multi_select',
        'text': 'Ce verifici la deschidere?',
        'options': [{'id': 'a', 'text': 'Iluminatul'}, {'id': 'b', 'text': 'Casa'}, {'id': 'c', 'text': 'Parcarea'}],
        'correctAnswer': ['a', 'b']
    })
    return onboarding_config_service.get_config().questions


@pytest.fixture
def progress(app, manager, employee):
    return onboarding_service.initialize(employee.id, employee.name, manager)


class TestQuizScoring:
    """Answer comparison and score rounding"""

    def test_multiple_choice(self):
        q = question('multiple_choice', 'b', 'q1')

        assert is_answer_correct(q, 'b')
        assert is_answer_correct(q, ['b'])
        assert not is_answer_correct(q, 'a')
        assert not is_answer_correct(q, None)

    def test_true_false(self):
        q = question('true_false', 'true', 'q1')

        assert is_answer_correct(q, 'true')
        assert not is_answer_correct(q, 'false')

    def test_multi_select_ignores_order(self):
        q = question('multi_select', ['a', 'b'], 'q1')

        assert is_answer_correct(q, ['b', 'a'])
        assert not is_answer_correct(q, ['a'])
        assert not is_answer_correct(q, ['a', 'b', 'c'])
        assert not is_answer_correct(q, 'a')

    def test_open_text(self):
        q = question('open_text', 'Vesta si pistolul', 'q1')

        assert is_answer_correct(q, '  vesta si   PISTOLUL ')
        assert not is_answer_correct(q, 'doar vesta')
        assert not is_answer_correct(q, '   ')

    def test_open_text_without_stored_answer(self):
        q = question('open_text', None, 'q1')

        assert is_answer_correct(q, 'orice raspuns')
        assert not is_answer_correct(q, '')

    def test_score_rounds_half_up(self):
        questions = [question('true_false', 'true', f'q{i}') for i in range(3)]

        result = score_quiz(questions, {'q0': 'true', 'q1': 'true', 'q2': 'false'}, 80)

        assert result['score'] == 67
        assert result['passed'] is False
        assert result['correctCount'] == 2
        assert result['results'] == {'q0': True, 'q1': True, 'q2': False}

    def test_threshold_is_inclusive(self):
        questions = [question('true_false', 'true', f'q{i}') for i in range(5)]
        answers = {'q0': 'true', 'q1': 'true', 'q2': 'true', 'q3': 'true', 'q4': 'false'}

        result = score_quiz(questions, answers, 80)

        assert result['score'] == 80
        assert result['passed'] is True

    def test_empty_bank_passes(self):
        assert score_quiz([], {}, 80) == {
            'score': 100, 'passed': True, 'correctCount': 0, 'totalQuestions': 0, 'results': {}
        }


class TestProgressAccess:
    """Who can see and start onboarding"""

    def test_initialize(self, manager_client, employee):
        response = manager_client.post(f'/api/onboarding/{employee.id}', json={'employeeName': employee.name})

        assert response.status_code == 201
        data = response.get_json()
        assert data['currentStep'] == OnboardingStep.NDA
        assert data['auditLog'][0]['action'] == 'Onboarding initializat'

    def test_initialize_twice(self, app, manager, employee, progress):
        with pytest.raises(ServiceError):
            onboarding_service.initialize(employee.id, employee.name, manager)

    def test_employee_cannot_initialize(self, employee_client, employee):
        response = employee_client.post(f'/api/onboarding/{employee.id}', json={'employeeName': 'X'})
        assert response.status_code == 403

    def test_employee_reads_own_progress(self, employee_client, employee, progress):
        response = employee_client.get(f'/api/onboarding/{employee.id}')

        assert response.status_code == 200
        assert response.get_json()['employee']['email'] == employee.email

    def test_employee_cannot_read_others(self, app, manager, employee_client, other_employee):
        onboarding_service.initialize(other_employee.id, other_employee.name, manager)

        response = employee_client.get(f'/api/onboarding/{other_employee.id}')
        assert response.status_code == 403

    def test_missing_progress(self, manager_client, employee):
        response = manager_client.get(f'/api/onboarding/{employee.id}')

        assert response.status_code == 404
        assert response.get_json()['error'] == 'Progres onboarding negasit'

    def test_list_incomplete(self, manager_client, manager, progress, other_employee):
        done = onboarding_service.initialize(other_employee.id, other_employee.name, manager)
        onboarding_service.complete(done, manager)

        assert len(manager_client.get('/api/onboarding').get_json()) == 2
        incomplete = manager_client.get('/api/onboarding?incomplete=true').get_json()
        assert [p['employeeId'] for p in incomplete] == [progress.employee_id]


class TestWizardSteps:
    """NDA, documents, video, quiz, handoff, completion"""

    def test_sign_nda(self, employee_client, employee, progress):
        url = f'/api/onboarding/{employee.id}/nda'
        body = {'signatureDataUrl': 'data:image/png;base64,abc', 'signedByName': employee.name}

        data = employee_client.post(url, json=body).get_json()
        assert data['ndaSigned'] is True
        assert data['ndaSignature']['signedBy'] == employee.id

        response = employee_client.post(url, json=body)
        assert response.status_code == 400
        assert response.get_json()['error'] == 'NDA deja semnat'

    def test_document_reading_then_confirm(self, employee_client, employee, progress):
        url = f'/api/onboarding/{employee.id}/documents'

        employee_client.put(url, json={'documentId': 'doc_1', 'timeSpentSeconds': 20})
        data = employee_client.put(url, json={'documentId': 'doc_1', 'timeSpentSeconds': 65, 'confirmed': True}).get_json()

        assert len(data['documents']) == 1
        document = data['documents'][0]
        assert document['timeSpentSeconds'] == 65
        assert document['confirmed'] is True
        assert 'completedAt' in document
        assert data['auditLog'][-1]['details'] == {'documentId': 'doc_1'}

    def test_video_progress_keeps_furthest(self, app, employee, progress):
        onboarding_service.update_video(progress, {'lastPosition': 100, 'furthestReached': 120}, employee)
        onboarding_service.update_video(progress, {'lastPosition': 30, 'furthestReached': 40}, employee)

        video = progress.get_video_progress()
        assert video['lastPosition'] == 30
        assert video['furthestReached'] == 120
        assert progress.video_completed is False

    def test_video_completion_moves_to_quiz(self, app, employee, progress):
        onboarding_service.update_video(progress, {
            'lastPosition': 600, 'furthestReached': 600, 'totalDuration': 600, 'completed': True
        }, employee)

        assert progress.video_completed is True
        assert progress.current_step == OnboardingStep.QUIZ
        assert progress.get_video_progress()['completedAt']

    def test_video_requires_positions(self, app, employee, progress):
        with pytest.raises(ServiceError):
            onboarding_service.update_video(progress, {'lastPosition': 10}, employee)

    def test_quiz_pass(self, employee_client, employee, progress, quiz_bank):
        first, second = quiz_bank

        response = employee_client.post(f'/api/onboarding/{employee.id}/quiz', json={
            'answers': {first.id: 'b', second.id: ['b', 'a']}
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data['_quizResult'] == {'score': 100, 'passed': True}
        assert data['quizPassed'] is True
        assert data['quizBestScore'] == 100
        assert data['currentStep'] == OnboardingStep.NOTIFICATION
        assert data['quizAttempts'][0]['attemptNumber'] == 1

    def test_quiz_fail_tracks_best_score(self, app, employee, progress, quiz_bank):
        config = onboarding_config_service.get_config()
        first, second = quiz_bank

        outcome = onboarding_service.submit_quiz(progress, {first.id: 'b', second.id: ['a']}, employee, config)
        assert outcome['result']['score'] == 50
        assert outcome['result']['passed'] is False

        onboarding_service.submit_quiz(progress, {first.id: 'a'}, employee, config)

        assert progress.quiz_best_score == 50
        assert progress.quiz_passed is False
        assert len(progress.get_quiz_attempts()) == 2

    def test_quiz_attempt_limit(self, app, employee, progress, quiz_bank):
        config = onboarding_config_service.get_config()
        config.quiz_max_attempts = 1
        onboarding_service.submit_quiz(progress, {}, employee, config)

        with pytest.raises(ServiceError) as exc:
            onboarding_service.submit_quiz(progress, {}, employee, config)
        assert exc.value.message == 'Numarul maxim de incercari a fost atins'

    def test_quiz_requires_answers(self, employee_client, employee, progress):
        response = employee_client.post(f'/api/onboarding/{employee.id}/quiz', json={'answers': ['b']})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'answers este obligatoriu'

    def test_handoff_needs_manager_first(self, employee_client, employee, progress):
        response = employee_client.post(f'/api/onboarding/{employee.id}/handoff', json={'type': 'employee'})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Managerul trebuie sa marcheze predarea mai intai'

    def test_employee_cannot_sign_as_manager(self, employee_client, employee, progress):
        response = employee_client.post(f'/api/onboarding/{employee.id}/handoff', json={
            'type': 'manager', 'signature': SIGNATURE
        })
        assert response.status_code == 403

    def test_handoff_both_sides(self, manager_client, employee_client, manager, employee, progress):
        url = f'/api/onboarding/{employee.id}/handoff'

        data = manager_client.post(url, json={'type': 'manager', 'signature': SIGNATURE}).get_json()
        assert data['physicalHandoff']['markedByManager'] is True
        assert data['managerId'] == manager.id
        assert data['handoffCompleted'] is False

        data = employee_client.post(url, json={'type': 'employee'}).get_json()
        assert data['handoffCompleted'] is True
        assert data['currentStep'] == OnboardingStep.CONFIRMATION

    def test_complete_clears_new_flag(self, employee_client, employee, progress):
        response = employee_client.post(f'/api/onboarding/{employee.id}/complete')

        assert response.status_code == 200
        data = response.get_json()
        assert data['isComplete'] is True
        assert data['currentStep'] == OnboardingStep.COMPLETE
        assert employee.is_new is False
        assert DBAuditLog.query.filter_by(action='onboarding_completed', entity_id=progress.id).count() == 1

        response = employee_client.post(f'/api/onboarding/{employee.id}/complete')
        assert response.status_code == 400

    def test_reset(self, manager_client, manager, employee, progress):
        onboarding_service.complete(progress, manager)

        response = manager_client.post(f'/api/onboarding/{employee.id}/reset')

        assert response.status_code == 200
        data = response.get_json()
        assert data['isComplete'] is False
        assert data['currentStep'] == OnboardingStep.NDA
        assert data['auditLog'][-1]['details']['wasComplete'] is True
        assert len(data['auditLog']) == 3
        assert employee.is_new is True

    def test_update_step(self, employee_client, employee, progress):
        url = f'/api/onboarding/{employee.id}'

        assert employee_client.put(url, json={'currentStep': 'documents'}).get_json()['currentStep'] == 'documents'
        assert employee_client.put(url, json={'currentStep': 'sfarsit'}).status_code == 400


class TestOnboardingConfig:
    """Manager-edited content"""

    def test_config_created_on_first_read(self, manager_client):
        data = manager_client.get('/api/onboarding/config').get_json()

        assert data['quizPassThreshold'] == 80
        assert data['quizMaxAttempts'] == 3
        assert data['documents'] == []

    def test_full_config_is_manager_only(self, employee_client):
        assert employee_client.get('/api/onboarding/config').status_code == 403

    def test_public_config_hides_answers(self, employee_client, quiz_bank):
        data = employee_client.get('/api/onboarding/config/public').get_json()

        assert len(data['questions']) == 2
        assert all('correctAnswer' not in q for q in data['questions'])

    def test_update_settings(self, manager_client, manager):
        response = manager_client.put('/api/onboarding/config', json={
            'quizPassThreshold': 70, 'ndaContent': '<p>NDA</p>'
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data['quizPassThreshold'] == 70
        assert data['ndaContent'] == '<p>NDA</p>'
        assert data['updatedBy'] == manager.id

    def test_invalid_threshold(self, manager_client):
        response = manager_client.put('/api/onboarding/config', json={'quizPassThreshold': 120})
        assert response.status_code == 400

    def test_documents_append_and_reorder(self, manager_client):
        first = manager_client.post('/api/onboarding/config/documents', json={
            'title': 'Regulament intern', 'content': '<p>Program</p>', 'minReadingSeconds': 60
        }).get_json()
        second = manager_client.post('/api/onboarding/config/documents', json={
            'title': 'Siguranta', 'content': '<p>Evacuare</p>'
        }).get_json()
        assert (first['sortOrder'], second['sortOrder']) == (1, 2)

        reordered = manager_client.put('/api/onboarding/config/documents/reorder', json={
            'orderedIds': [second['id'], first['id']]
        }).get_json()
        assert [d['id'] for d in reordered] == [second['id'], first['id']]

        assert manager_client.delete(f"/api/onboarding/config/documents/{first['id']}").status_code == 200
        assert len(manager_client.get('/api/onboarding/config').get_json()['documents']) == 1

    def test_question_validation(self, app):
        with pytest.raises(ServiceError):
            onboarding_config_service.add_question({'type': 'eseu', 'text': 'Ce?'})
        with pytest.raises(ServiceError):
            onboarding_config_service.add_question({'type': 'multiple_choice', 'text': 'Ce?', 'correctAnswer': 3})

    def test_update_question(self, manager_client, quiz_bank):
        question_id = quiz_bank[0].id

        data = manager_client.put(f'/api/onboarding/config/quiz/{question_id}', json={'correctAnswer': 'a'}).get_json()

        assert data['correctAnswer'] == 'a'

    def test_chapters(self, manager_client):
        chapter = manager_client.post('/api/onboarding/config/video/chapters', json={
            'title': 'Echipament', 'timestamp': 95
        })
        assert chapter.status_code == 201
        chapter_id = chapter.get_json()['id']

        data = manager_client.put(f'/api/onboarding/config/video/chapters/{chapter_id}', json={'timestamp': 120}).get_json()
        assert data['timestamp'] == 120

        assert manager_client.delete(f'/api/onboarding/config/video/chapters/{chapter_id}').status_code == 200
        assert manager_client.delete(f'/api/onboarding/config/video/chapters/{chapter_id}').status_code == 404


class TestTrainingVideo:
    """Chunked upload and range streaming"""

    def upload(self, client, parts, file_name='training.mp4'):
        for index, part in enumerate(parts):
            response = client.post('/api/onboarding/config/video/upload?action=chunk', data={
                'uploadId': 'up_test',
                'chunkIndex': str(index),
                'totalChunks': str(len(parts)),
                'totalSize': str(sum(len(p) for p in parts)),
                'chunk': (io.BytesIO(part), 'blob')
            }, content_type='multipart/form-data')
            assert response.status_code == 200
        return client.post('/api/onboarding/config/video/upload?action=finalize', json={
            'uploadId': 'up_test', 'fileName': file_name, 'totalSize': sum(len(p) for p in parts)
        })

    def test_upload_and_stream(self, manager_client, employee_client):
        response = self.upload(manager_client, [b'hello', b'world'])

        assert response.status_code == 200
        data = response.get_json()
        assert data['videoUrl'].startswith('/uploads/onboarding/training-video-')
        assert data['fileSize'] == 10

        full = employee_client.get('/api/onboarding/config/video/stream')
        assert full.status_code == 200
        assert full.data == b'helloworld'
        assert full.mimetype == 'video/mp4'

        partial = employee_client.get('/api/onboarding/config/video/stream', headers={'Range': 'bytes=5-'})
        assert partial.status_code == 206
        assert partial.data == b'world'
        assert partial.headers['Content-Range'] == 'bytes 5-9/10'

    def test_replacing_video_removes_old_file(self, app, manager_client):
        self.upload(manager_client, [b'first'])
        old_path = onboarding_config_service.video_path(onboarding_config_service.get_config())

        self.upload(manager_client, [b'second'], file_name='training.webm')

        assert not os.path.exists(old_path)
        assert onboarding_config_service.get_config().video_file_name == 'training.webm'

    def test_delete_video(self, manager_client):
        self.upload(manager_client, [b'hello'])

        data = manager_client.delete('/api/onboarding/config/video').get_json()

        assert data['videoUrl'] is None
        response = manager_client.get('/api/onboarding/config/video/stream')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Niciun video configurat'

    def test_unknown_action(self, manager_client):
        response = manager_client.post('/api/onboarding/config/video/upload?action=merge')

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Actiune necunoscuta'

    def test_finalize_without_chunks(self, manager_client):
        response = manager_client.post('/api/onboarding/config/video/upload?action=finalize', json={
            'uploadId': 'up_none', 'fileName': 'x.mp4'
        })
        assert response.status_code == 404

    def test_suffix_range(self, manager_client, employee_client):
        self.upload(manager_client, [b'hello', b'world'])

        response = employee_client.get('/api/onboarding/config/video/stream', headers={'Range': 'bytes=-4'})

        assert response.status_code == 206
        assert response.data == b'orld'
        assert response.headers['Content-Range'] == 'bytes 6-9/10'

    def test_range_past_end_of_file(self, manager_client, employee_client):
        self.upload(manager_client, [b'hello', b'world'])

        response = employee_client.get('/api/onboarding/config/video/stream', headers={'Range': 'bytes=999999-'})

        assert response.status_code == 416

    def test_stream_is_cacheable(self, manager_client, employee_client):
        self.upload(manager_client, [b'hello'])

        response = employee_client.get('/api/onboarding/config/video/stream')

        assert 'max-age=3600' in response.headers['Cache-Control']
        assert response.headers.get('ETag')
