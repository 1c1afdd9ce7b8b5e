#!/usr/bin/env python3
"""
LaserZone Hub - Seed Database
Populates a fresh database with demo staff, customers, reservations,
checklists, onboarding content and warnings.

Usage:
    python scripts/seed_db.py

Or wipe existing rows first:
    python scripts/seed_db.py --reset
"""
import os
import sys
from datetime import datetime, date, timedelta

# Add parent directory to path so we can import the app
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from laserzone_hub import create_app
from laserzone_hub.database import db
from laserzone_hub.models.db_models import (
    DBUser, DBTag, DBCustomer, DBCustomerTag, DBReservation, DBCapacitySettings,
    DBChecklistTemplate, DBChecklistItem, DBChecklistInstance, DBOnboardingConfig,
    DBOnboardingDocument, DBOnboardingQuizQuestion, DBOnboardingVideoChapter,
    DBSocialTemplate, DBHashtagSet, DBWarning, UserRole, ShiftType, WarningStatus
)

SIGNATURE_PLACEHOLDER = (
    'data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=='
)

USERS = [
    # id, email, password, name, role, shift, is_new
    ('user-1', 'manager@laserzone.ro', 'manager123', 'Alexandru Popescu', UserRole.MANAGER, None, False),
    ('user-2', 'maria@laserzone.ro', 'maria123', 'Maria Ionescu', UserRole.MANAGER, None, False),
    ('user-3', 'angajat@laserzone.ro', 'angajat123', 'Ion Vasile', UserRole.EMPLOYEE, ShiftType.MORNING, False),
    ('user-4', 'elena@laserzone.ro', 'elena123', 'Elena Dumitrescu', UserRole.EMPLOYEE, ShiftType.EVENING, False),
    ('user-5', 'nou@laserzone.ro', 'nou123', 'Andrei Marin', UserRole.EMPLOYEE, ShiftType.MORNING, True),
]

TAGS = [
    ('tag-vip', 'VIP', '#f535aa'),
    ('tag-birthday', 'Birthday Regular', '#22d3ee'),
    ('tag-corporate', 'Corporate', '#a855f7'),
    ('tag-frequent', 'Frequent', '#22c55e'),
    ('tag-first-timer', 'First Timer', '#f59e0b'),
    ('tag-problem', 'Problem', '#ef4444'),
]

CUSTOMERS = [
    ('cust-001', 'Ionescu Alexandru', '0722123456', 'alex.ionescu@email.ro',
     'Prefera sesiunile de dupa-amiaza.', ['tag-vip', 'tag-frequent']),
    ('cust-002', 'Popescu Maria', '0733234567', 'maria.popescu@gmail.com',
     'Organizeaza petreceri pentru copii in fiecare an.', ['tag-birthday']),
    ('cust-003', 'Dumitrescu Andrei', '0744345678', None,
     'Contact HR la TechCorp SRL. Team building trimestrial.', ['tag-corporate']),
    ('cust-004', 'Gheorghiu Elena', '0755456789', 'elena.g@yahoo.com', None, ['tag-frequent']),
    ('cust-005', 'Marin Bogdan', '0788789012', None, None, ['tag-first-timer']),
]

RESERVATIONS = [
    # id, customer, days from today, start, end, party, occasion, notes
    ('res-001', 'cust-001', 0, '10:00', '11:00', 8, 'corporate', 'Team building TechCorp'),
    ('res-002', 'cust-004', 0, '14:00', '15:00', 6, 'regular', None),
    ('res-003', 'cust-002', 0, '16:00', '18:00', 15, 'birthday', 'Petrecere Andrei 10 ani'),
    ('res-004', 'cust-003', 1, '14:00', '16:00', 20, 'corporate', 'TechCorp trimestrial'),
    ('res-005', 'cust-005', 2, '15:00', '16:00', 4, 'regular', None),
]


def reset_tables():
    """Drop and recreate every table"""
    db.drop_all()
    db.create_all()
    print("  Tables recreated")


def seed_users():
    for user_id, email, password, name, role, shift, is_new in USERS:
        db.session.add(DBUser(
            email=email, name=name, password=password, role=role,
            id=user_id, shift_type=shift, is_new=is_new,
            start_date=datetime.utcnow() if is_new else None
        ))
    print(f"  Created {len(USERS)} users")


def seed_calendar():
    tags = {}
    for tag_id, name, color in TAGS:
        tags[tag_id] = DBTag(name=name, color=color, id=tag_id)
        db.session.add(tags[tag_id])

    for customer_id, name, phone, email, notes, tag_ids in CUSTOMERS:
        customer = DBCustomer(name=name, phone=phone, id=customer_id, email=email, notes=notes)
        customer.customer_tags = [DBCustomerTag(tag=tags[t]) for t in tag_ids]
        db.session.add(customer)

    today = date.today()
    for res_id, customer_id, offset, start, end, party, occasion, notes in RESERVATIONS:
        db.session.add(DBReservation(
            customer_id=customer_id,
            date=(today + timedelta(days=offset)).isoformat(),
            start_time=start, end_time=end, party_size=party,
            id=res_id, occasion=occasion, notes=notes, created_by='user-1'
        ))

    db.session.add(DBCapacitySettings(default_capacity=40, warning_threshold=0.8, critical_threshold=1.0))
    print(f"  Created {len(TAGS)} tags, {len(CUSTOMERS)} customers, {len(RESERVATIONS)} reservations")


def seed_checklists():
    opening = DBChecklistTemplate(
        name='Checklist Deschidere', type='deschidere', id='template-deschidere',
        description='Verificari obligatorii la deschiderea locatiei in fiecare zi',
        time_window_start_hour=9, time_window_end_hour=11,
        allow_late_completion=True, late_window_minutes=30,
        assigned_to='shift', created_by='user-1'
    )
    opening.items = [
        DBChecklistItem('Verifica functionarea sistemului de iluminat', 1, id='open-1'),
        DBChecklistItem('Porneste sistemele audio', 2, id='open-2'),
        DBChecklistItem('Verifica echipamentele laser (baterii, veste)', 3, id='open-3'),
        DBChecklistItem('Curata zonele de joc', 4, id='open-4'),
        DBChecklistItem('Verifica stocul de consumabile', 5, id='open-5', is_required=False),
        DBChecklistItem('Pregateste casa de marcat', 6, id='open-6'),
    ]

    closing = DBChecklistTemplate(
        name='Checklist Inchidere', type='inchidere', id='template-inchidere',
        description='Proceduri de inchidere pentru securizarea locatiei',
        time_window_start_hour=21, time_window_end_hour=23,
        allow_late_completion=False, assigned_to='shift', created_by='user-1'
    )
    closing.items = [
        DBChecklistItem('Opreste sistemele audio', 1, id='close-1'),
        DBChecklistItem('Incarca echipamentele laser', 2, id='close-2'),
        DBChecklistItem('Verifica si inchide usile', 3, id='close-3'),
        DBChecklistItem('Activeaza sistemul de alarma', 4, id='close-4'),
    ]
    db.session.add_all([opening, closing])

    today = date.today().isoformat()
    db.session.add_all([
        DBChecklistInstance('template-deschidere', opening.name, today, 'user-3', id='instance-1'),
        DBChecklistInstance('template-inchidere', closing.name, today, 'user-4', id='instance-2'),
    ])
    print("  Created 2 templates and 2 instances")


def seed_onboarding():
    config = DBOnboardingConfig(
        nda_content='<h2>Acord de confidentialitate</h2><p>Angajatul se obliga sa pastreze '
                    'confidentialitatea informatiilor despre clienti si procedurile interne.</p>',
        video_description='Reguli de siguranta si folosirea echipamentului in arena'
    )
    config.documents = [
        DBOnboardingDocument('Regulament intern', '<p>Programul de lucru, tinuta, pauze.</p>',
                             min_reading_seconds=60, sort_order=1),
        DBOnboardingDocument('Proceduri de siguranta', '<p>Echipament de protectie, evacuare.</p>',
                             min_reading_seconds=90, sort_order=2),
    ]
    config.questions = [
        DBOnboardingQuizQuestion(
            'multiple_choice', 'Care este varsta minima a jucatorilor?',
            options=[{'id': 'a', 'text': '5 ani'}, {'id': 'b', 'text': '7 ani'}, {'id': 'c', 'text': '12 ani'}],
            correct_answer='b', sort_order=1
        ),
        DBOnboardingQuizQuestion(
            'true_false', 'Vestele se incarca la sfarsitul fiecarei ture.',
            options=[{'id': 'true', 'text': 'Adevarat'}, {'id': 'false', 'text': 'Fals'}],
            correct_answer='true', sort_order=2
        ),
        DBOnboardingQuizQuestion(
            'multi_select', 'Ce verifici la deschidere?',
            options=[{'id': 'a', 'text': 'Iluminatul'}, {'id': 'b', 'text': 'Casa de marcat'},
                     {'id': 'c', 'text': 'Parcarea vecinilor'}],
            correct_answer=['a', 'b'], sort_order=3
        ),
    ]
    config.chapters = [
        DBOnboardingVideoChapter('Introducere', 0, sort_order=1),
        DBOnboardingVideoChapter('Echipament', 95, sort_order=2),
        DBOnboardingVideoChapter('Siguranta in arena', 240, sort_order=3),
    ]
    db.session.add(config)
    print("  Created onboarding config with 2 documents and 3 questions")


def seed_social():
    db.session.add_all([
        DBSocialTemplate('Petrecere copii', 'La multi ani, {nume}! Te asteptam la LaserZone.', 'petrecere'),
        DBSocialTemplate('Oferta weekend', 'Weekend cu 20% reducere la orice rezervare!', 'promotie'),
        DBHashtagSet('Weekend', ['#laserzone', '#weekend', '#lasertag']),
        DBHashtagSet('Corporate', ['#teambuilding', '#corporate']),
    ])
    print("  Created social templates and hashtag sets")


def seed_warnings():
    now = datetime.utcnow()
    manager_signature = {
        'dataUrl': SIGNATURE_PLACEHOLDER,
        'signedAt': now.isoformat(),
        'signedBy': 'user-1',
        'signerName': 'Alexandru Popescu',
        'signerRole': 'manager',
    }
    acknowledged = DBWarning(
        'user-3', 'Ion Vasile', 'user-1', 'Alexandru Popescu', 'verbal', 'tardiness',
        'Intarziere de 45 de minute la tura de dimineata, fara anuntare.',
        now - timedelta(days=75), id='warn-001', manager_signature=manager_signature,
        status=WarningStatus.ACKNOWLEDGED, created_at=now - timedelta(days=74)
    )
    acknowledged.acknowledged_at = now - timedelta(days=74)
    acknowledged.acknowledgment_comment = 'Am inteles si voi respecta programul in viitor.'

    pending = DBWarning(
        'user-4', 'Elena Dumitrescu', 'user-2', 'Maria Ionescu', 'verbal', 'uniform_appearance',
        'Prezentare la serviciu fara uniforma completa.',
        now - timedelta(days=3), id='warn-002', manager_signature=manager_signature,
        created_at=now - timedelta(days=2)
    )
    db.session.add_all([acknowledged, pending])
    print("  Created 2 warnings")


def main():
    app = create_app()

    with app.app_context():
        if '--reset' in sys.argv:
            reset_tables()
        elif DBUser.query.count() > 0:
            print("Database already has users. Use --reset to wipe it first.")
            return

        print("Seeding database...")
        seed_users()
        seed_calendar()
        seed_checklists()
        seed_onboarding()
        seed_social()
        seed_warnings()

        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        print("\nDone. Log in as manager@laserzone.ro / manager123")


if __name__ == '__main__':
    main()
