"""
LaserZone Hub - Warning Service
Progressive discipline: escalation, acknowledgment, refusal and clearing
"""
import json
import logging
from datetime import datetime
from typing import Optional, List, Dict

from laserzone_hub.database import db
from laserzone_hub.models.db_models import DBWarning, DBUser, WarningLevel, WarningStatus, WarningCategory
from laserzone_hub.services.audit_service import audit_service
from laserzone_hub.services.errors import ServiceError, NotFoundError, ForbiddenError
from laserzone_hub.utils import parse_datetime

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ['employeeId', 'level', 'category', 'incidentDate', 'managerSignature']

# Category -> title and the description used when the manager leaves it empty
WARNING_TEMPLATES = {
    'tardiness': {
        'title': 'Intarziere la serviciu',
        'defaultText': ('Angajatul s-a prezentat la tura cu intarziere si fara un motiv justificat. '
                        'Inceperea turei la ora stabilita este obligatorie. '
                        'Se solicita respectarea programului de lucru.')
    },
    'no_show': {
        'title': 'Absenta nemotivata',
        'defaultText': ('Angajatul a lipsit de la tura programata fara sa anunte si fara un motiv justificat. '
                        'Absenta a afectat organizarea activitatii din arena.')
    },
    'policy_violation': {
        'title': 'Incalcare politica companiei',
        'defaultText': ('Angajatul nu a respectat regulamentul intern al companiei. '
                        'Se solicita recitirea regulamentului si respectarea lui pe viitor.')
    },
    'performance': {
        'title': 'Performanta sub asteptari',
        'defaultText': ('Sarcinile de serviciu nu au fost indeplinite la standardul asteptat. '
                        'Se solicita imbunatatirea performantei in perioada urmatoare.')
    },
    'insubordination': {
        'title': 'Insubordonare',
        'defaultText': ('Angajatul a refuzat sa indeplineasca o sarcina primita de la superiorul ierarhic '
                        'sau a avut un comportament nepotrivit fata de conducere.')
    },
    'safety_violation': {
        'title': 'Incalcare norme de siguranta',
        'defaultText': ('Angajatul nu a respectat normele de siguranta ale arenei, punand in pericol '
                        'jucatorii sau colegii. Procedurile de siguranta trebuie respectate fara exceptie.')
    },
    'customer_complaint': {
        'title': 'Plangere client',
        'defaultText': ('Un client a depus o plangere privind comportamentul angajatului sau serviciul primit. '
                        'Se solicita o atitudine profesionista fata de clienti.')
    },
    'cash_handling': {
        'title': 'Gestionare incorecta numerar',
        'defaultText': ('Au fost constatate nereguli la incasari sau la inchiderea casei. '
                        'Procedura de gestionare a numerarului trebuie urmata intocmai.')
    },
    'uniform_appearance': {
        'title': 'Tinuta necorespunzatoare',
        'defaultText': ('Angajatul nu a respectat codul vestimentar al companiei in timpul turei. '
                        'Uniforma completa este obligatorie.')
    },
    'other': {
        'title': 'Alt motiv',
        'defaultText': ('Angajatul a comis o abatere care nu se incadreaza in categoriile uzuale. '
                        'Detaliile incidentului sunt descrise mai jos.')
    },
}



def level_index(level: Optional[str]) -> int:
    return WarningLevel.ORDER.index(level) if level in WarningLevel.ORDER else -1


def next_level(current: Optional[str]) -> str:
    """One step above current, capped at termination; verbal when there is no history"""
    if not current:
        return WarningLevel.VERBAL
    index = min(level_index(current) + 1, len(WarningLevel.ORDER) - 1)
    return WarningLevel.ORDER[index]


def _commit():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


class WarningService:
    """Issue and track disciplinary warnings"""

    def templates(self) -> List[Dict]:
        return [{'category': category, **WARNING_TEMPLATES[category]} for category in WarningCategory.ALL]

    def get_warning(self, warning_id: str) -> DBWarning:
        warning = db.session.get(DBWarning, warning_id)
        if not warning:
            raise NotFoundError('Avertisment negasit')
        return warning

    def list_warnings(self, employee_id: str = None, status: str = None, level: str = None,
                      active: bool = False) -> List[DBWarning]:
        query = DBWarning.query
        if employee_id:
            query = query.filter(DBWarning.employee_id == employee_id)
        if status:
            query = query.filter(DBWarning.status == status)
        if level:
            query = query.filter(DBWarning.level == level)
        if active:
            query = query.filter(DBWarning.is_cleared.is_(False))
        return query.order_by(DBWarning.created_at.desc()).all()

    def pending_for(self, employee_id: str) -> List[DBWarning]:
        return DBWarning.query.filter(
            DBWarning.employee_id == employee_id,
            DBWarning.status == WarningStatus.PENDING,
            DBWarning.is_cleared.is_(False)
        ).order_by(DBWarning.created_at.desc()).all()

    def current_level(self, employee_id: str) -> Optional[str]:
        """Highest level among the employee's uncleared warnings"""
        levels = [w.level for w in self.list_warnings(employee_id=employee_id, active=True)]
        if not levels:
            return None
        return max(levels, key=level_index)

    def escalation(self, employee_id: str, requested_level: str) -> Dict:
        current = self.current_level(employee_id)
        suggested = next_level(current)
        is_skip = level_index(requested_level) > level_index(suggested)
        message = None
        if is_skip:
            message = (f"Avertismentul a fost creat cu nivel {requested_level}, dar nivelul sugerat "
                       f"era {suggested}. Skip-level inregistrat.")
        return {
            'currentLevel': current,
            'suggestedLevel': suggested,
            'isSkipLevel': is_skip,
            'message': message
        }

    def summary(self, employee_id: str) -> Dict:
        """Counts per level for the employee profile"""
        warnings = self.list_warnings(employee_id=employee_id)
        active = [w for w in warnings if not w.is_cleared]
        return {
            'total': len(warnings),
            'active': len(active),
            'pending': len([w for w in active if w.is_pending]),
            'currentLevel': max((w.level for w in active), key=level_index) if active else None,
            'byLevel': {level: len([w for w in active if w.level == level]) for level in WarningLevel.ORDER}
        }

    def create_warning(self, data: dict, manager: DBUser) -> Dict:
        """
        Issue a warning and report how it relates to the escalation ladder

        Returns:
            {'warning': DBWarning, 'escalation': {...}}
        """
        if any(not data.get(field) for field in REQUIRED_FIELDS):
            raise ServiceError('Campuri obligatorii lipsa: ' + ', '.join(REQUIRED_FIELDS))

        employee = db.session.get(DBUser, data['employeeId'])
        if not employee:
            raise NotFoundError('Angajatul nu a fost gasit')

        level = data['level']
        if level not in WarningLevel.ORDER:
            raise ServiceError(f"Nivel de disciplina invalid. Valori valide: {', '.join(WarningLevel.ORDER)}")
        if data['category'] not in WarningCategory.ALL:
            raise ServiceError('Categorie invalida')

        incident_date = parse_datetime(data['incidentDate'])
        if incident_date is None:
            raise ServiceError('Data incidentului este invalida')

        escalation = self.escalation(employee.id, level)

        warning = DBWarning(
            employee_id=employee.id,
            employee_name=employee.name,
            manager_id=manager.id,
            manager_name=manager.name,
            level=level,
            category=data['category'],
            description=data.get('description') or WARNING_TEMPLATES[data['category']]['defaultText'],
            incident_date=incident_date,
            witness=data.get('witness') or None,
            attachments=data.get('attachments') or [],
            manager_signature=data['managerSignature']
        )
        db.session.add(warning)

        audit_service.log(
            action=audit_service.ACTION_WARNING_ISSUED,
            entity_type=audit_service.ENTITY_WARNING,
            entity_id=warning.id,
            user=manager,
            details={'employeeName': employee.name, 'level': level, 'isSkipLevel': escalation['isSkipLevel']},
            commit=False
        )
        _commit()

        logger.info(f"Warning {warning.id} ({level}) issued to {employee.id} by {manager.id}")
        return {'warning': warning, 'escalation': escalation}

    def update_warning(self, warning: DBWarning, data: dict) -> DBWarning:
        if not warning.is_pending:
            raise ServiceError(f"Avertismentul nu mai poate fi modificat (status: {warning.status})")

        if 'level' in data:
            if data['level'] not in WarningLevel.ORDER:
                raise ServiceError(f"Nivel de disciplina invalid. Valori valide: {', '.join(WarningLevel.ORDER)}")
            warning.level = data['level']
        if 'category' in data:
            if data['category'] not in WarningCategory.ALL:
                raise ServiceError('Categorie invalida')
            warning.category = data['category']
        if 'description' in data:
            warning.description = data['description']
        if 'incidentDate' in data:
            incident_date = parse_datetime(data['incidentDate'])
            if incident_date is None:
                raise ServiceError('Data incidentului este invalida')
            warning.incident_date = incident_date
        if 'witness' in data:
            warning.witness = data['witness'] or None
        if 'attachments' in data:
            warning.attachments = json.dumps(data['attachments'] or [])

        warning.updated_at = datetime.utcnow()
        _commit()
        return warning

    def _ensure_pending_for(self, warning: DBWarning, user: DBUser, forbidden_message: str):
        if warning.employee_id != user.id:
            raise ForbiddenError(forbidden_message)
        if not warning.is_pending:
            raise ServiceError(f"Avertismentul nu este in asteptare de confirmare (status: {warning.status})")

    def acknowledge(self, warning: DBWarning, user: DBUser, data: dict) -> DBWarning:
        self._ensure_pending_for(warning, user, 'Doar angajatul vizat poate confirma avertismentul')
        if not data.get('signature'):
            raise ServiceError('Semnatura este obligatorie pentru confirmare')

        warning.status = WarningStatus.ACKNOWLEDGED
        warning.set_employee_signature(data['signature'])
        warning.acknowledgment_comment = data.get('employeeComments') or None
        warning.acknowledged_at = datetime.utcnow()
        _commit()

        logger.info(f"Warning {warning.id} acknowledged by {user.id}")
        return warning

    def refuse(self, warning: DBWarning, user: DBUser, data: dict) -> DBWarning:
        self._ensure_pending_for(warning, user, 'Doar angajatul vizat poate refuza semnarea avertismentului')
        if not data.get('witnessName'):
            raise ServiceError('Numele martorului este obligatoriu la refuzul semnarii')

        warning.status = WarningStatus.REFUSED
        warning.refused_to_sign = True
        warning.refused_at = datetime.utcnow()
        warning.refused_witnessed_by = data['witnessName']
        _commit()

        logger.info(f"Warning {warning.id} refused by {user.id}, witness {warning.refused_witnessed_by}")
        return warning

    def clear(self, warning: DBWarning, manager: DBUser, data: dict) -> DBWarning:
        if warning.is_cleared:
            raise ServiceError('Avertismentul este deja anulat')
        if not data.get('reason'):
            raise ServiceError('Motivul anularii este obligatoriu')

        warning.status = WarningStatus.CLEARED
        warning.is_cleared = True
        warning.cleared_at = datetime.utcnow()
        warning.cleared_by_id = manager.id
        warning.cleared_reason = data['reason']
        _commit()

        logger.info(f"Warning {warning.id} cleared by {manager.id}")
        return warning


warning_service = WarningService()
