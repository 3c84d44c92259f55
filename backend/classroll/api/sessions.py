"""Attendance session API endpoints."""
from datetime import timedelta
from flask import Blueprint, Response, current_app, request
from classroll import limiter
from classroll.exceptions import NotFound, Unauthorized, ValidationError
from classroll.models.session import Session
from classroll.models.user import UserRole
from classroll.services import session_controller, today
from classroll.services.export_service import ExportService
from classroll.services.token_issuer import TokenIssuer
from classroll.utils.decorators import login_required, teacher_required, load_current_user
from classroll.utils.helpers import success_response
from classroll.utils.validators import Validator

sessions_bp = Blueprint('sessions', __name__)

def _owned_session(session_id: str) -> Session:
    """Session the current user may run: its owner, or any admin."""
    session = session_controller().registry.get(session_id)
    user = load_current_user()
    if user.role != UserRole.ADMIN and not session.is_owned_by(user.id):
        raise Unauthorized("You can only manage your own sessions")
    return session

def _actor_id():
    """Owner checks in the controller are skipped for admins."""
    user = load_current_user()
    return None if user.role == UserRole.ADMIN else user.id

@sessions_bp.route('/', methods=['POST'])
@teacher_required
def create_session():
    data = request.get_json(silent=True)
    Validator.require_fields(data, ['class_id', 'start_time', 'end_time'])
    user = load_current_user()

    controller = session_controller()
    school_class = controller.registry.get_class(data['class_id'])
    if user.role != UserRole.ADMIN and school_class.teacher_id != user.id:
        raise Unauthorized("You can only schedule sessions for your own classes")

    expected = data.get('total_students')
    if expected is not None and not isinstance(expected, int):
        raise ValidationError("total_students must be an integer")

    session = controller.registry.create(
        owner_id=school_class.teacher_id or user.id,
        class_id=school_class.id,
        session_date=Validator.parse_date(data['session_date'], 'session_date')
        if data.get('session_date') else today(),
        start_time=Validator.parse_time(data['start_time'], 'start_time'),
        end_time=Validator.parse_time(data['end_time'], 'end_time'),
        expected_count=expected,
        location=data.get('location')
    )
    return success_response(data=session.to_dict(include_token=True),
                            message="Session scheduled", status_code=201)

@sessions_bp.route('/today', methods=['GET'])
@login_required
def todays_sessions():
    """Teachers see the sessions they own, students those of enrolled classes."""
    user = load_current_user()
    registry = session_controller().registry

    if user.role == UserRole.STUDENT:
        sessions = registry.list_for_student_on(user.id, today())
        return success_response(data=[s.to_dict() for s in sessions])

    sessions = registry.list_for_owner_on(user.id, today())
    return success_response(data=[s.to_dict(include_token=True) for s in sessions])

@sessions_bp.route('/<session_id>', methods=['GET'])
@login_required
def get_session(session_id):
    user = load_current_user()
    session = session_controller().registry.get(session_id)

    if session.is_owned_by(user.id) or user.role == UserRole.ADMIN:
        return success_response(data=session.to_dict(include_token=True))

    if user.role == UserRole.STUDENT and not session.school_class.is_enrolled(user.id):
        raise NotFound(f"Session {session_id} not found")

    return success_response(data=session.to_dict())

@sessions_bp.route('/<session_id>', methods=['DELETE'])
@teacher_required
def delete_session(session_id):
    _owned_session(session_id)
    session_controller().registry.delete(session_id)
    return success_response(message="Session deleted")

@sessions_bp.route('/<session_id>/start', methods=['POST'])
@teacher_required
@limiter.limit("30 per hour")
def start_session(session_id):
    """Start (or restart) a session with a fresh code.

    Restarting replaces the current code immediately.
    """
    data = request.get_json(silent=True) or {}
    ttl = None
    if 'ttl_minutes' in data:
        minutes = data['ttl_minutes']
        if not isinstance(minutes, (int, float)) or isinstance(minutes, bool) or minutes <= 0:
            raise ValidationError("ttl_minutes must be a positive number")
        ttl = timedelta(minutes=minutes)

    session = session_controller().start(session_id, ttl=ttl, actor_id=_actor_id())
    return success_response(data=session.to_dict(include_token=True),
                            message="Session started, students can now mark their attendance")

@sessions_bp.route('/<session_id>/stop', methods=['POST'])
@teacher_required
def stop_session(session_id):
    session = session_controller().stop(session_id, actor_id=_actor_id())
    return success_response(data=session.to_dict(include_token=True),
                            message="Session ended, attendance marking is now closed")

@sessions_bp.route('/<session_id>/qr', methods=['GET'])
@teacher_required
def session_qr(session_id):
    """QR image of the current code for display in class."""
    session = _owned_session(session_id)
    if not session.is_active or not session.qr_code:
        raise NotFound("Session has no active code")

    config = current_app.config
    return success_response(data={
        'session_id': session.id,
        'qr_code': session.qr_code,
        'qr_image': TokenIssuer.render_qr(session.qr_code,
                                          box_size=config.get('QR_BOX_SIZE', 10),
                                          border=config.get('QR_BORDER', 4)),
        'expires_at': session.qr_expires_at.isoformat()
    })

@sessions_bp.route('/<session_id>/attendance', methods=['GET'])
@teacher_required
def session_attendance(session_id):
    session = _owned_session(session_id)
    records = session_controller().ledger.list_for_session(session.id, search=request.args.get('q'))

    return success_response(data={
        'session': session.to_dict(include_token=True),
        'records': [record.to_dict() for record in records],
        'stats': ExportService.summary(records)
    })

@sessions_bp.route('/<session_id>/attendance/<student_id>/override', methods=['POST'])
@teacher_required
def override_attendance(session_id, student_id):
    """Owner-only manual mark: ``{"present": true|false}`` or no body to toggle."""
    data = request.get_json(silent=True) or {}
    present = data.get('present')
    if present is not None and not isinstance(present, bool):
        raise ValidationError("present must be a boolean")

    record, created = session_controller().override(
        session_id, load_current_user().id, student_id,
        present=present, notes=data.get('notes')
    )
    return success_response(data=record.to_dict(), message="Attendance updated",
                            status_code=201 if created else 200)

@sessions_bp.route('/<session_id>/attendance/export', methods=['GET'])
@teacher_required
def export_attendance(session_id):
    session = _owned_session(session_id)
    records = session_controller().ledger.list_for_session(session.id, search=request.args.get('q'))

    return Response(
        ExportService.attendance_csv(records),
        mimetype='text/csv',
        headers={
            'Content-Disposition': f'attachment; filename={ExportService.filename(session, today())}'
        }
    )
