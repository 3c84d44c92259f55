"""Student attendance API endpoints."""
from flask import Blueprint, current_app, request
from classroll import limiter
from classroll.exceptions import Unauthorized, ValidationError
from classroll.services import session_controller
from classroll.utils.decorators import student_required, load_current_user
from classroll.utils.helpers import success_response
from classroll.utils.validators import Validator

attendance_bp = Blueprint('attendance', __name__)

@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')

@attendance_bp.route('/redeem', methods=['POST'])
@student_required
@limiter.limit("20 per minute")
def redeem():
    """Mark the current student present with a scanned or typed code.

    Body: ``{"code": ..., "session_id"?: ..., "latitude"?: ..., "longitude"?: ...}``.
    Scanning again refreshes the existing record instead of creating another.
    """
    data = request.get_json(silent=True)
    Validator.require_fields(data, ['code'])
    user = load_current_user()

    latitude, longitude = data.get('latitude'), data.get('longitude')
    for value in (latitude, longitude):
        if value is not None and not isinstance(value, (int, float)):
            raise ValidationError("latitude and longitude must be numbers")

    code = str(data['code']).strip()
    controller = session_controller()
    if data.get('session_id'):
        session = controller.registry.get(data['session_id'])
    else:
        session = controller.registry.find_by_token(code)

    if session is not None and not session.school_class.is_enrolled(user.id):
        raise Unauthorized("You are not enrolled in this class")

    record, created = controller.redeem_code(
        user.id, code,
        session_id=session.id if session else None,
        latitude=latitude, longitude=longitude
    )

    subject = session.school_class.subject
    return success_response(
        data=record.to_dict(),
        message=f"Successfully marked present for {subject}" if created
        else f"Attendance for {subject} already recorded, time updated",
        status_code=201 if created else 200
    )

@attendance_bp.route('/me', methods=['GET'])
@student_required
def my_attendance():
    """Attendance history of the current student."""
    config = current_app.config
    limit = request.args.get('limit', config.get('DEFAULT_PAGE_SIZE', 20), type=int)
    limit = max(1, min(limit, config.get('MAX_PAGE_SIZE', 100)))
    records = session_controller().ledger.list_for_student(load_current_user().id, limit=limit)

    data = []
    for record in records:
        entry = record.to_dict()
        entry['session'] = record.session.to_dict()
        data.append(entry)

    return success_response(data=data)
