"""Classes and enrollment API endpoints."""
from flask import Blueprint, request
from sqlalchemy.exc import IntegrityError
from classroll import db
from classroll.exceptions import Conflict, NotFound, Unauthorized, ValidationError
from classroll.models.classroom import ClassEnrollment, SchoolClass
from classroll.models.user import User, UserRole
from classroll.utils.decorators import login_required, teacher_required, load_current_user
from classroll.utils.helpers import success_response
from classroll.utils.validators import Validator

classes_bp = Blueprint('classes', __name__)

EDITABLE_FIELDS = ('name', 'subject', 'department', 'semester', 'room_number', 'capacity', 'description')

def _get_class(class_id: str) -> SchoolClass:
    school_class = db.session.get(SchoolClass, class_id)
    if school_class is None:
        raise NotFound(f"Class {class_id} not found")
    return school_class

def _get_managed_class(class_id: str) -> SchoolClass:
    """Class the current user may manage: its teacher, or any admin."""
    school_class = _get_class(class_id)
    user = load_current_user()
    if user.role != UserRole.ADMIN and school_class.teacher_id != user.id:
        raise Unauthorized("You can only manage your own classes")
    return school_class

@classes_bp.route('/', methods=['GET'])
@login_required
def list_classes():
    """Everyone can view classes; ``?mine=1`` narrows to taught or enrolled ones."""
    user = load_current_user()
    query = SchoolClass.query

    if request.args.get('mine'):
        if user.role == UserRole.STUDENT:
            query = query.join(ClassEnrollment).filter(ClassEnrollment.student_id == user.id)
        else:
            query = query.filter(SchoolClass.teacher_id == user.id)

    classes = query.order_by(SchoolClass.subject, SchoolClass.name).all()
    return success_response(data=[c.to_dict() for c in classes])

@classes_bp.route('/', methods=['POST'])
@teacher_required
def create_class():
    data = request.get_json(silent=True)
    Validator.require_fields(data, ['name', 'subject'])
    user = load_current_user()

    teacher_id = user.id
    if user.role == UserRole.ADMIN and data.get('teacher_id'):
        teacher = db.session.get(User, data['teacher_id'])
        if teacher is None or teacher.role != UserRole.TEACHER:
            raise ValidationError("teacher_id must reference a teacher")
        teacher_id = teacher.id

    school_class = SchoolClass(teacher_id=teacher_id, **{
        field: data.get(field) for field in EDITABLE_FIELDS
    })
    school_class.save()
    return success_response(data=school_class.to_dict(), message="Class created", status_code=201)

@classes_bp.route('/<class_id>', methods=['GET'])
@login_required
def get_class(class_id):
    return success_response(data=_get_class(class_id).to_dict())

@classes_bp.route('/<class_id>', methods=['PUT'])
@teacher_required
def update_class(class_id):
    school_class = _get_managed_class(class_id)
    data = request.get_json(silent=True) or {}
    school_class.update(**{field: data[field] for field in EDITABLE_FIELDS if field in data})
    return success_response(data=school_class.to_dict(), message="Class updated")

@classes_bp.route('/<class_id>', methods=['DELETE'])
@teacher_required
def delete_class(class_id):
    _get_managed_class(class_id).delete()
    return success_response(message="Class deleted")

@classes_bp.route('/<class_id>/students', methods=['GET'])
@teacher_required
def list_students(class_id):
    school_class = _get_managed_class(class_id)
    students = (User.query
                .join(ClassEnrollment, ClassEnrollment.student_id == User.id)
                .filter(ClassEnrollment.class_id == school_class.id)
                .order_by(User.name)
                .all())
    return success_response(data=[student.to_dict() for student in students])

@classes_bp.route('/<class_id>/enroll', methods=['POST'])
@teacher_required
def enroll(class_id):
    """Enroll one or more students: ``{"student_ids": [...]}``."""
    school_class = _get_managed_class(class_id)
    data = request.get_json(silent=True)
    Validator.require_fields(data, ['student_ids'])

    student_ids = data['student_ids']
    if not isinstance(student_ids, list):
        raise ValidationError("student_ids must be a list")

    students = User.query.filter(User.id.in_(student_ids), User.role == UserRole.STUDENT).all()
    if len(students) != len(set(student_ids)):
        raise NotFound("Some student IDs were not found")

    new_students = [student for student in students if not school_class.is_enrolled(student.id)]
    if school_class.capacity and school_class.enrolled_count() + len(new_students) > school_class.capacity:
        raise ValidationError(f"Class capacity of {school_class.capacity} would be exceeded")

    for student in new_students:
        db.session.add(ClassEnrollment(class_id=school_class.id, student_id=student.id))
    added = len(new_students)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("Enrollment changed concurrently, please retry")

    return success_response(
        data={'added': added, 'enrolled_count': school_class.enrolled_count()},
        message=f"Enrolled {added} students"
    )

@classes_bp.route('/<class_id>/enroll/<student_id>', methods=['DELETE'])
@teacher_required
def unenroll(class_id, student_id):
    school_class = _get_managed_class(class_id)
    enrollment = school_class.enrollments.filter_by(student_id=student_id).first()
    if enrollment is None:
        raise NotFound("Student is not enrolled in this class")
    enrollment.delete()
    return success_response(message="Student removed from class")
