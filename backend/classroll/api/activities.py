"""Activities, suggestions, interests and goals API endpoints."""
from flask import Blueprint, request
from classroll.models.activity import StudentGoal, StudentInterest
from classroll.services import suggestion_service, today
from classroll.utils.decorators import login_required, staff_required, student_required, load_current_user
from classroll.utils.helpers import success_response
from classroll.utils.validators import Validator

activities_bp = Blueprint('activities', __name__)

@activities_bp.route('/', methods=['GET'])
@login_required
def list_activities():
    activities = suggestion_service().list_activities()
    return success_response(data=[activity.to_dict() for activity in activities])

@activities_bp.route('/', methods=['POST'])
@staff_required
def create_activity():
    activity = suggestion_service().create_activity(load_current_user().id, request.get_json(silent=True))
    return success_response(data=activity.to_dict(), message="Activity created", status_code=201)

@activities_bp.route('/suggestions/today', methods=['GET'])
@student_required
def todays_suggestions():
    suggestions = suggestion_service().list_open(load_current_user().id, today())
    return success_response(data=[suggestion.to_dict() for suggestion in suggestions])

@activities_bp.route('/suggestions/generate', methods=['POST'])
@student_required
def generate_suggestions():
    created = suggestion_service().generate(load_current_user().id, today())
    return success_response(data=[suggestion.to_dict() for suggestion in created],
                            message=f"Generated {len(created)} suggestions")

@activities_bp.route('/suggestions/<suggestion_id>/complete', methods=['POST'])
@student_required
def complete_suggestion(suggestion_id):
    data = request.get_json(silent=True) or {}
    suggestion = suggestion_service().complete(
        suggestion_id, load_current_user().id,
        rating=data.get('rating'), feedback=data.get('feedback')
    )
    return success_response(data=suggestion.to_dict(), message="Great job on completing your activity")

@activities_bp.route('/interests', methods=['GET'])
@student_required
def list_interests():
    interests = StudentInterest.query.filter_by(user_id=load_current_user().id).all()
    return success_response(data=[interest.to_dict() for interest in interests])

@activities_bp.route('/interests', methods=['POST'])
@student_required
def add_interest():
    data = request.get_json(silent=True)
    Validator.require_fields(data, ['interest'])
    interest = suggestion_service().add_interest(
        load_current_user().id, data['interest'], data.get('strength_level', 1)
    )
    return success_response(data=interest.to_dict(), status_code=201)

@activities_bp.route('/goals', methods=['GET'])
@student_required
def list_goals():
    goals = (StudentGoal.query
             .filter_by(user_id=load_current_user().id)
             .order_by(StudentGoal.completed, StudentGoal.priority.desc())
             .all())
    return success_response(data=[goal.to_dict() for goal in goals])

@activities_bp.route('/goals', methods=['POST'])
@student_required
def add_goal():
    data = request.get_json(silent=True)
    Validator.require_fields(data, ['goal'])
    target_date = Validator.parse_date(data['target_date'], 'target_date') if data.get('target_date') else None
    goal = suggestion_service().add_goal(
        load_current_user().id, data['goal'], target_date=target_date, priority=data.get('priority', 1)
    )
    return success_response(data=goal.to_dict(), status_code=201)
