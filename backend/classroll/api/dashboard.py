"""Role dashboard API."""
from flask import Blueprint
from classroll.services import suggestion_service, today
from classroll.services.dashboard_service import dashboard_for
from classroll.utils.decorators import login_required, load_current_user
from classroll.utils.helpers import success_response

dashboard_bp = Blueprint('dashboard', __name__)

@dashboard_bp.route('/', methods=['GET'])
@login_required
def dashboard():
    user = load_current_user()
    view = dashboard_for(user.role, suggestions=suggestion_service())
    return success_response(data=view.build(user, today()))
