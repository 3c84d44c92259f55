"""Custom decorators for authorization."""
from functools import wraps
from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from classroll import db
from classroll.models.user import User, UserRole
from classroll.utils.helpers import error_response

def load_current_user():
    """Resolve the JWT identity to an active User, cached on ``g`` per identity."""
    user_id = get_jwt_identity()
    cached = g.get('current_user')
    if cached is not None and cached[0] == user_id:
        return cached[1]

    user = db.session.get(User, user_id) if user_id else None
    if user is not None and not user.is_active:
        user = None
    g.current_user = (user_id, user)
    return user

def roles_required(*roles: UserRole):
    """Require a valid JWT whose user holds one of ``roles``."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            user = load_current_user()

            if not user:
                return error_response("User not found", 404)

            if roles and user.role not in roles:
                allowed = ', '.join(role.value for role in roles)
                return error_response(f"Requires one of roles: {allowed}", 403)

            return f(*args, **kwargs)
        return decorated_function
    return decorator

def login_required(f):
    """Require any authenticated, active user."""
    return roles_required()(f)

def student_required(f):
    """Decorator to require student role."""
    return roles_required(UserRole.STUDENT)(f)

def teacher_required(f):
    """Decorator to require teacher role or higher."""
    return roles_required(UserRole.TEACHER, UserRole.ADMIN)(f)

def staff_required(f):
    """Teachers, admins and counselors."""
    return roles_required(UserRole.TEACHER, UserRole.ADMIN, UserRole.COUNSELOR)(f)

def admin_required(f):
    """Decorator to require admin role."""
    return roles_required(UserRole.ADMIN)(f)
