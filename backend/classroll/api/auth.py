"""Authentication API."""
from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt_identity
from classroll import limiter
from classroll.services.auth_service import AuthService
from classroll.utils.decorators import login_required, load_current_user
from classroll.utils.helpers import success_response, error_response

auth_bp = Blueprint("auth", __name__)

@auth_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    return success_response(message="Auth service is running")

@auth_bp.route("/register", methods=["POST"])
@limiter.limit("10 per hour")
def register():
    """Register a student or teacher account."""
    data = request.get_json(silent=True) or {}

    user, error = AuthService.register(
        email=data.get("email", ""),
        password=data.get("password", ""),
        name=data.get("name", ""),
        role=data.get("role", "student"),
        roll_number=data.get("roll_number"),
        department=data.get("department"),
        semester=data.get("semester")
    )

    if error:
        return error_response(error, 400)

    return success_response(data=user, message="Registration successful", status_code=201)

@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    """Exchange email and password for JWT tokens."""
    data = request.get_json(silent=True)

    if not data:
        return error_response("Request body must be JSON", 400)

    result, error = AuthService.login(data.get("email", "").strip(), data.get("password", ""))

    if error:
        return error_response(error, 401)

    return success_response(data=result, message="Login successful")

@auth_bp.route("/refresh", methods=["POST"])
@jwt_required(refresh=True)
def refresh():
    """Issue a new access token from a refresh token."""
    result, error = AuthService.refresh_token(get_jwt_identity())

    if error:
        return error_response(error, 401)

    return success_response(data=result, message="Token refreshed")

@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    """Current user profile."""
    return success_response(data=load_current_user().to_dict())
