"""Authentication service for user management."""
from typing import Optional, Tuple

from flask_jwt_extended import create_access_token, create_refresh_token

from classroll import db
from classroll.models.user import User, UserRole
from classroll.utils.helpers import utcnow
from classroll.utils.validators import Validator

# Roles a user may pick at self-registration
SELF_SERVICE_ROLES = (UserRole.STUDENT, UserRole.TEACHER)

class AuthService:
    @staticmethod
    def login(email: str, password: str) -> Tuple[Optional[dict], Optional[str]]:
        """Authenticate user and return tokens."""
        if not email or not password:
            return None, "Email and password are required"

        if not Validator.validate_email(email):
            return None, "Invalid email format"

        user = User.query.filter_by(email=email.lower().strip()).first()

        if not user or not user.check_password(password):
            return None, "Invalid email or password"

        if not user.is_active:
            return None, "Account is deactivated"

        user.last_login = utcnow()
        db.session.commit()

        return {
            "access_token": create_access_token(identity=user.id),
            "refresh_token": create_refresh_token(identity=user.id),
            "user": user.to_dict()
        }, None

    @staticmethod
    def register(
        email: str,
        password: str,
        name: str,
        role: str = "student",
        roll_number: str = None,
        department: str = None,
        semester: int = None
    ) -> Tuple[Optional[dict], Optional[str]]:
        """Register new user."""
        if not all([email, password, name]):
            return None, "Email, password and name are required"

        if not Validator.validate_email(email):
            return None, "Invalid email format"

        password_check = Validator.validate_password(password)
        if not password_check["is_valid"]:
            return None, password_check["errors"][0]

        name_check = Validator.validate_name(name)
        if not name_check["is_valid"]:
            return None, name_check["errors"][0]

        email = email.lower().strip()
        if User.query.filter_by(email=email).first():
            return None, "Email already exists"

        if roll_number and User.query.filter_by(roll_number=roll_number).first():
            return None, "Roll number already exists"

        try:
            user_role = UserRole((role or "student").lower())
        except ValueError:
            return None, f"Unknown role: {role}"

        if user_role not in SELF_SERVICE_ROLES:
            return None, "Admin and counselor accounts are created by an administrator"

        user = User(
            email=email,
            name=name.strip(),
            role=user_role,
            roll_number=roll_number,
            department=department,
            semester=semester
        )
        user.set_password(password)
        user.save()

        return user.to_dict(), None

    @staticmethod
    def refresh_token(user_id: str) -> Tuple[Optional[dict], Optional[str]]:
        """Generate new access token."""
        user = db.session.get(User, user_id)
        if not user or not user.is_active:
            return None, "User not found or inactive"

        return {
            "access_token": create_access_token(identity=user.id),
            "user": user.to_dict()
        }, None
