"""User model for authentication and authorization."""
from enum import Enum
from werkzeug.security import generate_password_hash, check_password_hash
from classroll import db
from classroll.models.base import BaseModel

class UserRole(Enum):
    """User roles enumeration."""
    STUDENT = 'student'
    TEACHER = 'teacher'
    ADMIN = 'admin'
    COUNSELOR = 'counselor'

class User(BaseModel):
    """User model for all system users."""

    __tablename__ = 'users'

    # Basic Information
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    roll_number = db.Column(db.String(50), unique=True, nullable=True, index=True)

    # Role and academic placement
    role = db.Column(db.Enum(UserRole), nullable=False, default=UserRole.STUDENT)
    department = db.Column(db.String(100), nullable=True)
    semester = db.Column(db.Integer, nullable=True)

    # Account state
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    # Contact Information
    phone = db.Column(db.String(20), nullable=True)
    avatar_url = db.Column(db.String(500), nullable=True)

    # Relationships
    interests = db.relationship('StudentInterest', backref='user', lazy='dynamic',
                                cascade='all, delete-orphan')
    goals = db.relationship('StudentGoal', backref='user', lazy='dynamic',
                            cascade='all, delete-orphan')

    def set_password(self, password: str) -> None:
        """Set user password with hashing."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Check if provided password matches user's password."""
        return check_password_hash(self.password_hash, password)

    def is_teacher(self) -> bool:
        return self.role in (UserRole.TEACHER, UserRole.ADMIN)

    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary excluding sensitive data."""
        exclude = (exclude or []) + ['password_hash']
        return super().to_dict(exclude=exclude)

    def __repr__(self) -> str:
        return f'<User {self.email}>'
