"""ClassRoll - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

__version__ = '1.0.0'

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"]
)

def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from classroll.config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    setup_logging(app)
    register_blueprints(app)
    register_error_handlers(app)
    setup_database(app)
    register_commands(app)

    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'ClassRoll',
            'version': __version__
        })

    return app

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from classroll.api.auth import auth_bp
    from classroll.api.classes import classes_bp
    from classroll.api.sessions import sessions_bp
    from classroll.api.attendance import attendance_bp
    from classroll.api.activities import activities_bp
    from classroll.api.dashboard import dashboard_bp
    from classroll.utils.swagger import SWAGGER_URL, API_URL, generate_swagger_spec, get_swagger_blueprint

    app.register_blueprint(auth_bp, url_prefix='/api/auth')

    # Class and session management
    app.register_blueprint(classes_bp, url_prefix='/api/classes')
    app.register_blueprint(sessions_bp, url_prefix='/api/sessions')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')

    # Dashboards and suggestions
    app.register_blueprint(activities_bp, url_prefix='/api/activities')
    app.register_blueprint(dashboard_bp, url_prefix='/api/dashboard')

    @app.route(API_URL)
    def swagger_spec():
        """Serve Swagger/OpenAPI specification."""
        return jsonify(generate_swagger_spec())

    app.register_blueprint(get_swagger_blueprint(), url_prefix=SWAGGER_URL)

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from classroll.exceptions import AttendanceError
    from classroll.utils.helpers import handle_error
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(AttendanceError)
    def attendance_error(error):
        db.session.rollback()
        return handle_error(error.message, error.status_code)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return handle_error(error, 500)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e.description, e.code)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return handle_error('Token has expired', 401)

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return handle_error('Invalid token', 401)

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return handle_error('Authorization token required', 401)

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)

        # Service modules log under the package logger
        package_logger = logging.getLogger('classroll')
        package_logger.addHandler(file_handler)
        package_logger.setLevel(level)

        app.logger.setLevel(level)
        app.logger.info('ClassRoll startup')

def setup_database(app: Flask) -> None:
    """Import all models so they are registered on the metadata."""
    with app.app_context():
        from classroll.models import (  # noqa: F401
            User, UserRole,
            SchoolClass, ClassEnrollment,
            Session, SessionStatus,
            AttendanceRecord, AttendanceMethod,
            Activity, ActivitySuggestion, StudentInterest, StudentGoal
        )

def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

        from classroll.models.user import User, UserRole

        admin = User.query.filter_by(email='admin@school.edu').first()
        if not admin:
            admin = User(
                email='admin@school.edu',
                name='School Admin',
                role=UserRole.ADMIN
            )
            admin.set_password('admin123456')
            db.session.add(admin)
            db.session.commit()
            click.echo('Created admin user: admin@school.edu / admin123456')

    @app.cli.command('seed-db')
    def seed_db():
        """Seed database with demo data."""
        from classroll.services.seed_service import SeedService

        summary = SeedService.seed_all()
        click.echo(f'Database seeded: {summary}')

    @app.cli.command('create-admin')
    @click.option('--role', type=click.Choice(['admin', 'counselor']), default='admin')
    def create_admin(role):
        """Create an admin or counselor account."""
        email = click.prompt('Email').lower().strip()
        name = click.prompt('Name')
        password = click.prompt('Password', hide_input=True, confirmation_prompt=True)

        from classroll.models.user import User, UserRole
        from classroll.utils.validators import Validator

        if not Validator.validate_email(email):
            raise click.BadParameter(f'Invalid email: {email}')
        password_check = Validator.validate_password(password)
        if not password_check['is_valid']:
            raise click.BadParameter(password_check['errors'][0])
        if User.query.filter_by(email=email).first():
            raise click.ClickException(f'User {email} already exists')

        admin = User(email=email, name=name.strip(), role=UserRole(role))
        admin.set_password(password)

        db.session.add(admin)
        db.session.commit()
        click.echo(f'{role.title()} user created: {email}')
