"""Class Check-in Service - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"]
)

def create_app(config_name: str = None, config_overrides: dict = None) -> Flask:
    """Application factory pattern.

    ``config_overrides`` is applied on top of the selected config class,
    before any extension reads it.
    """
    app = Flask(__name__)

    # Load configuration
    from config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    if config_overrides:
        app.config.update(config_overrides)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Setup database
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    # Add health check
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'Class Check-in Service',
            'version': '1.0.0'
        })

    return app

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from checkin.api.auth import auth_bp
    from checkin.api.checkin import checkin_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(checkin_bp, url_prefix='/api/checkin')

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from checkin.utils.helpers import handle_error
    from checkin.utils.validators import ValidationError
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(ValidationError)
    def validation_error(error):
        return handle_error(error, 400)

    @app.errorhandler(404)
    def not_found(error):
        return handle_error(error, 404)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return handle_error(error, 500)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e, e.code)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({
            'error': True,
            'message': 'Token has expired',
            'status_code': 401
        }), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Invalid token',
            'status_code': 401
        }), 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Authorization token required',
            'status_code': 401
        }), 401

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)
    logging.getLogger('checkin').setLevel(level)

    if not app.debug and not app.testing:
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler(app.config.get('LOG_FILE', 'logs/app.log'))
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        logging.getLogger('checkin').addHandler(file_handler)

        app.logger.setLevel(logging.INFO)
        app.logger.info('Class Check-in Service startup')

def setup_database(app: Flask) -> None:
    """Setup database connections."""
    with app.app_context():
        # Import all models so metadata is complete
        from checkin.models import (
            User, UserRole,
            ClassGroup, Student, ClassMembership, EntityStatus,
            AttendanceSession, SessionStatus,
            AttendanceRecord, AttendanceStatus, AttendanceSource
        )

def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command()
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command()
    @click.argument('class_code')
    @click.option('--subject', default=None, help='Subject code for the session')
    @click.option('--lat', type=float, default=None, help='Reference latitude')
    @click.option('--lng', type=float, default=None, help='Reference longitude')
    @click.option('--radius', type=int, default=None, help='Geofence radius in meters')
    def open_session(class_code, subject, lat, lng, radius):
        """Open a check-in session for a class and print its entry code."""
        from checkin.models import ClassGroup, AttendanceSession
        from checkin.services.credential_service import generate_entry_code

        class_group = ClassGroup.find_active_by_code(class_code)
        if not class_group:
            raise click.ClickException(f'No active class with code {class_code}')

        entry_code = generate_entry_code(app.config.get('ENTRY_CODE_LENGTH', 6))
        session = AttendanceSession(
            class_id=class_group.id,
            subject_code=subject,
            public_token=AttendanceSession.generate_public_token(),
            require_geo=lat is not None and lng is not None,
            geo_lat=lat,
            geo_lng=lng,
            geo_radius_m=radius
        )
        session.set_entry_code(entry_code)
        session.save()

        click.echo(f'Session {session.id} opened for class {class_group.code}')
        click.echo(f'Public token: {session.public_token}')
        click.echo(f'Entry code: {entry_code}')

    @app.cli.command()
    def create_admin():
        """Create admin user."""
        email = click.prompt('Admin email')
        name = click.prompt('Admin name')
        password = click.prompt('Password', hide_input=True)

        from checkin.models.user import User, UserRole

        admin = User(
            email=email.lower().strip(),
            name=name,
            role=UserRole.ADMIN
        )
        admin.set_password(password)

        try:
            db.session.add(admin)
            db.session.commit()
            click.echo(f'Admin user created: {email}')
        except Exception as e:
            db.session.rollback()
            raise click.ClickException(f'Error creating admin: {str(e)}')
