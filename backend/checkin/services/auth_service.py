"""Authentication service for user management."""
import logging
from datetime import datetime
from typing import Optional, Tuple
from flask_jwt_extended import create_access_token, create_refresh_token
from checkin.models.user import User
from checkin.utils.validators import Validator

logger = logging.getLogger(__name__)

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
            logger.info("Failed login for %s", email)
            return None, "Invalid email or password"

        if not user.is_active:
            return None, "Account is deactivated"

        user.last_login = datetime.utcnow()
        user.save()

        # JWT subjects must be strings
        identity = str(user.id)
        return {
            "access_token": create_access_token(identity=identity),
            "refresh_token": create_refresh_token(identity=identity),
            "user": user.to_dict()
        }, None

    @staticmethod
    def get_user_by_id(user_id) -> Optional[User]:
        """Get user by ID (accepts the string JWT subject)."""
        try:
            return User.get_by_id(int(user_id))
        except (TypeError, ValueError):
            return None
