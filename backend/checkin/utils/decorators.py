"""Authorization decorators for staff-only endpoints."""
from functools import wraps
from flask_jwt_extended import get_jwt_identity
from checkin.services.auth_service import AuthService
from checkin.utils.helpers import error_response

def teacher_required(f):
    """Only teachers, coordinators and admins. Use under ``@jwt_required()``."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = AuthService.get_user_by_id(get_jwt_identity())

        if not user or not user.is_active:
            return error_response("User not found", 404)

        if not user.is_teacher():
            return error_response("Teacher access required", 403)

        return f(*args, **kwargs)
    return decorated_function
