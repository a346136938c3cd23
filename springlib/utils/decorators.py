from functools import wraps

from flask_jwt_extended import verify_jwt_in_request

from springlib.errors import Unauthorized
from springlib.utils.auth import current_identity
from springlib.utils.responses import api_error


def role_required(*roles):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            try:
                identity = current_identity()
            except Unauthorized as e:
                return api_error(e)
            if identity.role not in roles:
                return api_error(Unauthorized())
            return fn(*args, **kwargs)
        return wrapper
    return decorator
