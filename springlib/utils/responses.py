from flask import jsonify

from springlib.errors import LibraryError
from springlib.utils.clock import utcnow


def _envelope(status: int, success: bool, message: str, data=None):
    return jsonify({
        "status": status,
        "success": success,
        "message": message,
        "data": data,
        "timestamp": utcnow().isoformat(),
    }), status


def api_response(data=None, message: str = "OK", status: int = 200):
    return _envelope(status, True, message, data)


def api_error(error, status: int | None = None):
    """Accepts a LibraryError (status taken from it) or a plain message."""
    if isinstance(error, LibraryError):
        return _envelope(status or error.status_code, False, error.message)
    return _envelope(status or 400, False, str(error))
