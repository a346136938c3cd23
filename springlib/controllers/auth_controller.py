from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from springlib.errors import LibraryError
from springlib.services.auth_service import AuthService
from springlib.utils.auth import current_identity
from springlib.utils.responses import api_error, api_response
from springlib.utils.serializers import user_json

auth_bp = Blueprint("auth", __name__)


def _auth_payload(token, user):
    return {"token": token, "role": user.role.value, "userId": user.id}


@auth_bp.post("/register", endpoint="auth_register")
def register():
    data = request.get_json(silent=True) or {}

    username = (data.get("username") or "").strip()
    email = (data.get("email") or "").strip()
    password = (data.get("password") or "").strip()
    full_name = (data.get("fullName") or "").strip() or None

    try:
        # role is never taken from the request body
        user = AuthService.register(username=username, email=email, password=password, full_name=full_name)
        return api_response(_auth_payload(AuthService.issue_token(user), user), "Registration successful", 201)
    except LibraryError as e:
        return api_error(e)


@auth_bp.post("/login", endpoint="auth_login")
def login():
    data = request.get_json(silent=True) or {}
    try:
        token, user = AuthService.login(
            (data.get("username") or "").strip(),
            (data.get("password") or "").strip(),
        )
        return api_response(_auth_payload(token, user), "Login successful")
    except LibraryError as e:
        return api_error(e, 401)


@auth_bp.get("/me", endpoint="auth_me")
@jwt_required()
def me():
    try:
        user = AuthService.get_user(current_identity().user_id)
        return api_response(user_json(user))
    except LibraryError as e:
        return api_error(e)
