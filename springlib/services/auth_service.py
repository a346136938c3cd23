from flask import current_app
from flask_jwt_extended import create_access_token
from werkzeug.security import check_password_hash, generate_password_hash

from springlib.errors import NotFound, Unauthorized, ValidationError
from springlib.extensions import db
from springlib.models.user import Role, User
from springlib.repositories.user_repo import UserRepo


class AuthService:
    @staticmethod
    def register(username: str, email: str, password: str, full_name: str | None = None,
                 role: Role = Role.MEMBER) -> User:
        if not username or not email or not password:
            raise ValidationError("username, email and password are required")
        if UserRepo.get_by_username(username) or UserRepo.get_by_email(email):
            raise ValidationError("Username or email is already registered")

        user = User(
            username=username,
            email=email,
            full_name=full_name,
            password_hash=generate_password_hash(password),
            role=role,
        )
        try:
            UserRepo.create(user)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f"[auth] registered {user.role.value} {user.username} (id {user.id})")
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(
            identity=str(user.id),
            additional_claims={"role": user.role.value, "userId": user.id, "username": user.username},
        )

    @staticmethod
    def login(username: str, password: str):
        user = UserRepo.get_by_username(username)
        if not user or not check_password_hash(user.password_hash, password):
            raise Unauthorized("Invalid username or password")
        return AuthService.issue_token(user), user

    @staticmethod
    def get_user(user_id: int) -> User:
        user = UserRepo.get_by_id(user_id)
        if not user:
            raise NotFound("User not found")
        return user
