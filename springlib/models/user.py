import enum

from springlib.extensions import db
from springlib.utils.clock import utcnow


class Role(enum.Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"

    @classmethod
    def parse(cls, value):
        """Accepts "ADMIN", "admin" and the Spring style "ROLE_ADMIN"."""
        if isinstance(value, cls):
            return value
        name = str(value or "").strip().upper()
        if name.startswith("ROLE_"):
            name = name[len("ROLE_"):]
        if name == "USER":
            name = "MEMBER"
        return cls[name]


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    full_name = db.Column(db.String(200), nullable=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.Enum(Role, native_enum=False, length=20), nullable=False, default=Role.MEMBER)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
