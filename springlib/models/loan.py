import enum

from springlib.extensions import db
from springlib.models.user import User
from springlib.utils.clock import utcnow


class LoanStatus(enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    RETURNED = "RETURNED"

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return not self.is_active

    def can_transition_to(self, target: "LoanStatus") -> bool:
        return target in TRANSITIONS.get(self, ())


ACTIVE_STATUSES = frozenset({LoanStatus.PENDING, LoanStatus.APPROVED})

# (none) -> PENDING happens on request; everything else goes through this table
TRANSITIONS = {
    LoanStatus.PENDING: (LoanStatus.APPROVED, LoanStatus.REJECTED),
    LoanStatus.APPROVED: (LoanStatus.RETURNED,),
}


class Loan(db.Model):
    __tablename__ = "loans"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    # no FK: the loan outlives the book as an audit record
    book_id = db.Column(db.Integer, nullable=False, index=True)
    book_title = db.Column(db.String(200), nullable=True)
    book_author = db.Column(db.String(200), nullable=True)

    status = db.Column(
        db.Enum(LoanStatus, native_enum=False, length=20),
        nullable=False,
        default=LoanStatus.PENDING,
        index=True,
    )

    requested_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    loan_date = db.Column(db.DateTime, nullable=True)  # approval time
    due_date = db.Column(db.Date, nullable=True)
    return_date = db.Column(db.DateTime, nullable=True)

    approved_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    user = db.relationship(User, foreign_keys=[user_id], backref="loans")
