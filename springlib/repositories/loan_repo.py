from sqlalchemy.exc import OperationalError

from springlib.errors import TransportFailure
from springlib.extensions import db
from springlib.models.loan import ACTIVE_STATUSES, Loan, LoanStatus


class LoanRepo:
    @staticmethod
    def get(loan_id: int):
        return db.session.get(Loan, loan_id)

    @staticmethod
    def get_for_update(loan_id: int):
        return db.session.get(Loan, loan_id, with_for_update=True, populate_existing=True)

    @staticmethod
    def list_all(status: LoanStatus | None = None):
        q = Loan.query
        if status is not None:
            q = q.filter(Loan.status == status)
        return q.order_by(Loan.id.desc()).all()

    @staticmethod
    def list_by_user(user_id: int):
        return Loan.query.filter_by(user_id=user_id).order_by(Loan.id.desc()).all()

    @staticmethod
    def list_pending():
        # oldest first: admins work the queue in request order
        return Loan.query.filter(Loan.status == LoanStatus.PENDING).order_by(Loan.requested_at.asc(), Loan.id.asc()).all()

    @staticmethod
    def list_for_pair(user_id: int, book_id: int):
        return Loan.query.filter_by(user_id=user_id, book_id=book_id).all()

    @staticmethod
    def list_pending_siblings(book_id: int, exclude_loan_id: int):
        return Loan.query.filter(
            Loan.book_id == book_id,
            Loan.status == LoanStatus.PENDING,
            Loan.id != exclude_loan_id,
        ).order_by(Loan.id.asc()).all()

    @staticmethod
    def count_active_for_book(book_id: int) -> int:
        return Loan.query.filter(
            Loan.book_id == book_id,
            Loan.status.in_(list(ACTIVE_STATUSES)),
        ).count()

    @staticmethod
    def count_approved_for_book(book_id: int) -> int:
        return Loan.query.filter(
            Loan.book_id == book_id,
            Loan.status == LoanStatus.APPROVED,
        ).count()

    @staticmethod
    def create(loan: Loan):
        db.session.add(loan)
        db.session.flush()
        return loan

    @staticmethod
    def commit():
        try:
            db.session.commit()
        except OperationalError as e:
            db.session.rollback()
            raise TransportFailure() from e

    @staticmethod
    def rollback():
        db.session.rollback()
