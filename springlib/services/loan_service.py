from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from springlib.errors import (
    AlreadyRequested,
    BookUnavailable,
    InvalidTransition,
    InvariantViolation,
    LibraryError,
    NotFound,
    Unauthorized,
    ValidationError,
)
from springlib.models.loan import Loan, LoanStatus
from springlib.repositories.book_repo import BookRepo
from springlib.repositories.loan_repo import LoanRepo
from springlib.services import fleet_view
from springlib.services.catalog_service import CatalogService
from springlib.services.fleet_view import FleetView
from springlib.utils.auth import Identity
from springlib.utils.clock import utcnow


@dataclass
class SiblingResult:
    loan_id: int
    success: bool
    error: str | None = None


@dataclass
class CascadeResult:
    """Outcome of an approval: the approved loan plus one entry per competing request."""

    primary: Loan
    sibling_results: list[SiblingResult] = field(default_factory=list)

    @property
    def rejected_count(self) -> int:
        return sum(1 for r in self.sibling_results if r.success)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.sibling_results if not r.success)


def parse_due_date(value) -> date | None:
    """'YYYY-MM-DD' -> date. None/empty means "use the default loan period"."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("dueDate must be in YYYY-MM-DD format")


class LoanService:
    """
    Loan lifecycle engine.

        (none) --request--> PENDING --approve--> APPROVED --return--> RETURNED
                               |
                               +--reject--> REJECTED

    Every operation takes the caller's Identity explicitly. A failed
    operation rolls the session back, so counters and statuses are left
    exactly as they were.
    """

    @staticmethod
    def _require_admin(identity: Identity, action: str):
        if not identity.is_admin:
            raise Unauthorized(f"Only admins can {action} loans")

    @staticmethod
    def _get_loan(loan_id: int) -> Loan:
        loan = LoanRepo.get(loan_id)
        if not loan:
            raise NotFound("Loan not found")
        return loan

    @staticmethod
    def _check_transition(loan: Loan, target: LoanStatus):
        if not loan.status.can_transition_to(target):
            raise InvalidTransition(
                f"Loan {loan.id} is {loan.status.value} and cannot become {target.value}"
            )

    # ---- transitions

    @staticmethod
    def request_loan(identity: Identity, book_id: int, now: datetime | None = None) -> Loan:
        if not identity.is_member:
            raise Unauthorized("Only members can request loans")

        book = CatalogService.get_book(book_id)

        if FleetView.active_loan_for(identity.user_id, book.id) is not None:
            raise AlreadyRequested()
        if not CatalogService.is_borrowable(book):
            raise BookUnavailable()

        # availability is reserved at approval, not here
        loan = Loan(
            user_id=identity.user_id,
            book_id=book.id,
            book_title=book.title,
            book_author=book.author,
            status=LoanStatus.PENDING,
            requested_at=now or utcnow(),
        )
        try:
            LoanRepo.create(loan)
            LoanRepo.commit()
        except Exception:
            LoanRepo.rollback()
            raise

        current_app.logger.info(f"[loans] user {identity.user_id} requested book {book.id} (loan {loan.id})")
        return loan

    @staticmethod
    def approve_loan(identity: Identity, loan_id: int, due_date: date | None = None,
                     now: datetime | None = None) -> CascadeResult:
        LoanService._require_admin(identity, "approve")
        now = now or utcnow()

        loan = LoanService._get_loan(loan_id)
        LoanService._check_transition(loan, LoanStatus.APPROVED)

        if due_date is None:
            due_date = now.date() + timedelta(days=current_app.config["LOAN_DEFAULT_DAYS"])

        try:
            # re-read under lock: another approval may have taken the last copy
            book = BookRepo.get_for_update(loan.book_id)
            if book is None:
                raise InvariantViolation(f"Loan {loan.id} points at missing book {loan.book_id}")
            # a concurrent approval of this same loan may have committed first
            loan = LoanRepo.get_for_update(loan_id)
            LoanService._check_transition(loan, LoanStatus.APPROVED)
            if not CatalogService.is_borrowable(book):
                raise BookUnavailable()

            CatalogService.decrement_availability(book)
            loan.status = LoanStatus.APPROVED
            loan.due_date = due_date
            loan.approved_by = identity.user_id
            loan.loan_date = now
            LoanRepo.commit()
        except Exception:
            LoanRepo.rollback()
            raise

        current_app.logger.info(
            f"[loans] loan {loan.id} approved by {identity.user_id}, due {due_date}; "
            f"book {book.id} available={book.available_copies}"
        )

        # cascade: each competing request is rejected on its own, never rolled into the approval
        result = CascadeResult(primary=loan)
        for sibling in LoanRepo.list_pending_siblings(loan.book_id, loan.id):
            result.sibling_results.append(LoanService._reject_sibling(sibling, f"approval of loan {loan.id}"))

        if result.failed_count:
            current_app.logger.warning(
                f"[loans] loan {loan.id}: {result.failed_count} competing request(s) could not be rejected"
            )
        return result

    @staticmethod
    def _reject_sibling(sibling: Loan, reason: str) -> SiblingResult:
        sibling_id = sibling.id
        try:
            LoanService._check_transition(sibling, LoanStatus.REJECTED)
            sibling.status = LoanStatus.REJECTED
            LoanRepo.commit()
        except (LibraryError, SQLAlchemyError) as e:
            LoanRepo.rollback()
            current_app.logger.warning(f"[loans] could not reject loan {sibling_id} after {reason}: {e}")
            return SiblingResult(loan_id=sibling_id, success=False, error=str(e))

        current_app.logger.info(f"[loans] loan {sibling_id} rejected after {reason}")
        return SiblingResult(loan_id=sibling_id, success=True)

    @staticmethod
    def reject_loan(identity: Identity, loan_id: int) -> Loan:
        LoanService._require_admin(identity, "reject")

        loan = LoanService._get_loan(loan_id)
        LoanService._check_transition(loan, LoanStatus.REJECTED)

        try:
            loan.status = LoanStatus.REJECTED
            LoanRepo.commit()
        except Exception:
            LoanRepo.rollback()
            raise

        current_app.logger.info(f"[loans] loan {loan.id} rejected by {identity.user_id}")
        return loan

    @staticmethod
    def return_loan(identity: Identity, loan_id: int, now: datetime | None = None) -> Loan:
        may_return_own = identity.is_member and current_app.config.get("MEMBERS_MAY_RETURN")
        if not (identity.is_admin or may_return_own):
            raise Unauthorized("Only admins can return loans")

        loan = LoanService._get_loan(loan_id)
        if not identity.is_admin and loan.user_id != identity.user_id:
            raise Unauthorized("Only admins can return loans")

        LoanService._check_transition(loan, LoanStatus.RETURNED)

        try:
            book = BookRepo.get_for_update(loan.book_id)
            if book is None:
                raise InvariantViolation(f"Loan {loan.id} points at missing book {loan.book_id}")

            loan = LoanRepo.get_for_update(loan_id)
            LoanService._check_transition(loan, LoanStatus.RETURNED)

            CatalogService.increment_availability(book)
            loan.status = LoanStatus.RETURNED
            loan.return_date = now or utcnow()
            LoanRepo.commit()
        except Exception:
            LoanRepo.rollback()
            raise

        current_app.logger.info(
            f"[loans] loan {loan.id} returned; book {book.id} available={book.available_copies}"
        )
        return loan

    # ---- reads

    @staticmethod
    def list_my_loans(identity: Identity):
        return LoanRepo.list_by_user(identity.user_id)

    @staticmethod
    def list_loans(identity: Identity, status: LoanStatus | None = None):
        LoanService._require_admin(identity, "list all")
        return LoanRepo.list_all(status)

    @staticmethod
    def list_pending(identity: Identity):
        LoanService._require_admin(identity, "review pending")
        return LoanRepo.list_pending()

    # ---- maintenance

    @staticmethod
    def reject_stale_pending() -> list[SiblingResult]:
        """Finishes cascades that were interrupted after their approval was committed."""
        stale = fleet_view.stale_siblings(LoanRepo.list_all())
        return [LoanService._reject_sibling(loan, "pending sweep") for loan in stale]
