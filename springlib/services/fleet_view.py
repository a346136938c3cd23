"""
Aggregated views over a snapshot of books and loans.

Everything here is a pure function of the lists it is given. Callers fetch a
fresh snapshot (see ``FleetView.snapshot``) before each decision; nothing in
this module is cached or treated as a source of truth.
"""
from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Sequence

from springlib.models.book import Book
from springlib.models.loan import ACTIVE_STATUSES, Loan, LoanStatus
from springlib.repositories.book_repo import BookRepo
from springlib.repositories.loan_repo import LoanRepo
from springlib.utils.clock import utcnow


# per-book display state for one user
STATE_PENDING = "PENDING"
STATE_ON_LOAN = "ON_LOAN"
STATE_AVAILABLE = "AVAILABLE"
STATE_UNAVAILABLE = "UNAVAILABLE"


@dataclass
class CatalogStats:
    total_books: int = 0
    available_books: int = 0
    total_copies: int = 0
    available_copies: int = 0


@dataclass
class MemberLoanStats:
    counts: dict[LoanStatus, int] = field(default_factory=dict)
    overdue: int = 0


@dataclass
class Snapshot:
    books: list[Book] = field(default_factory=list)
    loans: list[Loan] = field(default_factory=list)


def active_loan_for(loans: Iterable[Loan], user_id: int, book_id: int) -> Optional[Loan]:
    """The PENDING or APPROVED loan for (user, book), if any."""
    for loan in loans:
        if loan.user_id == user_id and loan.book_id == book_id and loan.status in ACTIVE_STATUSES:
            return loan
    return None


def catalog_stats(books: Iterable[Book]) -> CatalogStats:
    stats = CatalogStats()
    for b in books:
        stats.total_books += 1
        stats.total_copies += b.total_copies or 0
        stats.available_copies += b.available_copies or 0
        if (b.available_copies or 0) > 0:
            stats.available_books += 1
    return stats


def loan_counts(loans: Iterable[Loan]) -> dict[LoanStatus, int]:
    counts = Counter(loan.status for loan in loans)
    return {status: counts.get(status, 0) for status in LoanStatus}


def is_overdue(loan: Loan, today: date) -> bool:
    return loan.status == LoanStatus.APPROVED and loan.due_date is not None and loan.due_date < today


def member_loan_stats(loans: Iterable[Loan], user_id: int, today: date) -> MemberLoanStats:
    """Per-status counts of one user's loans, plus how many of them are overdue."""
    mine = [loan for loan in loans if loan.user_id == user_id]
    return MemberLoanStats(
        counts=loan_counts(mine),
        overdue=sum(1 for loan in mine if is_overdue(loan, today)),
    )


def book_states(books: Iterable[Book], loans: Sequence[Loan], user_id: int) -> dict[int, str]:
    """Maps book id to what the user should see: Pending, On Loan, Borrow or Unavailable."""
    mine = {}
    for loan in loans:
        if loan.user_id == user_id and loan.status in ACTIVE_STATUSES:
            mine[loan.book_id] = loan

    states = {}
    for b in books:
        loan = mine.get(b.id)
        if loan is not None:
            states[b.id] = STATE_PENDING if loan.status == LoanStatus.PENDING else STATE_ON_LOAN
        elif (b.available_copies or 0) > 0:
            states[b.id] = STATE_AVAILABLE
        else:
            states[b.id] = STATE_UNAVAILABLE
    return states


def stale_siblings(loans: Iterable[Loan]) -> list[Loan]:
    """
    PENDING loans that an approval cascade should already have rejected.

    A pending request is stale when some other loan for the same book was
    approved after the request was made.
    """
    loans = list(loans)
    last_approval = {}
    for loan in loans:
        if loan.loan_date is None or loan.status not in (LoanStatus.APPROVED, LoanStatus.RETURNED):
            continue
        seen = last_approval.get(loan.book_id)
        if seen is None or loan.loan_date > seen:
            last_approval[loan.book_id] = loan.loan_date

    return [
        loan for loan in loans
        if loan.status == LoanStatus.PENDING
        and loan.book_id in last_approval
        and loan.requested_at is not None
        and loan.requested_at <= last_approval[loan.book_id]
    ]


def find_invariant_violations(books: Iterable[Book], loans: Iterable[Loan]) -> list[str]:
    """Re-derives the accounting and lifecycle invariants; returns one line per violation."""
    problems = []
    loans = list(loans)

    approved_by_book = Counter(l.book_id for l in loans if l.status == LoanStatus.APPROVED)
    for b in books:
        if not 0 <= b.available_copies <= b.total_copies:
            problems.append(
                f"book {b.id}: available copies {b.available_copies} outside [0, {b.total_copies}]"
            )
        on_loan = approved_by_book.get(b.id, 0)
        if on_loan > b.total_copies:
            problems.append(f"book {b.id}: {on_loan} approved loans exceed {b.total_copies} copies")
        if b.available_copies != b.total_copies - on_loan:
            problems.append(
                f"book {b.id}: available copies {b.available_copies} != "
                f"{b.total_copies} total - {on_loan} on loan"
            )

    active_pairs = defaultdict(list)
    for l in loans:
        if l.status in ACTIVE_STATUSES:
            active_pairs[(l.user_id, l.book_id)].append(l.id)
        if l.status in (LoanStatus.APPROVED, LoanStatus.RETURNED) and l.due_date is None:
            problems.append(f"loan {l.id}: {l.status.value} without a due date")
        if l.status == LoanStatus.RETURNED:
            if l.return_date is None:
                problems.append(f"loan {l.id}: RETURNED without a return date")
            elif l.requested_at is not None and l.return_date < l.requested_at:
                problems.append(f"loan {l.id}: returned before it was requested")

    for (user_id, book_id), ids in sorted(active_pairs.items()):
        if len(ids) > 1:
            problems.append(f"user {user_id} has {len(ids)} active loans for book {book_id}: {sorted(ids)}")

    return problems


class FleetView:
    """Repository-backed entry points; every call reads a fresh snapshot."""

    @staticmethod
    def snapshot() -> Snapshot:
        return Snapshot(books=BookRepo.list_all(), loans=LoanRepo.list_all())

    @staticmethod
    def active_loan_for(user_id: int, book_id: int) -> Optional[Loan]:
        return active_loan_for(LoanRepo.list_for_pair(user_id, book_id), user_id, book_id)

    @staticmethod
    def book_states_for(user_id: int, books: Sequence[Book]) -> dict[int, str]:
        return book_states(books, LoanRepo.list_by_user(user_id), user_id)

    @staticmethod
    def member_stats(user_id: int, today: Optional[date] = None) -> MemberLoanStats:
        return member_loan_stats(LoanRepo.list_by_user(user_id), user_id, today or utcnow().date())

    @staticmethod
    def dashboard() -> dict:
        snap = FleetView.snapshot()
        return {
            "catalog": catalog_stats(snap.books),
            "loans": loan_counts(snap.loans),
        }

    @staticmethod
    def audit() -> list[str]:
        snap = FleetView.snapshot()
        return find_invariant_violations(snap.books, snap.loans)
