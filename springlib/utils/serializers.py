from springlib.models.book import Book
from springlib.models.loan import Loan
from springlib.models.user import User
from springlib.services.fleet_view import is_overdue
from springlib.utils.clock import utcnow


def _iso(value):
    return value.isoformat() if value is not None else None


def book_json(b: Book, my_loan_status: str | None = None) -> dict:
    data = {
        "id": b.id,
        "title": b.title,
        "author": b.author,
        "isbn": b.isbn,
        "publisher": b.publisher,
        "publicationYear": b.publication_year,
        "totalCopies": b.total_copies,
        "availableCopies": b.available_copies,
    }
    if my_loan_status is not None:
        data["myLoanStatus"] = my_loan_status
    return data


def loan_json(l: Loan, today=None) -> dict:
    return {
        "id": l.id,
        "userId": l.user_id,
        "username": l.user.username if l.user else None,
        "bookId": l.book_id,
        "bookTitle": l.book_title,
        "bookAuthor": l.book_author,
        "status": l.status.value,
        "requestedAt": _iso(l.requested_at),
        "loanDate": _iso(l.loan_date),
        "dueDate": _iso(l.due_date),
        "returnDate": _iso(l.return_date),
        "approvedBy": l.approved_by,
        "overdue": is_overdue(l, today or utcnow().date()),
    }


def user_json(u: User) -> dict:
    return {
        "id": u.id,
        "username": u.username,
        "fullName": u.full_name,
        "email": u.email,
        "role": u.role.value,
    }


def cascade_json(result) -> dict:
    return {
        "loan": loan_json(result.primary),
        "alsoRejected": result.rejected_count,
        "siblingResults": [
            {"loanId": r.loan_id, "success": r.success, "error": r.error}
            for r in result.sibling_results
        ],
    }
