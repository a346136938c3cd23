from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from springlib.errors import LibraryError, ValidationError
from springlib.models.loan import LoanStatus
from springlib.services.fleet_view import FleetView
from springlib.services.loan_service import LoanService, parse_due_date
from springlib.utils.auth import current_identity
from springlib.utils.responses import api_error, api_response
from springlib.utils.serializers import cascade_json, loan_json

loan_bp = Blueprint("loans", __name__)


@loan_bp.post("/request/<int:book_id>")
@jwt_required()
def request_loan(book_id: int):
    try:
        loan = LoanService.request_loan(current_identity(), book_id)
        return api_response(loan_json(loan), "Borrow request submitted", 201)
    except LibraryError as e:
        return api_error(e)


@loan_bp.put("/<int:loan_id>/approve")
@jwt_required()
def approve_loan(loan_id: int):
    data = request.get_json(silent=True) or {}
    try:
        due_date = parse_due_date(data.get("dueDate"))
        result = LoanService.approve_loan(current_identity(), loan_id, due_date)

        message = "Loan approved"
        if result.rejected_count:
            message += f"; {result.rejected_count} competing request(s) also rejected"
        if result.failed_count:
            message += f"; {result.failed_count} competing request(s) could not be rejected"
        return api_response(cascade_json(result), message)
    except LibraryError as e:
        return api_error(e)


@loan_bp.put("/<int:loan_id>/reject")
@jwt_required()
def reject_loan(loan_id: int):
    try:
        loan = LoanService.reject_loan(current_identity(), loan_id)
        return api_response(loan_json(loan), "Loan rejected")
    except LibraryError as e:
        return api_error(e)


@loan_bp.put("/<int:loan_id>/return")
@jwt_required()
def return_loan(loan_id: int):
    try:
        loan = LoanService.return_loan(current_identity(), loan_id)
        return api_response(loan_json(loan), "Book returned")
    except LibraryError as e:
        return api_error(e)


@loan_bp.get("/my-loans")
@jwt_required()
def my_loans():
    try:
        loans = LoanService.list_my_loans(current_identity())
        return api_response([loan_json(l) for l in loans])
    except LibraryError as e:
        return api_error(e)


@loan_bp.get("/my-stats")
@jwt_required()
def my_stats():
    try:
        stats = FleetView.member_stats(current_identity().user_id)
        return api_response({
            "loans": {status.value: count for status, count in stats.counts.items()},
            "overdue": stats.overdue,
        })
    except LibraryError as e:
        return api_error(e)


@loan_bp.get("")
@jwt_required()
def all_loans():
    status = (request.args.get("status") or "").strip().upper()
    try:
        if status and status not in LoanStatus.__members__:
            raise ValidationError(f"Unknown loan status: {status}")
        loans = LoanService.list_loans(current_identity(), LoanStatus[status] if status else None)
        return api_response([loan_json(l) for l in loans])
    except LibraryError as e:
        return api_error(e)


@loan_bp.get("/pending")
@jwt_required()
def pending_loans():
    try:
        loans = LoanService.list_pending(current_identity())
        return api_response([loan_json(l) for l in loans])
    except LibraryError as e:
        return api_error(e)
