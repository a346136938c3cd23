from flask import Blueprint

from springlib.models.user import Role
from springlib.services.fleet_view import FleetView
from springlib.tasks.pending_sweep import sweep_pending
from springlib.utils.decorators import role_required
from springlib.utils.responses import api_response

admin_bp = Blueprint("admin", __name__)


@admin_bp.get("/stats")
@role_required(Role.ADMIN)
def admin_stats():
    view = FleetView.dashboard()
    catalog = view["catalog"]
    return api_response({
        "totalBooks": catalog.total_books,
        "availableBooks": catalog.available_books,
        "totalCopies": catalog.total_copies,
        "availableCopies": catalog.available_copies,
        "loans": {status.value: count for status, count in view["loans"].items()},
    })


@admin_bp.get("/audit")
@role_required(Role.ADMIN)
def admin_audit():
    problems = FleetView.audit()
    message = "No invariant violations" if not problems else f"{len(problems)} invariant violation(s)"
    return api_response({"violations": problems}, message)


@admin_bp.post("/sweep")
@role_required(Role.ADMIN)
def admin_sweep():
    summary = sweep_pending()
    return api_response(summary, f"Pending sweep rejected {summary['rejected']} request(s)")
