# springlib/tasks/pending_sweep.py
from flask import current_app

from springlib.services.fleet_view import FleetView
from springlib.services.loan_service import LoanService


def sweep_pending() -> dict:
    """
    Rejects PENDING requests left behind by an interrupted approval cascade
    and reports any accounting invariant that no longer holds.
    """
    results = LoanService.reject_stale_pending()
    violations = FleetView.audit()

    for problem in violations:
        current_app.logger.error(f"[sweep] invariant violation: {problem}")

    summary = {
        "rejected": sum(1 for r in results if r.success),
        "failed": sum(1 for r in results if not r.success),
        "violations": len(violations),
    }
    current_app.logger.info(
        f"[sweep] rejected={summary['rejected']} failed={summary['failed']} violations={summary['violations']}"
    )
    return summary


def run_pending_sweep_job(app):
    with app.app_context():
        try:
            sweep_pending()
        except Exception as e:
            current_app.logger.exception(f"[sweep] Error: {e}")
