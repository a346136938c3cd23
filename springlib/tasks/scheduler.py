# springlib/tasks/scheduler.py
from __future__ import annotations

import atexit
import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger


def start_scheduler(app):
    """
    Starts the periodic pending sweep.
    - Disabled with SCHEDULER_ENABLED=0 (tests, one-off CLI runs).
    - The debug reloader runs two processes; only the real one gets a scheduler.
    - The job runs inside an app context so it can use the database.
    """
    if not app.config.get("SCHEDULER_ENABLED", True):
        app.logger.info("[scheduler] Disabled by config.")
        return None

    # WERKZEUG_RUN_MAIN=true marks the reloader's serving process
    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        app.logger.info("[scheduler] Debug reloader secondary process: scheduler skipped.")
        return None

    from springlib.tasks.pending_sweep import run_pending_sweep_job

    minutes = int(app.config.get("PENDING_SWEEP_MINUTES", 10))
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        func=run_pending_sweep_job,
        args=[app],
        trigger=IntervalTrigger(minutes=minutes),
        id="pending_sweep_job",
        replace_existing=True,
        max_instances=1,        # never overlap
        coalesce=True,          # missed runs collapse into one
        misfire_grace_time=120,
    )
    scheduler.start()
    app.logger.info(f"[scheduler] Pending sweep started (every {minutes} minutes).")

    app.extensions["apscheduler"] = scheduler
    atexit.register(lambda: scheduler.shutdown(wait=False) if scheduler.running else None)
    return scheduler
