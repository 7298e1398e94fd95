# library_api/tasks/scheduler.py
from __future__ import annotations

import atexit
import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger


def start_scheduler(app):
    """
    Overdue sweep'i periyodik çalıştırır (OVERDUE_SWEEP_ENABLED=1 ise).
    - Debug reloader'da çift çalışmayı engeller.
    - Job app context içinde çalışır.
    """
    if not app.config.get("OVERDUE_SWEEP_ENABLED"):
        app.logger.info("[scheduler] Overdue sweep disabled.")
        return None

    # Werkzeug reloader varsa WERKZEUG_RUN_MAIN=true olan process gerçek process'tir.
    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        app.logger.info("[scheduler] Debug reloader secondary process: scheduler skipped.")
        return None

    # circular import olmasın diye burada
    from library_api.tasks.overdue_check import run_overdue_check_job

    minutes = int(app.config.get("OVERDUE_SWEEP_MINUTES", 10))
    scheduler = BackgroundScheduler(timezone="UTC")

    def _job_wrapper():
        try:
            run_overdue_check_job(app)
        except Exception as ex:
            app.logger.exception(f"[scheduler] overdue_check_job error: {ex}")

    scheduler.add_job(
        func=_job_wrapper,
        trigger=IntervalTrigger(minutes=minutes),
        id="overdue_check_job",
        replace_existing=True,
        max_instances=1,        # aynı job üst üste binmesin
        coalesce=True,          # kaçırılanları tek seferde toparla
        misfire_grace_time=120
    )

    scheduler.start()
    app.logger.info(f"[scheduler] Overdue sweep started (every {minutes} minutes).")
    app.extensions["apscheduler"] = scheduler

    # process kapanınca scheduler dursun
    atexit.register(lambda: scheduler.shutdown(wait=False) if scheduler.running else None)
    return scheduler
