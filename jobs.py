# jobs.py

import logging
from datetime import datetime, timedelta

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import config
import crud
from budgeting import evaluate_budget_alerts
from database import SessionLocal
from notifications import DatabaseNotificationSink
from reports import generate_monthly_reports

logger = logging.getLogger(__name__)


def _cooling_down(budget, now: datetime, cooldown_hours: int) -> bool:
    if cooldown_hours <= 0 or budget.last_alerted_at is None:
        return False
    return now - budget.last_alerted_at < timedelta(hours=cooldown_hours)


def run_budget_alert_sweep(
    db: Session,
    sink,
    threshold=None,
    today=None,
    now=None,
    cooldown_hours=None,
) -> dict:
    """Evaluate every active budget and dispatch alerts for those over threshold.

    A failed dispatch is logged and skipped; the remaining alerts are still sent.
    """
    threshold = config.BUDGET_ALERT_THRESHOLD if threshold is None else threshold
    cooldown_hours = (
        config.ALERT_COOLDOWN_HOURS if cooldown_hours is None else cooldown_hours
    )
    now = now or config.utcnow()
    today = today or now.date()

    budgets = crud.list_active_budgets(db, today)
    transactions = crud.list_expenses_for_users(db, {b.user_id for b in budgets})
    budgets_by_id = {b.id: b for b in budgets}

    summary = {"evaluated": len(budgets), "alerted": 0, "failed": 0, "skipped": 0}
    for alert in evaluate_budget_alerts(budgets, transactions, threshold):
        budget = budgets_by_id[alert.budget_id]
        if _cooling_down(budget, now, cooldown_hours):
            summary["skipped"] += 1
            continue

        try:
            sent = sink.send_budget_alert(
                alert.user_id, alert.budget_name, alert.percentage_used
            )
        except Exception:
            logger.exception(
                "Budget alert dispatch raised for budget %s (user %s)",
                alert.budget_id,
                alert.user_id,
            )
            sent = False

        if not sent:
            logger.warning(
                "Budget alert not delivered for budget %s (user %s)",
                alert.budget_id,
                alert.user_id,
            )
            summary["failed"] += 1
            continue

        summary["alerted"] += 1
        budget.last_alerted_at = now
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(
                "Could not record alert time for budget %s", alert.budget_id
            )

    logger.info(
        "Budget alert sweep: %(evaluated)d evaluated, %(alerted)d alerted, "
        "%(failed)d failed, %(skipped)d skipped",
        summary,
    )
    return summary


def budget_alert_job():
    with SessionLocal() as db:
        run_budget_alert_sweep(db, DatabaseNotificationSink())


def monthly_report_job():
    with SessionLocal() as db:
        generate_monthly_reports(db, config.today())


def create_scheduler() -> BackgroundScheduler:
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        budget_alert_job,
        "interval",
        hours=config.ALERT_SWEEP_INTERVAL_HOURS,
        id="budget_alerts",
    )
    scheduler.add_job(
        monthly_report_job, "cron", day=1, hour=0, minute=0, id="monthly_reports"
    )  # First instant of every month
    return scheduler
