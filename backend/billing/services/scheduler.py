"""
Maintenance scheduler
APScheduler job that expires payment requests past their deadline
"""

from datetime import datetime
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from billing.core.config import settings
from billing.core.logging_config import get_logger
from billing.db.base import utcnow
from billing.models import PaymentRequest

logger = get_logger(__name__)

scheduler: Optional[AsyncIOScheduler] = None


async def expire_payment_requests(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """Mark pending payment requests whose expiry has passed as expired"""
    now = now or utcnow()
    result = await db.execute(
        update(PaymentRequest)
        .where(
            PaymentRequest.status == "pending",
            PaymentRequest.expires_at.is_not(None),
            PaymentRequest.expires_at < now,
        )
        .values(status="expired")
    )
    await db.commit()
    return result.rowcount or 0


async def expire_payment_requests_job():
    """Scheduled entry point; opens its own session"""
    from billing.db.session import SessionLocal

    try:
        async with SessionLocal() as db:
            count = await expire_payment_requests(db)
        if count:
            logger.info(f"⌛ Expired {count} payment request(s)")
    except Exception as e:
        logger.error(f"❌ Payment request expiry failed: {e}")


def init_scheduler():
    """Create and start the scheduler"""
    global scheduler

    if not settings.PAYMENT_REQUEST_EXPIRY_ENABLED:
        logger.info("⏰ Payment request expiry disabled")
        return

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        expire_payment_requests_job,
        trigger=CronTrigger(
            hour=settings.PAYMENT_REQUEST_EXPIRY_HOUR,
            minute=settings.PAYMENT_REQUEST_EXPIRY_MINUTE
        ),
        id="expire_payment_requests",
        name="Expire payment requests",
        replace_existing=True
    )

    scheduler.start()
    logger.info(
        f"⏰ Scheduler started - payment requests expire daily at "
        f"{settings.PAYMENT_REQUEST_EXPIRY_HOUR:02d}:{settings.PAYMENT_REQUEST_EXPIRY_MINUTE:02d}"
    )


def shutdown_scheduler():
    global scheduler
    if scheduler:
        scheduler.shutdown()
        scheduler = None
        logger.info("⏰ Scheduler stopped")


def get_scheduler_status() -> dict:
    if not scheduler:
        return {"enabled": False, "running": False, "jobs": []}

    jobs = []
    for job in scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None
        })

    return {
        "enabled": settings.PAYMENT_REQUEST_EXPIRY_ENABLED,
        "running": scheduler.running,
        "jobs": jobs
    }
