from apscheduler.schedulers.asyncio import AsyncIOScheduler
from app.core.db import AsyncSessionLocal
from app.utils.logger import get_logger

from app.services.quotes.quote_expiry_service import auto_expire_quote_tokens

logger = get_logger(__name__)

scheduler = AsyncIOScheduler(
    timezone="UTC",
    job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": 3600},
)


@scheduler.scheduled_job("cron", hour=0, minute=5, id="expire_quote_tokens")  # daily at 00:05 UTC
async def expire_quote_tokens_job():
    async with AsyncSessionLocal() as db:
        revoked = await auto_expire_quote_tokens(db)
    logger.info("Quote token expiry job finished", extra={"revoked": revoked})
