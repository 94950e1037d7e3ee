"""
Date of Record Tasks
Daily advance of the exchange's date of record
Source: https://docs.celeryq.dev/en/stable/userguide/tasks.html
Verified: 2025-12-18
"""

from datetime import datetime, timezone
from typing import Optional

from hbx_core.db.connection import get_session
from hbx_core.models.hbx_profile import HbxProfile
from hbx_core.services.time_keeper import get_time_keeper
from hbx_core.utils.celery_app import celery_app
from hbx_core.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="time_keeper.push_date_of_record")
def push_date_of_record(now: Optional[str] = None) -> dict:
    """
    Set the date of record to the exchange's local date and run the
    rollover hooks of every HbxProfile.

    Args:
        now: ISO-8601 instant to use instead of the current time

    Returns:
        The new date and the rollovers dispatched
    """
    instant = datetime.fromisoformat(now) if now else datetime.now(timezone.utc)
    time_keeper = get_time_keeper()
    new_date = time_keeper.date_according_to_exchange_at(instant)

    with get_session() as session:
        profiles = HbxProfile.all(session)
        result = time_keeper.advance_date_of_record(new_date, profiles)

    logger.info(
        f"Date of record pushed to {result.new_date.isoformat()} "
        f"({', '.join(r.value for r in result.rollovers)}) for {result.sponsor_count} profile(s)"
    )
    return {
        "date_of_record": result.new_date.isoformat(),
        "rollovers": [r.value for r in result.rollovers],
        "sponsor_count": result.sponsor_count,
    }
