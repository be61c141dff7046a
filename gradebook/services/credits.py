import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from gradebook.core.config.settings import get_settings
from gradebook.models.user import User
from gradebook.utils.helpers import ensure_utc, get_utc_now

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def check_and_reset_credits(db: Session, user: User, now: Optional[datetime] = None) -> User:
    """Refill AI credits when a new period has started.

    Premium accounts refill every UTC day, free accounts every calendar
    month. The balance is replaced, not topped up.
    """
    settings = get_settings()
    now = ensure_utc(now) if now else get_utc_now()
    last_reset = ensure_utc(user.last_credit_reset) or _EPOCH

    if user.is_premium:
        should_reset = now.date() != last_reset.date()
        new_credits = settings.AI_PRO_DAILY_CREDITS
    else:
        should_reset = (now.year, now.month) != (last_reset.year, last_reset.month)
        new_credits = settings.AI_FREE_MONTHLY_CREDITS

    if should_reset:
        user.ai_credits = new_credits
        user.last_credit_reset = now
        db.commit()
        db.refresh(user)
        logger.info(f"Reset AI credits for user {user.id} to {new_credits}")
    return user

def deduct_credits(db: Session, user_id: int, amount: int) -> bool:
    """Take ``amount`` credits if the balance covers it. Returns whether it did."""
    result = db.execute(
        update(User)
        .where(User.id == user_id, User.ai_credits >= amount)
        .values(ai_credits=User.ai_credits - amount)
        .execution_options(synchronize_session="fetch")
    )
    db.commit()
    return result.rowcount == 1
