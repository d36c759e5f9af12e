from typing import List, Tuple

from sqlalchemy import func
from sqlmodel import Session, select

from ..core.config import settings
from ..core.models import Referral, User


class ReferralTracker:
    def __init__(self, session: Session, bot_username: str = None):
        self.session = session
        self.bot_username = bot_username or settings.bot_username

    def list_referrals(self, user: User) -> List[Tuple[Referral, User]]:
        """Referrals made by `user`, newest first, each with the invited user."""
        statement = (
            select(Referral, User)
            .join(User, Referral.referred_id == User.id)
            .where(Referral.referrer_id == user.id)
            .order_by(Referral.created_at.desc(), Referral.id.desc())
        )
        return list(self.session.exec(statement).all())

    def stats(self, user: User) -> dict:
        statement = select(
            func.count(Referral.id),
            func.coalesce(func.sum(Referral.reward_earned), 0),
        ).where(Referral.referrer_id == user.id)
        count, total_earned = self.session.exec(statement).one()
        return {"count": int(count), "totalEarned": int(total_earned)}

    def referral_link(self, user: User) -> str:
        return f"https://t.me/{self.bot_username}?start={user.referral_code}"
