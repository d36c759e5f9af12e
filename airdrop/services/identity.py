from typing import Optional, Tuple
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..core.config import settings
from ..core.errors import ReferralCodeExhausted, UserNotFound
from ..core.models import Referral, User, utcnow
from .ledger import RewardLedger

REFERRAL_CODE_ATTEMPTS = 5


def generate_referral_code() -> str:
    return uuid.uuid4().hex[:12]


class IdentityResolver:
    """
    Maps a Telegram identity to a User row, creating it on first contact.

    A brand new user may name a referrer by referral code; the referral row and
    the referrer's bonus are written in the same transaction as the user.
    """

    def __init__(self, session: Session, ledger: Optional[RewardLedger] = None,
                 referral_reward: int = None):
        self.session = session
        self.ledger = ledger or RewardLedger(session)
        self.referral_reward = settings.referral_reward if referral_reward is None else referral_reward

    def find_by_telegram_id(self, telegram_id: str) -> Optional[User]:
        return self.session.exec(select(User).where(User.telegram_id == telegram_id)).first()

    def get_by_telegram_id(self, telegram_id: str) -> User:
        user = self.find_by_telegram_id(telegram_id)
        if not user:
            raise UserNotFound()
        return user

    def find_by_referral_code(self, code: str) -> Optional[User]:
        return self.session.exec(select(User).where(User.referral_code == code)).first()

    def resolve(
        self,
        telegram_id: str,
        username: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
        referral_code: Optional[str] = None,
    ) -> Tuple[User, bool]:
        """Returns (user, created)."""
        db_user = self.find_by_telegram_id(telegram_id)
        if db_user:
            # profile fields are deliberately left as first seen
            db_user.last_active = utcnow()
            self.session.add(db_user)
            self.session.commit()
            self.session.refresh(db_user)
            return db_user, False

        referrer = self.find_by_referral_code(referral_code) if referral_code else None

        db_user = User(
            telegram_id=telegram_id,
            username=username,
            first_name=first_name,
            last_name=last_name,
            avatar_url=avatar_url,
            referral_code=self._new_referral_code(),
            referred_by=referrer.id if referrer else None,
        )
        self.session.add(db_user)
        try:
            self.session.flush()
            if referrer:
                self.session.add(Referral(
                    referrer_id=referrer.id,
                    referred_id=db_user.id,
                    reward_earned=self.referral_reward,
                ))
                self.ledger.credit(referrer.id, self.referral_reward)
            self.session.commit()
        except IntegrityError:
            # Another request created this identity first; use its row.
            self.session.rollback()
            existing = self.find_by_telegram_id(telegram_id)
            if existing is None:
                raise
            return existing, False

        self.session.refresh(db_user)
        print(f"--- Created user {db_user.id} for telegram id {telegram_id}")
        if referrer:
            print(f"--- Awarded {self.referral_reward} points to referrer {referrer.id}")
        return db_user, True

    def _new_referral_code(self) -> str:
        for _ in range(REFERRAL_CODE_ATTEMPTS):
            code = generate_referral_code()
            if not self.find_by_referral_code(code):
                return code
        raise ReferralCodeExhausted()
