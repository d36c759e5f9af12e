import re
from typing import Tuple

from sqlalchemy import update
from sqlmodel import Session

from ..core.config import settings
from ..core.errors import InvalidWalletAddress
from ..core.models import User
from .ledger import RewardLedger

# TON friendly (48), TON raw (0:<64 hex>) and base58 addresses all fit here.
WALLET_ADDRESS_RE = re.compile(r"^[A-Za-z0-9_:\-]{32,68}$")


class WalletLinker:
    def __init__(self, session: Session, ledger: RewardLedger = None, reward: int = None):
        self.session = session
        self.ledger = ledger or RewardLedger(session)
        self.reward = settings.wallet_link_reward if reward is None else reward

    def link(self, user: User, wallet_address: str) -> Tuple[User, int]:
        """
        Stores the wallet address. The first link pays a one-time bonus;
        later calls just replace the address. Returns (user, reward paid).
        """
        wallet_address = (wallet_address or "").strip()
        if not WALLET_ADDRESS_RE.match(wallet_address):
            raise InvalidWalletAddress()

        first_link = self.session.exec(
            update(User)
            .where(User.id == user.id, User.wallet_address.is_(None))
            .values(wallet_address=wallet_address)
            .execution_options(synchronize_session=False)
        ).rowcount == 1

        reward = 0
        if first_link:
            self.ledger.credit(user.id, self.reward)
            reward = self.reward
        else:
            self.session.exec(
                update(User)
                .where(User.id == user.id)
                .values(wallet_address=wallet_address)
                .execution_options(synchronize_session=False)
            )

        self.session.commit()
        self.session.refresh(user)
        return user, reward
