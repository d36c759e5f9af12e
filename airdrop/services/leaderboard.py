from typing import List, Tuple

from sqlalchemy import and_, func, or_
from sqlmodel import Session, select

from ..core.errors import UserNotFound
from ..core.models import User

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


def parse_limit(raw) -> int:
    """Lenient ?limit= parsing: anything but a positive integer means the default; big values are capped."""
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    if limit <= 0:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


class Leaderboard:
    """
    Orders users by lifetime earnings, then balance.

    Ranks use competition ("1224") semantics: tied users share a rank and the
    next distinct score skips ahead by the size of the tie.
    """

    def __init__(self, session: Session):
        self.session = session

    def top(self, limit: int = DEFAULT_LIMIT) -> List[Tuple[int, User]]:
        statement = (
            select(User)
            .order_by(User.total_earned.desc(), User.balance.desc(), User.id)
            .limit(limit)
        )
        users = self.session.exec(statement).all()

        ranked = []
        previous_key, rank = None, 0
        for position, user in enumerate(users, start=1):
            key = (user.total_earned, user.balance)
            if key != previous_key:
                rank, previous_key = position, key
            ranked.append((rank, user))
        return ranked

    def rank_of(self, user: User) -> int:
        if user is None or user.id is None:
            raise UserNotFound()

        ahead = select(func.count(User.id)).where(
            or_(
                User.total_earned > user.total_earned,
                and_(User.total_earned == user.total_earned, User.balance > user.balance),
            )
        )
        return self.session.exec(ahead).one() + 1
