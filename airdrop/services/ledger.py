from sqlalchemy import case, update
from sqlmodel import Session

from ..core.config import settings
from ..core.errors import InvalidAmount, UserNotFound
from ..core.models import User


def level_for(total_earned: int, step: int = None) -> int:
    """Level reached with a given lifetime total: one level per `step` points, starting at 1."""
    step = step or settings.level_step
    return total_earned // step + 1


class RewardLedger:
    """
    Applies reward credits to a user's balance.

    Balance, lifetime total and level move in a single UPDATE, so concurrent
    credits never lose an increment and the level is never computed from a
    stale total. `credit` joins the caller's transaction; committing is the
    caller's job.
    """

    def __init__(self, session: Session, level_step: int = None):
        self.session = session
        self.level_step = level_step or settings.level_step

    def credit(self, user_id: int, amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise InvalidAmount()

        new_total = User.total_earned + amount
        new_level = new_total // self.level_step + 1

        statement = (
            update(User)
            .where(User.id == user_id)
            .values(
                balance=User.balance + amount,
                total_earned=new_total,
                # levels only ever go up
                level=case((User.level > new_level, User.level), else_=new_level),
            )
            .execution_options(synchronize_session=False)
        )
        result = self.session.exec(statement)
        if result.rowcount == 0:
            raise UserNotFound()
