from fastapi import Depends
from sqlmodel import Session

from ..core.database import get_session
from ..services import (
    IdentityResolver,
    Leaderboard,
    ReferralTracker,
    RewardLedger,
    TaskCatalog,
    TaskProgressTracker,
    WalletLinker,
)


def get_ledger(session: Session = Depends(get_session)) -> RewardLedger:
    return RewardLedger(session)


def get_identity(
    session: Session = Depends(get_session), ledger: RewardLedger = Depends(get_ledger)
) -> IdentityResolver:
    return IdentityResolver(session, ledger)


def get_catalog(session: Session = Depends(get_session)) -> TaskCatalog:
    return TaskCatalog(session)


def get_progress(
    session: Session = Depends(get_session),
    catalog: TaskCatalog = Depends(get_catalog),
    ledger: RewardLedger = Depends(get_ledger),
) -> TaskProgressTracker:
    return TaskProgressTracker(session, catalog, ledger)


def get_referrals(session: Session = Depends(get_session)) -> ReferralTracker:
    return ReferralTracker(session)


def get_leaderboard(session: Session = Depends(get_session)) -> Leaderboard:
    return Leaderboard(session)


def get_wallets(
    session: Session = Depends(get_session), ledger: RewardLedger = Depends(get_ledger)
) -> WalletLinker:
    return WalletLinker(session, ledger)
