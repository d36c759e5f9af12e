from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..core.errors import Unauthorized
from ..core.security import get_validated_data
from ..services import (
    IdentityResolver,
    Leaderboard,
    ReferralTracker,
    TaskCatalog,
    TaskProgressTracker,
    WalletLinker,
)
from ..services.leaderboard import parse_limit
from .dependencies import (
    get_catalog,
    get_identity,
    get_leaderboard,
    get_progress,
    get_referrals,
    get_wallets,
)
from .schemas import *

router = APIRouter()


def _user_task_out(user_task, task=None) -> UserTaskOut:
    data = user_task.model_dump()
    if task is not None:
        data["task"] = task.model_dump()
    return UserTaskOut.model_validate(data)


def ensure_same_user(validated_data: Optional[dict], telegram_id: str) -> None:
    """Rejects a request acting for someone other than the verified Telegram user."""
    if validated_data and validated_data["user"]["id"] != telegram_id:
        raise Unauthorized("Telegram identity does not match request")


@router.post("/auth/telegram", response_model=AuthResponse)
def authenticate(
    request: TelegramAuthRequest,
    validated_data: Optional[dict] = Depends(get_validated_data),
    identity: IdentityResolver = Depends(get_identity),
):
    ensure_same_user(validated_data, request.telegram_id)
    referral_code = request.referral_code
    if validated_data:
        referral_code = referral_code or validated_data["user"].get("referral_code_used")

    user, _ = identity.resolve(
        telegram_id=request.telegram_id,
        username=request.username,
        first_name=request.first_name,
        last_name=request.last_name,
        avatar_url=request.avatar_url,
        referral_code=referral_code,
    )
    return AuthResponse(user=UserOut.model_validate(user))


@router.get("/user/{telegram_id}", response_model=ProfileResponse)
def get_profile(
    telegram_id: str,
    validated_data: Optional[dict] = Depends(get_validated_data),
    identity: IdentityResolver = Depends(get_identity),
    leaderboard: Leaderboard = Depends(get_leaderboard),
    referrals: ReferralTracker = Depends(get_referrals),
):
    ensure_same_user(validated_data, telegram_id)
    user = identity.get_by_telegram_id(telegram_id)
    rank = leaderboard.rank_of(user)
    return ProfileResponse(
        user=UserProfileOut.model_validate({**user.model_dump(), "rank": rank}),
        referral_stats=ReferralStats.model_validate(referrals.stats(user)),
    )


@router.get("/tasks", response_model=TaskListResponse)
def list_tasks(catalog: TaskCatalog = Depends(get_catalog)):
    return TaskListResponse(tasks=[TaskOut.model_validate(task) for task in catalog.list_active()])


@router.get("/user/{telegram_id}/tasks", response_model=UserTaskListResponse)
def list_user_tasks(
    telegram_id: str,
    validated_data: Optional[dict] = Depends(get_validated_data),
    identity: IdentityResolver = Depends(get_identity),
    progress: TaskProgressTracker = Depends(get_progress),
):
    ensure_same_user(validated_data, telegram_id)
    user = identity.get_by_telegram_id(telegram_id)
    return UserTaskListResponse(
        user_tasks=[_user_task_out(user_task, task) for user_task, task in progress.list_for_user(user)]
    )


@router.post("/tasks/start", response_model=StartTaskResponse)
def start_task(
    request: StartTaskRequest,
    validated_data: Optional[dict] = Depends(get_validated_data),
    identity: IdentityResolver = Depends(get_identity),
    progress: TaskProgressTracker = Depends(get_progress),
):
    ensure_same_user(validated_data, request.telegram_id)
    user = identity.get_by_telegram_id(request.telegram_id)
    user_task, action_url = progress.start(user, request.task_id)
    return StartTaskResponse(user_task=_user_task_out(user_task), action_url=action_url)


@router.post("/tasks/submit", response_model=SubmitTaskResponse)
def submit_task(
    request: UserTaskRequest,
    validated_data: Optional[dict] = Depends(get_validated_data),
    identity: IdentityResolver = Depends(get_identity),
    progress: TaskProgressTracker = Depends(get_progress),
):
    ensure_same_user(validated_data, request.telegram_id)
    user = identity.get_by_telegram_id(request.telegram_id)
    user_task = progress.submit(user, request.user_task_id)
    return SubmitTaskResponse(user_task=_user_task_out(user_task))


@router.post("/tasks/complete", response_model=CompleteTaskResponse)
def complete_task(
    request: UserTaskRequest,
    validated_data: Optional[dict] = Depends(get_validated_data),
    identity: IdentityResolver = Depends(get_identity),
    progress: TaskProgressTracker = Depends(get_progress),
):
    ensure_same_user(validated_data, request.telegram_id)
    user = identity.get_by_telegram_id(request.telegram_id)
    _, reward = progress.complete(user, request.user_task_id)
    return CompleteTaskResponse(success=True, reward=reward, message="Task completed successfully!")


@router.get("/user/{telegram_id}/referrals", response_model=ReferralListResponse)
def list_referrals(
    telegram_id: str,
    validated_data: Optional[dict] = Depends(get_validated_data),
    identity: IdentityResolver = Depends(get_identity),
    referrals: ReferralTracker = Depends(get_referrals),
):
    ensure_same_user(validated_data, telegram_id)
    user = identity.get_by_telegram_id(telegram_id)
    items = [
        ReferralOut.model_validate({**referral.model_dump(), "referred": referred.model_dump()})
        for referral, referred in referrals.list_referrals(user)
    ]
    return ReferralListResponse(
        referrals=items,
        stats=ReferralStats.model_validate(referrals.stats(user)),
        referral_link=referrals.referral_link(user),
    )


@router.post("/user/wallet", response_model=WalletResponse)
def link_wallet(
    request: WalletLinkRequest,
    validated_data: Optional[dict] = Depends(get_validated_data),
    identity: IdentityResolver = Depends(get_identity),
    wallets: WalletLinker = Depends(get_wallets),
):
    ensure_same_user(validated_data, request.telegram_id)
    user = identity.get_by_telegram_id(request.telegram_id)
    user, reward = wallets.link(user, request.wallet_address)
    return WalletResponse(user=UserOut.model_validate(user), reward=reward)


@router.get("/leaderboard", response_model=LeaderboardResponse)
def get_leaderboard_top(
    limit: Optional[str] = Query(None),
    leaderboard: Leaderboard = Depends(get_leaderboard),
):
    entries = [
        LeaderboardEntry.model_validate({**user.model_dump(), "rank": rank})
        for rank, user in leaderboard.top(parse_limit(limit))
    ]
    return LeaderboardResponse(leaderboard=entries)
