from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..core.models import TaskStatus


class CamelModel(BaseModel):
    """JSON uses camelCase keys; snake_case is accepted on input too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# --- Requests ---

class TelegramIdentified(CamelModel):
    telegram_id: str = Field(min_length=1)

    @field_validator("telegram_id", mode="before")
    @classmethod
    def _coerce_telegram_id(cls, value: Any) -> Any:
        # Telegram sends numeric ids; they are stored as text.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class TelegramAuthRequest(TelegramIdentified):
    username: str = Field(min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None
    referral_code: Optional[str] = None


class StartTaskRequest(TelegramIdentified):
    task_id: int


class UserTaskRequest(TelegramIdentified):
    user_task_id: int


class WalletLinkRequest(TelegramIdentified):
    wallet_address: str


# --- Responses ---

class UserOut(CamelModel):
    id: int
    telegram_id: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None
    balance: int
    total_earned: int
    level: int
    referral_code: str
    referred_by: Optional[int] = None
    wallet_address: Optional[str] = None
    joined_at: datetime
    last_active: datetime


class UserProfileOut(UserOut):
    rank: int


class PublicUserOut(CamelModel):
    id: int
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None
    level: int
    total_earned: int


class LeaderboardEntry(PublicUserOut):
    rank: int
    balance: int


class TaskOut(CamelModel):
    id: int
    title: str
    description: str
    reward: int
    type: str
    category: str
    icon: str
    action_url: Optional[str] = None
    verification_data: Optional[dict] = None
    is_active: bool
    sort_order: int
    created_at: datetime


class UserTaskOut(CamelModel):
    id: int
    user_id: int
    task_id: int
    status: TaskStatus
    completed_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    reward_claimed: bool
    task: Optional[TaskOut] = None


class ReferralOut(CamelModel):
    id: int
    referrer_id: int
    referred_id: int
    reward_earned: int
    created_at: datetime
    referred: PublicUserOut


class ReferralStats(CamelModel):
    count: int
    total_earned: int


class AuthResponse(CamelModel):
    user: UserOut


class ProfileResponse(CamelModel):
    user: UserProfileOut
    referral_stats: ReferralStats


class TaskListResponse(CamelModel):
    tasks: List[TaskOut]


class UserTaskListResponse(CamelModel):
    user_tasks: List[UserTaskOut]


class StartTaskResponse(CamelModel):
    user_task: UserTaskOut
    action_url: Optional[str] = None


class SubmitTaskResponse(CamelModel):
    user_task: UserTaskOut


class CompleteTaskResponse(CamelModel):
    success: bool
    reward: int
    message: str


class ReferralListResponse(CamelModel):
    referrals: List[ReferralOut]
    stats: ReferralStats
    referral_link: str


class WalletResponse(CamelModel):
    user: UserOut
    reward: int


class LeaderboardResponse(CamelModel):
    leaderboard: List[LeaderboardEntry]


class InitTasksResponse(CamelModel):
    success: bool
    message: str
    created: int
