from sqlmodel import Field, SQLModel
from sqlalchemy import Column, JSON, UniqueConstraint
from typing import Optional
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, Enum):
    pending = "pending"
    completed = "completed"
    verified = "verified"


# Allowed moves of a UserTask; `completed` pays out exactly like `pending`.
TASK_TRANSITIONS = {
    TaskStatus.pending: {TaskStatus.completed, TaskStatus.verified},
    TaskStatus.completed: {TaskStatus.verified},
    TaskStatus.verified: set(),
}


def can_transition(current: TaskStatus, target: TaskStatus) -> bool:
    return target in TASK_TRANSITIONS.get(TaskStatus(current), set())


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    telegram_id: str = Field(index=True, unique=True)
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None

    balance: int = Field(default=0)
    total_earned: int = Field(default=0)
    level: int = Field(default=1)

    referral_code: str = Field(index=True, unique=True)
    referred_by: Optional[int] = Field(default=None, foreign_key="users.id")
    wallet_address: Optional[str] = Field(default=None)

    joined_at: datetime = Field(default_factory=utcnow)
    last_active: datetime = Field(default_factory=utcnow)


class Task(SQLModel, table=True):
    __tablename__ = "tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(index=True)
    description: str
    reward: int
    type: str  # social, daily, referral, custom
    category: str  # twitter, youtube, telegram, daily, referral
    icon: str
    action_url: Optional[str] = None
    verification_data: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    is_active: bool = Field(default=True)
    sort_order: int = Field(default=0)
    created_at: datetime = Field(default_factory=utcnow)


class UserTask(SQLModel, table=True):
    __tablename__ = "user_tasks"
    __table_args__ = (UniqueConstraint("user_id", "task_id", name="uq_user_task"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    task_id: int = Field(foreign_key="tasks.id")
    status: TaskStatus = Field(default=TaskStatus.pending)
    completed_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    reward_claimed: bool = Field(default=False)


class Referral(SQLModel, table=True):
    __tablename__ = "referrals"

    id: Optional[int] = Field(default=None, primary_key=True)
    referrer_id: int = Field(foreign_key="users.id", index=True)
    referred_id: int = Field(foreign_key="users.id", unique=True)
    reward_earned: int = Field(default=0)
    created_at: datetime = Field(default_factory=utcnow)
