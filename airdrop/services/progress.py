from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..core.errors import (
    InvalidTransition,
    TaskAlreadyCompleted,
    TaskAlreadyStarted,
    TaskNotFound,
    UserTaskNotFound,
)
from ..core.models import TASK_TRANSITIONS, Task, TaskStatus, User, UserTask, can_transition, utcnow
from .catalog import TaskCatalog
from .ledger import RewardLedger


class TaskProgressTracker:
    """
    Per-user task progress: pending -> (completed ->) verified.

    Status changes are conditional UPDATEs that only match rows still in an
    allowed source status, so of two racing completions exactly one pays out.
    """

    def __init__(self, session: Session, catalog: Optional[TaskCatalog] = None,
                 ledger: Optional[RewardLedger] = None):
        self.session = session
        self.catalog = catalog or TaskCatalog(session)
        self.ledger = ledger or RewardLedger(session)

    def list_for_user(self, user: User) -> List[Tuple[UserTask, Task]]:
        statement = (
            select(UserTask, Task)
            .join(Task, UserTask.task_id == Task.id)
            .where(UserTask.user_id == user.id)
            .order_by(UserTask.id.desc())
        )
        return list(self.session.exec(statement).all())

    def find(self, user: User, task_id: int) -> Optional[UserTask]:
        statement = select(UserTask).where(UserTask.user_id == user.id, UserTask.task_id == task_id)
        return self.session.exec(statement).first()

    def start(self, user: User, task_id: int) -> Tuple[UserTask, Optional[str]]:
        """Opens a pending record and hands back the URL the user should visit."""
        task = self.catalog.get(task_id)
        if not task.is_active:
            raise TaskNotFound()

        if self.find(user, task.id):
            raise TaskAlreadyStarted()

        user_task = UserTask(user_id=user.id, task_id=task.id, status=TaskStatus.pending)
        self.session.add(user_task)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise TaskAlreadyStarted()

        self.session.refresh(user_task)
        return user_task, task.action_url

    def submit(self, user: User, user_task_id: int) -> UserTask:
        user_task = self._get_owned(user, user_task_id)
        if user_task.status == TaskStatus.verified:
            raise TaskAlreadyCompleted()
        if not can_transition(user_task.status, TaskStatus.completed):
            raise InvalidTransition("Task already submitted")

        if not self._transition(user_task, TaskStatus.completed, completed_at=utcnow()):
            self.session.rollback()
            self.session.refresh(user_task)
            if user_task.status == TaskStatus.verified:
                raise TaskAlreadyCompleted()
            raise InvalidTransition("Task already submitted")

        self.session.commit()
        self.session.refresh(user_task)
        return user_task

    def complete(self, user: User, user_task_id: int) -> Tuple[UserTask, int]:
        """Verifies the task and credits its reward. Returns (user_task, reward)."""
        user_task = self._get_owned(user, user_task_id)
        if not can_transition(user_task.status, TaskStatus.verified):
            raise TaskAlreadyCompleted()

        task = self.catalog.get(user_task.task_id)
        try:
            if not self._transition(user_task, TaskStatus.verified,
                                    verified_at=utcnow(), reward_claimed=True):
                raise TaskAlreadyCompleted()
            self.ledger.credit(user.id, task.reward)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        self.session.refresh(user_task)
        return user_task, task.reward

    def _get_owned(self, user: User, user_task_id: int) -> UserTask:
        user_task = self.session.get(UserTask, user_task_id)
        if not user_task or user_task.user_id != user.id:
            raise UserTaskNotFound()
        return user_task

    def _transition(self, user_task: UserTask, target: TaskStatus, **values) -> bool:
        sources = [status for status, targets in TASK_TRANSITIONS.items() if target in targets]
        statement = (
            update(UserTask)
            .where(UserTask.id == user_task.id, UserTask.status.in_(sources))
            .values(status=target, **values)
            .execution_options(synchronize_session=False)
        )
        return self.session.exec(statement).rowcount == 1
