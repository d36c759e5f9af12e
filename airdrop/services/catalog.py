from typing import Iterable, List

from sqlmodel import Session, select

from ..core.errors import TaskNotFound
from ..core.models import Task


class TaskCatalog:
    def __init__(self, session: Session):
        self.session = session

    def list_active(self) -> List[Task]:
        statement = (
            select(Task)
            .where(Task.is_active == True)  # noqa: E712
            .order_by(Task.sort_order, Task.id)
        )
        return list(self.session.exec(statement).all())

    def get(self, task_id: int) -> Task:
        task = self.session.get(Task, task_id)
        if not task:
            raise TaskNotFound()
        return task

    def seed(self, definitions: Iterable[dict]) -> List[Task]:
        """
        Inserts every definition whose title is not in the catalog yet.
        Running it twice creates nothing the second time.
        """
        existing = set(self.session.exec(select(Task.title)).all())
        created = []
        for definition in definitions:
            if definition["title"] in existing:
                continue
            task = Task(**definition)
            self.session.add(task)
            created.append(task)
            existing.add(task.title)

        self.session.commit()
        for task in created:
            self.session.refresh(task)
        return created
