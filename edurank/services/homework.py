"""Homework tracking service."""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from edurank.core.exceptions import NotFoundError
from edurank.core.subjects import ClassLevel
from edurank.models.homework import HomeworkStatus, HomeworkTask
from edurank.schemas.homework import HomeworkCreate, HomeworkResponse, HomeworkUpdate

logger = logging.getLogger(__name__)


class HomeworkService:
    """Homework tasks and their non-submitter lists."""

    def __init__(self, db: Session):
        self.db = db

    def create_task(self, request: HomeworkCreate, subject_key: str, created_by_id: int | None) -> HomeworkResponse:
        """Create a homework task. ``subject_key`` must already be resolved for the class."""
        task = HomeworkTask(
            class_level=request.class_level.value,
            subject=subject_key,
            task_name=request.task_name,
            assigned_on=request.assigned_on or date.today(),
            status=HomeworkStatus.ASSIGNED,
            non_submitters=[],
            created_by_id=created_by_id,
        )
        self.db.add(task)
        self.db.flush()
        self.db.refresh(task)
        return HomeworkResponse.model_validate(task)

    def get_task(self, task_id: int) -> HomeworkTask:
        task = self.db.execute(
            select(HomeworkTask).where(HomeworkTask.id == task_id)
        ).scalar_one_or_none()
        if not task:
            raise NotFoundError("Homework task", str(task_id))
        return task

    def list_tasks(
        self,
        class_level: ClassLevel,
        subject: str | None = None,
        status: HomeworkStatus | None = None,
    ) -> list[HomeworkResponse]:
        """Tasks of a class, most recently assigned first."""
        query = select(HomeworkTask).where(HomeworkTask.class_level == class_level.value)
        if subject:
            query = query.where(HomeworkTask.subject == subject.strip().lower())
        if status:
            query = query.where(HomeworkTask.status == status)
        query = query.order_by(HomeworkTask.assigned_on.desc(), HomeworkTask.id.desc())
        return [HomeworkResponse.model_validate(t) for t in self.db.execute(query).scalars().all()]

    def update_task(self, task: HomeworkTask, request: HomeworkUpdate) -> HomeworkResponse:
        """Move a task through its lifecycle or record who has not submitted."""
        if request.status is not None:
            task.status = request.status
        if request.non_submitters is not None:
            # Roll numbers, de-duplicated in submission order
            task.non_submitters = list(dict.fromkeys(r.strip() for r in request.non_submitters if r.strip()))
        self.db.flush()
        self.db.refresh(task)
        logger.debug("Homework %s now %s", task.id, task.status.value)
        return HomeworkResponse.model_validate(task)

    def delete_task(self, task: HomeworkTask) -> None:
        self.db.delete(task)
        self.db.flush()
