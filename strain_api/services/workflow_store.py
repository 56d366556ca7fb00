"""
Repository over users and their ordered workflow history.

One user's rows are the unit of consistency: every public method runs in its
own transaction and either commits or rolls back before returning.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from strain_api.core.exceptions import AppError, ConflictError, NotFoundError, ServiceUnavailable
from strain_api.models import User, Workflow
from strain_api.schemas.user import UserRecord
from strain_api.schemas.workflow import TERMINAL_STATUSES, WorkflowSchema

logger = logging.getLogger(__name__)


class WorkflowStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _unit_of_work(self, conflict_message: str | None = None) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if conflict_message is None:
                logger.error("Integrity violation: %s", exc.orig)
                raise ServiceUnavailable("Database rejected the write") from exc
            raise ConflictError(conflict_message) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Database operation failed: %s", exc)
            raise ServiceUnavailable("Database unavailable") from exc
        except AppError:
            self.db.rollback()
            raise

    def _user_row(self, email: str) -> User | None:
        return self.db.execute(select(User).where(User.email == email)).scalar_one_or_none()

    def _require_user(self, email: str) -> User:
        user = self._user_row(email)
        if user is None:
            raise NotFoundError("No such user")
        return user

    def find_user(self, email: str) -> UserRecord | None:
        with self._unit_of_work():
            user = self._user_row(email)
            record = UserRecord.model_validate(user) if user is not None else None
        return record

    def create_user(self, email: str) -> UserRecord:
        with self._unit_of_work(conflict_message="User already saved"):
            if self._user_row(email) is not None:
                raise ConflictError("User already saved")
            user = User(email=email)
            self.db.add(user)
            self.db.flush()
            record = UserRecord.model_validate(user)
        logger.info("Created user %s", email)
        return record

    def set_credential(self, email: str, credential: str) -> None:
        """Replace the stored long-lived credential for an existing user."""
        with self._unit_of_work():
            result = self.db.execute(
                update(User)
                .where(User.email == email)
                .values(credential=credential)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError("No such user")

    def append_workflow(self, email: str, workflow: WorkflowSchema) -> WorkflowSchema:
        """
        Append a workflow to the end of the user's history.

        Duplicate ids are rejected by the (user_id, workflow_id) unique
        constraint, so two racing appends yield one row and one ConflictError.
        """
        with self._unit_of_work(conflict_message="Workflow with that id already exists"):
            user = self._require_user(email)
            row = Workflow(
                user_id=user.id,
                workflow_id=workflow.workflow_id,
                submitted=workflow.submitted,
                finished=workflow.finished,
                algorithm=workflow.algorithm,
                species=workflow.species,
                project_id=workflow.project_id,
                sample_name=workflow.sample_name,
                single=workflow.single,
                status=workflow.status,
            )
            self.db.add(row)
            self.db.flush()
            stored = WorkflowSchema.model_validate(row)
        return stored

    def get_workflow_status(self, email: str, workflow_id: str) -> str:
        with self._unit_of_work():
            user = self._require_user(email)
            status = self.db.execute(
                select(Workflow.status).where(
                    Workflow.user_id == user.id,
                    Workflow.workflow_id == workflow_id,
                )
            ).scalar_one_or_none()
            if status is None:
                raise NotFoundError("Workflow with given workflowId not found")
        return status

    def set_workflow_status(self, email: str, workflow_id: str, status: str) -> None:
        """
        Overwrite the status of one workflow in a single UPDATE.

        Reaching a terminal status also stamps `finished` unless it is already set.
        """
        values: dict = {"status": status}
        if status in TERMINAL_STATUSES:
            values["finished"] = func.coalesce(Workflow.finished, datetime.now(timezone.utc))

        user_id = select(User.id).where(User.email == email).scalar_subquery()
        with self._unit_of_work():
            result = self.db.execute(
                update(Workflow)
                .where(Workflow.user_id == user_id, Workflow.workflow_id == workflow_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError("No user with given email, or workflowId found")

    def list_workflows(self, email: str) -> list[WorkflowSchema]:
        """Return the user's workflows in insertion order."""
        with self._unit_of_work():
            user = self._require_user(email)
            rows = self.db.execute(
                select(Workflow).where(Workflow.user_id == user.id).order_by(Workflow.id.asc())
            ).scalars().all()
            workflows = [WorkflowSchema.model_validate(row) for row in rows]
        return workflows
