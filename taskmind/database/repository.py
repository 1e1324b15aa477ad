"""Repository layer for database operations."""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, asc, desc

from taskmind.models.task import Task, TaskStatus
from taskmind.database.models import TaskDB, enum_to_value, now_to_column, time_point_to_column
from taskmind.temporal.normalizer import TimePoint

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for Task database operations."""
    
    def __init__(self, db: Session):
        self.db = db

    def _ordered_by_due(self, query):
        # Earliest due first; tasks without a due date go last.
        return query.order_by(TaskDB.due_at.is_(None), asc(TaskDB.due_at), desc(TaskDB.created_at))
    
    def create(self, task: Task) -> Task:
        """Create a new task."""
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task.id}: {task.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise
    
    def get(self, user_id: str, task_id: str) -> Optional[Task]:
        """Get task by ID for a specific user."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == task_id,
            TaskDB.user_id == user_id,
        ).first()
        return task_db.to_pydantic() if task_db else None
    
    def list(self, user_id: str, subject: Optional[str] = None, priority: Optional[str] = None) -> List[Task]:
        """Get a user's tasks ordered by due date, optionally filtered by subject and priority."""
        conditions = [TaskDB.user_id == user_id]
        if subject:
            conditions.append(TaskDB.subject == subject)
        if priority:
            conditions.append(TaskDB.priority == enum_to_value(priority))
        
        tasks_db = self._ordered_by_due(self.db.query(TaskDB).filter(and_(*conditions))).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def list_due_between(self, user_id: str, start: TimePoint, end: TimePoint) -> List[Task]:
        """Tasks due within [start, end], inclusive on both ends."""
        tasks_db = self.db.query(TaskDB).filter(
            TaskDB.user_id == user_id,
            TaskDB.due_at.isnot(None),
            TaskDB.due_at >= time_point_to_column(start),
            TaskDB.due_at <= time_point_to_column(end),
        ).order_by(asc(TaskDB.due_at)).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def list_upcoming(self, user_id: str, now: TimePoint, limit: int) -> List[Task]:
        """Unfinished tasks due at or after ``now``, soonest first."""
        tasks_db = self.db.query(TaskDB).filter(
            TaskDB.user_id == user_id,
            TaskDB.status != TaskStatus.COMPLETED.value,
            TaskDB.due_at >= now_to_column(now),
        ).order_by(asc(TaskDB.due_at)).limit(limit).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def list_overdue(self, user_id: str, now: TimePoint, limit: Optional[int] = None) -> List[Task]:
        """Unfinished tasks due strictly before ``now``, oldest first."""
        query = self.db.query(TaskDB).filter(
            TaskDB.user_id == user_id,
            TaskDB.status != TaskStatus.COMPLETED.value,
            TaskDB.due_at < now_to_column(now),
        ).order_by(asc(TaskDB.due_at))
        if limit is not None:
            query = query.limit(limit)
        return [task_db.to_pydantic() for task_db in query.all()]

    def update(self, task: Task) -> Task:
        """Update an existing task (user_id must match task.user_id)."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == task.id,
            TaskDB.user_id == task.user_id,
        ).first()
        if not task_db:
            raise ValueError(f"Task {task.id} not found")
        
        # Update all fields
        task_db.title = task.title
        task_db.description = task.description
        task_db.subject = task.subject
        task_db.due_at = time_point_to_column(task.due_at)
        task_db.priority = enum_to_value(task.priority)
        task_db.status = enum_to_value(task.status)
        task_db.color = task.color
        task_db.grade = task.grade
        task_db.completed_at = time_point_to_column(task.completed_at)
        task_db.updated_at = task.updated_at
        
        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Updated task {task.id}: {task.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task.id}: {type(e).__name__}: {str(e)}")
            raise
    
    def delete(self, user_id: str, task_id: str) -> bool:
        """Delete a task by ID for a specific user."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == task_id,
            TaskDB.user_id == user_id,
        ).first()
        if not task_db:
            return False
        
        try:
            self.db.delete(task_db)
            self.db.commit()
            logger.debug(f"Deleted task {task_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise
