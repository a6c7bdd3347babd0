# talkitout/routers/tasks.py
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import desc
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..constants import TaskPriority, TaskStatus
from ..db import get_db
from ..errors import AppError
from ..models import Task, User
from ..schemas import TaskIn, TaskOut, TaskStatusIn, TaskUpdate

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _own_task(db: Session, user: User, task_id: int) -> Task:
    task = db.query(Task).filter(Task.id == task_id, Task.user_id == user.id).one_or_none()
    if task is None:
        raise AppError(404, "Task not found")
    return task


@router.post("", response_model=TaskOut, status_code=201)
def create_task(body: TaskIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    task = Task(user_id=user.id, **body.model_dump())
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@router.get("", response_model=List[TaskOut])
def list_tasks(
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    subject: Optional[str] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    q = db.query(Task).filter(Task.user_id == user.id)
    if status is not None:
        q = q.filter(Task.status == status)
    if priority is not None:
        q = q.filter(Task.priority == priority)
    if subject:
        q = q.filter(Task.subject == subject)
    return q.order_by(desc(Task.created_at), desc(Task.id)).all()


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _own_task(db, user, task_id)


@router.patch("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    body: TaskUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = _own_task(db, user, task_id)
    for key, value in body.model_dump(exclude_unset=True).items():
        if key in ("title", "priority", "status") and value is None:
            raise AppError(400, f"{key} cannot be null")
        setattr(task, key, value)
    db.commit()
    db.refresh(task)
    return task


@router.patch("/{task_id}/status", response_model=TaskOut)
def update_status(
    task_id: int,
    body: TaskStatusIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = _own_task(db, user, task_id)
    task.status = body.status
    db.commit()
    db.refresh(task)
    return task


@router.delete("/{task_id}")
def delete_task(task_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    db.delete(_own_task(db, user, task_id))
    db.commit()
    return {"message": "Task deleted"}
