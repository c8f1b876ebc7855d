# src/task_timer/tasks/task_api.py

from __future__ import annotations

import logging

from ..core.observer import LiveValue
from ..core.ports import TaskRepo
from .task_models import Task

logger = logging.getLogger(__name__)


def save_task(store: TaskRepo, task: Task) -> Task:
    """
    Insert (id == 0) or update a task and return it.

    A task with an empty name is not saved; it is returned unchanged (id stays 0).
    """
    if not task.name or not task.name.strip():
        logger.debug("save_task: not saving a task with no name")
        return task

    if task.id == 0:
        task.id = store.add_task(
            name=task.name,
            description=task.description,
            sort_order=task.sort_order,
        )
        logger.info("Task saved id=%s name=%r", task.id, task.name)
    else:
        store.update_task(
            task.id,
            name=task.name,
            description=task.description,
            sort_order=task.sort_order,
        )
        logger.info("Task updated id=%s name=%r", task.id, task.name)
    return task


def delete_task(store: TaskRepo, task_id: int) -> None:
    logger.info("Deleting task id=%s", task_id)
    store.delete_task(task_id)


class TaskList:
    """
    Presentation-side list of tasks, ordered by sort order then name.

    Re-reads the store on every change notification and publishes the result
    through `tasks` (a LiveValue). close() releases the store subscription.
    """

    def __init__(self, store: TaskRepo) -> None:
        self._store = store
        self.tasks: LiveValue[list[Task]] = LiveValue([])
        self._sub = store.subscribe(self.reload)
        self.reload()

    def reload(self) -> None:
        try:
            tasks = self._store.list_tasks()
        except Exception:
            logger.exception("TaskList: reloading tasks failed")
            return
        logger.debug("TaskList: %d tasks", len(tasks))
        self.tasks.set(tasks)

    def close(self) -> None:
        self._sub.cancel()
