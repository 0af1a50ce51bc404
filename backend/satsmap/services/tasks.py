from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

TaskFunc = Callable[[], Awaitable[Any]]


class ScheduledTask(ABC):
    """Handle to a one-off delayed task"""

    @property
    @abstractmethod
    def id(self) -> str:
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Drop the task if it has not run yet. Cancelling twice is a no-op."""
        pass


class TaskScheduler(ABC):
    """Runs a coroutine function once after a delay"""

    @abstractmethod
    def schedule(self, delay_seconds: float, func: TaskFunc, name: str) -> ScheduledTask:
        pass
