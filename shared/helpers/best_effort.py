import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from shared.core.exceptions import DegradedNotification

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class StepOutcome(Generic[T]):
    step: str
    value: Optional[T] = None
    error: Optional[DegradedNotification] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def attempt(step: str, func: Callable[..., T], *args: Any, default: Any = None, **kwargs: Any) -> StepOutcome[T]:
    """
    Run one fallible enrichment step in isolation.

    A raised exception is logged and turned into a DegradedNotification on the
    outcome; a None result is replaced by `default` in both cases.
    """
    try:
        value = func(*args, **kwargs)
    except Exception as e:
        logger.warning(f"Degraded notification: step '{step}' failed: {e}")
        return StepOutcome(step=step, value=default, error=DegradedNotification(step, e))

    return StepOutcome(step=step, value=default if value is None else value)
