from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, TYPE_CHECKING

from staffgate.apps.telegram_bot.models import StepName

if TYPE_CHECKING:
    from staffgate.apps.telegram_bot.steps import StepContext

StepHandler = Callable[["StepContext"], None]


@dataclass
class StepMeta:
    step: StepName
    handler: StepHandler
    description: str


_step_handlers: Dict[StepName, StepMeta] = {}


def handles(step: StepName, *, description: str = ""):
    """Decorator: @handles(StepName.EMAIL, description="Collect email")"""

    def _decorator(fn: StepHandler) -> StepHandler:
        if step in _step_handlers:
            raise RuntimeError(f"Step '{step.value}' already has a handler")
        _step_handlers[step] = StepMeta(step=step, handler=fn, description=description)
        return fn

    return _decorator


def resolve_step(raw: str) -> Optional[StepName]:
    try:
        return StepName(raw)
    except ValueError:
        return None


def get_step_meta(step: Optional[StepName]) -> Optional[StepMeta]:
    if step is None:
        return None
    return _step_handlers.get(step)
