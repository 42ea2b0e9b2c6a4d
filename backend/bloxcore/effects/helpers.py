"""Small helpers shared by the built-in effects."""

from typing import Any
from typing import Dict
from typing import Optional

from bloxcore.registries.effects import Dispatch
from bloxcore.registries.effects import EffectContext
from bloxcore.schemas.actions import ActionType
from bloxcore.schemas.actions import make_action


def dispatch_log(
    dispatch: Dispatch,
    level: str,
    message: str,
    source: str,
    data: Optional[Dict[str, Any]] = None,
) -> None:
    """Append a user-visible entry to the in-state log buffer."""

    payload: Dict[str, Any] = {"level": level, "message": message, "source": source}
    if data is not None:
        payload["data"] = data
    dispatch(make_action(ActionType.LOGS_APPEND, payload))


def report_failure(context: EffectContext, dispatch: Dispatch, message: str, source: str, error: Exception) -> None:
    """Log an effect failure to both the operator log and the in-state buffer."""

    if context.logger is not None:
        context.logger.warn(message, {"error": str(error), "source": source})
    dispatch_log(dispatch, "warn", message, source, {"error": str(error)})
