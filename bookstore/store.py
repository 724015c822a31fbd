"""Shared state-container plumbing: actions, reducers and dispatch."""
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional

from bookstore.errors import ApiError

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


@dataclass(frozen=True)
class SetLoading:
    is_loading: bool


@dataclass(frozen=True)
class SetError:
    error: Optional[ApiError]


@dataclass(frozen=True)
class SetFormErrors:
    form_errors: Dict[str, str]


def reduce_status(state, action):
    """
    Apply the status actions every collection understands.

    Returns the new state, or None when the action is not a status action.
    A recorded error always ends the loading phase.
    """
    if isinstance(action, SetLoading):
        return replace(state, is_loading=action.is_loading)
    if isinstance(action, SetError):
        return replace(state, error=action.error, is_loading=False)
    if isinstance(action, SetFormErrors):
        return replace(state, form_errors=dict(action.form_errors))
    return None


class Store:
    """Holds one state value and replaces it through a pure reducer."""

    def __init__(self, reducer: Callable[[Any, Any], Any], initial_state):
        self._reducer = reducer
        self.state = initial_state
        self._listeners: List[Listener] = []

    def dispatch(self, action):
        self.state = self._reducer(self.state, action)
        for listener in list(self._listeners):
            listener(self.state)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called after every dispatch; returns an unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def fail(self, action_name: str, error: ApiError):
        """Record a failed API call as data instead of raising."""
        logger.error(f"{action_name} failed ({error.status}): {error.message}")
        self.dispatch(SetError(error))
