"""
Confirmation guard for actions that would discard unsaved changes.

Screen code hands the destructive action to the guard instead of running it.
The guard keeps at most one pending action, shows a prompt for it, and runs it
only when the user confirms.
"""

import logging
from enum import Enum
from typing import Any, Callable, Optional

from autoservice.models import PromptContent

logger = logging.getLogger(__name__)

PendingAction = Callable[[], Any]


class GuardState(str, Enum):
    """States of a navigation guard."""

    IDLE = 'idle'
    AWAITING_CONFIRMATION = 'awaiting_confirmation'


class PromptChoice(str, Enum):
    """Outcome reported by whatever renders the prompt."""

    CONFIRM = 'confirm'
    CANCEL = 'cancel'
    DISMISS = 'dismiss'


class NavigationGuard:
    """Holds a single pending action until the user confirms or cancels it.

    Not thread-safe: transitions are expected to come from one event loop or
    request at a time.
    """

    def __init__(self, prompt: Optional[PromptContent] = None, has_unsaved_changes: bool = False):
        """
        Initialize the guard.

        Args:
            prompt: Copy for the confirmation prompt (default: PromptContent())
            has_unsaved_changes: Whether the owning screen starts out dirty
        """
        self.prompt = prompt or PromptContent()
        self.has_unsaved_changes = has_unsaved_changes
        self._pending_action: Optional[PendingAction] = None

    @property
    def state(self) -> GuardState:
        if self._pending_action is None:
            return GuardState.IDLE
        return GuardState.AWAITING_CONFIRMATION

    @property
    def is_prompt_visible(self) -> bool:
        return self._pending_action is not None

    @property
    def has_pending_action(self) -> bool:
        return self._pending_action is not None

    def request_navigation(self, action: PendingAction) -> None:
        """
        Store an action and show the prompt for it.

        A request made while another is pending replaces it; the earlier
        action is dropped without running.

        Raises:
            TypeError: If action is not callable
        """
        if not callable(action):
            raise TypeError(f"Pending action must be callable, got {type(action).__name__}")
        if self._pending_action is not None:
            logger.debug("Replacing pending action %r with %r", self._pending_action, action)
        self._pending_action = action

    def confirm(self) -> Any:
        """
        Run the pending action once and return to idle.

        Returns:
            Whatever the action returns, or None when nothing was pending
        """
        action = self._pending_action
        self._pending_action = None
        if action is None:
            logger.debug("Confirm with nothing pending; ignoring")
            return None
        return action()

    def cancel(self) -> None:
        """Drop the pending action without running it."""
        if self._pending_action is not None:
            logger.debug("Cancelled pending action %r", self._pending_action)
        self._pending_action = None

    def dismiss(self) -> None:
        """Prompt closed without an explicit choice; same as cancel()."""
        self.cancel()

    def resolve(self, choice: PromptChoice) -> Any:
        """Apply the choice reported by the prompt renderer."""
        choice = PromptChoice(choice)
        if choice is PromptChoice.CONFIRM:
            return self.confirm()
        if choice is PromptChoice.CANCEL:
            self.cancel()
        else:
            self.dismiss()
        return None

    # Unsaved-changes tracking

    def mark_dirty(self) -> None:
        self.has_unsaved_changes = True

    def mark_clean(self) -> None:
        self.has_unsaved_changes = False

    def navigate(self, action: PendingAction) -> Any:
        """
        Run an action now if nothing is unsaved, otherwise ask first.

        Returns:
            The action's result when it ran immediately, else None
        """
        if self.has_unsaved_changes:
            self.request_navigation(action)
            return None
        return action()

    def before_unload_message(self) -> Optional[str]:
        """Message for a page-unload warning, or None when nothing is unsaved."""
        return self.prompt.message if self.has_unsaved_changes else None

    def snapshot(self) -> dict[str, Any]:
        """Get the current guard state for renderers and polling."""
        return {
            'state': self.state.value,
            'prompt_visible': self.is_prompt_visible,
            'has_pending_action': self.has_pending_action,
            'has_unsaved_changes': self.has_unsaved_changes,
            'prompt': self.prompt.as_dict(),
        }
