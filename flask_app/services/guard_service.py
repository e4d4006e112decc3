"""
Service that keeps one navigation guard per browser session.

A session only holds a registry entry while its prompt is open; idle guards
are dropped, and read-only requests never create one.
"""
import threading
import uuid
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from flask import current_app, redirect, session

from autoservice.models import PromptContent
from autoservice.navigation_guard import NavigationGuard, PromptChoice

SESSION_KEY = 'guard_session_id'


class _GuardEntry:
    """A session's guard plus the lock serializing its transitions."""

    def __init__(self, guard: NavigationGuard):
        self.guard = guard
        self.lock = threading.Lock()


class NavigationGuardService:
    """Service for routing destructive navigations through a session's guard."""

    _guards: dict[str, _GuardEntry] = {}
    _registry_lock = threading.Lock()

    @staticmethod
    def prompt_from_config() -> PromptContent:
        """Build the prompt copy from the app configuration."""
        config = current_app.config
        defaults = PromptContent()
        return PromptContent(
            title=config.get('UNSAVED_CHANGES_TITLE', defaults.title),
            message=config.get('UNSAVED_CHANGES_MESSAGE', defaults.message),
            confirm_label=config.get('UNSAVED_CHANGES_CONFIRM_LABEL', defaults.confirm_label),
            cancel_label=config.get('UNSAVED_CHANGES_CANCEL_LABEL', defaults.cancel_label),
        )

    @classmethod
    def reset(cls) -> None:
        """Forget every session's guard."""
        with cls._registry_lock:
            cls._guards.clear()

    @classmethod
    def active_count(cls) -> int:
        """Number of sessions currently holding a guard."""
        with cls._registry_lock:
            return len(cls._guards)

    @contextmanager
    def _locked_guard(self, create: bool) -> Iterator[Optional[NavigationGuard]]:
        """
        Hold the current session's guard under its lock.

        Args:
            create: Create the guard (and session id) when the session has none

        Yields:
            The guard, or None when the session has none and create is False
        """
        session_id = session.get(SESSION_KEY)
        if not session_id:
            if not create:
                yield None
                return
            session_id = uuid.uuid4().hex
            session[SESSION_KEY] = session_id

        while True:
            with self._registry_lock:
                entry = self._guards.get(session_id)
                if entry is None and create:
                    entry = _GuardEntry(NavigationGuard(prompt=self.prompt_from_config()))
                    self._guards[session_id] = entry
                    current_app.logger.debug("Created navigation guard for session %s", session_id)
            if entry is None:
                yield None
                return

            with entry.lock:
                with self._registry_lock:
                    current = self._guards.get(session_id)
                if current is not entry:
                    # Dropped while this request waited; start over.
                    continue
                try:
                    yield entry.guard
                finally:
                    if not entry.guard.has_pending_action:
                        with self._registry_lock:
                            if self._guards.get(session_id) is entry:
                                del self._guards[session_id]
                return

    def request_redirect(self, target: str, has_unsaved_changes: bool) -> Optional[Any]:
        """
        Navigate to target, asking for confirmation when there are unsaved changes.

        Args:
            target: Validated local path to redirect to
            has_unsaved_changes: Whether the calling screen holds unsaved work

        Returns:
            Redirect response when navigation happened immediately, None when
            the guard is now awaiting confirmation
        """
        with self._locked_guard(create=True) as guard:
            if has_unsaved_changes:
                guard.mark_dirty()
            else:
                guard.mark_clean()

            response = guard.navigate(self._redirect_action(target))
            if response is None:
                current_app.logger.info("Navigation to %s awaiting confirmation", target)
            return response

    def resolve(self, choice: PromptChoice) -> Optional[Any]:
        """
        Apply the user's choice to the current session's guard.

        Returns:
            The pending action's response on confirm, otherwise None
        """
        with self._locked_guard(create=False) as guard:
            if guard is None:
                current_app.logger.debug("Guard resolved with %s (no guard)", choice.value)
                return None
            had_pending = guard.has_pending_action
            response = guard.resolve(choice)
            current_app.logger.debug("Guard resolved with %s (pending: %s)", choice.value, had_pending)
            return response

    def get_state(self) -> dict[str, Any]:
        """Get the current session's guard state for polling."""
        with self._locked_guard(create=False) as guard:
            if guard is None:
                return NavigationGuard(prompt=self.prompt_from_config()).snapshot()
            return guard.snapshot()

    @staticmethod
    def _redirect_action(target: str) -> Callable[[], Any]:
        def go():
            current_app.logger.info("Navigating to %s", target)
            return redirect(target)
        return go
