"""Best-effort local reminders for items that become due.

Reminders are a nudge only. They live in memory, are lost on restart and
never influence :meth:`ReviewScheduler.query_due`. Missing permission, an
unsupported host or a failing notifier are skipped without telling the
caller.
"""

from __future__ import annotations

import itertools
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger

from flash10.review_item import ReviewItem

DEFAULT_TITLE = "Flash10: time to review!"
DEFAULT_BODY = 'The word "{word}" is due for review. Open Flash10 to practise it.'


class Notifier:
    """Host notification sink."""

    def request_permission(self) -> bool:
        raise NotImplementedError

    def notify(self, title: str, body: str) -> None:
        raise NotImplementedError


class NullNotifier(Notifier):
    """Host without notification support."""

    def request_permission(self) -> bool:
        return False

    def notify(self, title: str, body: str) -> None:
        return None


class FletNotifier(Notifier):
    """Shows reminders as a snack bar on an open flet page."""

    def __init__(self, page: Any, *, duration_ms: int = 6000) -> None:
        self.page = page
        self.duration_ms = duration_ms

    def request_permission(self) -> bool:
        return self.page is not None

    def notify(self, title: str, body: str) -> None:
        import flet as ft

        snack = ft.SnackBar(
            content=ft.Column(
                controls=[
                    ft.Text(title, weight=ft.FontWeight.BOLD),
                    ft.Text(body),
                ],
                tight=True,
            ),
            duration=self.duration_ms,
        )
        self.page.open(snack)


class ReminderDispatcher:
    """Arms one-shot timers that surface a reminder when an item is due."""

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        *,
        timer_factory: Callable[..., Any] = threading.Timer,
        title: str = DEFAULT_TITLE,
        body_template: str = DEFAULT_BODY,
        enabled: bool = True,
    ) -> None:
        self.notifier = notifier or NullNotifier()
        self.timer_factory = timer_factory
        self.title = title
        self.body_template = body_template
        self.enabled = enabled
        self._permission: Optional[bool] = None
        # identity -> (ticket, timer); the ticket tells a stale timer from its replacement
        self._timers: Dict[str, Tuple[int, Any]] = {}
        self._tickets = itertools.count(1)
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Permission
    # ------------------------------------------------------------------
    def request_permission(self) -> bool:
        """Ask the host once; later calls return the first answer."""

        if self._permission is None:
            try:
                self._permission = bool(self.notifier.request_permission())
            except Exception as exc:
                logger.debug(f"Reminder permission request failed: {exc}")
                self._permission = False
            logger.info(f"Reminder permission granted: {self._permission}")
        return self._permission

    @property
    def permission_granted(self) -> bool:
        return bool(self._permission)

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------
    def schedule_reminder(self, item: ReviewItem, delay_ms: int) -> bool:
        """Arm a reminder for *item* after *delay_ms*.

        Returns ``True`` when a timer was armed. Any pending reminder for the
        same identity is cancelled first.
        """

        if not self.enabled or not self.permission_granted:
            return False

        display = item.display_identity()
        ticket = next(self._tickets)
        try:
            timer = self.timer_factory(
                max(delay_ms, 0) / 1000.0, self._fire, args=(item.identity, display, ticket)
            )
            timer.daemon = True
        except Exception as exc:
            logger.debug(f"Cannot create reminder timer for {item.identity!r}: {exc}")
            return False

        with self._lock:
            previous = self._timers.pop(item.identity, None)
            self._timers[item.identity] = (ticket, timer)
        if previous is not None:
            previous[1].cancel()

        try:
            timer.start()
        except Exception as exc:
            logger.debug(f"Cannot start reminder timer for {item.identity!r}: {exc}")
            with self._lock:
                if self._current_ticket(item.identity) == ticket:
                    del self._timers[item.identity]
            return False
        logger.debug(f"Reminder for {item.identity!r} armed in {delay_ms} ms")
        return True

    def _current_ticket(self, identity: str) -> Optional[int]:
        entry = self._timers.get(identity)
        return entry[0] if entry is not None else None

    def _fire(self, identity: str, display: str, ticket: int) -> None:
        with self._lock:
            if self._current_ticket(identity) != ticket:
                logger.debug(f"Dropping superseded reminder for {identity!r}")
                return
            del self._timers[identity]
        try:
            self.notifier.notify(self.title, self.body_template.format(word=display))
        except Exception as exc:
            logger.debug(f"Reminder for {identity!r} not delivered: {exc}")

    def cancel(self, identity: str) -> bool:
        with self._lock:
            entry = self._timers.pop(identity, None)
        if entry is None:
            return False
        entry[1].cancel()
        return True

    def cancel_all(self) -> None:
        with self._lock:
            timers = [timer for _, timer in self._timers.values()]
            self._timers.clear()
        for timer in timers:
            timer.cancel()

    def pending(self) -> List[str]:
        with self._lock:
            return sorted(self._timers)


__all__ = [
    "DEFAULT_BODY",
    "DEFAULT_TITLE",
    "FletNotifier",
    "Notifier",
    "NullNotifier",
    "ReminderDispatcher",
]
