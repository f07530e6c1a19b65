"""
View-models shared by every dashboard page.

``ListViewModel`` holds the last fetched snapshot of one table and filters it
locally. ``FormController`` edits a single draft and writes it back through the
same client, then asks the list to refetch. After any successful write the
snapshot is rebuilt from a fresh fetch; nothing is patched in place.

Both classes are framework-free: remote work goes through a runner with the
``submit(fn, on_success=, on_error=, on_finish=)`` signature and state changes
are announced to plain callbacks registered with ``subscribe``.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, TypeVar

from .api import Between, RemoteCollectionClient, RemoteError
from .notifications import LoggingNotifier, NotificationSink, error_message
from .runners import ImmediateRunner, Runner
from .tables import Collection, Draft, Errors

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[], None]

ALL = "all"


class ValidationError(Exception):
    """Draft failed local checks; nothing was sent to the server."""

    def __init__(self, errors: Errors) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(f"{name}: {message}" for name, message in self.errors.items()))


def _normalize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


class _Observable:
    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Listener:
        """Register ``listener``; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()


class ListViewModel(_Observable, Generic[T]):
    def __init__(
        self,
        client: RemoteCollectionClient,
        collection: Collection[T],
        *,
        runner: Optional[Runner] = None,
        notifier: Optional[NotificationSink] = None,
    ) -> None:
        super().__init__()
        self.client = client
        self.collection = collection
        self.runner = runner or ImmediateRunner()
        self.notifier = notifier or LoggingNotifier()
        self.snapshot: List[T] = []
        self.is_loading = False
        self.last_error: Optional[RemoteError] = None
        self.search_text = ""
        self.active_filters: Dict[str, Any] = {}
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Detach the view; results of calls still in flight are dropped."""
        self._disposed = True
        self._listeners.clear()

    def refresh(self) -> None:
        if self._disposed:
            return
        filters = {**self.collection.fixed_filters, **self.active_filters}
        self.is_loading = True
        self._changed()

        def work() -> List[T]:
            rows = self.client.list(filters, self.collection.order, self.collection.limit)
            return [self.collection.parse(row) for row in rows]

        def on_success(items: List[T]) -> None:
            if self._disposed:
                return
            self.snapshot = items
            self.last_error = None
            logger.debug("Loaded %d %s", len(items), self.collection.table)

        def on_error(exc: Exception) -> None:
            if self._disposed:
                return
            fallback = f"Failed to fetch {self.collection.label.lower()}"
            if isinstance(exc, RemoteError):
                self.last_error = exc
            else:
                logger.error("Unexpected failure loading %s", self.collection.table, exc_info=exc)
                self.last_error = RemoteError(fallback)
            self.notifier.error(error_message(exc, fallback))

        def on_finish() -> None:
            if self._disposed:
                return
            self.is_loading = False
            self._changed()

        self.runner.submit(work, on_success=on_success, on_error=on_error, on_finish=on_finish)

    def visible_items(self) -> Iterator[T]:
        snapshot = list(self.snapshot)
        needle = self.search_text.lower()
        filters = {name: _normalize(value) for name, value in self.active_filters.items()}
        fields = self.collection.search_fields

        def matches_search(item: T) -> bool:
            if not needle:
                return True
            return any(needle in str(getattr(item, name, None) or "").lower() for name in fields)

        def matches_filters(item: T) -> bool:
            for name, value in filters.items():
                actual = _normalize(getattr(item, name, None))
                if isinstance(value, Between):
                    if not value.matches(actual):
                        return False
                elif actual != value:
                    return False
            return True

        return (item for item in snapshot if matches_search(item) and matches_filters(item))

    def set_search_text(self, text: str) -> None:
        self.search_text = text or ""
        self._changed()

    def set_filter(self, name: str, value: Any) -> None:
        if value is None or value == ALL:
            self.active_filters.pop(name, None)
        else:
            self.active_filters[name] = _normalize(value)
        self._changed()

    def clear_filters(self) -> None:
        self.active_filters.clear()
        self.search_text = ""
        self._changed()

    def notify_mutation_completed(self) -> None:
        self.refresh()


class FormMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class DeleteState(str, Enum):
    IDLE = "idle"
    PENDING_CONFIRMATION = "pending_confirmation"


class DeleteConfirmation:
    """Idle -> PendingConfirmation(key) -> Idle, on confirm or cancel."""

    def __init__(self) -> None:
        self.state = DeleteState.IDLE
        self.pending_key: Optional[Any] = None

    @property
    def is_pending(self) -> bool:
        return self.state is DeleteState.PENDING_CONFIRMATION

    def request(self, key: Any) -> None:
        self.state = DeleteState.PENDING_CONFIRMATION
        self.pending_key = key

    def resolve(self) -> Optional[Any]:
        key = self.pending_key if self.is_pending else None
        self.state = DeleteState.IDLE
        self.pending_key = None
        return key


class FormController(_Observable, Generic[T]):
    def __init__(
        self,
        client: RemoteCollectionClient,
        collection: Collection[T],
        *,
        list_view: Optional[ListViewModel[T]] = None,
        runner: Optional[Runner] = None,
        notifier: Optional[NotificationSink] = None,
    ) -> None:
        super().__init__()
        self.client = client
        self.collection = collection
        self.list_view = list_view
        self.runner = runner or ImmediateRunner()
        self.notifier = notifier or LoggingNotifier()
        self.mode = FormMode.CREATE
        self.editing_key: Optional[Any] = None
        self.draft: Draft = collection.defaults()
        self.errors: Errors = {}
        self.is_open = False
        self.is_submitting = False
        self.deletion = DeleteConfirmation()

    @property
    def singular(self) -> str:
        return self.collection.singular

    def open_for_create(self) -> None:
        self.draft = self.collection.defaults()
        self.errors = {}
        self.mode = FormMode.CREATE
        self.editing_key = None
        self.is_open = True
        self._changed()

    def open_for_edit(self, record: T) -> None:
        self.draft = self.collection.to_draft(record)
        self.errors = {}
        self.mode = FormMode.EDIT
        self.editing_key = getattr(record, "key")
        self.is_open = True
        self._changed()

    def update_field(self, name: str, value: Any) -> None:
        self.draft[name] = value
        self.errors.pop(name, None)

    def close(self) -> None:
        self.is_open = False
        self.mode = FormMode.CREATE
        self.editing_key = None
        self.draft = self.collection.defaults()
        self.errors = {}
        self._changed()

    def submit(self) -> None:
        if self.is_submitting:
            return
        creating = self.mode is FormMode.CREATE
        errors = self.collection.validate(self.draft, creating)
        if errors:
            self.errors = errors
            self._changed()
            raise ValidationError(errors)

        payload = self.collection.payload(self.draft, creating)
        key = self.editing_key
        self.is_submitting = True
        self._changed()

        def work() -> Dict[str, Any]:
            if creating:
                return self.client.create(payload)
            return self.client.update(key, payload)

        def on_success(_: Any) -> None:
            self.close()
            verb = "created" if creating else "updated"
            self.notifier.success(f"{self.singular.capitalize()} {verb} successfully")
            if self.list_view is not None:
                self.list_view.notify_mutation_completed()

        def on_error(exc: Exception) -> None:
            if not isinstance(exc, RemoteError):
                logger.error("Unexpected failure saving %s", self.collection.table, exc_info=exc)
            self.notifier.error(error_message(exc, f"Failed to save {self.singular}"))

        def on_finish() -> None:
            self.is_submitting = False
            self._changed()

        self.runner.submit(work, on_success=on_success, on_error=on_error, on_finish=on_finish)

    def request_delete(self, key: Any) -> None:
        self.deletion.request(key)
        self._changed()

    def cancel_delete(self) -> None:
        self.deletion.resolve()
        self._changed()

    def confirm_delete(self) -> None:
        key = self.deletion.resolve()
        self._changed()
        if key is None:
            return

        def work() -> None:
            self.client.delete(key)

        def on_success(_: Any) -> None:
            self.notifier.success(f"{self.singular.capitalize()} deleted successfully")
            if self.list_view is not None:
                self.list_view.notify_mutation_completed()

        def on_error(exc: Exception) -> None:
            if not isinstance(exc, RemoteError):
                logger.error("Unexpected failure deleting %s", self.collection.table, exc_info=exc)
            self.notifier.error(error_message(exc, f"Failed to delete {self.singular}"))

        self.runner.submit(work, on_success=on_success, on_error=on_error)
