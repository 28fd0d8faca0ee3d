from __future__ import annotations

import copy
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from resources.base import ResourceSpec, entity_id
from transport.client import ApiTransport
from transport.errors import ApiError, InvalidTransitionError, ValidationError

logger = logging.getLogger(__name__)

ConfirmGate = Callable[[str], "bool | Awaitable[bool]"]


class ListStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class EditorStatus(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    SAVING = "saving"


@dataclass(frozen=True)
class ListState:
    status: ListStatus
    items: tuple[dict[str, Any], ...] = ()
    message: str | None = None


@dataclass
class EditorState:
    status: EditorStatus = EditorStatus.CLOSED
    draft: dict[str, Any] | None = None
    is_new: bool = False
    errors: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Notification:
    kind: str  # success | error
    message: str


NotificationListener = Callable[[Notification], None]


class ResourceSyncController:
    """List plus single-editor synchronization for one resource kind.

    The list is only ever replaced wholesale by a successful ``refresh()``;
    mutations never patch it locally. The editor is a small state machine
    (closed -> open -> saving -> closed | open) and at most one mutation
    (``submit`` or ``remove``) may be in flight at a time. After ``dispose()``
    late completions are absorbed without touching state.
    """

    def __init__(self, transport: ApiTransport, spec: ResourceSpec):
        self._transport = transport
        self.spec = spec
        self.list_state = ListState(ListStatus.LOADING)
        self.editor = EditorState()
        self.notification: Notification | None = None
        self._listeners: list[NotificationListener] = []
        self._refresh_seq = 0
        self._mutating = False
        self._disposed = False

    # ------------------------------------------------------------------
    # observation
    # ------------------------------------------------------------------
    @property
    def items(self) -> list[dict[str, Any]]:
        return [dict(item) for item in self.list_state.items]

    @property
    def busy(self) -> bool:
        return self._mutating

    @property
    def disposed(self) -> bool:
        return self._disposed

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def dismiss_notification(self) -> None:
        self.notification = None

    def _notify(self, kind: str, message: str) -> None:
        if self._disposed:
            return
        self.notification = Notification(kind=kind, message=message)
        for listener in list(self._listeners):
            listener(self.notification)

    def dispose(self) -> None:
        self._disposed = True
        self._listeners.clear()

    # ------------------------------------------------------------------
    # list
    # ------------------------------------------------------------------
    async def refresh(self) -> ListState:
        if self._disposed:
            return self.list_state
        self._refresh_seq += 1
        seq = self._refresh_seq
        failure = f"Failed to load {self.spec.plural_label}."

        try:
            data = await self._transport.get(self.spec.base_path)
        except ApiError as exc:
            if self._is_stale(seq):
                return self.list_state
            logger.warning("Loading %s failed: %s", self.spec.name, exc)
            self.list_state = ListState(ListStatus.FAILED, self.list_state.items, failure)
            self._notify("error", failure)
            return self.list_state

        if self._is_stale(seq):
            return self.list_state
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            logger.warning("Loading %s returned an unexpected payload", self.spec.name)
            self.list_state = ListState(ListStatus.FAILED, self.list_state.items, failure)
            self._notify("error", failure)
            return self.list_state

        self.list_state = ListState(ListStatus.READY, tuple(copy.deepcopy(data)))
        return self.list_state

    def _is_stale(self, seq: int) -> bool:
        return self._disposed or seq != self._refresh_seq

    # ------------------------------------------------------------------
    # editor
    # ------------------------------------------------------------------
    def open_editor(self, entity: dict[str, Any] | None = None) -> EditorState:
        if self.editor.status != EditorStatus.CLOSED:
            raise InvalidTransitionError(
                f"{self.spec.label} editor is already {self.editor.status.value}; close it first"
            )
        if entity is None:
            self.editor = EditorState(EditorStatus.OPEN, self.spec.new_draft(), is_new=True)
        else:
            self.editor = EditorState(
                EditorStatus.OPEN,
                copy.deepcopy(dict(entity)),
                is_new=entity_id(entity) is None,
            )
        return self.editor

    def update_field(self, name: str, value: Any) -> None:
        self._require_open("update a field")
        try:
            parsed = self.spec.parse_field(name, value)
        except (ValueError, TypeError, OverflowError) as exc:
            self.editor.errors[name] = str(exc)
            raise ValidationError({name: str(exc)}) from exc
        self.editor.draft[name] = parsed
        self.editor.errors.pop(name, None)

    def close_editor(self) -> None:
        if self.editor.status == EditorStatus.SAVING:
            raise InvalidTransitionError(f"Cannot close the {self.spec.noun} editor while saving")
        self.editor = EditorState()

    def _require_open(self, action: str) -> None:
        if self.editor.status != EditorStatus.OPEN:
            raise InvalidTransitionError(
                f"Cannot {action}: {self.spec.noun} editor is {self.editor.status.value}"
            )

    def _require_idle(self) -> None:
        if self._mutating:
            raise InvalidTransitionError(f"A {self.spec.noun} change is already in flight")

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------
    async def submit(self) -> bool:
        self._require_idle()
        self._require_open("submit")

        draft = self.editor.draft
        is_new = self.editor.is_new
        errors = self.spec.validate(draft)
        if errors:
            self.editor.errors = errors
            self._notify("error", f"Please correct the {self.spec.noun} details.")
            return False

        target_id = entity_id(draft)
        if not is_new and target_id is None:
            raise InvalidTransitionError(f"Cannot update a {self.spec.noun} without an identifier")

        self._mutating = True
        self.editor.status = EditorStatus.SAVING
        self.editor.errors = {}
        payload = copy.deepcopy(draft)
        try:
            if is_new:
                await self._transport.post(self.spec.base_path, payload)
            else:
                await self._transport.put(self.spec.item_path(target_id), payload)
        except ApiError as exc:
            if self._disposed:
                return False
            logger.warning("Saving %s failed: %s", self.spec.noun, exc)
            self.editor.status = EditorStatus.OPEN
            self._notify("error", f"Failed to save {self.spec.noun}.")
            return False
        finally:
            self._mutating = False

        if self._disposed:
            return True
        logger.info("%s %s", self.spec.label, "created" if is_new else f"{target_id} updated")
        self.editor = EditorState()
        self._notify("success", f"{self.spec.label} {'added' if is_new else 'updated'}!")
        await self.refresh()
        return True

    async def remove(self, entity: dict[str, Any], confirm: ConfirmGate) -> bool:
        self._require_idle()
        target_id = entity_id(entity)
        if target_id is None:
            raise InvalidTransitionError(f"Cannot delete a {self.spec.noun} that was never saved")

        self._mutating = True
        try:
            approved = confirm(f"Delete this {self.spec.noun}?")
            if inspect.isawaitable(approved):
                approved = await approved
            if not approved or self._disposed:
                return False
            await self._transport.delete(self.spec.item_path(target_id))
        except ApiError as exc:
            if self._disposed:
                return False
            logger.warning("Deleting %s %s failed: %s", self.spec.noun, target_id, exc)
            self._notify("error", f"Failed to delete {self.spec.noun}.")
            return False
        finally:
            self._mutating = False

        if self._disposed:
            return True
        logger.info("%s %s deleted", self.spec.label, target_id)
        self._notify("success", f"{self.spec.label} deleted!")
        await self.refresh()
        return True
