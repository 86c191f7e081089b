"""Generic list-page controller.

One :class:`ListPage` drives a searchable, paginated table with optional
inline create/edit/delete for any entity described by an
:class:`~trackmykid.pages.entities.EntitySpec`.

State has three independent axes: ``loading`` (idle or fetching), the form
(closed, create, or edit of one record) and the data (rows plus page count).
Every page action catches :class:`~trackmykid.exceptions.CrmError` itself,
so callers always end up with either fresh rows or a visible error; nothing
propagates out of ``fetch``, ``submit`` or ``delete``.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import ValidationError

from trackmykid._constants import RELATED_PER_PAGE
from trackmykid.config import CrmConfig
from trackmykid.exceptions import (
    CrmAuthenticationError,
    CrmConfigError,
    CrmError,
    CrmForbiddenError,
    CrmTransportError,
    CrmValidationError,
)
from trackmykid.models import CrmRecord
from trackmykid.pages.entities import EntitySpec, Lookup, lookup_key
from trackmykid.pages.filtering import filter_rows
from trackmykid.pages.listing import parse_list_response
from trackmykid.session import SessionContext

_logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[str], bool]


class ApiClient(Protocol):
    """The part of :class:`~trackmykid.client.CrmClient` a page needs."""

    @property
    def config(self) -> CrmConfig: ...

    @property
    def context(self) -> SessionContext: ...

    async def get(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any: ...

    async def post(self, endpoint: str, body: Any = None) -> Any: ...

    async def put(self, endpoint: str, body: Any = None) -> Any: ...

    async def delete(self, endpoint: str) -> Any: ...


class FormMode(enum.StrEnum):
    CLOSED = "closed"
    CREATE = "create"
    EDIT = "edit"


@dataclass
class PageState:
    query: str = ""
    page: int = 1
    per_page: int = 10
    total_pages: int = 1
    rows: list[CrmRecord] = field(default_factory=list)
    loading: bool = False
    error: str | None = None


@dataclass
class FormState:
    mode: FormMode = FormMode.CLOSED
    draft: dict[str, Any] = field(default_factory=dict)
    editing: CrmRecord | None = None
    error: str | None = None

    @property
    def is_open(self) -> bool:
        return self.mode is not FormMode.CLOSED


def describe_error(exc: CrmError, action: str) -> str | None:
    """User-facing message for a failed page action.

    Returns ``None`` for an expired session: the client has already sent
    the user to the login page, so there is nothing to show.
    """
    if isinstance(exc, CrmAuthenticationError) and exc.status_code == 401:
        return None
    if isinstance(exc, CrmForbiddenError):
        return f"Access denied (403). Your account is not allowed to {action.lower()}."
    if isinstance(exc, CrmTransportError):
        return f"{action} failed: could not reach the server. Check your connection and try again."
    message = str(exc)
    return message or f"{action} failed"


def _deny(_message: str) -> bool:
    return False


class ListPage:
    """Controller behind one entity list page.

    Parameters
    ----------
    client : ApiClient
        Usually a :class:`~trackmykid.client.CrmClient`.
    spec : EntitySpec
        Entity configuration.
    per_page : int, optional
        Page size; defaults to ``client.config.per_page``.
    confirm : callable, optional
        Asked before every delete with a question such as
        ``"Delete Alpha Corp?"``.  Defaults to refusing, so deletes only
        happen when a caller wires up a real confirmation.
    """

    def __init__(
        self,
        client: ApiClient,
        spec: EntitySpec,
        *,
        per_page: int | None = None,
        confirm: ConfirmCallback | None = None,
    ) -> None:
        self._client = client
        self.spec = spec
        self.state = PageState(per_page=per_page if per_page is not None else client.config.per_page)
        self.form = FormState()
        self._confirm = confirm if confirm is not None else _deny
        self._related: dict[str, CrmRecord] = {}
        self._request_seq = 0

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def related(self) -> Lookup:
        return self._related

    @property
    def visible_rows(self) -> list[CrmRecord]:
        """Fetched rows narrowed by the client-side fallback filter."""
        return filter_rows(
            self.state.rows,
            self.state.query,
            lambda record: self.spec.haystack(record, self._related),
        )

    @property
    def pager_label(self) -> str:
        return f"Page {self.state.page} of {self.state.total_pages}"

    def cells(self, record: CrmRecord) -> list[str]:
        return [column.render(record, self._related) for column in self.spec.columns]

    def _to_records(self, rows: list[Any], model: type[CrmRecord]) -> list[CrmRecord]:
        records: list[CrmRecord] = []
        for item in rows:
            if not isinstance(item, dict):
                continue
            try:
                records.append(model.model_validate(item))
            except ValidationError:
                _logger.warning("Skipping malformed %s row id=%s", self.spec.name, item.get("id"), exc_info=True)
        return records

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def fetch(self) -> None:
        """Load the current page.

        Only the most recently issued request may update state; a slower
        response to an earlier request is discarded when it arrives.
        """
        self._request_seq += 1
        seq = self._request_seq
        self.state.loading = True
        self.state.error = None
        params = {
            "q": self.state.query.strip() or None,
            "page": self.state.page,
            "perPage": self.state.per_page,
        }
        try:
            response = await self._client.get(self.spec.endpoint, params)
        except CrmError as exc:
            if seq != self._request_seq:
                return
            _logger.debug("Fetching %s failed: %s", self.spec.name, exc)
            self.state.rows = []
            self.state.total_pages = 1
            self.state.error = describe_error(exc, f"Fetch {self.spec.title.lower()}")
            return
        finally:
            if seq == self._request_seq:
                self.state.loading = False

        if seq != self._request_seq:
            _logger.debug("Discarding stale %s response (seq %d < %d)", self.spec.name, seq, self._request_seq)
            return

        result = parse_list_response(response, self.state.per_page)
        self.state.rows = self._to_records(result.rows, self.spec.model)
        self.state.total_pages = result.total_pages

    async def search(self, text: str) -> None:
        """Change the search text; always starts over from page 1."""
        self.state.query = text
        self.state.page = 1
        await self.fetch()

    async def go_to(self, page: int) -> None:
        self.state.page = min(max(1, page), self.state.total_pages)
        await self.fetch()

    async def next_page(self) -> None:
        await self.go_to(self.state.page + 1)

    async def previous_page(self) -> None:
        await self.go_to(self.state.page - 1)

    async def load_related(self) -> None:
        """Load the related list used for labels and form dropdowns.

        Failure leaves the lookup empty; the page still works with raw ids.
        """
        related = self.spec.related
        if related is None:
            return
        try:
            response = await self._client.get(related.endpoint, {"page": 1, "perPage": RELATED_PER_PAGE})
        except CrmError as exc:
            _logger.warning("Failed to load %s for %s: %s", related.endpoint, self.spec.name, exc)
            self._related = {}
            return
        result = parse_list_response(response, RELATED_PER_PAGE)
        records = self._to_records(result.rows, related.model)
        self._related = {lookup_key(record.id): record for record in records if record.id is not None}

    def search_related(self, text: str) -> list[CrmRecord]:
        """Related records matching *text*, for picking a foreign key."""
        related = self.spec.related
        if related is None:
            return []
        return filter_rows(list(self._related.values()), text, related.haystack)

    # ------------------------------------------------------------------
    # Form
    # ------------------------------------------------------------------

    def open_create(self) -> None:
        if self.spec.form is None:
            raise CrmConfigError(f"{self.spec.title} cannot be created here")
        self.form = FormState(mode=FormMode.CREATE, draft=self.spec.form.blank())

    def open_edit(self, record: CrmRecord) -> None:
        if self.spec.form is None or not self.spec.editable:
            raise CrmConfigError(f"{self.spec.title} cannot be edited here")
        self.form = FormState(mode=FormMode.EDIT, draft=self.spec.form.from_record(record), editing=record)

    def close_form(self) -> None:
        self.form = FormState()

    def update_draft(self, **values: Any) -> None:
        self._merge_draft(values)

    def _merge_draft(self, values: Mapping[str, Any]) -> None:
        form_cls = self.spec.form
        self.form.draft.update(form_cls.by_field_name(values) if form_cls is not None else values)

    def _build_payload(self) -> dict[str, Any]:
        form_cls = self.spec.form
        if form_cls is None:
            raise CrmConfigError(f"{self.spec.title} has no form")
        payload = form_cls.from_draft(self.form.draft).to_payload()
        if self.spec.prepare_payload is not None:
            payload = self.spec.prepare_payload(payload, self._client.context, self._client.config)
        return payload

    async def submit(self, draft: Mapping[str, Any] | None = None) -> bool:
        """Validate and save the open form.

        Validation failures never reach the network.  On success the form
        closes and the list refetches; on failure the form stays open with
        ``form.error`` set.
        """
        if not self.form.is_open:
            raise CrmConfigError("No form is open")
        if draft is not None:
            self._merge_draft(draft)

        try:
            payload = self._build_payload()
        except CrmValidationError as exc:
            self.form.error = str(exc)
            return False

        self.form.error = None
        editing = self.form.editing
        try:
            if self.form.mode is FormMode.EDIT and editing is not None:
                action = f"Update {self.spec.singular}"
                if editing.id is None:
                    self.form.error = f"Cannot update a {self.spec.singular} without an id"
                    return False
                await self._client.put(f"{self.spec.endpoint}/{editing.id}", payload)
            else:
                action = f"Create {self.spec.singular}"
                await self._client.post(self.spec.endpoint, payload)
        except CrmError as exc:
            self.form.error = describe_error(exc, action)
            return False

        self.close_form()
        await self.fetch()
        return True

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(self, record: CrmRecord) -> bool:
        """Delete *record* after explicit confirmation.

        Returns ``True`` only when the record was deleted.
        """
        if not self.spec.deletable:
            raise CrmConfigError(f"{self.spec.title} cannot be deleted here")
        if not self._confirm(self.spec.confirm_message(record)):
            return False
        if record.id is None:
            self.state.error = f"Cannot delete a {self.spec.singular} without an id"
            return False
        try:
            await self._client.delete(f"{self.spec.endpoint}/{record.id}")
        except CrmError as exc:
            self.state.error = describe_error(exc, f"Delete {self.spec.singular}")
            return False
        await self.fetch()
        return True
