"""Base models for CRM records and form drafts.

Every record model inherits from :class:`CrmRecord` which provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* An ``id`` accepted from either ``id`` or ``_id``.
* A ``model_validator(mode="before")`` that drops ``None`` values so the
  field default is used, and stashes the original payload in ``raw``.
* :meth:`CrmRecord.display` for table cells, rendering a placeholder for
  missing optional values.

Form drafts inherit from :class:`CrmForm`, which knows its required
fields and produces the camelCase JSON payload for POST/PUT.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from trackmykid._constants import PLACEHOLDER
from trackmykid.exceptions import CrmValidationError

RecordId = int | str


class CrmRecord(BaseModel):
    """Base for records mirrored from the CRM API."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: RecordId | None = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    raw: dict[str, Any] = Field(default_factory=dict)
    """Original API record."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        cleaned = {key: value for key, value in values.items() if value is not None}
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned

    def display(self, field: str) -> str:
        """Text for a table cell; missing values render as a placeholder."""
        value = getattr(self, field, None)
        if value is None or value == "":
            return PLACEHOLDER
        if isinstance(value, bool):
            return "yes" if value else "no"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)


class CrmForm(BaseModel):
    """Base for editable drafts.

    Subclasses declare ``REQUIRED`` (field names that must be non-empty)
    and optionally ``LABELS`` for friendlier validation messages.
    """

    REQUIRED: ClassVar[tuple[str, ...]] = ()
    LABELS: ClassVar[dict[str, str]] = {}

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        str_strip_whitespace=True,
    )

    @classmethod
    def label(cls, field: str) -> str:
        return cls.LABELS.get(field, field.replace("_", " ").capitalize())

    @classmethod
    def by_field_name(cls, values: Mapping[str, Any]) -> dict[str, Any]:
        """Re-key *values* so wire aliases (``contactPerson``) use field names."""
        by_alias = {info.alias: name for name, info in cls.model_fields.items() if info.alias}
        return {by_alias.get(key, key): value for key, value in values.items()}

    @classmethod
    def from_draft(cls, draft: dict[str, Any]) -> CrmForm:
        """Validate a raw draft, raising :class:`CrmValidationError` on failure."""
        try:
            form = cls.model_validate(draft)
        except ValidationError as exc:
            first = exc.errors()[0]
            loc = first.get("loc") or ("",)
            by_alias = {info.alias: name for name, info in cls.model_fields.items() if info.alias}
            field = by_alias.get(str(loc[0]), str(loc[0]))
            raise CrmValidationError(f"{cls.label(field)}: {first.get('msg', 'invalid value')}", field=field) from exc
        form.check_required()
        return form

    @classmethod
    def from_record(cls, record: CrmRecord) -> dict[str, Any]:
        """Draft pre-filled from an existing record's editable fields."""
        draft: dict[str, Any] = {}
        for name, field in cls.model_fields.items():
            value = getattr(record, name, None)
            draft[name] = field.get_default(call_default_factory=True) if value is None else value
        return draft

    @classmethod
    def blank(cls) -> dict[str, Any]:
        return {name: field.get_default(call_default_factory=True) for name, field in cls.model_fields.items()}

    def check_required(self) -> None:
        for name in self.REQUIRED:
            value = getattr(self, name, None)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise CrmValidationError(f"{self.label(name)} is required", field=name)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
