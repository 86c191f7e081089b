"""List pages: one generic controller, configured per entity."""

from trackmykid.pages.controller import FormMode, FormState, ListPage, PageState, describe_error
from trackmykid.pages.entities import ENTITIES, Column, EntitySpec, RelatedSpec, get_entity
from trackmykid.pages.filtering import filter_rows
from trackmykid.pages.listing import ListResult, parse_list_response, read_total

__all__ = [
    "ENTITIES",
    "Column",
    "EntitySpec",
    "FormMode",
    "FormState",
    "ListPage",
    "ListResult",
    "PageState",
    "RelatedSpec",
    "describe_error",
    "filter_rows",
    "get_entity",
    "parse_list_response",
    "read_total",
]
