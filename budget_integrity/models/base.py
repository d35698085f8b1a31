"""
Shared model configuration and field helpers.

Every budget document arrives from the persistence layer with camelCase keys
(Firestore style). Models accept either spelling and always serialize back to
the camelCase form with ``model_dump(by_alias=True)``.

DESIGN DECISION: Documents are immutable snapshots. The engine only reads
them; changes happen in the CRUD layer, which re-validates afterwards.
"""

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BudgetDocument(BaseModel):
    """
    Base class for every budget entity.

    ``revalidate_instances="always"`` matters: the validators re-run the
    schema on instances handed to them, and an instance built with
    ``model_construct()`` must not be trusted just because it is an instance.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        str_strip_whitespace=True,
        revalidate_instances="always",
    )


def read_field(source: Any, name: str) -> Any:
    """
    Read a field from a model, a plain object or a mapping.

    Mappings may use either the snake_case name or its camelCase alias.
    Missing fields read as None.
    """
    if source is None:
        return None
    if isinstance(source, Mapping):
        if name in source:
            return source[name]
        return source.get(to_camel(name))
    return getattr(source, name, None)


def read_items(allocation: Any) -> list[Any]:
    """
    The ``items`` of an allocation, or an empty list when they are missing
    or not a list.
    """
    items = read_field(allocation, "items")
    if isinstance(items, (list, tuple)):
        return list(items)
    return []


def is_hashable(value: Any) -> bool:
    """True if ``value`` can be used as a set member or mapping key."""
    try:
        hash(value)
    except TypeError:
        return False
    return True


def is_number(value: Any) -> bool:
    """True for int/float values (bools excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_in_future(moment: date | datetime) -> bool:
    """
    Check whether a date or datetime lies after the current moment.

    Naive datetimes are compared against local time, aware ones against
    the current time in their own zone.
    """
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            return moment > datetime.now()
        return moment > datetime.now(moment.tzinfo)
    return moment > date.today()
