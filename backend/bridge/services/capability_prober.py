from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import UTC, date, datetime
from functools import lru_cache
from importlib import import_module
from types import ModuleType
from typing import Any

LOGGER = logging.getLogger("newstube.prober")

Predicate = Callable[[Any], bool]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_MISSING = object()


@lru_cache(maxsize=256)
def accessor_spellings(name: str) -> tuple[str, ...]:
    """
    Expand a logical accessor name into the spellings a provider may expose.

    `uploaderName` -> uploaderName, getUploaderName, uploader_name, get_uploader_name.
    Names that are already prefixed (`getInfo`) or snake_case stay first.
    """
    stripped = name.strip()
    if not stripped:
        return ()
    snake = _CAMEL_BOUNDARY.sub("_", stripped).lower()
    camel_getter = f"get{stripped[0].upper()}{stripped[1:]}"
    spellings = (stripped, camel_getter, snake, f"get_{snake}")
    return tuple(dict.fromkeys(spellings))


def probe(obj: Any, candidates: Iterable[str], predicate: Predicate) -> Any | None:
    """
    Return the first candidate accessor value on `obj` accepted by `predicate`.

    Candidates are tried in order. A missing accessor, a raising accessor or a
    rejected value all just move on to the next candidate; `None` means no
    candidate produced a usable value.
    """
    if obj is None:
        return None
    for name in candidates:
        for spelling in accessor_spellings(name):
            value = _try_read(obj, spelling)
            if value is _MISSING or value is None:
                continue
            try:
                accepted = predicate(value)
            except Exception:
                LOGGER.debug("probe predicate raised accessor=%s", spelling, exc_info=True)
                continue
            if accepted:
                return value
    return None


def probe_string(obj: Any, candidates: Iterable[str]) -> str | None:
    value = probe(obj, candidates, is_non_blank_string)
    if value is None:
        return None
    return str(value).strip()


def probe_sequence(obj: Any, candidates: Iterable[str]) -> list[Any] | None:
    value = probe(obj, candidates, is_non_empty_sequence)
    if value is None:
        return None
    return as_list(value)


def invoke_first(
    obj: Any,
    candidates: Iterable[str],
    *args: Any,
) -> tuple[bool, Any]:
    """
    Call the first candidate callable on `obj` that exists and does not raise.

    Returns `(True, result)` for the winning candidate or `(False, None)` when
    every candidate was missing or failed. Used for entry points that take
    arguments (search extractor factories, `fetchPage()`/`fetch()` triggers).
    """
    if obj is None:
        return False, None
    for name in candidates:
        for spelling in accessor_spellings(name):
            member = _lookup(obj, spelling)
            if member is _MISSING or not callable(member):
                continue
            try:
                return True, member(*args)
            except Exception:
                LOGGER.debug("invoke candidate failed accessor=%s", spelling, exc_info=True)
                break
    return False, None


def resolve_path(root: Any, dotted_path: str) -> Any | None:
    """
    Walk an attribute path such as `channel.tabs.ChannelTabInfo.getInfo`.

    Module segments that were not imported yet are imported on demand. Only the
    final segment gets spelling expansion; package and class names are literal.
    """
    segments = [segment for segment in dotted_path.split(".") if segment]
    if not segments:
        return None
    current = root
    for index, segment in enumerate(segments):
        is_last = index == len(segments) - 1
        spellings = accessor_spellings(segment) if is_last else (segment,)
        resolved: Any = _MISSING
        for spelling in spellings:
            resolved = _lookup(current, spelling)
            if resolved is _MISSING and isinstance(current, ModuleType):
                resolved = _import_submodule(current, spelling)
            if resolved is not _MISSING:
                break
        if resolved is _MISSING or resolved is None:
            return None
        current = resolved
    return current


def is_non_blank_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def is_non_empty_sequence(value: Any) -> bool:
    return is_sequence(value) and len(value) > 0


def is_sequence(value: Any) -> bool:
    if isinstance(value, str | bytes | bytearray | Mapping):
        return False
    if isinstance(value, Sequence):
        return True
    # Bridged JVM lists expose the sized/indexable protocol without registering.
    return hasattr(value, "__len__") and hasattr(value, "__getitem__")


def is_present(value: Any) -> bool:
    return value is not None


def is_timestamp_like(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, datetime | date | int | float)


def as_list(value: Any) -> list[Any]:
    if not is_sequence(value):
        return []
    return [item for item in list(value) if item is not None]


def to_epoch_millis(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, datetime):
        aware = value if value.tzinfo is not None else value.replace(tzinfo=UTC)
        return int(aware.timestamp() * 1000)
    if isinstance(value, date):
        return int(datetime(value.year, value.month, value.day, tzinfo=UTC).timestamp() * 1000)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return 0


def _try_read(obj: Any, spelling: str) -> Any:
    member = _lookup(obj, spelling)
    if member is _MISSING:
        return _MISSING
    if isinstance(obj, Mapping) or not callable(member) or isinstance(member, type):
        return member
    try:
        return member()
    except Exception:
        LOGGER.debug("probe accessor raised accessor=%s", spelling, exc_info=True)
        return _MISSING


def _lookup(obj: Any, spelling: str) -> Any:
    if isinstance(obj, Mapping):
        if spelling in obj:
            return obj[spelling]
        return _MISSING
    try:
        return getattr(obj, spelling)
    except Exception:
        return _MISSING


def _import_submodule(module: ModuleType, name: str) -> Any:
    try:
        return import_module(f"{module.__name__}.{name}")
    except ImportError:
        return _MISSING
