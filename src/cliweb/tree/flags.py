"""Parse and serialise flag values according to their declared :class:`~cliweb.models.FlagType`.

Values cross the browser/server boundary as strings. This module is the
only place that knows how those strings map to Python values:

* **Scalars** -- ``string`` is taken verbatim, ``int`` and ``float64`` go
  through :func:`int` / :func:`float`, ``bool`` accepts the usual
  command-line spellings (``1``, ``t``, ``true``, ``0``, ``f``, ``false``
  in any case).
* **Lists** -- a list value is one CSV record (``a,b,"c,d"``), the same
  representation command-line slice flags use. Several records supplied
  for the same flag are concatenated in order, so ``?layers=1,2&layers=3``
  and ``?layers=1&layers=2&layers=3`` both yield ``[1, 2, 3]``.

Every parse failure raises :class:`~cliweb.exceptions.InvalidArgumentError`
naming the flag and the offending value.
"""

from __future__ import annotations

import csv
import io
from typing import Any, Iterable, Sequence

from cliweb.exceptions import InvalidArgumentError
from cliweb.models import Flag, FlagType

_TRUE_STRINGS = frozenset({"1", "t", "true", "y", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "f", "false", "n", "no", "off"})


# ---------------------------------------------------------------------------
# CSV records
# ---------------------------------------------------------------------------


def parse_list(raw: str) -> list[str]:
    """Split a CSV record into its entries.

    An empty (or whitespace-only) string is the empty list.

    Example::

        >>> parse_list('a,"b,c",d')
        ['a', 'b,c', 'd']
    """
    if not raw.strip():
        return []
    try:
        rows = list(csv.reader(io.StringIO(raw), skipinitialspace=True))
    except csv.Error as exc:
        raise InvalidArgumentError(f"invalid list value {raw!r}: {exc}") from exc
    entries: list[str] = []
    for row in rows:
        entries.extend(row)
    return entries


def format_list(entries: Iterable[Any]) -> str:
    """Join entries into one CSV record, quoting only where needed."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="")
    writer.writerow([str(e) for e in entries])
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def parse_scalar(value_type: FlagType, raw: str) -> Any:
    """Convert one string to the Python value of a scalar *value_type*.

    Raises:
        ValueError: If *raw* is not a valid literal for the type.
    """
    if value_type == FlagType.INT:
        return int(raw.strip())
    if value_type == FlagType.FLOAT:
        return float(raw.strip())
    if value_type == FlagType.BOOL:
        return parse_bool(raw)
    return raw


def format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


# ---------------------------------------------------------------------------
# Flag-level helpers
# ---------------------------------------------------------------------------


def parse_values(flag: Flag, raw_values: Sequence[str]) -> Any:
    """Parse the raw strings supplied for *flag* into its typed value.

    Scalars use the first supplied string. List types concatenate the
    entries of every supplied CSV record.

    Raises:
        InvalidArgumentError: If any entry fails to parse.
    """
    value_type = flag.value_type
    try:
        if value_type.is_list:
            entries: list[str] = []
            for raw in raw_values:
                entries.extend(parse_list(raw))
            element = value_type.element_type
            return [parse_scalar(element, entry) for entry in entries]
        raw = raw_values[0] if raw_values else ""
        return parse_scalar(value_type, raw)
    except ValueError as exc:
        shown = ", ".join(f'"{v}"' for v in raw_values)
        raise InvalidArgumentError(
            f'invalid argument {shown} for "--{flag.name}" flag: '
            f"expected {value_type.value}"
        ) from exc


def format_value(value_type: FlagType, value: Any) -> str:
    """Serialise a Python value to the string form stored in :attr:`Flag.value`."""
    if value_type.is_list:
        if value is None:
            return ""
        if isinstance(value, (str, bytes)):
            return format_scalar(value)
        return format_list(format_scalar(v) for v in value)
    return format_scalar(value)


def default_value(flag: Flag) -> Any:
    """The typed value of *flag* when a request does not set it.

    A non-string scalar declared without a default is ``None``.
    """
    value_type = flag.value_type
    if flag.value == "" and not value_type.is_list and value_type != FlagType.STRING:
        return None
    return parse_values(flag, [flag.value])


def entries(flag: Flag) -> list[str]:
    """The input entries the page shows for *flag*.

    Scalars always have exactly one entry; lists have one per element
    (possibly none).
    """
    if flag.value_type.is_list:
        return parse_list(flag.value)
    return [flag.value]
