"""
Filter descriptors -> backend conditions.

A filter descriptor is ``{value_type, column_name, column_key?, value}`` with a
string-encoded value. Each value type has its own handler:

    Int     exact match, value parsed as an integer
    Float   exact match, value parsed as a finite float
    String  case-sensitive substring match (LIKE %value%, wildcards in the
            value escaped with !)
    Date    inclusive range, value is "start_ms,end_ms"
    other   exact match on the raw string

All conditions are combined with AND.
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from autogql.errors import MalformedFilterError

EQ = "eq"
LIKE = "like"
BETWEEN = "between"

LIKE_ESCAPE = "!"

INT_RE = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class Condition:
    column: str
    op: str
    value: Any


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def ms_to_datetime(ms: int) -> datetime:
    return EPOCH + timedelta(milliseconds=ms)


def datetime_to_ms(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - EPOCH) // timedelta(milliseconds=1)


def escape_like(value: str) -> str:
    """Make ``value`` match literally inside a LIKE pattern."""
    for ch in (LIKE_ESCAPE, "%", "_"):
        value = value.replace(ch, LIKE_ESCAPE + ch)
    return value


def parse_int(value: str) -> int:
    # int() alone also takes "1_000", "+3" and non-ASCII digits
    s = value.strip()
    if not INT_RE.fullmatch(s):
        raise ValueError(f"invalid integer: {value!r}")
    return int(s)


class FilterCompiler:
    """Declarative mapping of value types -> conditions."""

    def __init__(self):
        self.handlers: Dict[str, Callable[[str, str], Condition]] = {
            "Int": self._int,
            "Float": self._float,
            "String": lambda c, v: Condition(c, LIKE, f"%{escape_like(v)}%"),
            "Date": self._date,
        }

    def compile(self, filter_options: Optional[Sequence[Mapping[str, Any]]]) -> List[Condition]:
        return [self.compile_one(f) for f in (filter_options or [])]

    def compile_one(self, spec: Mapping[str, Any]) -> Condition:
        if not isinstance(spec, Mapping):
            raise MalformedFilterError(f"Filter must be an object, got {type(spec).__name__}")
        value = spec.get("value")
        if value is None:
            raise MalformedFilterError("Filter is missing 'value'")
        value = str(value)
        col = spec.get("column_key") or spec.get("column_name")
        handler = self.handlers.get(spec.get("value_type"))
        if handler is None:
            cond = Condition(col, EQ, value)
        else:
            cond = handler(col, value)
        if not col:
            raise MalformedFilterError("Filter needs 'column_name' or 'column_key'")
        return cond

    def compile_order(self, column: Optional[str], direction: Optional[str]) -> List[Tuple[str, str]]:
        if column and direction:
            return [(column, direction)]
        return []

    def _int(self, col, v):
        try:
            return Condition(col, EQ, parse_int(v))
        except ValueError:
            raise MalformedFilterError(f"Int filter on '{col}': {v!r} is not an integer") from None

    def _float(self, col, v):
        try:
            num = float(v.strip())
        except ValueError:
            raise MalformedFilterError(f"Float filter on '{col}': {v!r} is not a number") from None
        if not math.isfinite(num):
            raise MalformedFilterError(f"Float filter on '{col}': {v!r} is not a finite number")
        return Condition(col, EQ, num)

    def _date(self, col, v):
        parts = v.split(",")
        if len(parts) != 2:
            raise MalformedFilterError(
                f"Date filter on '{col}' needs exactly two comma-separated epoch-ms values, got {len(parts)}"
            )
        try:
            lo, hi = (parse_int(p) for p in parts)
        except ValueError:
            raise MalformedFilterError(f"Date filter on '{col}': {v!r} is not a pair of epoch-ms integers") from None
        try:
            return Condition(col, BETWEEN, (ms_to_datetime(lo), ms_to_datetime(hi)))
        except (OverflowError, OSError, ValueError):
            raise MalformedFilterError(f"Date filter on '{col}': {v!r} is out of range") from None


# --------------------------------------------------------------------------------------
# SQL rendering
# --------------------------------------------------------------------------------------

SQL_OPS: Dict[str, Callable[[str, str], Tuple[str, List[str]]]] = {
    EQ: lambda c, p: (f"{c} = :{p}", [p]),
    LIKE: lambda c, p: (f"{c} LIKE :{p} ESCAPE '{LIKE_ESCAPE}'", [p]),
    BETWEEN: lambda c, p: (f"{c} BETWEEN :{p}_lo AND :{p}_hi", [f"{p}_lo", f"{p}_hi"]),
}


def where_sql(conditions: Sequence[Condition]) -> Tuple[str, Dict[str, Any]]:
    clauses: List[str] = []
    params: Dict[str, Any] = {}
    for i, cond in enumerate(conditions or []):
        fmt = SQL_OPS.get(cond.op)
        if fmt is None:
            raise ValueError(f"Unsupported op: {cond.op}")
        clause, names = fmt(cond.column, f"p_{i}")
        clauses.append(clause)
        values = cond.value if len(names) > 1 else (cond.value,)
        params.update(zip(names, values))
    return " AND ".join(clauses), params


# --------------------------------------------------------------------------------------
# In-process evaluation
# --------------------------------------------------------------------------------------

def like_to_regex(pattern: str) -> "re.Pattern":
    out = []
    chars = iter(pattern)
    for ch in chars:
        if ch == LIKE_ESCAPE:
            out.append(re.escape(next(chars, LIKE_ESCAPE)))
        elif ch == "%":
            out.append(".*")
        elif ch == "_":
            out.append(".")
        else:
            out.append(re.escape(ch))
    return re.compile("^" + "".join(out) + "$", re.DOTALL)


def _comparable(value: Any) -> Any:
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def matches(cond: Condition, row: Mapping[str, Any]) -> bool:
    actual = _comparable(row.get(cond.column))
    if actual is None:
        return False
    if cond.op == EQ:
        if isinstance(cond.value, str) and not isinstance(actual, str):
            return str(actual) == cond.value
        return actual == cond.value
    if cond.op == LIKE:
        return bool(like_to_regex(cond.value).match(str(actual)))
    if cond.op == BETWEEN:
        lo, hi = cond.value
        try:
            return lo <= actual <= hi
        except TypeError:
            return False
    raise ValueError(f"Unsupported op: {cond.op}")
