"""
Merging caller-supplied schema fragments and resolvers into the generated set.

One rule everywhere: generated entries keep their order, a custom entry with
the same operation name replaces the generated one in place, and new custom
entries are appended in the order given.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

_NAME_RE = re.compile(r"^\s*([_A-Za-z][_0-9A-Za-z]*)")

QUERY = "Query"
MUTATION = "Mutation"


def merge_ordered(generated: Mapping[str, Any], custom: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(generated)
    for k, v in custom.items():
        merged[k] = v
    return merged


@dataclass(frozen=True)
class SchemaExtension:
    """Custom SDL: type declarations plus up to four operation signatures."""

    types: str = ""
    read: str = ""
    read_multiple: str = ""
    create: str = ""
    update: str = ""

    def signatures(self, kind: str) -> List[str]:
        if kind == QUERY:
            raw = (self.read, self.read_multiple)
        elif kind == MUTATION:
            raw = (self.create, self.update)
        else:
            raise ValueError(f"Unknown operation kind: {kind}")
        lines: List[str] = []
        for block in raw:
            for line in (block or "").splitlines():
                if line.strip():
                    lines.append(line.strip())
        return lines


def signature_name(line: str) -> str:
    m = _NAME_RE.match(line)
    if not m:
        raise ValueError(f"Cannot parse an operation name from {line!r}")
    return m.group(1)


def merge_signatures(generated: Mapping[str, str], extensions: Iterable[SchemaExtension], kind: str) -> Dict[str, str]:
    merged = dict(generated)
    for ext in extensions or ():
        custom = {signature_name(line): line for line in ext.signatures(kind)}
        merged = merge_ordered(merged, custom)
    return merged


def _section(custom: Mapping[str, Any], kind: str) -> Mapping[str, Callable]:
    section: Optional[Mapping[str, Callable]] = custom.get(kind.lower())
    if section is None:
        section = custom.get(kind)
    return section or {}


def merge_resolvers(query: Mapping[str, Callable], mutation: Mapping[str, Callable], custom_maps: Iterable[Mapping[str, Any]]):
    """Returns (query, mutation) with every custom map applied in order."""
    q = dict(query)
    m = dict(mutation)
    for custom in custom_maps or ():
        q = merge_ordered(q, _section(custom, QUERY))
        m = merge_ordered(m, _section(custom, MUTATION))
    return q, m
