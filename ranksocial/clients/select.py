"""Parser for the column/relationship-expansion syntax used in ``select``.

``"*, author:profiles!posts_author_id_fkey(*, rank:ranks(*))"`` parses into the
plain columns ``["*"]`` plus one embed aliased ``author`` on table
``profiles`` (foreign key hint ``posts_author_id_fkey``) which in turn embeds
``ranks`` as ``rank``.
"""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class Embed:
    alias: str
    table: str
    hint: str | None
    select: "SelectSpec"


@dataclass(slots=True)
class SelectSpec:
    columns: list[str] = field(default_factory=list)
    embeds: list[Embed] = field(default_factory=list)

    @property
    def include_all(self) -> bool:
        return "*" in self.columns


def _split_top_level(expression: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    for char in expression:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise ValueError("Unbalanced parentheses in select expression")
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    if depth:
        raise ValueError("Unbalanced parentheses in select expression")
    parts.append("".join(current))
    return parts


def parse_select(expression: str) -> SelectSpec:
    spec = SelectSpec()
    for raw in _split_top_level(expression):
        item = raw.strip()
        if not item:
            continue
        if "(" not in item:
            spec.columns.append(item)
            continue
        if not item.endswith(")"):
            raise ValueError(f"Malformed embed '{item}'")
        head, inner = item.split("(", 1)
        alias: str | None = None
        if ":" in head:
            alias, head = head.split(":", 1)
        table, _, hint = head.partition("!")
        table = table.strip()
        if not table:
            raise ValueError(f"Malformed embed '{item}'")
        spec.embeds.append(
            Embed(
                alias=(alias or table).strip(),
                table=table,
                hint=hint.strip() or None,
                select=parse_select(inner[:-1]),
            )
        )
    if not spec.columns and not spec.embeds:
        spec.columns.append("*")
    return spec


__all__ = ["Embed", "SelectSpec", "parse_select"]
