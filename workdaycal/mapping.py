"""
Column mapping helpers.

- guess_mapping: pick a column per role from header names
- merge_mapping: apply explicit role=column overrides on top
- require_complete: fail early if a required role is unset
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from workdaycal.model import ROLE_LABELS, FieldMapping, MappingError

# Role -> candidate substrings, tried in order against lowercased headers.
ROLE_CANDIDATES: Dict[str, Sequence[str]] = {
    "days": ("days", "meeting pattern", "meets", "days of week"),
    "start_date": ("start date", "from date", "first day"),
    "end_date": ("end date", "to date", "last day"),
    "start_time": ("start time", "time start", "from time", "begin time"),
    "end_time": ("end time", "time end", "to time", "finish time"),
    "location": ("location", "room", "building"),
    "title": ("title",),
    "course": ("course", "subject"),
    "section": ("section",),
    "component": ("component", "type"),
}


def _pick(headers: Sequence[str], lowered: Sequence[str], candidates: Iterable[str]) -> Optional[str]:
    for cand in candidates:
        for header, low in zip(headers, lowered):
            if cand in low:
                return header
    return None


def guess_mapping(headers: Sequence[str]) -> FieldMapping:
    """
    Guess a FieldMapping from header names (case-insensitive substring match).

    Roles without a matching header stay unset. Description is never guessed.
    """
    lowered = [str(h).lower() for h in headers]
    guessed: Dict[str, Optional[str]] = {}
    for role, candidates in ROLE_CANDIDATES.items():
        guessed[role] = _pick(headers, lowered, candidates)
    return FieldMapping(**guessed)


def parse_overrides(pairs: Iterable[str]) -> Dict[str, str]:
    """
    Parse CLI style 'role=column' strings. Raises MappingError on bad input.
    """
    out: Dict[str, str] = {}
    roles = FieldMapping.roles()
    for pair in pairs:
        if "=" not in pair:
            raise MappingError(f"Invalid mapping {pair!r}, expected ROLE=COLUMN")
        role, column = pair.split("=", 1)
        role = role.strip().lower().replace("-", "_")
        if role not in roles:
            raise MappingError(f"Unknown mapping role {role!r} (known: {', '.join(roles)})")
        out[role] = column.strip()
    return out


def merge_mapping(base: FieldMapping, overrides: Mapping[str, str]) -> FieldMapping:
    """
    Return a copy of base with overrides applied. An empty value unsets a role.
    """
    data: Dict[str, Optional[str]] = {role: getattr(base, role) for role in FieldMapping.roles()}
    for role, column in overrides.items():
        if role in data:
            data[role] = column or None
    return FieldMapping(**data)


def require_complete(mapping: FieldMapping) -> None:
    """
    Raise MappingError naming the first unset required role.
    """
    missing = mapping.missing_required()
    if missing:
        raise MappingError(f"Missing required mapping: {ROLE_LABELS[missing]}")


def unknown_columns(mapping: FieldMapping, headers: Sequence[str]) -> List[str]:
    """
    Mapped columns that do not exist in headers.
    """
    known = set(headers)
    return [col for col in mapping.to_dict().values() if col not in known]
