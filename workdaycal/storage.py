"""
Persistent storage for saved mapping profiles.

A profile remembers how the columns of a particular schedule export map to
roles, plus the calendar options, so the same export can be converted again
without re-typing every --map flag.

JSON schema:
    {
      "mapping": {"start_date": "Start Date", ...},
      "options": {"title_template": "...", "calendar_name": "...", "timezone_hint": "..."}
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Tuple

from workdaycal.model import CalendarOptions, FieldMapping

logger = logging.getLogger(__name__)


def _default_profile_path() -> Path:
    """
    Return the default profile location in the user's home directory.

    Using a function instead of a constant makes testing easier,
    because tests can pass their own path.
    """
    return Path.home() / ".workdaycal" / "profile.json"


def _options_from_dict(data: Any) -> CalendarOptions:
    if not isinstance(data, dict):
        return CalendarOptions()
    known = {f.name for f in fields(CalendarOptions)}
    kwargs = {k: v for k, v in data.items() if k in known and isinstance(v, str)}
    return CalendarOptions(**kwargs)


def load_profile(path: str | Path | None = None) -> Tuple[FieldMapping, CalendarOptions]:
    """
    Load a saved mapping profile.

    Returns an empty mapping and default options if the file does not exist
    or is invalid. A broken profile never stops a conversion.
    """
    profile_path = Path(path) if path is not None else _default_profile_path()

    # First run: nothing saved yet
    if not profile_path.exists():
        return FieldMapping(), CalendarOptions()

    try:
        data = json.loads(profile_path.read_text(encoding="utf-8"))
        mapping_raw = data.get("mapping", {})
        mapping = FieldMapping.from_dict(mapping_raw) if isinstance(mapping_raw, dict) else FieldMapping()
        return mapping, _options_from_dict(data.get("options"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, AttributeError) as e:
        logger.warning("Ignoring unreadable profile %s: %s", profile_path, e)
        return FieldMapping(), CalendarOptions()


def save_profile(mapping: FieldMapping, options: CalendarOptions, path: str | Path | None = None) -> Path:
    """
    Save a mapping profile. Creates parent directories if needed.
    """
    profile_path = Path(path) if path is not None else _default_profile_path()
    profile_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {"mapping": mapping.to_dict(), "options": asdict(options)}
    profile_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return profile_path
