"""
Metadata scanner.
Reads every miniature record in the content store and collects the known
manufacturer / game / faction / scale values plus the slugs already in use.
Read-only; a record that does not parse is skipped (and logged), never fatal.
"""
from pathlib import Path

import yaml

from error_log import SCAN_ERROR_LOG, log_error

RECORD_EXT = ".yaml"

# record key -> key in the scan result
CATEGORY_FIELDS = {
    "manufacturer": "manufacturers",
    "game":         "games",
    "faction":      "factions",
    "scale":        "scales",
}


def _load_record(path: Path) -> dict:
    # BaseLoader keeps scalars as written ("1:35" stays text, not base-60)
    try:
        data = yaml.load(path.read_bytes(), Loader=yaml.BaseLoader)
    except (yaml.YAMLError, OSError) as e:
        log_error(f"unreadable record: {path.name}", e, SCAN_ERROR_LOG)
        return {}
    return data if isinstance(data, dict) else {}


def scan(records_dir) -> dict:
    """
    Scan all records and return dropdown choices and used slugs.

    Returns:
        {"manufacturers": [...], "games": [...], "factions": [...],
         "scales": [...], "slugs": [...]}
        Category lists are distinct and sorted; slugs are file stems in
        directory order.
    """
    values: dict[str, set[str]] = {out: set() for out in CATEGORY_FIELDS.values()}
    slugs: list[str] = []

    records_dir = Path(records_dir)
    files = records_dir.glob(f"*{RECORD_EXT}") if records_dir.is_dir() else []

    for path in files:
        slugs.append(path.stem)
        record = _load_record(path)
        for key, out in CATEGORY_FIELDS.items():
            value = record.get(key)
            if isinstance(value, str) and value:
                values[out].add(value)

    result = {out: sorted(found) for out, found in values.items()}
    result["slugs"] = slugs
    return result
