"""
Save pipeline for new miniatures.

Order of work for one submission:
  1. required fields, date format
  2. slug from title
  3. record collision (<slug>.yaml)
  4. photo filename collisions + payload decoding, for the whole batch
  5. write photos, then the record
  6. missing-logo warnings (never fatal)

Nothing touches the disk before step 5. A failure during step 5 is not
rolled back: photos already written stay on disk.
"""
import re
from datetime import date, datetime
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from image_processor import InvalidImageError, decode_payload
from metadata_scanner import RECORD_EXT
from site_config import LOGO_CATEGORIES, SITE_CONFIG


class SaveError(Exception):
    status = 500


class ValidationError(SaveError):
    status = 400


class ConflictError(SaveError):
    status = 409


class Submission(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title:        str = ""
    manufacturer: str = ""
    date:         str = ""
    scale:        str = ""
    game:         str | None = None
    faction:      str | None = None
    order:        int | None = None
    photos:       list[str] = Field(default_factory=list)

    @field_validator("title", "manufacturer", "date", "scale", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return "" if v is None else v

    @field_validator("photos", mode="before")
    @classmethod
    def _none_as_no_photos(cls, v):
        return [] if v is None else v

    @field_validator("order", mode="before")
    @classmethod
    def _blank_order(cls, v):
        return None if v == "" else v

    @field_validator("game", "faction")
    @classmethod
    def _blank_as_absent(cls, v):
        return v or None


def slugify(text: str) -> str:
    slug = text.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def photo_filename(slug: str, position: int) -> str:
    """<slug>.png for the primary photo, <slug>-<n>.png (1-based n) after it."""
    suffix = "" if position == 0 else f"-{position + 1}"
    return f"{slug}{suffix}.{SITE_CONFIG['image_ext']}"


# ── Record serialization ──────────────────────────────────────────────────────

class _Quoted(str):
    """String field rendered as a double-quoted YAML scalar."""


class _RecordDumper(yaml.SafeDumper):
    # Indent list items under their key ("photos:\n  - ...")
    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)


_RecordDumper.add_representer(
    _Quoted,
    lambda dumper, value: dumper.represent_scalar("tag:yaml.org,2002:str", value, style='"'),
)


def build_record(sub: Submission, taken_on: date, photo_refs: list[str]) -> str:
    """Serialize a record; field order is fixed and absent optionals are omitted."""
    record = {
        "title":        _Quoted(sub.title),
        "photos":       [_Quoted(ref) for ref in photo_refs],
        "manufacturer": _Quoted(sub.manufacturer),
        "date":         taken_on,
        "scale":        _Quoted(sub.scale),
    }
    if sub.game:
        record["game"] = _Quoted(sub.game)
    if sub.faction:
        record["faction"] = _Quoted(sub.faction)
    if sub.order is not None:
        record["order"] = sub.order

    return yaml.dump(
        record,
        Dumper=_RecordDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=float("inf"),
    )


# ── Checks ────────────────────────────────────────────────────────────────────

def _parse_submission(payload) -> Submission:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid submission: expected a JSON object")
    try:
        return Submission.model_validate(payload)
    except PydanticValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ValidationError(f"Invalid submission: {fields}") from e


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as e:
        raise ValidationError(f'Invalid date "{value}" (expected YYYY-MM-DD)') from e


def missing_logo_warnings(sub: Submission, logos_dir: Path) -> list[str]:
    warnings = []
    for field, category in LOGO_CATEGORIES.items():
        value = getattr(sub, field)
        if not value:
            continue
        rel = f"{category}/{slugify(value)}.{SITE_CONFIG['logo_ext']}"
        if not (logos_dir / rel).exists():
            warnings.append(f"Missing logo: {rel}")
    return warnings


# ── Entry point ───────────────────────────────────────────────────────────────

def save(payload, paths: dict[str, Path]) -> dict:
    """
    Validate a submission and write its photos and record.

    Args:
        payload: Decoded JSON body (title, manufacturer, date, scale, photos,
                 optional game / faction / order).
        paths:   Store directories from site_config.store_paths().

    Returns:
        {"message", "identifier", "files", "warnings"}; files lists the
        record first, then the photos in submission order.

    Raises:
        ValidationError: missing/invalid fields, empty slug, bad photo data.
        ConflictError:   record or any photo filename already exists.
    """
    sub = _parse_submission(payload)
    if not (sub.title and sub.manufacturer and sub.date and sub.scale and sub.photos):
        raise ValidationError("Missing required fields")
    taken_on = _parse_date(sub.date)

    slug = slugify(sub.title)
    if not slug:
        raise ValidationError("Title produces an empty slug")

    records_dir = Path(paths["records"])
    photos_dir  = Path(paths["photos"])

    record_path = records_dir / f"{slug}{RECORD_EXT}"
    if record_path.exists():
        raise ConflictError(f'A miniature with slug "{slug}" already exists')

    # Check every photo path before writing anything
    targets: list[Path] = []
    for i in range(len(sub.photos)):
        filename = photo_filename(slug, i)
        if (photos_dir / filename).exists():
            raise ConflictError(f'Photo file "{filename}" already exists')
        targets.append(photos_dir / filename)

    blobs: list[bytes] = []
    for i, photo in enumerate(sub.photos, start=1):
        try:
            blobs.append(decode_payload(photo))
        except InvalidImageError as e:
            raise ValidationError(f"Photo {i} is invalid: {e}") from e

    # ── Writes (no rollback past this point) ─────────────────────────────────
    photos_dir.mkdir(parents=True, exist_ok=True)
    for target, data in zip(targets, blobs):
        with open(target, "xb") as f:
            f.write(data)

    refs = [f"{SITE_CONFIG['photo_ref_prefix']}{t.name}" for t in targets]
    records_dir.mkdir(parents=True, exist_ok=True)
    with open(record_path, "x", encoding="utf-8") as f:
        f.write(build_record(sub, taken_on, refs))

    warnings = missing_logo_warnings(sub, Path(paths["logos"]))

    count = len(targets)
    return {
        "message":    f'Saved "{sub.title}" ({count} photo{"s" if count > 1 else ""})',
        "identifier": slug,
        "files":      [str(record_path)] + [str(t) for t in targets],
        "warnings":   warnings,
    }
