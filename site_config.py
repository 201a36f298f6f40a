"""
Centralized admin configuration.
Store locations are resolved from GALLERY_ROOT (default: this directory);
host/port come from ADMIN_HOST / ADMIN_PORT. Values may live in .env.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

GALLERY_ROOT = Path(os.environ.get("GALLERY_ROOT", Path(__file__).resolve().parent))
ADMIN_HOST   = os.environ.get("ADMIN_HOST", "127.0.0.1")
ADMIN_PORT   = int(os.environ.get("ADMIN_PORT", "3001"))

# Logo sub-namespaces checked after a save, keyed by submission field
LOGO_CATEGORIES = {
    "manufacturer": "manufacturers",
    "game":         "games",
    "faction":      "factions",
}

SITE_CONFIG = {
    "page_title":    "Admin - Add Miniature",
    # Pre-selected in the scale dropdown when it exists in the store
    "default_scale": "28mm",
    # Relative reference written into each record's photos list
    "photo_ref_prefix": "../../assets/photos/",
    "image_ext":     "png",
    "logo_ext":      "png",
    # Several base64 photos per request
    "max_request_mb": 64,
}


def store_paths(root=None) -> dict[str, Path]:
    """Return the records / photos / logos directories under a gallery root."""
    root = Path(root) if root is not None else GALLERY_ROOT
    return {
        "records": root / "src" / "content" / "miniatures",
        "photos":  root / "src" / "assets" / "photos",
        "logos":   root / "src" / "assets" / "logos",
    }
