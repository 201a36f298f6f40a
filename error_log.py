"""Last-error logs for the admin server and the record scanner."""
import traceback
from datetime import datetime

ERROR_LOG = "last_error.log"
# Kept apart so a page load never overwrites the last save failure
SCAN_ERROR_LOG = "last_scan_error.log"


def log_error(context: str, exc: Exception, log_path: str = ERROR_LOG) -> None:
    """Write the last error with timestamp to log_path (no user data)."""
    with open(log_path, "w", encoding="utf-8") as f:
        f.write(f"[{datetime.now().isoformat(timespec='seconds')}] {context}\n\n")
        if exc.__traceback__:
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=f)
        else:
            f.write(f"{type(exc).__name__}: {exc}\n")
