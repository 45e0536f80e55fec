import logging
import traceback
from datetime import datetime

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO"):
    root = logging.getLogger()
    root.setLevel(level.upper())
    # Idempotent: the app may be imported by several workers or test sessions
    if not any(getattr(h, "_pm_api", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._pm_api = True
        root.addHandler(handler)


def append_error_log(path: str, exc: BaseException):
    """Write the traceback of an unhandled error to the flat error log."""
    error_msg = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    with open(path, "a") as f:
        f.write(f"\n[{datetime.now()}] 500 Error:\n{error_msg}\n")
    return error_msg
