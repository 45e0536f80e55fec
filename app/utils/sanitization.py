import re

TAG_RE = re.compile(r"<[^>]*>")


def sanitize_string(v):
    if not isinstance(v, str):
        return v
    # Strip HTML tags, then surrounding whitespace
    return TAG_RE.sub("", v).strip()


def like_pattern(term: str) -> str:
    """Substring pattern for ILIKE with the LIKE wildcards escaped (escape char ``\\``)."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
