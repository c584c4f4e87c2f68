"""Workspace Files — validation and upsert rules for team IDE files.

Invariants:
    - Every file needs id, name and language
    - File names are reduced to [A-Za-z0-9._-]; anything else becomes "_"
    - Content larger than the configured cap is rejected
    - Upsert replaces the file with the same id, otherwise appends
"""

import re
from datetime import datetime

_UNSAFE_NAME = re.compile(r"[^a-zA-Z0-9._-]")

REQUIRED_FILE_FIELDS = ("id", "name", "language")

# Extension per executable language; source files are written under these names.
LANGUAGE_EXTENSIONS = {
    "javascript": "js",
    "typescript": "ts",
    "python": "py",
    "java": "java",
    "cpp": "cpp",
    "html": "html",
    "css": "css",
}


def sanitize_file_name(name: str) -> str:
    cleaned = _UNSAFE_NAME.sub("_", name)
    # never let a name escape its directory
    return cleaned.lstrip(".") or "file"


def file_problem(file: dict, max_bytes: int) -> str | None:
    missing = [k for k in REQUIRED_FILE_FIELDS if not file.get(k)]
    if missing:
        return f"File is missing required fields: {', '.join(missing)}"
    if len((file.get("content") or "").encode("utf-8")) > max_bytes:
        return f"File exceeds maximum size of {max_bytes // (1024 * 1024)}MB"
    return None


def upsert_file(files: list[dict], file: dict, now: datetime) -> list[dict]:
    entry = {
        **file,
        "name": sanitize_file_name(file["name"]),
        "last_modified": now.isoformat(),
    }
    updated = [f for f in files if f.get("id") != entry["id"]]
    if len(updated) == len(files):
        return [*files, entry]
    return [entry if f.get("id") == entry["id"] else f for f in files]
