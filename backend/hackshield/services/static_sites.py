"""Static Sites — writes preview and deployment bundles for the IDE's live preview.

Invariants:
    - Files land under <root>/<access_id>/ and nowhere else (path segments sanitized,
      anything resolving outside the site directory is skipped)
    - Previews always contain an index.html (a placeholder is written when missing)
    - Writing is idempotent: the same bundle overwrites the previous one

Design Decisions:
    - Served by FastAPI StaticFiles mounts (/previews, /deployments) in main.py
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from hackshield.core.workspace_files import sanitize_file_name

logger = logging.getLogger(__name__)

PLACEHOLDER_INDEX = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Preview</title>
</head>
<body>
    <h1>Live Preview</h1>
    <p>Add an index.html file to see your web project.</p>
</body>
</html>
"""


@dataclass
class SiteBundle:
    directory: Path
    files: list[str]


def _safe_relative_path(name: str) -> Path | None:
    parts = [sanitize_file_name(p) for p in name.replace("\\", "/").split("/") if p not in ("", ".", "..")]
    return Path(*parts) if parts else None


def write_site(
    root: str, access_id: str, files: list[dict], ensure_index: bool = False,
) -> SiteBundle:
    site_dir = Path(root) / sanitize_file_name(access_id)
    site_dir.mkdir(parents=True, exist_ok=True)
    base = site_dir.resolve()
    written: list[str] = []
    for file in files:
        relative = _safe_relative_path(file.get("name") or "")
        if relative is None:
            continue
        target = site_dir / relative
        if not target.resolve().is_relative_to(base):
            logger.warning(f"Skipping file outside site directory: {file.get('name')}")
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(file.get("content") or "", encoding="utf-8")
        written.append(relative.as_posix())
    if ensure_index and "index.html" not in written:
        (site_dir / "index.html").write_text(PLACEHOLDER_INDEX, encoding="utf-8")
    return SiteBundle(site_dir, written)


def site_exists(root: str, access_id: str) -> bool:
    return (Path(root) / sanitize_file_name(access_id)).is_dir()
