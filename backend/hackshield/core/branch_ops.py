"""Branch Operations — branch / commit / pull-request emulation over plain lists.

Invariants:
    - Nothing here diffs or resolves conflicts: merge appends the feature branch's
      files after main's files, duplicates included
    - Every mutation returns new lists; callers assign them back to the JSON columns
      so SQLAlchemy sees the change
    - Commit and PR ids are millisecond timestamps (string), sortable by creation
    - "main" is reserved: it is the only main branch and cannot be deleted

Design Decisions:
    - Pure list transforms keep the persistence layer trivial (assign + commit)
"""

from datetime import datetime

MAIN_BRANCH = "main"
BRANCH_ACTIONS = ("commit", "update_files", "create_pr", "merge")


def _stamp(now: datetime) -> str:
    return str(int(now.timestamp() * 1000))


def add_commit(
    commits: list[dict], message: str, author: str | None,
    files_changed: list[str] | None, now: datetime,
) -> list[dict]:
    return [*commits, {
        "id": _stamp(now),
        "message": message,
        "author": author,
        "timestamp": now.isoformat(),
        "files_changed": list(files_changed or []),
    }]


def add_pull_request(
    pull_requests: list[dict], title: str, description: str | None,
    author: str | None, now: datetime,
) -> tuple[list[dict], dict]:
    pr = {
        "id": _stamp(now),
        "title": title,
        "description": description or "",
        "author": author,
        "status": "open",
        "created_at": now.isoformat(),
        "merged_at": None,
    }
    return [*pull_requests, pr], pr


def merge_into_main(
    main_files: list[dict], main_commits: list[dict],
    branch_name: str, branch_files: list[dict], author: str | None, now: datetime,
) -> tuple[list[dict], list[dict]]:
    """Return (main files, main commits) after merging branch_files."""
    files = [*main_files, *branch_files]
    commits = add_commit(
        main_commits, f"Merged branch {branch_name}", author,
        [f.get("name") for f in branch_files], now,
    )
    return files, commits


def mark_pull_request_merged(
    pull_requests: list[dict], pr_id: str | None, now: datetime,
) -> list[dict]:
    """Unknown or missing pr_id leaves the list unchanged."""
    updated = []
    for pr in pull_requests:
        if pr_id and pr.get("id") == pr_id:
            pr = {**pr, "status": "merged", "merged_at": now.isoformat()}
        updated.append(pr)
    return updated
