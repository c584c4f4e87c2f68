"""Branch Operations — verifies commit, pull-request and merge list transforms."""

from datetime import datetime, timezone

from hackshield.core.branch_ops import (
    add_commit, add_pull_request, mark_pull_request_merged, merge_into_main,
)

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_add_commit_returns_new_list():
    commits = []
    updated = add_commit(commits, "init", "alice", ["main.py"], NOW)
    assert commits == []
    assert updated == [{
        "id": str(int(NOW.timestamp() * 1000)),
        "message": "init",
        "author": "alice",
        "timestamp": NOW.isoformat(),
        "files_changed": ["main.py"],
    }]


def test_add_pull_request_opens_pr():
    prs, pr = add_pull_request([], "Login page", None, "bob", NOW)
    assert prs == [pr]
    assert pr["status"] == "open"
    assert pr["description"] == ""
    assert pr["merged_at"] is None


def test_merge_appends_branch_files_after_main():
    main_files = [{"id": "1", "name": "index.html"}]
    branch_files = [{"id": "1", "name": "index.html"}, {"id": "2", "name": "app.js"}]
    files, commits = merge_into_main(main_files, [], "feature-x", branch_files, "bob", NOW)
    assert [f["name"] for f in files] == ["index.html", "index.html", "app.js"]
    assert commits[-1]["message"] == "Merged branch feature-x"
    assert commits[-1]["files_changed"] == ["index.html", "app.js"]


def test_mark_pull_request_merged():
    prs, pr = add_pull_request([], "Login page", "desc", "bob", NOW)
    merged = mark_pull_request_merged(prs, pr["id"], NOW)
    assert merged[0]["status"] == "merged"
    assert merged[0]["merged_at"] == NOW.isoformat()
    assert prs[0]["status"] == "open"


def test_unknown_pull_request_left_unchanged():
    prs, _ = add_pull_request([], "Login page", None, "bob", NOW)
    assert mark_pull_request_merged(prs, "nope", NOW) == prs
    assert mark_pull_request_merged(prs, None, NOW) == prs
