# tests/conftest.py
import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import pytest

from core.config import Config
from tools.audit_notifier import IssueNotifier


class FakeJira:
    """In-memory stand-in for JiraAPI used by notifier/engine tests."""

    def __init__(self, issues=None, comments=None):
        # issues: key -> Jira issue payload; comments: key -> [{"id", "body"}]
        self.issues = {i["key"]: i for i in (issues or [])}
        self.comments = {k: list(v) for k, v in (comments or {}).items()}
        self.calls = []
        self.fail_on = set()  # method names that return an error payload
        self._next_id = 1000

    def _error(self, name):
        return {"error": f"HTTP 500: {name} failed"} if name in self.fail_on else None

    # ---- reads ----
    def test_connection(self):
        return {"success": True, "user": {"displayName": "audit-bot"}}

    def get_issue(self, key, fields=None):
        self.calls.append(("get_issue", key))
        if self._error("get_issue"):
            return self._error("get_issue")
        if key not in self.issues:
            return {"error": f"HTTP 404: {key}"}
        return self.issues[key]

    def get_comments(self, key):
        self.calls.append(("get_comments", key))
        return self._error("get_comments") or {"success": True, "comments": list(self.comments.get(key, []))}

    def search_issues(self, jql, max_results=50, next_page_token=None, fields=None):
        # cursor paging like /search/jql: no startAt, no total
        self.calls.append(("search_issues", jql))
        if self._error("search_issues"):
            return self._error("search_issues")
        items = list(self.issues.values())
        offset = int(next_page_token or 0)
        page = items[offset : offset + max_results]
        is_last = offset + len(page) >= len(items)
        return {
            "success": True,
            "issues": page,
            "next_page_token": None if is_last else str(offset + len(page)),
            "is_last": is_last,
        }

    # ---- writes ----
    def add_comment(self, key, body):
        self.calls.append(("add_comment", key))
        if self._error("add_comment"):
            return self._error("add_comment")
        self._next_id += 1
        self.comments.setdefault(key, []).append({"id": str(self._next_id), "body": body})
        return {"success": True, "comment_id": str(self._next_id)}

    def update_comment(self, key, comment_id, body):
        self.calls.append(("update_comment", key))
        for c in self.comments.get(key, []):
            if c["id"] == comment_id:
                c["body"] = body
        return {"success": True, "comment_id": comment_id}

    def delete_comment(self, key, comment_id):
        self.calls.append(("delete_comment", key))
        if self._error("delete_comment"):
            return self._error("delete_comment")
        self.comments[key] = [c for c in self.comments.get(key, []) if c["id"] != comment_id]
        return {"success": True}

    def writes(self):
        return [c for c in self.calls if c[0] in {"add_comment", "update_comment", "delete_comment"}]


class RecordingNotifier(IssueNotifier):
    """Records every side effect a rule requests."""

    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def _record(self, *call):
        if self.fail:
            raise RuntimeError("jira unavailable")
        self.calls.append(call)

    def post_issue_audit_failure_comment(self, issue, result):
        self._record("post", issue.key, result.name)

    def remove_issue_audit_failure_comment(self, issue, result):
        self._record("remove", issue.key, result.name)

    def cleanse_sub_tasks(self, issue):
        self._record("cleanse", issue.key)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def fake_jira_factory():
    return FakeJira


@pytest.fixture
def config(monkeypatch):
    for var in ("JIRA_BASE_URL", "JIRA_TOKEN", "JIRA_EMAIL", "JIRA_BEARER_TOKEN",
                "AUDIT_ASSIGNEE_CUTOFF", "AUDIT_FIX_VERSION_CUTOFF", "AUDIT_DRY_RUN"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("WEBHOOK_SECRET", "s3cret")
    monkeypatch.setenv("AUDIT_DEFAULT_PROJECTS", "SBX")
    return Config()


@pytest.fixture
def failing_notifier():
    return RecordingNotifier(fail=True)
