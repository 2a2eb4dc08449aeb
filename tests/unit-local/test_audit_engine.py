# tests/unit-local/test_audit_engine.py
from datetime import date

import pytest

from core.issue import Issue
from tools.audit_notifier import JiraAuditNotifier
from workflows.audit_engine import AuditEngine, build_audit_rules, event_type, parse_projects

ENFORCED = date(2019, 5, 6)


def ev_issue(key="SBX-1", event="issue_updated", **fields):
    return {"eventType": event, "issue": {"key": key, "fields": fields}}


def engine_with(notifier, config, jira=None, now=ENFORCED, **kw):
    return AuditEngine(notifier=notifier, jira=jira, config=config, clock=lambda: now, **kw)


# ---------- rule building ----------

def test_build_rules_uses_config_cutoffs(notifier, config):
    rules = build_audit_rules(notifier, config)
    assert [r.name for r in rules] == ["Issue Assigned", "Fix Version Indicated"]
    assert rules[0].cutoff == date(2019, 3, 25)
    assert rules[1].enforcement_date == date(2019, 5, 6)


def test_build_rules_toggles(notifier, config):
    rules = build_audit_rules(notifier, config, enable_assignee=False)
    assert [r.name for r in rules] == ["Fix Version Indicated"]


def test_engine_without_jira_uses_dry_run_notifier(config):
    engine = AuditEngine(config=config)
    assert engine.jira is None
    assert isinstance(engine.notifier, JiraAuditNotifier)
    assert engine.notifier.dry_run is True


# ---------- audit_issue ----------

def test_audit_issue_collects_both_results(notifier, config):
    engine = engine_with(notifier, config)
    report = engine.audit_issue(Issue(key="SBX-1", assignee="acc-1", fix_versions=()))

    assert report["issue_key"] == "SBX-1"
    assert report["passing"] is False
    assert [(r["audit"], r["passing"]) for r in report["results"]] == [
        ("Issue Assigned", True),
        ("Fix Version Indicated", False),
    ]
    assert report["errors"] == []
    assert notifier.calls == [
        ("remove", "SBX-1", "Issue Assigned"),
        ("post", "SBX-1", "Fix Version Indicated"),
    ]


def test_audit_issue_uses_clock_and_explicit_now(notifier, config):
    engine = engine_with(notifier, config, now=date(2019, 5, 1))
    report = engine.audit_issue(Issue(key="SBX-1", assignee="a", fix_versions=()))
    assert report["passing"] is True
    assert "currently FAILING" in report["results"][1]["details"]

    report = engine.audit_issue(Issue(key="SBX-1", assignee="a", fix_versions=()), now=ENFORCED)
    assert report["passing"] is False


def test_audit_issue_isolates_rule_errors(failing_notifier, config):
    engine = engine_with(failing_notifier, config)
    report = engine.audit_issue(Issue(key="SBX-1"))

    assert report["passing"] is False
    assert report["results"] == []
    assert [e["audit"] for e in report["errors"]] == ["Issue Assigned", "Fix Version Indicated"]
    assert all(e["status"] == "error" for e in report["errors"])


# ---------- process ----------

@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"eventType": "issue_created"}, "issue_created"),
        ({"webhookEvent": "jira:issue_updated"}, "issue_updated"),
        ({"eventType": "Scheduled_Sweep"}, "scheduled_sweep"),
        ({}, ""),
    ],
)
def test_event_type(payload, expected):
    assert event_type(payload) == expected


def test_process_issue_event(notifier, config):
    engine = engine_with(notifier, config)
    res = engine.process(ev_issue(assignee={"accountId": "a"}, fixVersions=[{"name": "1.0"}]))

    assert res["status"] == "ok"
    assert res["report"]["passing"] is True


def test_process_skips_without_issue(notifier, config):
    engine = engine_with(notifier, config)
    res = engine.process({"eventType": "issue_created"})
    assert res["status"] == "skipped"
    assert res["reason"] == "no_issue_context"
    assert notifier.calls == []


def test_process_skips_unknown_event(notifier, config):
    engine = engine_with(notifier, config)
    res = engine.process({"eventType": "comment_created"})
    assert res["reason"] == "unsupported_event"


# ---------- sweep ----------

def test_sweep_dry_run_without_jira(notifier, config):
    engine = engine_with(notifier, config)
    res = engine.process({"eventType": "scheduled_sweep"})

    assert res["status"] == "dry_run"
    assert res["jql"] == "project in (SBX) ORDER BY key ASC"
    assert res["issues_audited"] == 0


def test_sweep_paginates_and_reports_failures(notifier, config, fake_jira_factory):
    fake = fake_jira_factory(issues=[
        {"key": "ABC-1", "fields": {"assignee": {"accountId": "a"}, "fixVersions": [{"name": "1"}]}},
        {"key": "ABC-2", "fields": {"assignee": None, "fixVersions": [{"name": "1"}]}},
        {"key": "ABC-3", "fields": {"assignee": {"accountId": "b"}, "fixVersions": []}},
    ])
    engine = engine_with(notifier, config, jira=fake, batch_size=2)

    res = engine.sweep(projects=["ABC"])

    assert res["status"] == "ok"
    assert res["jql"] == "project in (ABC) ORDER BY key ASC"
    assert res["issues_audited"] == 3
    assert res["failing_keys"] == ["ABC-2", "ABC-3"]
    assert len([c for c in fake.calls if c[0] == "search_issues"]) == 2


def test_sweep_search_error_raises(notifier, config, fake_jira_factory):
    fake = fake_jira_factory()
    fake.fail_on.add("search_issues")
    engine = engine_with(notifier, config, jira=fake)

    with pytest.raises(RuntimeError):
        engine.sweep(jql="project = ABC")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("ABC, OPS", ["ABC", "OPS"]),
        (["ABC", " OPS "], ["ABC", "OPS"]),
        ("", ["SBX"]),
        (None, ["SBX"]),
    ],
)
def test_parse_projects(raw, expected):
    assert parse_projects(raw, ["SBX"]) == expected


def test_process_sweep_accepts_csv_projects(notifier, config):
    engine = engine_with(notifier, config)
    res = engine.process({"eventType": "scheduled_sweep", "projects": "A,B"})
    assert res["jql"] == "project in (A,B) ORDER BY key ASC"
