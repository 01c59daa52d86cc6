import json
from unittest.mock import patch

from typer.testing import CliRunner

from git_wrapped.cli import app
from git_wrapped.fetchers.github import SubjectNotFound
from git_wrapped.models import DeveloperDocument, RepositoryDocument

runner = CliRunner()

DEVELOPER = {
    "type": "developer",
    "subject": {"login": "octocat"},
    "totals": {"commits": 7},
    "calendar": {"weeks": [{"contributionDays": [
        {"date": "2025-02-01", "contributionCount": 7, "weekday": 6},
    ]}]},
}


def test_analyze_saved_document_to_json(tmp_path):
    source = tmp_path / "octocat.json"
    source.write_text(json.dumps(DEVELOPER))
    out = tmp_path / "stats.json"

    result = runner.invoke(app, ["analyze", str(source), "--year", "2025", "--json", "--output", str(out)])

    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    assert data["subject"]["login"] == "octocat"
    assert data["activity"]["busiestDay"] == "Saturday"


def test_analyze_list_of_documents_to_markdown(tmp_path):
    source = tmp_path / "many.json"
    source.write_text(json.dumps([DEVELOPER, {"type": "repository", "repository": {"nameWithOwner": "octo/widget"}}]))
    out = tmp_path / "report.md"

    result = runner.invoke(app, ["analyze", str(source), "--year", "2025", "--output", str(out)])

    assert result.exit_code == 0, result.output
    report = out.read_text()
    assert "# octocat's 2025 Wrapped" in report
    assert "# octo/widget · 2025 Wrapped" in report


def test_analyze_malformed_document_exits_1(tmp_path):
    source = tmp_path / "bad.json"
    source.write_text(json.dumps({"type": "developer"}))
    result = runner.invoke(app, ["analyze", str(source)])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_analyze_invalid_json_exits_1(tmp_path):
    source = tmp_path / "bad.json"
    source.write_text("{not json")
    result = runner.invoke(app, ["analyze", str(source)])
    assert result.exit_code == 1
    assert "not valid JSON" in result.output


def test_wrapped_fetches_each_user(tmp_path):
    out = tmp_path / "wrapped.json"
    documents = {
        login: DeveloperDocument.model_validate({**DEVELOPER, "subject": {"login": login}})
        for login in ("alice", "bob")
    }
    with patch("git_wrapped.cli.fetch_developer_document", side_effect=lambda login, year, settings: documents[login]) as fetch:
        result = runner.invoke(app, ["wrapped", "@alice", "bob", "--year", "2024", "--json", "-o", str(out)])

    assert result.exit_code == 0, result.output
    assert [c.args[:2] for c in fetch.call_args_list] == [("alice", 2024), ("bob", 2024)]
    data = json.loads(out.read_text())
    assert [d["subject"]["login"] for d in data] == ["alice", "bob"]
    assert all(d["year"] == 2024 for d in data)


def test_wrapped_unknown_user_exits_1():
    with patch("git_wrapped.cli.fetch_developer_document", side_effect=SubjectNotFound('User "ghost" not found')):
        result = runner.invoke(app, ["wrapped", "ghost", "--year", "2025"])
    assert result.exit_code == 1
    assert "ghost" in result.output


def test_project_requires_owner_and_name():
    result = runner.invoke(app, ["project", "widget"])
    assert result.exit_code == 1
    assert "OWNER/REPO" in result.output


def test_project_writes_markdown(tmp_path):
    out = tmp_path / "widget.md"
    document = RepositoryDocument.model_validate({"type": "repository", "repository": {"nameWithOwner": "octo/widget"}})
    with patch("git_wrapped.cli.fetch_repository_document", return_value=document) as fetch:
        result = runner.invoke(app, ["project", "octo/widget", "--year", "2025", "-o", str(out)])

    assert result.exit_code == 0, result.output
    assert fetch.call_args.args == ("octo", "widget", 2025)
    assert "Growing Project" in out.read_text()


def test_serve_runs_uvicorn():
    with patch("uvicorn.run") as run:
        result = runner.invoke(app, ["serve", "--port", "9000"])
    assert result.exit_code == 0, result.output
    run.assert_called_once_with("git_wrapped.api.server:app", host="127.0.0.1", port=9000, reload=False)
