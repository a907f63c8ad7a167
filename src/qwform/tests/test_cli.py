"""CLI integration tests."""

import os
import subprocess
import sys
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).resolve().parents[1]

CLASSIFICATIONS = """\
classifications:
  MemberStatus:
    - {code: FML, alias: Formal Member}
    - {code: PRV, alias: Provisional Member}
"""

DATA = """\
action: MemberEditAction
form:
  memberName: Ariel
  memberStatus: PRV
errors:
  - {property: memberName, key: errors.required, args: [Name]}
"""

TEMPLATE = (
    '<form><input type="text" la:property="memberName"/>'
    '<select la:property="memberStatus"><option la:optionCls="MemberStatus"></option></select>'
    '<input type="hidden" la:token="true"/></form>'
)


def run_cli(*args, cwd):
    env = dict(os.environ, COLUMNS="200")
    env["PYTHONPATH"] = os.pathsep.join(
        p for p in (str(SRC_DIR), env.get("PYTHONPATH")) if p
    )
    return subprocess.run(
        [sys.executable, "-m", "qwform.cli.main", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        env=env,
    )


@pytest.fixture
def project(tmp_path):
    (tmp_path / "qwform.yaml").write_text("classifications: cls.yaml\n")
    (tmp_path / "cls.yaml").write_text(CLASSIFICATIONS)
    (tmp_path / "data.yaml").write_text(DATA)
    (tmp_path / "edit.html").write_text(TEMPLATE)
    return tmp_path


class TestCLIIntegration:
    def test_render(self, project):
        """qwform render should print the rewritten page."""
        result = run_cli("render", "edit.html", "--data", "data.yaml", cwd=project)
        assert result.returncode == 0, result.stderr
        assert 'name="memberName" value="Ariel" class="validError"' in result.stdout
        assert '<option value="PRV" selected="selected">Provisional Member</option>' in (
            result.stdout
        )
        assert 'name="qwform.token" value="none"' in result.stdout

    def test_render_with_token(self, project):
        result = run_cli(
            "render", "edit.html", "-d", "data.yaml", "--token", cwd=project
        )
        assert result.returncode == 0, result.stderr
        assert 'value="none"' not in result.stdout

    def test_render_to_file(self, project):
        result = run_cli("render", "edit.html", "-d", "data.yaml", "-o", "out.html", cwd=project)
        assert result.returncode == 0, result.stderr
        assert "<form>" in (project / "out.html").read_text()

    def test_render_error_exits_nonzero(self, project):
        (project / "bad.html").write_text('<div la:token="true"></div>')
        result = run_cli("render", "bad.html", cwd=project)
        assert result.returncode == 1
        assert "Cannot use the token attribute except input tag." in result.stderr

    def test_render_bad_error_entry(self, project):
        """An error entry without a property reports the data file, not a traceback."""
        (project / "bad.yaml").write_text("errors:\n  - {key: errors.required}\n")
        result = run_cli("render", "edit.html", "-d", "bad.yaml", cwd=project)
        assert result.returncode == 1
        assert "Error: Invalid data file: error entries need 'property' and 'key'" in (
            result.stderr
        )
        assert "bad.yaml" in result.stderr
        assert "Traceback" not in result.stderr

    def test_render_missing_data_file(self, project):
        result = run_cli("render", "edit.html", "-d", "nope.yaml", cwd=project)
        assert result.returncode == 1
        assert "Invalid data file: file not found" in result.stderr

    def test_lint_clean(self, project):
        result = run_cli("lint", "edit.html", cwd=project)
        assert result.returncode == 0
        assert "No mistaken prefixes found" in result.stdout

    def test_lint_reports_mistakes(self, project):
        (project / "bad.html").write_text('<li th:errors="memberName"></li>')
        result = run_cli("lint", "edit.html", "bad.html", cwd=project)
        assert result.returncode == 1
        assert "la:errors" in result.stdout

    def test_directives(self, project):
        result = run_cli("directives", cwd=project)
        assert result.returncode == 0
        assert "la:property" in result.stdout
        assert "la:optioncls" in result.stdout

    def test_version(self, project):
        result = run_cli("--version", cwd=project)
        assert result.returncode == 0
        assert result.stdout.startswith("qwform ")
