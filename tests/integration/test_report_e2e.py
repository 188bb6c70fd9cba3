"""End-to-end tests for coverage reports on a realistic project."""

import json
from pathlib import Path

from typer.testing import CliRunner

from doccov.cli import app

runner = CliRunner()

SESSION_TS = '''import { Token } from './token';

// Session lifecycle
export class Session {
  constructor(private token: Token) {}

  refresh(): Token {
    return this.token.renew();
  }
}

export function createSession(token: Token): Session {
  return new Session(token);
}

export const destroySession = (session: Session) => {
  session.refresh();
};
'''

TOKEN_TS = '''export interface Token {
  renew(): Token;
}

export function parseToken(raw: string): Token {
  return JSON.parse(raw);
}
'''

LEGACY_JS = '''function legacy() {
  return 1;
}
module.exports = { legacy };
'''


def write(path: str, content: str) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    Path(path).write_text(content)


class TestReportE2E:
    """End-to-end tests running report on a small TypeScript project."""

    def setup_project(self):
        write("src/auth/session.ts", SESSION_TS)
        write("src/auth/token.ts", TOKEN_TS)
        write("src/legacy.js", LEGACY_JS)
        write("src/auth/session.test.ts", "test('x', () => {});\n")
        write("node_modules/dep/index.js", "module.exports = 1;\n")
        write("docs/notes/session.md", (
            "---\n"
            "id: session-notes\n"
            "title: Sessions\n"
            "sources:\n"
            "  - src/auth/session.ts:3-10\n"
            "  - src/auth/token.ts\n"
            "  - /etc/passwd:1-1\n"
            "---\n"
            "How sessions work.\n"
        ))
        write(".doccov", (
            "coverage:\n"
            "  include: ['src/**/*.{ts,js}']\n"
            "  thresholds:\n"
            "    src: 40\n"
        ))

    def test_report_realistic_project(self):
        with runner.isolated_filesystem():
            self.setup_project()

            result = runner.invoke(app, ["report", "--json"])

            assert result.exit_code == 0
            data = json.loads(result.stdout)

            paths = [f["path"] for f in data["files"]]
            assert paths == ["src/auth/session.ts", "src/auth/token.ts", "src/legacy.js"]

            files = {f["path"]: f for f in data["files"]}
            session = files["src/auth/session.ts"]
            assert session["total_lines"] == 18
            assert session["covered_sections"] == [{"start": 3, "end": 10}]
            assert session["uncovered_sections"] == [{"start": 1, "end": 2}, {"start": 11, "end": 18}]

            functions = {f["name"]: f["is_covered"] for f in session["functions"]}
            assert functions == {"createSession": False, "destroySession": False}
            assert [(c["name"], c["is_covered"]) for c in session["classes"]] == [("Session", True)]

            token = files["src/auth/token.ts"]
            assert token["coverage_percentage"] == 100.0
            assert [f["name"] for f in token["functions"]] == ["parseToken"]

            summary = data["summary"]
            assert summary["total_lines"] == 18 + 7 + 4
            assert summary["covered_lines"] == 8 + 7
            assert summary["undocumented_files"] == ["src/legacy.js"]
            assert summary["low_coverage_files"] == ["src/auth/session.ts"]
            assert summary["functions_total"] == 4
            assert summary["functions_covered"] == 1
            assert summary["scope_threshold_violations"] == []
            assert [s["name"] for s in summary["scopes"]] == ["src"]

    def test_scope_threshold_fails_build(self):
        with runner.isolated_filesystem():
            self.setup_project()
            write(".doccov", "coverage:\n  thresholds:\n    src: 90\n")

            result = runner.invoke(app, ["report"])

            assert result.exit_code == 1

    def test_dry_run_matches_report_files(self):
        with runner.isolated_filesystem():
            self.setup_project()

            result = runner.invoke(app, ["scan", "--json"])

            assert result.exit_code == 0
            data = json.loads(result.stdout)
            assert data["source_files"] == ["src/auth/session.ts", "src/auth/token.ts", "src/legacy.js"]
            assert data["total_files"] == 3
