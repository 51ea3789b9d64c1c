"""End-to-end tests for import and export against a live KV agent.

Tests the complete flow: CLI → worker pool → upload tasks → HTTP → agent.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from consulio.client.api import ConsulConnector
from consulio.client.cli import cli
from consulio.client.sync import (
    BoundedWorkerPool,
    RateLimiter,
    UploadStatus,
    UploadWorker,
)
from consulio.core.config import ConsulConfig

from tests.integration.conftest import FakeConsul


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def configs(tmp_path: Path) -> Path:
    """Create a directory with a.txt ("X") and b/c.txt ("Y")."""
    root = tmp_path / "configs"
    (root / "b").mkdir(parents=True)
    (root / "a.txt").write_text("X")
    (root / "b" / "c.txt").write_text("Y")
    return root


def run_import(runner: CliRunner, consul: FakeConsul, root: Path, *extra: str):  # type: ignore[no-untyped-def]
    """Invoke `consul-io import` with concurrency 2, 3 attempts and 10ms pacing."""
    problems = root.parent / "problems.txt"
    return runner.invoke(
        cli,
        [
            "--consul-addr", consul.url,
            "--concurrency", "2",
            "--retry-limit", "3",
            "--rate-limit", "10",
            "import", str(root),
            "--problems-file", str(problems),
            *extra,
        ],
    )


class TestImportWorkflow:
    """Import scenarios through the CLI."""

    def test_upload_into_empty_store(
        self, runner: CliRunner, consul: FakeConsul, configs: Path
    ) -> None:
        """Both files are uploaded into an empty store."""
        result = run_import(runner, consul, configs)

        assert result.exit_code == 0, result.output
        assert consul.data == {"a.txt": b"X", "b/c.txt": b"Y"}
        assert result.output.count("Uploaded ") == 2
        assert "2 uploaded, 0 unchanged, 0 failed" in result.output
        assert "Import process completed successfully." in result.output

    def test_partial_skip(
        self, runner: CliRunner, consul: FakeConsul, configs: Path
    ) -> None:
        """Only the changed file is written when the other already matches."""
        consul.data["a.txt"] = b"X"

        result = run_import(runner, consul, configs)

        assert result.exit_code == 0, result.output
        assert f"No changes detected for file: {configs / 'a.txt'}" in result.output
        assert consul.put_counts == {"b/c.txt": 1}
        assert consul.data["b/c.txt"] == b"Y"

    def test_failing_put_does_not_abort_run(
        self, runner: CliRunner, consul: FakeConsul, configs: Path
    ) -> None:
        """A key that always fails is reported; the other file still uploads."""
        consul.fail_put.add("a.txt")

        result = run_import(runner, consul, configs)

        assert result.exit_code == 0, result.output
        assert consul.put_counts["a.txt"] == 3
        assert consul.data == {"b/c.txt": b"Y"}
        assert "Error: a.txt:" in result.output
        assert "1 uploaded, 0 unchanged, 1 failed" in result.output

    def test_fail_on_error_exit_code(
        self, runner: CliRunner, consul: FakeConsul, configs: Path
    ) -> None:
        """--fail-on-error turns a failed file into exit status 1."""
        consul.fail_put.add("a.txt")

        result = run_import(runner, consul, configs, "--fail-on-error")

        assert result.exit_code == 1
        assert consul.data == {"b/c.txt": b"Y"}

    def test_ignore_prefix(
        self, runner: CliRunner, consul: FakeConsul, configs: Path
    ) -> None:
        """Ignored paths are never written."""
        result = run_import(runner, consul, configs, "--ignore", "b")

        assert result.exit_code == 0, result.output
        assert consul.data == {"a.txt": b"X"}
        assert "Ignoring path:" in result.output

    def test_sensitive_findings(
        self, runner: CliRunner, consul: FakeConsul, configs: Path
    ) -> None:
        """Plain-text secrets are uploaded and recorded in the problems file."""
        (configs / "app.yml").write_text("dbPassword: hunter2\n")

        result = run_import(runner, consul, configs)

        assert result.exit_code == 0, result.output
        problems = (configs.parent / "problems.txt").read_text(encoding="utf-8")
        assert "sensitive key 'Password'" in problems
        assert consul.data["app.yml"] == b"dbPassword: hunter2\n"

    def test_unreachable_agent(self, runner: CliRunner, configs: Path) -> None:
        """Every file fails when the agent cannot be reached; the run completes."""
        result = runner.invoke(
            cli,
            [
                "--consul-addr", "http://127.0.0.1:9",
                "--rate-limit", "0",
                "import", str(configs),
                "--problems-file", str(configs.parent / "problems.txt"),
            ],
        )

        assert result.exit_code == 0, result.output
        assert "0 uploaded, 0 unchanged, 2 failed" in result.output
        assert "Error creating Consul client" in result.output


class TestPoolAgainstAgent:
    """The worker pool wired to the real HTTP client."""

    def test_pool_run(self, consul: FakeConsul, configs: Path) -> None:
        connector = ConsulConnector(ConsulConfig(address=consul.url))
        worker = UploadWorker(
            connect=connector,
            limiter=RateLimiter(0.01),
            retry_limit=3,
            rate_limit=0.01,
        )
        outcomes: list = []
        pool = BoundedWorkerPool(worker, concurrency=2, on_result=outcomes.append)

        try:
            summary = pool.run(configs)
        finally:
            connector.close()

        assert sorted(summary.uploaded) == ["a.txt", "b/c.txt"]
        assert all(o.status == UploadStatus.UPLOADED for o in outcomes)
        assert pool.peak_active <= 2
        assert pool.released_count == 2


class TestExportWorkflow:
    """Export through the CLI."""

    def test_round_trip(
        self, runner: CliRunner, consul: FakeConsul, configs: Path, tmp_path: Path
    ) -> None:
        """Files imported into the store can be exported back."""
        run_import(runner, consul, configs)
        target = tmp_path / "exported"

        result = runner.invoke(
            cli,
            [
                "--consul-addr", consul.url,
                "export", str(target),
                "--problems-file", str(tmp_path / "problems.txt"),
            ],
        )

        assert result.exit_code == 0, result.output
        assert (target / "a.txt").read_text() == "X"
        assert (target / "b" / "c.txt").read_text() == "Y"
        assert "Export process completed successfully." in result.output

    def test_unreachable_agent(self, runner: CliRunner, tmp_path: Path) -> None:
        """Export fails as a whole when the agent cannot be reached."""
        result = runner.invoke(
            cli, ["--consul-addr", "http://127.0.0.1:9", "export", str(tmp_path / "out")]
        )

        assert result.exit_code == 1
        assert "Error:" in result.output
