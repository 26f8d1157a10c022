"""Tests for toolchain base helpers."""

import signal
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from kaos.errors import HarnessError
from kaos.toolchains.base import RunOutput, ephemeral_workspace, run_process


class TestRunProcess:
    """Tests for run_process."""

    async def test_captures_output_and_status(self) -> None:
        """Collects stdout, stderr and the exit status."""
        output = await run_process(
            [
                sys.executable,
                "-c",
                "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)",
            ]
        )

        assert output.returncode == 3
        assert output.stdout.strip() == b"out"
        assert output.stderr.strip() == b"err"
        assert output.success is False

    async def test_passes_extra_environment(self) -> None:
        """Extra variables are added to the inherited environment."""
        output = await run_process(
            [
                sys.executable,
                "-c",
                "import os; print(os.environ['KAOS_MARKER'], 'PATH' in os.environ)",
            ],
            env={"KAOS_MARKER": "yes"},
        )

        assert output.stdout.split() == [b"yes", b"True"]

    async def test_kills_process_after_timeout(self) -> None:
        """An overdue process is killed and flagged."""
        output = await run_process(
            [sys.executable, "-c", "import time; time.sleep(30)"], timeout=0.5
        )

        assert output.timed_out is True
        assert output.success is False
        assert output.returncode == -signal.SIGKILL


def test_run_output_success() -> None:
    """Only a zero status without timeout is a success."""
    assert RunOutput(returncode=0).success is True
    assert RunOutput(returncode=1).success is False
    assert RunOutput(returncode=0, timed_out=True).success is False


class TestEphemeralWorkspace:
    """Tests for ephemeral_workspace."""

    def test_creates_and_removes_workspace(self) -> None:
        """The workspace exists only while the context is open."""
        with ephemeral_workspace() as workspace:
            assert workspace.is_dir()
            (workspace / "marker").write_text("x")

        assert not Path(workspace).exists()

    def test_raises_harness_error_when_uncreatable(self) -> None:
        """Failing to create the workspace is fatal for the harness."""
        with (
            patch(
                "kaos.toolchains.base.tempfile.TemporaryDirectory",
                side_effect=PermissionError("denied"),
            ),
            pytest.raises(HarnessError, match="Cannot create workspace"),
        ):
            with ephemeral_workspace():
                pass
