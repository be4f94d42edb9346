"""Tests for ProcessRunner against real child processes."""

import asyncio
import sys

import pytest

from npm_publish_scripts.exceptions import ProcessFailure, ProcessSpawnFailure
from npm_publish_scripts.process import ProcessRunner


@pytest.mark.asyncio
async def test_run_success_returns_zero():
    runner = ProcessRunner()
    result = await runner.run(sys.executable, ["-c", "pass"])
    assert result.exit_code == 0
    assert result.stdout == ""
    assert not runner.live


@pytest.mark.asyncio
async def test_run_captures_output(tmp_path):
    runner = ProcessRunner()
    result = await runner.run(
        sys.executable,
        ["-c", "import os; print(os.getcwd())"],
        cwd=tmp_path,
        capture=True,
    )
    assert result.stdout.strip() == str(tmp_path.resolve())


@pytest.mark.asyncio
async def test_nonzero_exit_raises_process_failure():
    runner = ProcessRunner()
    with pytest.raises(ProcessFailure) as excinfo:
        await runner.run(
            sys.executable,
            ["-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"],
            capture=True,
        )
    assert excinfo.value.exit_code == 3
    assert "exited with code 3" in str(excinfo.value)
    assert "boom" in str(excinfo.value)
    assert not runner.live


@pytest.mark.asyncio
async def test_missing_executable_raises_spawn_failure():
    runner = ProcessRunner()
    with pytest.raises(ProcessSpawnFailure) as excinfo:
        await runner.run("definitely-not-a-real-command-npm-publish", ["--version"])
    assert "definitely-not-a-real-command-npm-publish" in str(excinfo.value)
    assert not runner.live


@pytest.mark.asyncio
async def test_cancellation_stops_the_child():
    runner = ProcessRunner()
    task = asyncio.ensure_future(
        runner.run(sys.executable, ["-c", "import time; time.sleep(30)"])
    )
    for _ in range(100):
        if runner.live:
            break
        await asyncio.sleep(0.05)
    assert runner.live
    process = next(iter(runner.live))

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert process.returncode is not None
    assert not runner.live


@pytest.mark.asyncio
async def test_terminate_all_stops_live_children():
    runner = ProcessRunner()
    task = asyncio.ensure_future(
        runner.run(sys.executable, ["-c", "import time; time.sleep(30)"])
    )
    for _ in range(100):
        if runner.live:
            break
        await asyncio.sleep(0.05)
    process = next(iter(runner.live))

    await runner.terminate_all()

    assert process.returncode is not None
    assert not runner.live
    with pytest.raises(ProcessFailure):
        await task
