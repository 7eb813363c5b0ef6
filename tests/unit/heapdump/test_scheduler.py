"""Unit tests for start_auto_snapshot and snap_every."""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

import pytest

from leaklab.heapdump import scheduler
from leaklab.heapdump.scheduler import snap_every, start_auto_snapshot


class FakeWriter:
    """Stands in for write_snapshot; records labels and can fail on demand."""

    def __init__(self, directory: Path, fail_on: set[int] | None = None):
        self.directory = directory
        self.fail_on = fail_on or set()
        self.labels: list[str] = []
        self.calls = 0

    def __call__(self, label: str = "snapshot", output_dir=None) -> Path:
        call = self.calls
        self.calls += 1
        if call in self.fail_on:
            raise RuntimeError(f"write {call} failed")
        self.labels.append(label)
        return self.directory / f"{label}.heapsnapshot"


@pytest.fixture
def fake_writer(tmp_path, monkeypatch) -> FakeWriter:
    writer = FakeWriter(tmp_path)
    monkeypatch.setattr(scheduler, "write_snapshot", writer)
    return writer


class TestAutoSnapshotBasics:
    def test_immediate_capture_and_sequence(self, fake_writer):
        async def scenario():
            job = start_auto_snapshot(label="leak", interval_ms=30)
            await asyncio.sleep(0.1)
            return await job.stop()

        files = asyncio.run(scenario())

        assert len(files) >= 3
        assert fake_writer.labels == [f"leak-{i:04d}" for i in range(len(files))]

    def test_not_immediate_waits_for_first_tick(self, fake_writer):
        async def scenario():
            job = start_auto_snapshot(interval_ms=200, immediate=False)
            await asyncio.sleep(0.05)
            return await job.stop()

        assert asyncio.run(scenario()) == []
        assert fake_writer.calls == 0

    def test_immediate_capture_before_first_tick(self, fake_writer):
        async def scenario():
            job = start_auto_snapshot(interval_ms=1000)
            await asyncio.sleep(0.02)
            return await job.stop()

        files = asyncio.run(scenario())
        assert [f.name for f in files] == ["snapshot-0000.heapsnapshot"]

    def test_invalid_interval(self):
        async def scenario():
            with pytest.raises(ValueError):
                start_auto_snapshot(interval_ms=0)

        asyncio.run(scenario())

    def test_files_is_a_copy(self, fake_writer):
        async def scenario():
            job = start_auto_snapshot(interval_ms=1000)
            await asyncio.sleep(0.02)
            job.files.clear()
            files = job.files
            await job.stop()
            return files

        assert len(asyncio.run(scenario())) == 1


class TestAutoSnapshotSerialization:
    def test_slow_callback_never_overlaps(self, fake_writer):
        active = 0
        max_active = 0
        indices = []

        async def slow_callback(path, index):
            nonlocal active, max_active
            active += 1
            max_active = max(max_active, active)
            indices.append(index)
            await asyncio.sleep(0.2)
            active -= 1

        async def scenario():
            job = start_auto_snapshot(label="slow", interval_ms=50, on_after_snapshot=slow_callback)
            await asyncio.sleep(0.5)
            return await job.stop()

        files = asyncio.run(scenario())

        assert max_active == 1
        # Ticks queued during slow captures are drained, not dropped.
        assert len(files) >= 5
        assert indices == list(range(len(files)))
        assert fake_writer.labels == [f"slow-{i:04d}" for i in range(len(files))]

    def test_sync_callback_receives_path_and_index(self, fake_writer):
        seen = []

        async def scenario():
            job = start_auto_snapshot(
                label="cb", interval_ms=30, on_after_snapshot=lambda p, i: seen.append((p.name, i))
            )
            await asyncio.sleep(0.08)
            return await job.stop()

        files = asyncio.run(scenario())
        assert seen == [(f.name, i) for i, f in enumerate(files)]

    def test_stop_waits_for_in_flight_capture(self, fake_writer):
        finished = []

        async def slow_callback(path, index):
            await asyncio.sleep(0.1)
            finished.append(index)

        async def scenario():
            job = start_auto_snapshot(interval_ms=1000, on_after_snapshot=slow_callback)
            await asyncio.sleep(0.01)
            files = await job.stop()
            return files, job

        files, job = asyncio.run(scenario())
        assert finished == [0]
        assert len(files) == 1
        assert job.stopped

    def test_stop_drains_with_real_writer(self, tmp_path):
        async def scenario():
            job = start_auto_snapshot(label="real", output_dir=tmp_path, interval_ms=50)
            await asyncio.sleep(0.12)
            return await job.stop()

        files = asyncio.run(scenario())

        assert files
        assert all(f.exists() for f in files)
        for i, f in enumerate(files):
            assert re.match(rf"real-{i:04d}-.*\.heapsnapshot$", f.name)


class TestAutoSnapshotStop:
    def test_stop_is_idempotent(self, fake_writer):
        async def scenario():
            job = start_auto_snapshot(interval_ms=30)
            await asyncio.sleep(0.05)
            first = await job.stop()
            await asyncio.sleep(0.1)
            second = await job.stop()
            return first, second

        first, second = asyncio.run(scenario())
        assert first == second
        assert fake_writer.calls == len(first)

    def test_no_captures_after_stop(self, fake_writer):
        async def scenario():
            job = start_auto_snapshot(interval_ms=20)
            await asyncio.sleep(0.05)
            await job.stop()
            calls = fake_writer.calls
            await asyncio.sleep(0.1)
            return calls

        calls = asyncio.run(scenario())
        assert fake_writer.calls == calls

    def test_pre_set_signal_takes_nothing(self, fake_writer):
        async def scenario():
            signal = asyncio.Event()
            signal.set()
            job = start_auto_snapshot(interval_ms=10, signal=signal)
            await asyncio.sleep(0.05)
            return job, await job.stop()

        job, files = asyncio.run(scenario())
        assert files == []
        assert job.stopped
        assert fake_writer.calls == 0

    def test_signal_stops_job(self, fake_writer):
        async def scenario():
            signal = asyncio.Event()
            job = start_auto_snapshot(interval_ms=20, signal=signal)
            await asyncio.sleep(0.05)
            signal.set()
            await asyncio.sleep(0.01)
            assert job.stopped
            calls = fake_writer.calls
            await asyncio.sleep(0.1)
            return job, calls

        job, calls = asyncio.run(scenario())
        assert fake_writer.calls == calls
        assert len(job.files) == calls


class TestAutoSnapshotFailures:
    def test_failure_is_logged_and_job_continues(self, tmp_path, monkeypatch, caplog):
        writer = FakeWriter(tmp_path, fail_on={1})
        monkeypatch.setattr(scheduler, "write_snapshot", writer)

        async def scenario():
            job = start_auto_snapshot(label="flaky", interval_ms=20)
            await asyncio.sleep(0.09)
            return await job.stop()

        files = asyncio.run(scenario())

        assert writer.calls >= 3
        assert len(files) == writer.calls - 1
        # Sequence advances only on success, so the failed index is reused.
        assert writer.labels[:2] == ["flaky-0000", "flaky-0001"]
        assert "[flaky] snapshot failed" in caplog.text

    def test_callback_failure_keeps_sequence_gapless(self, fake_writer, caplog):
        calls = []

        def flaky_callback(path, index):
            calls.append(index)
            if len(calls) == 2:
                raise RuntimeError("callback failed")

        async def scenario():
            job = start_auto_snapshot(label="cb", interval_ms=20, on_after_snapshot=flaky_callback)
            await asyncio.sleep(0.09)
            return job, await job.stop()

        job, files = asyncio.run(scenario())

        assert len(files) >= 3
        names = [f.name for f in files]
        assert names == [f"cb-{i:04d}.heapsnapshot" for i in range(len(files))]
        assert len(set(names)) == len(names)
        assert calls == list(range(len(files)))
        assert job.sequence == len(files)
        assert "on_after_snapshot failed for cb-0001.heapsnapshot" in caplog.text

    def test_before_gc_collects_each_capture(self, fake_writer, monkeypatch):
        collections = []
        monkeypatch.setattr(scheduler, "_collect_garbage", lambda: collections.append(1))

        async def scenario():
            job = start_auto_snapshot(interval_ms=30, before_gc=True)
            await asyncio.sleep(0.08)
            return await job.stop()

        files = asyncio.run(scenario())
        assert len(collections) == len(files)

    def test_no_gc_by_default(self, fake_writer, monkeypatch):
        collections = []
        monkeypatch.setattr(scheduler, "_collect_garbage", lambda: collections.append(1))

        async def scenario():
            job = start_auto_snapshot(interval_ms=1000)
            await asyncio.sleep(0.02)
            await job.stop()

        asyncio.run(scenario())
        assert collections == []

    def test_missing_collector_is_skipped(self, monkeypatch):
        monkeypatch.delattr(scheduler.gc, "collect")
        scheduler._collect_garbage()


class TestSnapEvery:
    def test_takes_requested_count(self, fake_writer):
        files = asyncio.run(snap_every(3, label="pair", interval_ms=10))
        assert fake_writer.labels == ["pair-0000", "pair-0001", "pair-0002"]
        assert len(files) == 3

    def test_default_is_two(self, fake_writer):
        asyncio.run(snap_every(interval_ms=10))
        assert fake_writer.labels == ["snapshot-0000", "snapshot-0001"]

    def test_no_sleep_after_last(self, fake_writer, monkeypatch):
        sleeps = []

        async def fake_sleep(seconds):
            sleeps.append(seconds)

        monkeypatch.setattr(scheduler.asyncio, "sleep", fake_sleep)
        asyncio.run(snap_every(3, interval_ms=5000))
        assert sleeps == [5.0, 5.0]

    def test_error_propagates(self, tmp_path, monkeypatch):
        writer = FakeWriter(tmp_path, fail_on={1})
        monkeypatch.setattr(scheduler, "write_snapshot", writer)

        with pytest.raises(RuntimeError, match="write 1 failed"):
            asyncio.run(snap_every(3, interval_ms=10))
        assert writer.labels == ["snapshot-0000"]

    def test_zero_times(self, fake_writer):
        assert asyncio.run(snap_every(0)) == []
