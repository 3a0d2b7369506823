"""Tests for the expired share grant reaper."""

import asyncio

import pytest
from pymongo.errors import AutoReconnect

from notevault.core.modules.reaper.models import ReaperState
from notevault.core.modules.share.models import SharePermission
from notevault.errors import ShareExpiredError, ShareNotFoundError


@pytest.fixture
async def note(core, alice):
    return await core.services.note.create_note(alice.id, "Plan", "step 1")


async def wait_until(predicate, timeout=5.0):
    async def poll():
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(poll(), timeout)


class TestSweep:
    async def test_deletes_only_expired(self, core, alice, note, clock):
        """Test that a sweep removes grants with expires_at <= now and keeps the rest."""
        short = await core.services.share.issue(note.id, alice.id, SharePermission.READ, ttl_days=1)
        long = await core.services.share.issue(note.id, alice.id, SharePermission.READ, ttl_days=5)
        clock.advance(days=1)  # short expires exactly now

        result = await core.services.reaper.sweep()

        assert result.succeeded
        assert result.deleted == 1
        assert result.started_at == clock()
        assert await core.services.share.registry.find_by_token(short.token) is None
        assert await core.services.share.registry.find_by_token(long.token) is not None
        assert core.services.reaper.state == ReaperState.IDLE

    async def test_idempotent(self, core, alice, note, clock):
        await core.services.share.issue(note.id, alice.id, SharePermission.READ, ttl_days=1)
        clock.advance(days=2)

        assert (await core.services.reaper.sweep()).deleted == 1
        assert (await core.services.reaper.sweep()).deleted == 0
        assert core.services.reaper.last_result.deleted == 0

    async def test_storage_error_is_logged_not_raised(self, core, alice, note, clock, monkeypatch):
        """Test that a failed sweep reports zero deletions and leaves the grants for the next run."""
        await core.services.share.issue(note.id, alice.id, SharePermission.READ, ttl_days=1)
        clock.advance(days=2)

        async def broken(moment):
            raise AutoReconnect("connection lost")

        monkeypatch.setattr(core.services.share.registry, "delete_expired", broken)
        result = await core.services.reaper.sweep()
        assert not result.succeeded
        assert result.deleted == 0
        assert core.services.reaper.state == ReaperState.IDLE

        monkeypatch.undo()
        assert (await core.services.reaper.sweep()).deleted == 1

    async def test_expiry_lifecycle(self, core, alice, note, clock):
        """Test resolve before expiry, after expiry and after reaping; the last two look the same."""
        grant = await core.services.share.issue(note.id, alice.id, SharePermission.READ, ttl_days=1)
        assert (await core.services.share.resolve(grant.token)).note_id == note.id

        clock.advance(days=1, seconds=1)
        with pytest.raises(ShareExpiredError) as expired:
            await core.services.share.resolve(grant.token)

        await core.services.reaper.sweep()
        with pytest.raises(ShareNotFoundError) as missing:
            await core.services.share.resolve(grant.token)

        assert str(expired.value) == str(missing.value)


class TestTimer:
    async def test_disabled_reaper_not_started(self, core):
        assert not core.services.reaper.is_running

    async def test_start_and_stop(self, core):
        reaper = core.services.reaper
        reaper.start()
        assert reaper.is_running
        await reaper.stop()
        assert not reaper.is_running
        assert reaper.last_result is None

    async def test_sweeps_periodically(self, core, alice, note, clock, monkeypatch):
        await core.services.share.issue(note.id, alice.id, SharePermission.READ, ttl_days=1)
        clock.advance(days=2)
        monkeypatch.setattr(core.config, "reaper_interval_seconds", 0.01)

        core.services.reaper.start()
        await wait_until(lambda: core.services.reaper.last_result is not None)
        await core.services.reaper.stop()

        assert await core.services.share.registry.count() == 0

    async def test_keeps_running_after_failures(self, core, monkeypatch):
        calls = []

        async def broken(moment):
            calls.append(moment)
            raise RuntimeError("unexpected")

        monkeypatch.setattr(core.services.share.registry, "delete_expired", broken)
        monkeypatch.setattr(core.config, "reaper_interval_seconds", 0.01)

        core.services.reaper.start()
        await wait_until(lambda: len(calls) >= 2)
        assert core.services.reaper.is_running
        await core.services.reaper.stop()
        assert core.services.reaper.state == ReaperState.IDLE

    async def test_stop_waits_for_sweep_in_flight(self, core, monkeypatch):
        """Test that stopping does not abort a running sweep and no new sweep starts afterwards."""
        entered = asyncio.Event()
        release = asyncio.Event()
        calls = []

        async def slow(moment):
            calls.append(moment)
            entered.set()
            await release.wait()
            return 3

        monkeypatch.setattr(core.services.share.registry, "delete_expired", slow)
        monkeypatch.setattr(core.config, "reaper_interval_seconds", 0.01)

        reaper = core.services.reaper
        reaper.start()
        await asyncio.wait_for(entered.wait(), 5)
        assert reaper.state == ReaperState.SWEEPING

        stopping = asyncio.create_task(reaper.stop())
        await asyncio.sleep(0.05)
        assert not stopping.done()

        release.set()
        await stopping
        assert not reaper.is_running
        assert reaper.last_result.deleted == 3
        assert len(calls) == 1
