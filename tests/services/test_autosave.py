"""
Tests for AutosaveScheduler — debounce, coalescing, single in-flight write,
failure handling and cancellation.
"""

import asyncio

import pytest

from pagesmith.services.landing_page.autosave import AutosaveScheduler, IDLE, PENDING
from pagesmith.services.landing_page.editor import SectionEditor

DELAY = 0.05


@pytest.fixture
def editor():
    return SectionEditor(
        {"sections": [{"id": "hero-1", "type": "hero", "content": {"headline": "A"}}]},
        title="Acme",
    )


class Recorder:
    """Persist callback that records snapshots and tracks concurrency."""

    def __init__(self, hold: asyncio.Event = None, fail: bool = False):
        self.calls = []
        self.active = 0
        self.max_active = 0
        self.hold = hold
        self.fail = fail
        self.started = asyncio.Event()

    async def __call__(self, document, title):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.started.set()
        try:
            if self.hold is not None:
                await self.hold.wait()
            if self.fail:
                raise RuntimeError("db down")
            self.calls.append((document, title))
        finally:
            self.active -= 1


class TestDebounce:
    @pytest.mark.asyncio
    async def test_burst_of_edits_saves_once(self, editor):
        recorder = Recorder()
        scheduler = AutosaveScheduler(editor, recorder, delay=DELAY)

        for text in ("B", "BC", "BCD", "BCDE"):
            editor.update_field("hero-1", "headline", text)
            await asyncio.sleep(DELAY / 5)

        assert scheduler.state == PENDING
        assert recorder.calls == []

        await asyncio.sleep(DELAY * 4)

        assert len(recorder.calls) == 1
        document, title = recorder.calls[0]
        assert document["sections"][0]["content"]["headline"] == "BCDE"
        assert title == "Acme"
        assert not editor.is_dirty
        assert scheduler.state == IDLE
        scheduler.close()

    @pytest.mark.asyncio
    async def test_each_edit_resets_timer(self, editor):
        recorder = Recorder()
        scheduler = AutosaveScheduler(editor, recorder, delay=DELAY)

        editor.update_field("hero-1", "headline", "B")
        await asyncio.sleep(DELAY * 0.7)
        editor.update_field("hero-1", "headline", "C")
        await asyncio.sleep(DELAY * 0.7)
        assert recorder.calls == []

        await asyncio.sleep(DELAY * 2)
        assert len(recorder.calls) == 1
        scheduler.close()

    @pytest.mark.asyncio
    async def test_sync_persist_callback(self, editor):
        saved = []
        scheduler = AutosaveScheduler(editor, lambda doc, title: saved.append(doc), delay=DELAY)
        editor.update_field("hero-1", "headline", "Sync")
        await asyncio.sleep(DELAY * 4)
        assert saved and saved[0]["sections"][0]["content"]["headline"] == "Sync"
        assert not editor.is_dirty
        scheduler.close()

    @pytest.mark.asyncio
    async def test_lambda_wrapping_coroutine_is_awaited(self, editor):
        saved = []

        async def save(doc, title):
            saved.append(doc)

        scheduler = AutosaveScheduler(editor, lambda doc, title: save(doc, title), delay=DELAY)
        editor.update_field("hero-1", "headline", "Wrapped")
        await asyncio.sleep(DELAY * 4)

        assert len(saved) == 1
        assert saved[0]["sections"][0]["content"]["headline"] == "Wrapped"
        assert scheduler.save_count == 1
        assert not editor.is_dirty
        scheduler.close()

    @pytest.mark.asyncio
    async def test_lambda_wrapping_failing_coroutine_stays_dirty(self, editor):
        async def save(doc, title):
            raise RuntimeError("db down")

        scheduler = AutosaveScheduler(editor, lambda doc, title: save(doc, title), delay=10)
        editor.update_field("hero-1", "headline", "Lost?")

        assert await scheduler.flush() is False
        assert editor.is_dirty
        assert scheduler.save_count == 0
        scheduler.close()


class TestInFlight:
    @pytest.mark.asyncio
    async def test_edit_during_save_does_not_start_concurrent_write(self, editor):
        hold = asyncio.Event()
        recorder = Recorder(hold=hold)
        scheduler = AutosaveScheduler(editor, recorder, delay=DELAY)

        editor.update_field("hero-1", "headline", "first")
        await asyncio.wait_for(recorder.started.wait(), timeout=1)
        assert scheduler.is_saving

        editor.update_field("hero-1", "headline", "second")
        await asyncio.sleep(DELAY * 3)
        assert recorder.active == 1

        hold.set()
        await asyncio.sleep(DELAY * 4)

        assert recorder.max_active == 1
        assert [c[0]["sections"][0]["content"]["headline"] for c in recorder.calls] == ["first", "second"]
        assert not editor.is_dirty
        scheduler.close()

    @pytest.mark.asyncio
    async def test_edit_during_save_keeps_dirty_after_first_write(self, editor):
        hold = asyncio.Event()
        recorder = Recorder(hold=hold)
        scheduler = AutosaveScheduler(editor, recorder, delay=10)

        editor.update_field("hero-1", "headline", "first")
        flush = asyncio.ensure_future(scheduler.flush())
        await asyncio.wait_for(recorder.started.wait(), timeout=1)

        editor.update_field("hero-1", "headline", "second")
        hold.set()
        await flush

        assert editor.is_dirty
        scheduler.close()


class TestFailureAndLifecycle:
    @pytest.mark.asyncio
    async def test_failed_save_keeps_edits_dirty(self, editor):
        scheduler = AutosaveScheduler(editor, Recorder(fail=True), delay=DELAY)
        editor.update_field("hero-1", "headline", "unsaved")

        assert await scheduler.flush() is False
        assert editor.is_dirty
        assert isinstance(scheduler.last_error, RuntimeError)
        assert editor.get_section("hero-1").content["headline"] == "unsaved"
        scheduler.close()

    @pytest.mark.asyncio
    async def test_flush_saves_immediately(self, editor):
        recorder = Recorder()
        scheduler = AutosaveScheduler(editor, recorder, delay=10)
        editor.update_field("hero-1", "headline", "now")

        assert await scheduler.flush() is True
        assert len(recorder.calls) == 1
        assert scheduler.save_count == 1
        assert scheduler.last_saved_at is not None
        scheduler.close()

    @pytest.mark.asyncio
    async def test_flush_when_clean_writes_nothing(self, editor):
        recorder = Recorder()
        scheduler = AutosaveScheduler(editor, recorder, delay=DELAY)
        assert await scheduler.flush() is True
        assert recorder.calls == []
        scheduler.close()

    @pytest.mark.asyncio
    async def test_close_cancels_pending_save(self, editor):
        recorder = Recorder()
        scheduler = AutosaveScheduler(editor, recorder, delay=DELAY)
        editor.update_field("hero-1", "headline", "pending")
        scheduler.close()

        await asyncio.sleep(DELAY * 3)
        assert recorder.calls == []
        assert scheduler.state == IDLE

        editor.update_field("hero-1", "headline", "after close")
        await asyncio.sleep(DELAY * 3)
        assert recorder.calls == []
