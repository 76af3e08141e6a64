"""
Debounced autosave for an editing session.

Each change cancels the pending timer and starts a new one, so any burst of
edits turns into a single write ``delay`` seconds after the last one. At
most one write is in flight per editor. An edit that lands during a write
re-marks the document dirty and starts another debounce cycle; it does not
start a second concurrent write.
"""

import asyncio
import inspect
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from ...core.config import Config
from .editor import SectionEditor

logger = logging.getLogger(__name__)

# persist(document_json, title) -> anything; may be sync or async
PersistCallback = Callable[[Dict[str, Any], str], Any]

IDLE = "idle"
PENDING = "pending"
SAVING = "saving"


class AutosaveScheduler:
    """
    Usage:
        scheduler = AutosaveScheduler(
            editor,
            lambda doc, title: page_service.save_document(page_id, doc, title=title),
        )
        editor.update_field(...)      # save runs 3s after the last edit
        await scheduler.flush()       # or save right now
        scheduler.close()
    """

    def __init__(
        self,
        editor: SectionEditor,
        persist: PersistCallback,
        delay: Optional[float] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.editor = editor
        self.persist = persist
        self.delay = Config.AUTOSAVE_DELAY_SECONDS if delay is None else delay
        self.state = IDLE
        self.last_error: Optional[Exception] = None
        self.last_saved_at: Optional[datetime] = None
        self.save_count = 0

        self._loop = loop
        self._timer: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None
        self._rerun_after_save = False
        self._closed = False
        self._unsubscribe = editor.subscribe(self._on_change)

    @property
    def is_saving(self) -> bool:
        return self._task is not None and not self._task.done()

    def _on_change(self, editor: SectionEditor) -> None:
        self.schedule()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def schedule(self) -> None:
        """(Re)start the debounce timer."""
        if self._closed:
            return
        self._cancel_timer()
        loop = self._loop or asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._fire)
        if not self.is_saving:
            self.state = PENDING

    def _fire(self) -> None:
        self._timer = None
        if self.is_saving:
            self._rerun_after_save = True
            return
        self._task = asyncio.ensure_future(self._save())

    def _persist_is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.persist) or inspect.iscoroutinefunction(
            getattr(self.persist, "__call__", None)
        )

    async def _call_persist(self, snapshot: Dict[str, Any], title: str) -> Any:
        """Run the callback, off the loop when it is sync; await whatever it hands back."""
        if self._persist_is_async():
            result = self.persist(snapshot, title)
        else:
            result = await asyncio.to_thread(self.persist, snapshot, title)
        # lambdas and partials wrapping a coroutine function return an awaitable
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _save(self) -> bool:
        if not self.editor.is_dirty:
            self.state = IDLE
            return True

        revision = self.editor.revision
        snapshot = self.editor.snapshot()
        title = self.editor.title
        self.state = SAVING

        try:
            await self._call_persist(snapshot, title)
        except Exception as e:
            # In-memory edits stay dirty so the user can retry
            logger.error(f"Autosave failed: {e}")
            self.last_error = e
            return False
        else:
            self.last_error = None
            self.last_saved_at = datetime.now()
            self.save_count += 1
            if not self.editor.mark_clean(revision):
                logger.debug("Document changed during save; staying dirty")
            return True
        finally:
            self.state = PENDING if self._timer is not None else IDLE
            if self._rerun_after_save and not self._closed:
                self._rerun_after_save = False
                self.schedule()

    async def flush(self) -> bool:
        """Save immediately, waiting for any in-flight write first."""
        self._cancel_timer()
        if self._task is not None and not self._task.done():
            await self._task
            self._cancel_timer()
            self._rerun_after_save = False
        self._task = asyncio.ensure_future(self._save())
        return await self._task

    def close(self) -> None:
        """Stop listening and drop the pending timer. An in-flight write is left to finish."""
        self._closed = True
        self._cancel_timer()
        self._unsubscribe()
        if not self.is_saving:
            self.state = IDLE
