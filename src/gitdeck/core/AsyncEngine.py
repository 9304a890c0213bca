# gitdeck/core/AsyncEngine.py
"""AsyncEngine Module
==================
Background execution of repository calls.

The curses loop must never block on git. `AsyncEngine` owns an asyncio event
loop living on its own daemon thread; every submitted task runs its blocking
callable in the loop's default executor, so a slow `git log --graph` does not
hold up a `git status` issued right after it.

Communication with the UI thread uses two plain `queue.Queue` objects:
`from_ui_queue` carries task dictionaries (``None`` asks the loop to finish)
and `to_ui_queue` carries exactly one message back per task: the task's own
result message, its error message, or a `TaskErrorMsg`.

Task format::

    {
        "type": "call",
        "name": "fetch:Files",            # shown in logs
        "func": callable,                  # blocking, runs in a worker thread
        "on_result": callable(result) -> message,
        "on_error": callable(GitError) -> message,   # optional
    }
"""

import asyncio
import logging
import queue
import threading
from typing import Any, Optional

from gitdeck.core.Messages import TaskErrorMsg
from gitdeck.integrations.GitBridge import GitError


TaskData = Optional[dict[str, Any]]

logger = logging.getLogger("gitdeck")


# ==================== AsyncEngine Class ====================
class AsyncEngine:
    """Class AsyncEngine
    ===================
    Event loop thread that turns task dictionaries into UI messages.

    Attributes:
        loop (Optional[asyncio.AbstractEventLoop]): Loop owned by the worker thread.
        thread (Optional[threading.Thread]): The worker thread, None until `start()`.
        from_ui_queue (queue.Queue): Incoming task dictionaries; None is the stop signal.
        to_ui_queue (queue.Queue): Outgoing messages for `Dashboard.process_pending`.
        config (dict): Application configuration.

    Methods:
        start(): Spawns the worker thread.
        submit_task(task_data): Queues a task; safe to call from any thread.
        stop(): Sends the stop signal, cancels running tasks and joins the thread.
        run_task(task_data): Coroutine executing a single task.
    """

    def __init__(self, to_ui_queue: "queue.Queue[Any]", config: Optional[dict[str, Any]] = None) -> None:
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.thread: Optional[threading.Thread] = None
        self.from_ui_queue: queue.Queue[TaskData] = queue.Queue()
        self.to_ui_queue: queue.Queue[Any] = to_ui_queue
        self.config: dict[str, Any] = config or {}
        self._running: set[asyncio.Task[Any]] = set()

    # ---------------------------------------------------------------- lifecycle

    def start(self) -> None:
        if self.thread is not None:
            logger.warning("AsyncEngine.start() called twice; ignoring.")
            return
        self.thread = threading.Thread(target=self._thread_main, daemon=True, name="AsyncEngineThread")
        self.thread.start()
        logger.info("AsyncEngine worker thread started.")

    def _thread_main(self) -> None:
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)
        try:
            self.loop.run_until_complete(self._receive_tasks())
        finally:
            self.loop.close()
            logger.info("AsyncEngine loop closed.")

    def stop(self) -> None:
        """Stops the worker thread; outstanding tasks are cancelled, not awaited."""
        if self.thread is None or self.loop is None or not self.thread.is_alive():
            logger.debug("AsyncEngine.stop(): nothing running.")
            return

        self.from_ui_queue.put(None)
        self.thread.join(timeout=2.0)
        if self.thread.is_alive():
            logger.error("AsyncEngine worker did not finish within 2s; forcing the loop to stop.")
            self.loop.call_soon_threadsafe(self.loop.stop)
        else:
            logger.info("AsyncEngine stopped.")

    # ---------------------------------------------------------------- tasks

    def submit_task(self, task_data: dict[str, Any]) -> None:
        self.from_ui_queue.put(task_data)

    async def _receive_tasks(self) -> None:
        assert self.loop is not None
        logger.debug("AsyncEngine waiting for tasks.")
        while True:
            try:
                task_data = await self.loop.run_in_executor(None, self.from_ui_queue.get)
            except RuntimeError as e:
                # executor already shut down
                logger.info(f"AsyncEngine stopped receiving tasks: {e}")
                break
            if task_data is None:
                logger.debug("AsyncEngine got the stop signal.")
                break
            task = self.loop.create_task(self.run_task(task_data))
            self._running.add(task)
            task.add_done_callback(self._running.discard)

        await self._cancel_running()

    async def run_task(self, task_data: dict[str, Any]) -> None:
        """Executes one task and puts exactly one message on `to_ui_queue`."""
        name = str(task_data.get("name", task_data.get("type")))
        logger.debug(f"AsyncEngine running {name}")
        try:
            if task_data.get("type") != "call":
                raise ValueError(f"Unknown task type: {task_data.get('type')!r}")
            assert self.loop is not None
            result = await self.loop.run_in_executor(None, task_data["func"])
            message = task_data["on_result"](result)
        except GitError as e:
            on_error = task_data.get("on_error")
            if on_error is None:
                logger.error(f"Task {name} failed: {e}")
                message = TaskErrorMsg(task=name, error=str(e))
            else:
                logger.debug(f"Task {name} failed: {e}")
                message = on_error(e)
        except Exception as e:
            logger.error(f"Unexpected error in task {name}: {e}", exc_info=True)
            message = TaskErrorMsg(task=name, error=str(e))
        self.to_ui_queue.put(message)

    async def _cancel_running(self) -> None:
        pending = list(self._running)
        if not pending:
            return
        logger.info(f"AsyncEngine cancelling {len(pending)} running task(s).")
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
