"""
Answer submission and exam finalization.

Selecting an answer updates the local answer map immediately and syncs it to
the exam service in the background; the taker never waits on the network
and a failed sync never reverts what they chose. Answers not yet confirmed
by the server are tracked in `unsynced` and sent again before finalizing.

Finalize is single-flight: while one finalize is running, or after one has
succeeded, further calls do not touch the network. A manual finish and an
expired countdown therefore end the exam exactly once. The id of an exam
whose finalize was accepted is persisted, so a later process that only needs
the graded details never posts finalize again.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from loguru import logger

from simulado.core.app_state import AppStateStore
from simulado.core.errors import FinalizeError, SimuladoApiError, SimuladoError, SimuladoValidationError
from simulado.core.mock_data import grade_offline, is_offline_exam
from simulado.core.models import ExamDetails, letter_for_index
from simulado.integrations.exam_client import ExamClient


class AnswerSubmissionPipeline:
    """Local-first answer recording plus the finalize sequence for one exam."""

    def __init__(
        self,
        app_state: AppStateStore,
        exam_client: ExamClient,
        exam_id: str,
        offline: bool | None = None,
    ):
        self.app_state = app_state
        self.exam_client = exam_client
        self.exam_id = exam_id
        self.offline = is_offline_exam(exam_id) if offline is None else offline

        # question id -> index the server has not confirmed yet
        self.unsynced: dict[str, int] = {}
        self._pending: set[asyncio.Task] = set()
        self._latest: dict[str, asyncio.Task] = {}

        self._finalizing = False
        self._result: ExamDetails | None = None

    # =========================================================================
    # Answers
    # =========================================================================

    def select(self, question_id: str, index: int) -> asyncio.Task | None:
        """
        Record an answer locally and schedule its remote sync.

        Must be called from a running event loop for online exams.

        Returns:
            The background sync task, or None for offline exams.
        """
        if index < 0:
            raise SimuladoValidationError(f"Invalid alternative index {index}")
        if self.is_finalized:
            raise SimuladoValidationError("Exam already finished")

        self.app_state.set_answer(question_id, index)
        if self.offline:
            return None

        self.unsynced[question_id] = index
        previous = self._latest.get(question_id)
        task = asyncio.get_running_loop().create_task(self._sync(question_id, index, previous))
        self._latest[question_id] = task
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _sync(self, question_id: str, index: int, previous: asyncio.Task | None) -> bool:
        # Same-question PATCHes go out in selection order
        if previous is not None and not previous.done():
            await previous
        return await self._send(question_id, index)

    async def _send(self, question_id: str, index: int) -> bool:
        try:
            await self.exam_client.update_answer(self.exam_id, question_id, letter_for_index(index))
        except SimuladoApiError as e:
            logger.error(f"Error saving answer for question {question_id}: {e}")
            return False

        if self.unsynced.get(question_id) == index:
            del self.unsynced[question_id]
        return True

    async def drain(self) -> None:
        """Wait for every scheduled sync to settle."""
        while True:
            pending = [task for task in self._pending if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending)

    async def reconcile(self) -> int:
        """
        Re-send every answer the server has not confirmed.

        Returns:
            Number of answers still unsynced afterwards.
        """
        await self.drain()
        for question_id, index in list(self.unsynced.items()):
            logger.info(f"Re-sending unsynced answer for question {question_id}")
            await self._send(question_id, index)
        if self.unsynced:
            logger.warning(f"{len(self.unsynced)} answers could not be synced before finalize")
        return len(self.unsynced)

    # =========================================================================
    # Finalize
    # =========================================================================

    @property
    def is_finalized(self) -> bool:
        return self._result is not None

    @property
    def is_finalizing(self) -> bool:
        return self._finalizing

    async def finalize(self) -> ExamDetails | None:
        """
        Finalize the exam and fetch its graded details.

        Returns:
            The graded details, the earlier result when already finalized,
            or None when another finalize is still running.

        Raises:
            FinalizeError: When finalize or the details fetch fails. The
                pipeline is re-armed so the caller can try again.
        """
        if self._finalizing or self._result is not None:
            logger.debug(f"Finalize for exam {self.exam_id} already handled")
            return self._result

        self._finalizing = True
        try:
            if self.offline:
                details = grade_offline(
                    self.exam_id, self.app_state.current_simulado, self.app_state.answers
                )
            else:
                details = await self._finalize_remote()
        finally:
            self._finalizing = False

        self._result = details
        return details

    async def _finalize_remote(self) -> ExamDetails:
        try:
            if self.app_state.finalized_exam_id != self.exam_id:
                await self.reconcile()
                await self.exam_client.finalize_exam(self.exam_id)
                self.app_state.finalized_exam_id = self.exam_id
            else:
                logger.info(f"Exam {self.exam_id} already finalized, fetching details only")
            return await self.exam_client.get_exam_details(self.exam_id)
        except SimuladoApiError as e:
            raise FinalizeError(f"Could not finish exam {self.exam_id}: {e}") from e


def format_time(seconds: int) -> str:
    """Format remaining seconds as MM:SS."""
    minutes, rest = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{rest:02d}"


class CountdownTimer:
    """
    Per-exam countdown that fires `on_expire` once when it reaches zero.

    `interval` is the wall-clock length of one tick (one second of exam
    time); tests shrink it.
    """

    def __init__(
        self,
        seconds: int,
        on_expire: Callable[[], Awaitable[Any]],
        interval: float = 1.0,
        on_tick: Callable[[int], None] | None = None,
    ):
        self.remaining = max(0, seconds)
        self.on_expire = on_expire
        self.interval = interval
        self.on_tick = on_tick
        self.error: SimuladoError | None = None
        self._fired = False
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def expired(self) -> bool:
        return self._fired

    def start(self) -> asyncio.Task:
        if self.running:
            return self._task
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()

    def tick(self) -> bool:
        """Advance one second. Returns True exactly once, when time runs out."""
        if self._fired:
            return False
        self.remaining = max(0, self.remaining - 1)
        if self.on_tick:
            self.on_tick(self.remaining)
        if self.remaining == 0:
            self._fired = True
            return True
        return False

    async def _run(self) -> None:
        while not self._fired:
            await asyncio.sleep(self.interval)
            if self.tick():
                logger.info("Time is up, finishing exam")
                try:
                    await self.on_expire()
                except SimuladoError as e:
                    self.error = e
                    logger.error(f"Automatic finish failed: {e}")

    async def wait(self) -> None:
        if self._task:
            await asyncio.wait([self._task])
