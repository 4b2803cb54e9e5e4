"""Background execution of playlist jobs.

Starting a job writes its ``pending`` snapshot and returns at once; the
pipeline then runs as its own asyncio task. The runner holds a strong
reference to every running task so none is garbage-collected mid-run, and
``drain`` gives in-flight jobs a bounded time to finish on shutdown.
"""

import asyncio
from collections.abc import Callable

from attrs import define, field

from underplayed.application.services import JobStatusRepository
from underplayed.application.use_cases import (
    GeneratePlaylistCommand,
    GeneratePlaylistUseCase,
    new_process_id,
    pending_snapshot,
    record_job_failure,
)
from underplayed.config import get_logger
from underplayed.domain.entities import JobSnapshot

logger = get_logger(__name__)

# Builds the use case for one job around the runner's status repository
UseCaseFactory = Callable[[JobStatusRepository], GeneratePlaylistUseCase]


@define(slots=True)
class JobRunner:
    """Starts playlist jobs and tracks the ones still running."""

    status_repository: JobStatusRepository
    use_case_factory: UseCaseFactory
    _tasks: set[asyncio.Task[JobSnapshot]] = field(factory=set, init=False)

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    async def accept(self, playlist_name: str | None = None) -> GeneratePlaylistCommand:
        """Assign a process id and persist the job's ``pending`` snapshot."""
        command = GeneratePlaylistCommand(
            process_id=new_process_id(), playlist_name=playlist_name
        )
        await self.status_repository.save(pending_snapshot(command.process_id))
        logger.info(f"Accepted playlist job {command.process_id}")
        return command

    async def start(self, playlist_name: str | None = None) -> str:
        """Accept a job and run it in the background.

        Returns:
            The new job's process id
        """
        command = await self.accept(playlist_name)
        task = asyncio.create_task(
            self.run(command), name=f"playlist-job-{command.process_id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return command.process_id

    async def run(self, command: GeneratePlaylistCommand) -> JobSnapshot:
        """Run an accepted job to completion in the current task."""
        try:
            use_case = self.use_case_factory(self.status_repository)
        except Exception as e:
            # Misconfigured clients fail the job like any other stage error
            logger.opt(exception=e).error(
                f"Could not prepare playlist job {command.process_id}: {e}"
            )
            return await record_job_failure(
                self.status_repository, pending_snapshot(command.process_id), e
            )

        return await use_case.execute(command)

    async def drain(self, timeout: float) -> None:
        """Wait up to ``timeout`` seconds for running jobs, then cancel the rest."""
        if not self._tasks:
            return

        logger.info(f"Waiting up to {timeout}s for {len(self._tasks)} running jobs")
        _, still_running = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in still_running:
            logger.warning(f"Cancelling unfinished job task {task.get_name()}")
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
