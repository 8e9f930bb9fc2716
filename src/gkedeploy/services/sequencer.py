"""Sequential stage execution with first-failure short-circuit."""

from typing import List, Optional, Sequence, Tuple

from gkedeploy.errors import DeployError
from gkedeploy.models import Stage, StageOutcome
from gkedeploy.services.stages import OPERATIONS

PENDING = "pending"
RUNNING = "running"
COMPLETED = "completed"
FAILED = "failed"


class StageSequencer:
    """Runs the active stages for one operation, strictly in order.

    A stage whose predicate is false is skipped without side effects. The first
    failing command marks its stage failed, stops the pipeline and the error is
    re-raised unchanged; nothing after it is launched.
    """

    def __init__(
        self,
        stages: Sequence[Stage],
        command_runner,
        presenter,
        logger,
        report=None,
        cwd: Optional[str] = None,
    ):
        self.stages: Tuple[Stage, ...] = tuple(stages)
        self.command_runner = command_runner
        self.presenter = presenter
        self.logger = logger
        self.report = report
        self.cwd = cwd
        self.state = PENDING
        self.current_stage: Optional[str] = None
        self.outcomes: List[StageOutcome] = []

    @staticmethod
    def validate_operation(operation: str):
        if operation not in OPERATIONS:
            raise DeployError(
                f"Unknown operation '{operation}'. Expected one of: {', '.join(OPERATIONS)}"
            )

    def active_stages(self, operation: str) -> List[Stage]:
        self.validate_operation(operation)
        return [stage for stage in self.stages if stage.is_active(operation)]

    def run(self, operation: str) -> List[StageOutcome]:
        self.validate_operation(operation)
        if self.state != PENDING:
            raise DeployError("A pipeline can only be run once.")

        for stage in self.stages:
            if not stage.is_active(operation):
                self.logger.debug("Skipping stage %s for operation %s", stage.name, operation)
                self._record(StageOutcome(stage.name, "skipped"))
                if self.report is not None:
                    self.report.stage_skipped(stage.name)
                continue

            self.state = RUNNING
            self.current_stage = stage.name
            if self.report is not None:
                self.report.stage_started(stage.name)

            try:
                self._run_stage(stage)
            except DeployError as exc:
                self.state = FAILED
                self._record(StageOutcome(stage.name, "failed", str(exc)))
                if self.report is not None:
                    self.report.stage_finished(stage.name, "failed", error=str(exc))
                self.logger.debug("Stage %s failed, aborting pipeline", stage.name)
                raise

            self._record(StageOutcome(stage.name, "success"))
            if self.report is not None:
                self.report.stage_finished(stage.name, "success")

        self.state = COMPLETED
        self.current_stage = None
        return list(self.outcomes)

    def _run_stage(self, stage: Stage):
        self.logger.info("Running stage: %s", stage.name)
        for step in stage.steps:
            if step.announcement:
                self.presenter.announce(step.announcement)
            if step.note:
                self.presenter.note(step.note)
            self.command_runner.run(step.executable, step.args, cwd=self.cwd)

        if stage.finished_message:
            self.presenter.announce(stage.finished_message)

    def _record(self, outcome: StageOutcome):
        self.outcomes.append(outcome)
