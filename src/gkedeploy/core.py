import logging
import subprocess
from typing import Optional

from rich.console import Console

from .errors import DeployError
from .services.command_runner import CommandRunner
from .services.config_loader import ConfigLoader
from .services.context_builder import ContextBuilder
from .services.presentation import ConsolePresenter
from .services.report import RunReport
from .services.sequencer import StageSequencer
from .services.stages import OPERATIONS, build_stages
from .services.vcs import VcsService

console = Console()
logger = logging.getLogger("gkedeploy")


class GkeDeployer:
    DEFAULT_CONFIG_PATH = ".gkedeploy"
    OPERATIONS = OPERATIONS

    def __init__(
        self,
        operation: str,
        config_path: str = DEFAULT_CONFIG_PATH,
        dry_run: bool = False,
        report_file: Optional[str] = None,
        cwd: Optional[str] = None,
        output: Optional[Console] = None,
        subprocess_module=subprocess,
    ):
        if operation not in self.OPERATIONS:
            raise DeployError(
                f"Invalid operation '{operation}'. Supported operations: {', '.join(self.OPERATIONS)}"
            )

        self.operation = operation
        self.config_path = config_path
        self.dry_run = dry_run
        self.cwd = cwd

        self.presenter = ConsolePresenter(output or console)
        self.report = RunReport(logger=logger, report_file=report_file)
        self.command_runner = CommandRunner(
            logger=logger,
            line_sink=self.presenter.show,
            subprocess_module=subprocess_module,
        )
        self.vcs_service = VcsService(logger=logger, cwd=cwd, subprocess_module=subprocess_module)
        self.context_builder = ContextBuilder(
            logger=logger,
            config_loader=ConfigLoader(logger=logger),
            vcs_service=self.vcs_service,
        )
        self.context = None
        self.sequencer: Optional[StageSequencer] = None

    def prepare(self) -> StageSequencer:
        self.context = self.context_builder.build(self.config_path)
        self.report.set_metadata(
            primary_tag=self.context.primary_tag,
            commit=self.context.commit_hash,
            branch=self.context.branch_name,
        )
        self.sequencer = StageSequencer(
            stages=build_stages(self.context, self.config_path),
            command_runner=self.command_runner,
            presenter=self.presenter,
            logger=logger,
            report=self.report,
            cwd=self.cwd,
        )
        return self.sequencer

    def show_plan(self, sequencer: StageSequencer):
        self.presenter.announce(f"Dry run for '{self.operation}', no commands will be executed.")
        for stage in sequencer.active_stages(self.operation):
            self.presenter.announce(f"Stage {stage.name}:")
            for step in stage.steps:
                self.presenter.note(f"  {step.command_line}")

    def run(self) -> int:
        exit_code = 1
        report_status = "failed"
        report_error: Optional[str] = None

        try:
            logger.info("Starting gkedeploy %s...", self.operation)
            self.report.start_run(
                self.operation,
                metadata={"config_path": self.config_path, "dry_run": self.dry_run},
            )

            sequencer = self.prepare()

            if self.dry_run:
                self.show_plan(sequencer)
                report_status = "dry-run"
                exit_code = 0
                return exit_code

            sequencer.run(self.operation)
            report_status = "success"
            exit_code = 0
            return exit_code

        except KeyboardInterrupt:
            self.presenter.console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            report_status = "aborted"
            report_error = "Operation cancelled by user."
            return exit_code
        except DeployError as exc:
            self.presenter.failure(str(exc))
            logger.error(str(exc))
            report_error = str(exc)
            return exit_code
        except Exception as exc:
            self.presenter.console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
            logger.exception("Unexpected error")
            report_error = str(exc)
            return exit_code
        finally:
            self.report.finalize(report_status, error=report_error)
            if self.report.stages:
                self.presenter.summary(self.report.stages)
