import pytest

from gkedeploy.errors import DeployError, ProcessExitError
from gkedeploy.models import CommandStep, Stage
from gkedeploy.services import sequencer as sequencer_module
from gkedeploy.services.report import RunReport
from gkedeploy.services.sequencer import StageSequencer


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None

    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


class DummyPresenter:
    def __init__(self):
        self.messages = []

    def announce(self, message):
        self.messages.append(message)

    def note(self, message):
        self.messages.append(f"note: {message}")


class FakeRunner:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []
        self.cwds = []

    def run(self, executable, args, cwd=None):
        self.calls.append(args[0])
        self.cwds.append(cwd)
        if args[0] in self.failing:
            raise ProcessExitError(executable, args, 1, f"Command failed (1): {args[0]}")
        return None


def _stage(name, operations, *step_names, finished=None):
    steps = tuple(CommandStep("tool", (step_name,), f"Running {step_name}") for step_name in step_names)
    return Stage(name=name, operations=frozenset(operations), steps=steps, finished_message=finished)


def _stages():
    return [
        _stage("push", {"push"}, "build", "push", "tag-latest", "tag-branch", finished="pushed"),
        _stage("configure-credentials", {"kubeconfig", "deploy"}, "get-credentials"),
        _stage("deploy", {"deploy"}, "set-image", "rollout-status"),
    ]


def _sequencer(runner, report=None, presenter=None):
    return StageSequencer(
        stages=_stages(),
        command_runner=runner,
        presenter=presenter or DummyPresenter(),
        logger=DummyLogger(),
        report=report,
    )


@pytest.mark.parametrize(
    "operation, expected",
    [
        ("push", ["push"]),
        ("kubeconfig", ["configure-credentials"]),
        ("deploy", ["configure-credentials", "deploy"]),
    ],
)
def test_active_stages_per_operation(operation, expected):
    sequencer = _sequencer(FakeRunner())

    assert [stage.name for stage in sequencer.active_stages(operation)] == expected


@pytest.mark.parametrize(
    "operation, expected_calls",
    [
        ("push", ["build", "push", "tag-latest", "tag-branch"]),
        ("kubeconfig", ["get-credentials"]),
        ("deploy", ["get-credentials", "set-image", "rollout-status"]),
    ],
)
def test_run_executes_only_active_stages(operation, expected_calls):
    runner = FakeRunner()
    sequencer = _sequencer(runner)

    sequencer.run(operation)

    assert runner.calls == expected_calls
    assert sequencer.state == sequencer_module.COMPLETED
    assert sequencer.current_stage is None


def test_run_records_skipped_and_successful_stages():
    sequencer = _sequencer(FakeRunner())

    outcomes = sequencer.run("deploy")

    assert [(outcome.name, outcome.status) for outcome in outcomes] == [
        ("push", "skipped"),
        ("configure-credentials", "success"),
        ("deploy", "success"),
    ]


def test_credentials_failure_short_circuits_deploy():
    runner = FakeRunner(failing={"get-credentials"})
    sequencer = _sequencer(runner)

    with pytest.raises(ProcessExitError, match="get-credentials"):
        sequencer.run("deploy")

    assert runner.calls == ["get-credentials"]
    assert sequencer.state == sequencer_module.FAILED
    assert sequencer.current_stage == "configure-credentials"
    assert sequencer.outcomes[-1].status == "failed"


def test_push_substep_failure_aborts_remaining_substeps():
    runner = FakeRunner(failing={"push"})
    presenter = DummyPresenter()
    sequencer = _sequencer(runner, presenter=presenter)

    with pytest.raises(ProcessExitError):
        sequencer.run("push")

    assert runner.calls == ["build", "push"]
    assert "pushed" not in presenter.messages


def test_rollout_watch_runs_only_after_set_image_succeeds():
    runner = FakeRunner(failing={"set-image"})
    sequencer = _sequencer(runner)

    with pytest.raises(ProcessExitError):
        sequencer.run("deploy")

    assert runner.calls == ["get-credentials", "set-image"]


def test_error_is_reraised_unchanged():
    error = ProcessExitError("tool", ["build"], 7, "Command failed (7): build")

    class RaisingRunner:
        def run(self, *_args, **_kwargs):
            raise error

    sequencer = _sequencer(RaisingRunner())

    with pytest.raises(ProcessExitError) as exc_info:
        sequencer.run("push")

    assert exc_info.value is error
    assert exc_info.value.exit_code == 7


def test_announcements_precede_each_step_and_finish_message_follows():
    presenter = DummyPresenter()
    sequencer = _sequencer(FakeRunner(), presenter=presenter)

    sequencer.run("push")

    assert presenter.messages == [
        "Running build",
        "Running push",
        "Running tag-latest",
        "Running tag-branch",
        "pushed",
    ]


def test_run_reports_stage_statuses():
    report = RunReport(logger=DummyLogger())
    sequencer = _sequencer(FakeRunner(failing={"set-image"}), report=report)

    with pytest.raises(ProcessExitError):
        sequencer.run("deploy")

    assert [(stage["name"], stage["status"]) for stage in report.stages] == [
        ("push", "skipped"),
        ("configure-credentials", "success"),
        ("deploy", "failed"),
    ]
    assert "set-image" in report.stages[-1]["error"]


def test_unknown_operation_is_rejected():
    runner = FakeRunner()
    sequencer = _sequencer(runner)

    with pytest.raises(DeployError, match="Unknown operation"):
        sequencer.run("rollback")

    assert runner.calls == []


def test_sequencer_runs_only_once():
    sequencer = _sequencer(FakeRunner())
    sequencer.run("kubeconfig")

    with pytest.raises(DeployError, match="only be run once"):
        sequencer.run("kubeconfig")


def test_every_step_runs_in_the_configured_directory():
    runner = FakeRunner()
    sequencer = StageSequencer(
        stages=_stages(),
        command_runner=runner,
        presenter=DummyPresenter(),
        logger=DummyLogger(),
        cwd="/srv/app",
    )

    sequencer.run("deploy")

    assert runner.cwds == ["/srv/app", "/srv/app", "/srv/app"]


def test_step_notes_are_printed_as_notes():
    presenter = DummyPresenter()
    stage = Stage(
        name="deploy",
        operations=frozenset({"deploy"}),
        steps=(CommandStep("kubectl", ("rollout",), note="Watching deployment..."),),
    )
    sequencer = StageSequencer(
        stages=[stage],
        command_runner=FakeRunner(),
        presenter=presenter,
        logger=DummyLogger(),
    )

    sequencer.run("deploy")

    assert presenter.messages == ["note: Watching deployment..."]
