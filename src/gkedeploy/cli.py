import logging

import click
from rich.logging import RichHandler

from .core import GkeDeployer
from .errors import DeployError

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


def _configure_logging(verbose: bool, log_file):
    logger = logging.getLogger("gkedeploy")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)


def _config_option(func):
    # Accepted both before and after the subcommand, the subcommand's value wins.
    return click.option(
        "-c",
        "--config",
        "config",
        required=False,
        default=None,
        type=click.Path(dir_okay=False),
        help=f"Configuration file (default: {GkeDeployer.DEFAULT_CONFIG_PATH}).",
    )(func)


@click.group(invoke_without_command=True, no_args_is_help=False)
@_config_option
@click.option("--verbose", is_flag=True, default=False, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option(
    "--report-file",
    type=click.Path(dir_okay=False),
    help="Write a JSON report of the run to this path.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Resolve the image tag and print the commands without running them.",
)
@click.pass_context
def main(ctx, config, verbose, log_file, report_file, dry_run):
    """Build, push and deploy Docker images to Google Kubernetes Engine."""
    if ctx.invoked_subcommand is None:
        raise click.UsageError("You need to specify at least one command", ctx=ctx)

    _configure_logging(verbose, log_file)
    ctx.obj = {
        "config": config,
        "report_file": report_file,
        "dry_run": dry_run,
    }


def _run_operation(ctx, operation: str, config):
    options = ctx.obj
    config_path = config or options["config"] or GkeDeployer.DEFAULT_CONFIG_PATH

    try:
        deployer = GkeDeployer(
            operation=operation,
            config_path=config_path,
            dry_run=options["dry_run"],
            report_file=options["report_file"],
        )
    except DeployError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(deployer.run())


@main.command()
@_config_option
@click.pass_context
def kubeconfig(ctx, config):
    """Updates kubeconfig with `.gkedeploy` settings."""
    _run_operation(ctx, "kubeconfig", config)


@main.command()
@_config_option
@click.pass_context
def push(ctx, config):
    """Builds the Docker image and pushes it to Google Container Registry."""
    _run_operation(ctx, "push", config)


@main.command()
@_config_option
@click.pass_context
def deploy(ctx, config):
    """Deploys the Docker image to Google Kubernetes Engine."""
    _run_operation(ctx, "deploy", config)


if __name__ == "__main__":
    main()
