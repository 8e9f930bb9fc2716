"""Run context assembly for gkedeploy."""

from gkedeploy.models import DeployConfig, RunContext
from gkedeploy.services.config_loader import ConfigLoader
from gkedeploy.services.vcs import VcsService


def image_repository(config: DeployConfig) -> str:
    return f"{config.gcr_host}/{config.project_id}/{config.deployment_name}"


class ContextBuilder:
    """Builds the immutable context shared by every stage of a run."""

    def __init__(self, logger, config_loader: ConfigLoader, vcs_service: VcsService):
        self.logger = logger
        self.config_loader = config_loader
        self.vcs_service = vcs_service

    def build(self, config_path: str) -> RunContext:
        config = self.config_loader.load(config_path)
        commit, branch = self.vcs_service.resolve()

        repository = image_repository(config)
        context = RunContext(
            image_repository=repository,
            commit_hash=commit,
            branch_name=branch,
            primary_tag=f"{repository}:{commit}",
            config=config,
        )
        self.logger.info("Image tag for this run: %s", context.primary_tag)
        return context
