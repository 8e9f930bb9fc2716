"""Concrete pipeline stages: image push, cluster credentials and rollout."""

from typing import Tuple

from gkedeploy.models import CommandStep, RunContext, Stage

PUSH = "push"
KUBECONFIG = "kubeconfig"
DEPLOY = "deploy"
OPERATIONS = (KUBECONFIG, PUSH, DEPLOY)


def docker_build(tag: str) -> CommandStep:
    return CommandStep("docker", ("build", "-t", tag, "."), f"Build image {tag}")


def docker_push(tag: str) -> CommandStep:
    return CommandStep("gcloud", ("docker", "--", "push", tag), f"Pushing image {tag}")


def add_tag(current_tag: str, new_tag: str) -> CommandStep:
    return CommandStep(
        "gcloud",
        ("beta", "container", "images", "add-tag", current_tag, new_tag, "-q"),
        f"Add tag {new_tag} to {current_tag}",
    )


def push_stage(context: RunContext) -> Stage:
    tag = context.primary_tag
    return Stage(
        name="push",
        operations=frozenset({PUSH}),
        steps=(
            docker_build(tag),
            docker_push(tag),
            add_tag(tag, context.image_tag("latest")),
            add_tag(tag, context.image_tag(context.branch_name)),
        ),
        finished_message=f"Finished uploading image {tag}",
    )


def credentials_stage(context: RunContext, config_path: str) -> Stage:
    config = context.config
    return Stage(
        name="configure-credentials",
        operations=frozenset({KUBECONFIG, DEPLOY}),
        steps=(
            CommandStep(
                "gcloud",
                (
                    "container",
                    "clusters",
                    "get-credentials",
                    config.cluster_name,
                    "--zone",
                    config.cluster_zone,
                    "--project",
                    config.project_id,
                ),
                f"Init kubeconfig using {config_path} settings",
            ),
        ),
    )


def deploy_stage(context: RunContext) -> Stage:
    name = context.config.deployment_name
    tag = context.primary_tag
    return Stage(
        name="deploy",
        operations=frozenset({DEPLOY}),
        steps=(
            CommandStep(
                "kubectl",
                ("set", "image", f"deployment/{name}", f"{name}={tag}"),
                f"Update deployment/{name} with new image {tag}",
            ),
            CommandStep(
                "kubectl",
                ("rollout", "status", f"deployment/{name}"),
                note="Watching deployment...",
            ),
        ),
        finished_message=(
            "Finished deployment, you should manually verify your deployment because "
            "usually deployment failure conditions are configured improperly"
        ),
    )


def build_stages(context: RunContext, config_path: str) -> Tuple[Stage, ...]:
    """Returns every stage in pipeline order; activation is decided per run."""
    return (
        push_stage(context),
        credentials_stage(context, config_path),
        deploy_stage(context),
    )
