"""Actionable error catalog for gkedeploy."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "config_not_found": {
        "what": "Config file not found: {path}",
        "next": "Create a `.gkedeploy` file in the project root or pass `--config`.",
    },
    "config_invalid": {
        "what": "Invalid config file '{path}': {reason}",
        "next": "The config file must be a JSON object.",
    },
    "missing_config_field": {
        "what": 'Config file must specify "{field}" ({hint}).',
        "next": "Add the field to the config file and run again.",
    },
    "invalid_config_field": {
        "what": 'Config field "{field}" must be a string.',
        "next": "Quote the value in the config file.",
    },
    "command_not_found": {
        "what": "Required command could not be started: {executable} ({reason})",
        "next": "Install it and make sure it is on PATH.",
    },
    "command_failed": {
        "what": "Command failed ({exit_code}): {command}",
        "next": "Review the command output above.",
    },
    "vcs_unavailable": {
        "what": "Could not read {what_value} from git: {reason}",
        "next": "Run gkedeploy from a git repository with at least one commit on a branch.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
