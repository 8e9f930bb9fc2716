"""Severity classification for child process output."""

import os
from typing import Optional

from gkedeploy.models import Channel, ClassifiedLine, Severity

# gcloud writes "status messages about the action you are performing" to stderr.
STATUS_ON_STDERR_EXECUTABLES = frozenset({"gcloud"})
ERROR_MARKER = "ERROR"


def classify(channel: Channel, executable: str, text: str) -> Severity:
    if channel == Channel.STDOUT:
        return Severity.NORMAL

    if os.path.basename(executable) in STATUS_ON_STDERR_EXECUTABLES:
        if text.strip().startswith(ERROR_MARKER):
            return Severity.ERROR
        return Severity.NORMAL

    return Severity.ERROR


def classify_line(channel: Channel, executable: str, text: str) -> Optional[ClassifiedLine]:
    cleaned = text.strip()
    if not cleaned:
        return None
    return ClassifiedLine(
        channel=channel,
        severity=classify(channel, executable, cleaned),
        text=cleaned,
        executable=executable,
    )
