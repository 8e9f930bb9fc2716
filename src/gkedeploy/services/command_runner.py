"""Subprocess execution service for gkedeploy."""

import subprocess
import threading
from typing import Callable, List, Optional, Sequence

from gkedeploy.errors import ProcessExitError, ProcessLaunchError
from gkedeploy.errors_catalog import actionable_error
from gkedeploy.models import Channel, ClassifiedLine, ProcessResult
from gkedeploy.services.stream_classifier import classify_line

LineSink = Callable[[ClassifiedLine], None]


class CommandRunner:
    """Runs one external command, streaming its classified output as it arrives."""

    def __init__(self, logger, line_sink: Optional[LineSink] = None, subprocess_module=subprocess):
        self.logger = logger
        self.line_sink = line_sink
        self.subprocess = subprocess_module
        self._sink_lock = threading.Lock()

    def run(
        self,
        executable: str,
        args: Sequence[str],
        cwd: Optional[str] = None,
    ) -> ProcessResult:
        cmd = [executable] + list(args)
        cmd_str = " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        try:
            process = self.subprocess.Popen(
                cmd,
                cwd=cwd,
                stdout=self.subprocess.PIPE,
                stderr=self.subprocess.PIPE,
                text=True,
                bufsize=1,
                errors="replace",
            )
        except OSError as exc:
            raise ProcessLaunchError(
                executable,
                actionable_error(
                    "command_not_found",
                    executable=executable,
                    reason=exc.strerror or str(exc),
                ),
            ) from exc

        readers: List[threading.Thread] = []
        sink_errors: List[Exception] = []
        for channel, stream in ((Channel.STDOUT, process.stdout), (Channel.STDERR, process.stderr)):
            if stream is None:
                continue
            reader = threading.Thread(
                target=self._drain,
                args=(stream, channel, executable, sink_errors),
                name=f"gkedeploy-{channel.value}",
                daemon=True,
            )
            reader.start()
            readers.append(reader)

        exit_code = process.wait()
        for reader in readers:
            reader.join()

        if sink_errors:
            raise sink_errors[0]

        if exit_code != 0:
            self.logger.debug("Command exited with %s: %s", exit_code, cmd_str)
            raise ProcessExitError(
                executable,
                args,
                exit_code,
                actionable_error("command_failed", exit_code=str(exit_code), command=cmd_str),
            )

        return ProcessResult(executable=executable, args=tuple(args), exit_code=exit_code)

    def _drain(self, stream, channel: Channel, executable: str, sink_errors: List[Exception]):
        # A failing sink stops presentation but the pipe is still drained to EOF.
        try:
            for raw_line in stream:
                line = classify_line(channel, executable, raw_line)
                if line is None:
                    continue
                self.logger.debug("[%s] %s", channel.value, line.text)
                if self.line_sink is None:
                    continue
                with self._sink_lock:
                    if sink_errors:
                        continue
                    try:
                        self.line_sink(line)
                    except Exception as exc:
                        sink_errors.append(exc)
        finally:
            stream.close()
