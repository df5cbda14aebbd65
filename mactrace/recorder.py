import os
import re
import shutil
import signal
import subprocess
import tempfile
import threading
import uuid
from dataclasses import dataclass
from typing import IO, Callable, List, Optional

from mactrace import MactraceError

XCTRACE_TEMPLATE = "System Trace"

XCTRACE_MESSAGE_PATTERNS = [
    re.compile(r"^Starting recording"),
    re.compile(r"^Ctrl-C to stop"),
    re.compile(r"^Target app exited"),
    re.compile(r"^Recording completed"),
    re.compile(r"^Recording stopped"),
    re.compile(r"^Recording failed"),
    re.compile(r"^Output file saved"),
    re.compile(r"^Saving output file"),
    re.compile(r"^Run issues were detected"),
    re.compile(r"^\* \["),
]


class CommandNotFoundError(MactraceError):
    pass


@dataclass(frozen=True)
class RecordResult:
    trace_file: str
    exit_code: int


def is_xctrace_message(line: str) -> bool:
    return any(p.match(line) for p in XCTRACE_MESSAGE_PATTERNS)


def create_trace_path() -> str:
    return os.path.join(tempfile.gettempdir(), f"mactrace-{uuid.uuid4()}.trace")


def remove_trace_file(trace_file: str) -> None:
    shutil.rmtree(trace_file, ignore_errors=True)


def build_record_command(trace_file: str, command: List[str]) -> List[str]:
    resolved = shutil.which(command[0])
    if resolved is None:
        raise CommandNotFoundError(f"Command not found: {command[0]}")

    return [
        "xcrun",
        "xctrace",
        "record",
        "--no-prompt",
        "--template",
        XCTRACE_TEMPLATE,
        "--output",
        trace_file,
        "--target-stdout",
        "-",
        "--launch",
        "--",
        resolved,
        *command[1:],
    ]


class Recorder:
    """
    Runs `xctrace record` against a freshly launched command, passing the
    target's own output through while dropping xctrace's status chatter.
    """

    def __init__(self, on_stdout: Callable[[str], None], on_stderr: Callable[[str], None]) -> None:
        self._on_stdout = on_stdout
        self._on_stderr = on_stderr
        self._lock = threading.Lock()
        self._process: Optional[subprocess.Popen] = None

    def record(self, command: List[str], trace_file: Optional[str] = None) -> RecordResult:
        if len(command) == 0:
            raise MactraceError("No command specified")
        if trace_file is None:
            trace_file = create_trace_path()

        argv = build_record_command(trace_file, command)

        process = subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            encoding="utf-8",
            errors="replace",
        )
        with self._lock:
            self._process = process

        try:
            pumps = [
                threading.Thread(target=self._pump, args=(process.stdout, self._on_stdout), daemon=True),
                threading.Thread(target=self._pump, args=(process.stderr, self._on_stderr), daemon=True),
            ]
            for pump in pumps:
                pump.start()

            exit_code = process.wait()
            for pump in pumps:
                pump.join()
        finally:
            with self._lock:
                self._process = None

        return RecordResult(trace_file=trace_file, exit_code=exit_code)

    def interrupt(self) -> None:
        with self._lock:
            process = self._process
        if process is not None and process.poll() is None:
            process.send_signal(signal.SIGINT)

    @property
    def is_recording(self) -> bool:
        with self._lock:
            return self._process is not None

    def _pump(self, stream: IO[str], sink: Callable[[str], None]) -> None:
        with stream:
            for line in stream:
                line = line.rstrip("\n")
                if not is_xctrace_message(line):
                    sink(line)
