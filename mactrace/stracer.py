import argparse
import codecs
import signal
import sys
from types import FrameType
from typing import Iterable, List, Optional

from mactrace import MactraceError
from mactrace.application import ConsoleApplication
from mactrace.cli_formatting import format_events
from mactrace.exporter import export_trace, list_schemas
from mactrace.model import TraceEvent
from mactrace.recorder import Recorder, remove_trace_file


class TerminatedError(MactraceError):
    pass


def main() -> None:
    app = MactraceApplication()
    app.run()


class MactraceApplication(ConsoleApplication):
    def _usage(self) -> str:
        return "%(prog)s [options] [--] command [args...]"

    def _add_options(self, parser: argparse.ArgumentParser) -> None:
        parser.description = "strace for macOS - trace system calls using Instruments."
        parser.add_argument(
            "-o", "--output", help="write trace output to FILE (no colors)", metavar="FILE", dest="output_file"
        )
        parser.add_argument("--no-color", help="disable colored output", action="store_true", default=False)
        parser.add_argument(
            "--list-schemas",
            help="list the schemas available in the recorded trace (for debugging)",
            action="store_true",
            default=False,
        )
        parser.add_argument("command", help="command to trace, with its arguments", nargs=argparse.REMAINDER)

    def _initialize(self, parser: argparse.ArgumentParser, options: argparse.Namespace) -> None:
        command = options.command
        if len(command) > 0 and command[0] == "--":
            command = command[1:]
        if len(command) == 0:
            parser.error("no command specified")

        self._command: List[str] = command
        self._output_file: Optional[str] = options.output_file
        self._color = not (options.no_color or self._no_color or self._output_file is not None)
        self._list_schemas = options.list_schemas

        self._recorder = Recorder(on_stdout=self._on_target_stdout, on_stderr=self._on_target_stderr)
        self._trace_file: Optional[str] = None

    def _start(self) -> None:
        try:
            self._record()
            assert self._trace_file is not None

            if self._list_schemas:
                self._print("Available schemas:", file=sys.stderr)
                for schema in list_schemas(self._trace_file):
                    self._print(f"  - {schema}", file=sys.stderr)
            else:
                events = export_trace(self._trace_file, on_missing_schema=self._on_missing_schema)
                self._write_events(events)
        except TerminatedError:
            self._exit(128 + signal.SIGTERM)
            return
        except Exception as e:
            self._log("error", f"Error: {e}")
            self._exit(1)
            return

        self._exit(0)

    def _stop(self) -> None:
        if self._trace_file is not None:
            remove_trace_file(self._trace_file)
            self._trace_file = None

    def _record(self) -> None:
        previous_handler = signal.signal(signal.SIGINT, self._on_sigint)
        try:
            result = self._recorder.record(self._command)
        finally:
            signal.signal(signal.SIGINT, previous_handler)
        self._trace_file = result.trace_file

    def _write_events(self, events: Iterable[TraceEvent]) -> None:
        lines = format_events(events, color=self._color)
        if self._output_file is not None:
            with codecs.open(self._output_file, "w", "utf-8") as f:
                for line in lines:
                    f.write(line + "\n")
        else:
            for line in lines:
                self._print(line, file=sys.stderr)

    def _on_missing_schema(self, schemas: List[str]) -> None:
        self._log("warning", "No syscall data in trace. Available schemas:")
        for schema in schemas:
            self._log("warning", f"  - {schema}")

    def _on_target_stdout(self, line: str) -> None:
        self._print(line, file=sys.stdout, flush=True)

    def _on_target_stderr(self, line: str) -> None:
        self._print(line, file=sys.stderr, flush=True)

    def _on_sigint(self, n: int, f: Optional[FrameType]) -> None:
        self._recorder.interrupt()

    def _on_sigterm(self, n: int, f: Optional[FrameType]) -> None:
        if self._recorder.is_recording:
            self._recorder.interrupt()
            return
        raise TerminatedError("terminated")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
