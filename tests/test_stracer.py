import os
import shutil
import signal
import tempfile
import unittest
from unittest import mock

from mactrace.exporter import ExportError, extract, parse_document
from mactrace.recorder import Recorder, RecordResult
from mactrace.stracer import MactraceApplication

from .data import SYSCALL_EXPORT_PATH, read_data


class MactraceApplicationTestCase(unittest.TestCase):
    def setUp(self):
        self.workdir = tempfile.mkdtemp()
        self.bundle = os.path.join(self.workdir, "mactrace-test.trace")
        os.mkdir(self.bundle)
        self.events = extract(parse_document(read_data(SYSCALL_EXPORT_PATH)))

    def tearDown(self):
        shutil.rmtree(self.workdir, ignore_errors=True)

    def create_app(self, *args):
        app = MactraceApplication(args=list(args))
        app._recorder.record = mock.Mock(return_value=RecordResult(trace_file=self.bundle, exit_code=0))
        return app

    def run_app(self, app):
        with self.assertRaises(SystemExit) as cm:
            app.run()
        return cm.exception.code

    def test_writes_events_to_output_file(self):
        output = os.path.join(self.workdir, "trace.log")
        app = self.create_app("-o", output, "ls", "-la")
        with mock.patch("mactrace.stracer.export_trace", return_value=self.events) as export:
            status = self.run_app(app)

        self.assertEqual(0, status)
        app._recorder.record.assert_called_once_with(["ls", "-la"])
        self.assertEqual(self.bundle, export.call_args[0][0])
        with open(output, encoding="utf-8") as f:
            lines = f.read().splitlines()
        self.assertEqual(len(self.events), len(lines))
        self.assertTrue(lines[0].endswith("openat(AT_FDCWD, 0x16b473548, O_RDWR, 0) = <fd:3>"))
        self.assertNotIn("\x1b", "".join(lines))
        self.assertFalse(os.path.exists(self.bundle))

    def test_writes_events_to_stderr(self):
        app = self.create_app("--no-color", "ls")
        with mock.patch("mactrace.stracer.export_trace", return_value=self.events), mock.patch.object(
            app, "_print"
        ) as printer:
            status = self.run_app(app)

        self.assertEqual(0, status)
        printed = [call[0][0] for call in printer.call_args_list]
        self.assertEqual(len(self.events), len(printed))
        self.assertIn("read(<fd:3>, 0x16b470000, 16384) = 2293", printed[1])

    def test_export_error_exits_with_failure(self):
        app = self.create_app("ls")
        failure = ExportError("xctrace export failed: boom")
        with mock.patch("mactrace.stracer.export_trace", side_effect=failure):
            with mock.patch.object(app, "_log") as log:
                status = self.run_app(app)

        self.assertEqual(1, status)
        log.assert_called_once_with("error", "Error: xctrace export failed: boom")
        self.assertFalse(os.path.exists(self.bundle))

    def test_list_schemas(self):
        app = self.create_app("--list-schemas", "ls")
        with mock.patch("mactrace.stracer.list_schemas", return_value=["tick", "syscall"]), mock.patch(
            "mactrace.stracer.export_trace"
        ) as export, mock.patch.object(app, "_print") as printer:
            status = self.run_app(app)

        self.assertEqual(0, status)
        export.assert_not_called()
        self.assertEqual(
            ["Available schemas:", "  - tick", "  - syscall"], [call[0][0] for call in printer.call_args_list]
        )

    def test_missing_schema_is_reported(self):
        app = self.create_app("ls")
        with mock.patch.object(app, "_log") as log:
            app._on_missing_schema(["tick", "kdebug"])
        self.assertEqual(
            [
                mock.call("warning", "No syscall data in trace. Available schemas:"),
                mock.call("warning", "  - tick"),
                mock.call("warning", "  - kdebug"),
            ],
            log.call_args_list,
        )

    def test_sigint_is_forwarded(self):
        app = self.create_app("ls")
        with mock.patch.object(app._recorder, "interrupt") as interrupt:
            app._on_sigint(signal.SIGINT, None)
        interrupt.assert_called_once_with()

    def test_sigterm_during_recording_is_forwarded(self):
        app = self.create_app("ls")
        with mock.patch.object(
            Recorder, "is_recording", new_callable=mock.PropertyMock, return_value=True
        ), mock.patch.object(app._recorder, "interrupt") as interrupt:
            app._on_sigterm(signal.SIGTERM, None)
        interrupt.assert_called_once_with()

    def test_sigterm_after_recording_stops_the_run(self):
        app = self.create_app("ls")

        def export_then_terminate(trace_file, on_missing_schema=None):
            app._on_sigterm(signal.SIGTERM, None)
            return self.events

        with mock.patch("mactrace.stracer.export_trace", side_effect=export_then_terminate), mock.patch.object(
            app, "_print"
        ) as printer, mock.patch.object(app, "_log") as log:
            status = self.run_app(app)

        self.assertEqual(128 + signal.SIGTERM, status)
        printer.assert_not_called()
        log.assert_not_called()
        self.assertFalse(os.path.exists(self.bundle))


if __name__ == "__main__":
    unittest.main()
