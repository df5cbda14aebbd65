import io
import os
import signal
import tempfile
import unittest
from unittest import mock

from mactrace import MactraceError
from mactrace.recorder import (
    CommandNotFoundError,
    Recorder,
    build_record_command,
    create_trace_path,
    is_xctrace_message,
    remove_trace_file,
)


class FakeProcess:
    def __init__(self, stdout: str, stderr: str, exit_code: int = 0) -> None:
        self.stdout = io.StringIO(stdout)
        self.stderr = io.StringIO(stderr)
        self.exit_code = exit_code
        self.signals = []

    def wait(self) -> int:
        return self.exit_code

    def poll(self):
        return None

    def send_signal(self, sig) -> None:
        self.signals.append(sig)


class StatusFilterTestCase(unittest.TestCase):
    def test_xctrace_messages(self):
        test_cases = [
            ("starting", "Starting recording with the System Trace template. Launching process: ls."),
            ("ctrl-c", "Ctrl-C to stop the recording"),
            ("exited", "Target app exited, ending recording..."),
            ("completed", "Recording completed. Saving output file..."),
            ("saved", "Output file saved as: /tmp/mactrace-1.trace"),
            ("issues", "Run issues were detected (trace is still ready to be viewed):"),
            ("issue item", "* [Error] Failed to gain authorization"),
        ]
        for message, line in test_cases:
            with self.subTest(message, line=line):
                self.assertTrue(is_xctrace_message(line))

    def test_target_output_passes(self):
        for line in ("total 8", "", "  Starting recording", "* not a bracket"):
            with self.subTest(line=line):
                self.assertFalse(is_xctrace_message(line))


class RecordCommandTestCase(unittest.TestCase):
    def test_command_is_resolved(self):
        with mock.patch("mactrace.recorder.shutil.which", return_value="/bin/ls"):
            argv = build_record_command("/tmp/t.trace", ["ls", "-la"])
        self.assertEqual(["xcrun", "xctrace", "record", "--no-prompt"], argv[:4])
        self.assertEqual(["--template", "System Trace", "--output", "/tmp/t.trace"], argv[4:8])
        self.assertEqual(["--launch", "--", "/bin/ls", "-la"], argv[-4:])

    def test_unknown_command(self):
        with mock.patch("mactrace.recorder.shutil.which", return_value=None):
            with self.assertRaises(CommandNotFoundError) as cm:
                build_record_command("/tmp/t.trace", ["nope"])
        self.assertEqual("Command not found: nope", str(cm.exception))
        self.assertIsInstance(cm.exception, MactraceError)

    def test_trace_path(self):
        path = create_trace_path()
        self.assertEqual(tempfile.gettempdir(), os.path.dirname(path))
        self.assertTrue(os.path.basename(path).startswith("mactrace-"))
        self.assertTrue(path.endswith(".trace"))
        self.assertNotEqual(path, create_trace_path())


class RecorderTestCase(unittest.TestCase):
    def setUp(self):
        self.out = []
        self.err = []
        self.recorder = Recorder(on_stdout=self.out.append, on_stderr=self.err.append)

    def test_record_filters_status_lines(self):
        process = FakeProcess(
            "Starting recording with the System Trace template.\nhello\nworld",
            "Ctrl-C to stop the recording\noops\nOutput file saved as: /tmp/x.trace\n",
            exit_code=3,
        )
        with mock.patch("mactrace.recorder.shutil.which", return_value="/bin/echo"), mock.patch(
            "mactrace.recorder.subprocess.Popen", return_value=process
        ) as popen:
            result = self.recorder.record(["echo", "hello"], trace_file="/tmp/x.trace")

        self.assertEqual(["hello", "world"], self.out)
        self.assertEqual(["oops"], self.err)
        self.assertEqual("/tmp/x.trace", result.trace_file)
        self.assertEqual(3, result.exit_code)
        self.assertEqual("/bin/echo", popen.call_args[0][0][-2])
        self.assertFalse(self.recorder.is_recording)

    def test_empty_command(self):
        with self.assertRaises(MactraceError):
            self.recorder.record([])

    def test_interrupt_forwards_sigint(self):
        process = FakeProcess("", "")
        self.recorder._process = process
        self.recorder.interrupt()
        self.assertEqual([signal.SIGINT], process.signals)

    def test_interrupt_without_recording(self):
        self.recorder.interrupt()
        self.assertFalse(self.recorder.is_recording)


class RemoveTraceFileTestCase(unittest.TestCase):
    def test_removes_bundle_directory(self):
        bundle = tempfile.mkdtemp(suffix=".trace")
        with open(os.path.join(bundle, "form.template"), "w") as f:
            f.write("x")
        remove_trace_file(bundle)
        self.assertFalse(os.path.exists(bundle))

    def test_missing_bundle_is_ignored(self):
        remove_trace_file(os.path.join(tempfile.gettempdir(), "mactrace-does-not-exist.trace"))


if __name__ == "__main__":
    unittest.main()
