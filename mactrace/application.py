import argparse
import codecs
import os
import shlex
import signal
import sys
from types import FrameType
from typing import Any, List, Optional

import colorama

from mactrace import __version__
from mactrace.cli_formatting import format_error


class ConsoleApplication:
    """
    ConsoleApplication is the base class for mactrace commands: it owns
    argument parsing, options files, color setup and console output. Each
    application implements one or more of the hook methods that are called
    during the flow of the application.

    The subclass should not expose any additional methods aside from __init__
    and run methods that are defined by this class. These methods should not be
    overridden without calling the super method.
    """

    def __init__(self, args: Optional[List[str]] = None):
        plain_terminal = os.environ.get("TERM", "").lower() == "none"

        # Windows doesn't have SIGPIPE
        if hasattr(signal, "SIGPIPE"):
            signal.signal(signal.SIGPIPE, signal.SIG_DFL)

        # If true, emit text without colors.  https://no-color.org/
        no_color = plain_terminal or bool(os.environ.get("NO_COLOR"))

        colorama.init(strip=True if no_color else None)

        parser = self._initialize_arguments_parser()
        real_args = compute_real_args(parser, args=args)
        options = parser.parse_args(real_args)

        self._exit_status: Optional[int] = None
        self._plain_terminal = plain_terminal
        self._no_color = no_color

        try:
            self._initialize(parser, options)
        except Exception as e:
            parser.error(str(e))

    def _initialize_arguments_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(usage=self._usage())

        parser.add_argument(
            "-O", "--options-file", help="text file containing additional command line options", metavar="FILE"
        )
        parser.add_argument("--version", action="version", version=__version__)

        self._add_options(parser)
        return parser

    def run(self) -> None:
        signal.signal(signal.SIGTERM, self._on_sigterm)

        try:
            self._start()
        finally:
            self._stop()

        sys.exit(self._exit_status if self._exit_status is not None else 0)

    def _add_options(self, parser: argparse.ArgumentParser) -> None:
        """
        override this method if you want to add custom arguments to your
        command. The parser command is an argparse object, you should add the
        options to him.
        """

    def _initialize(self, parser: argparse.ArgumentParser, options: argparse.Namespace) -> None:
        """
        override this method if you need to have additional initialization code
        before running, maybe to use your custom options from the `_add_options`
        method.
        """

    def _usage(self) -> str:
        """
        override this method if to add a custom usage message
        """

        return "%(prog)s [options]"

    def _start(self) -> None:
        """
        override this method with the logic of your command, it will run after
        the class is fully initialized.
        """

    def _stop(self) -> None:
        """
        override this method if you have something you need to do at the end of
        your command, maybe cleaning up some objects.
        """

    def _exit(self, exit_status: int) -> None:
        self._exit_status = exit_status

    def _on_sigterm(self, n: int, f: Optional[FrameType]) -> None:
        self._exit(0)

    def _print(self, *args: Any, **kwargs: Any) -> None:
        encoded_args: List[Any] = []
        stream = kwargs.get("file", sys.stdout)
        encoding = getattr(stream, "encoding", None) or "UTF-8"
        if encoding.upper() in ("UTF-8", "UTF8"):
            encoded_args = list(args)
        else:
            for arg in args:
                if isinstance(arg, str):
                    encoded_args.append(arg.encode(encoding, errors="backslashreplace").decode(encoding))
                else:
                    encoded_args.append(arg)
        print(*encoded_args, **kwargs)

    def _log(self, level: str, text: str) -> None:
        # stdout belongs to the traced program, so diagnostics always go to stderr
        if level == "info":
            self._print(text, file=sys.stderr)
        elif level == "error":
            self._print(format_error(text), file=sys.stderr)
        else:
            text = colorama.Fore.YELLOW + colorama.Style.BRIGHT + text + colorama.Style.RESET_ALL
            self._print(text, file=sys.stderr)


def compute_real_args(parser: argparse.ArgumentParser, args: Optional[List[str]] = None) -> List[str]:
    if args is None:
        args = sys.argv[1:]
    real_args = normalize_options_file_args(args)

    files_processed = set()
    while True:
        offset = find_options_file_offset(real_args, parser)
        if offset == -1:
            break

        file_path = os.path.abspath(real_args[offset + 1])
        if file_path in files_processed:
            parser.error(f"File '{file_path}' given twice as -O argument")

        if os.path.isfile(file_path):
            with codecs.open(file_path, "r", "utf-8") as f:
                new_arg_text = f.read()
        else:
            parser.error(f"File '{file_path}' following -O option is not a valid file")

        real_args = insert_options_file_args_in_list(real_args, offset, new_arg_text)
        files_processed.add(file_path)

    return real_args


def normalize_options_file_args(raw_args: List[str]) -> List[str]:
    result = []
    for arg in raw_args:
        if arg.startswith("--options-file="):
            result.append(arg[0:14])
            result.append(arg[15:])
        else:
            result.append(arg)
    return result


def find_options_file_offset(arglist: List[str], parser: argparse.ArgumentParser) -> int:
    """
    Locate the next -O option among our own options. Scanning stops at `--`
    and at the first positional argument, since everything after it belongs
    to the traced command.
    """

    i = 0
    while i < len(arglist):
        arg = arglist[i]
        if arg == "--" or not arg.startswith("-"):
            break
        if arg in ("-O", "--options-file"):
            if i < len(arglist) - 1:
                return i
            else:
                parser.error("No argument given for -O option")
        i += 2 if option_takes_value(parser, arg) else 1
    return -1


def option_takes_value(parser: argparse.ArgumentParser, arg: str) -> bool:
    for action in parser._actions:
        if arg in action.option_strings:
            return action.nargs != 0
    return False


def insert_options_file_args_in_list(args: List[str], offset: int, new_arg_text: str) -> List[str]:
    new_args = shlex.split(new_arg_text)
    new_args = normalize_options_file_args(new_args)
    new_args_list = args[:offset] + new_args + args[offset + 2 :]
    return new_args_list
