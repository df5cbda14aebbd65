import re
from typing import Iterable, List, NamedTuple, Optional

from colorama import Fore, Style

from mactrace.constants import darwin_errno_text
from mactrace.decoders import decode
from mactrace.model import TraceEvent
from mactrace.results import format_result

STYLE_TIMESTAMP = Fore.LIGHTBLACK_EX
STYLE_DURATION = Fore.YELLOW
STYLE_PROCESS = Fore.CYAN
STYLE_SYSCALL = Style.BRIGHT
STYLE_ERROR = Fore.RED
STYLE_PUNCTUATION = Style.DIM
STYLE_RESULT = Style.DIM
STYLE_RESET_ALL = Style.RESET_ALL

# xctrace attaches errno-shaped narratives to calls that did not fail.
BENIGN_ERRNO_MARKERS = ("success", "unknown error code", "reachable", "Operation not supported")

TIMESTAMP_PATTERN = re.compile(r"(\d+)\.(\d+)\.(\d+)$")
ERRNO_CODE_PATTERN = re.compile(r"[0-9]+", re.ASCII)

TIMESTAMP_WIDTH = 6
DURATION_WIDTH = 9
PROCESS_WIDTH = 16
PROCESS_NAME_LIMIT = 10


class Palette(NamedTuple):
    timestamp: str
    duration: str
    process: str
    syscall: str
    error: str
    punctuation: str
    result: str
    reset: str


COLOR_PALETTE = Palette(
    timestamp=STYLE_TIMESTAMP,
    duration=STYLE_DURATION,
    process=STYLE_PROCESS,
    syscall=STYLE_SYSCALL,
    error=STYLE_ERROR,
    punctuation=STYLE_PUNCTUATION,
    result=STYLE_RESULT,
    reset=STYLE_RESET_ALL,
)

PLAIN_PALETTE = Palette(*([""] * len(Palette._fields)))


def is_real_error(errno: Optional[str]) -> bool:
    if not errno:
        return False
    if ERRNO_CODE_PATTERN.fullmatch(errno) is not None:
        return int(errno) != 0
    return not any(marker in errno for marker in BENIGN_ERRNO_MARKERS)


def format_errno(errno: str) -> str:
    if ERRNO_CODE_PATTERN.fullmatch(errno) is not None:
        code = int(errno)
        return f"{darwin_errno_text(code)} ({code})"
    return errno


def format_timestamp(timestamp: str) -> str:
    m = TIMESTAMP_PATTERN.search(timestamp)
    if m is not None:
        return f"{m.group(1)}.{m.group(2)}"
    return timestamp


def format_duration(duration: Optional[str]) -> str:
    if not duration:
        return ""
    return duration.replace(" ", "", 1)


def format_process(process: Optional[str], pid: Optional[int]) -> str:
    name = process.split(" ")[0][:PROCESS_NAME_LIMIT] if process else ""
    return f"{name or '?'}/{pid or 0}"


def dim_punctuation(args: str, palette: Palette) -> str:
    p = palette.punctuation
    r = palette.reset
    args = re.sub(r"^\(", lambda _: f"{p}({r}", args)
    args = re.sub(r"\)$", lambda _: f"{p}){r}", args)
    return args.replace(", ", f"{p}, {r}")


def format_event(event: TraceEvent, color: bool = False) -> str:
    palette = COLOR_PALETTE if color else PLAIN_PALETTE
    failed = is_real_error(event.errno)

    decoded_args = dim_punctuation(decode(event.syscall, event.args), palette)

    result = ""
    if event.result:
        value = format_result(event.syscall, event.result, failed)
        if failed:
            result = f"{palette.error}= {value} {format_errno(event.errno)}{palette.reset}"
        else:
            result = f"{palette.result}= {value}{palette.reset}"

    ts_col = f"{palette.timestamp}{format_timestamp(event.timestamp).rjust(TIMESTAMP_WIDTH)}{palette.reset}"
    dur_col = f"{palette.duration}{format_duration(event.duration).rjust(DURATION_WIDTH)}{palette.reset}"
    proc_col = f"{palette.process}{format_process(event.process, event.pid).ljust(PROCESS_WIDTH)}{palette.reset}"

    if failed:
        syscall_col = f"{palette.syscall}{palette.error}{event.syscall}{palette.reset}"
    else:
        syscall_col = f"{palette.syscall}{event.syscall}{palette.reset}"

    return f"{ts_col} {dur_col} {proc_col} {syscall_col}{decoded_args} {result}".rstrip()


def format_events(events: Iterable[TraceEvent], color: bool = False) -> List[str]:
    return [format_event(event, color=color) for event in events]


def format_error(error) -> str:
    return Fore.RED + Style.BRIGHT + str(error) + Style.RESET_ALL
