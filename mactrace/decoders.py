import re
from typing import Callable, Dict, List, Optional, Sequence

from mactrace.constants import (
    DARWIN_AT_FDCWD,
    DARWIN_FCNTL_COMMANDS,
    DARWIN_MMAP_FLAGS,
    DARWIN_O_ACCMODE,
    DARWIN_OPEN_ACCESS_MODES,
    DARWIN_OPEN_FLAGS,
    DARWIN_PROT_FLAGS,
)

MISSING_ARG = "?"
MAX_FD = 0xFFFF
NUMBER_PATTERN = re.compile(r"0[xX][0-9a-fA-F]+|-?[0-9]+", re.ASCII)

ArgRenderer = Callable[[str], str]
Decoder = Callable[[Sequence[str]], str]


def parse_number(s: str) -> Optional[int]:
    if NUMBER_PATTERN.fullmatch(s) is None:
        return None
    if s.startswith("0x") or s.startswith("0X"):
        return int(s, 16)
    return int(s, 10)


def raw(s: str) -> str:
    return s


def format_fd(s: str) -> str:
    v = parse_number(s)
    if v is None or v < 0 or v > MAX_FD:
        return s
    return f"<fd:{v}>"


def format_dirfd(s: str) -> str:
    if s == DARWIN_AT_FDCWD:
        return "AT_FDCWD"
    return format_fd(s)


def format_int(s: str) -> str:
    v = parse_number(s)
    if v is None or v < 0 or v > MAX_FD:
        return s
    return str(v)


def format_bitmask(v: int, names: Dict[int, str], zero_name: str = "0") -> str:
    parts: List[str] = []
    remaining = v
    for bit, name in names.items():
        if bit != 0 and (v & bit) == bit:
            parts.append(name)
            remaining &= ~bit
    if remaining:
        parts.append(f"0x{remaining:x}")
    return "|".join(parts) if parts else zero_name


def darwin_open_flags_text(v: int) -> str:
    access = DARWIN_OPEN_ACCESS_MODES[v & DARWIN_O_ACCMODE]
    rest = v & ~DARWIN_O_ACCMODE
    if rest == 0:
        return access
    return access + "|" + format_bitmask(rest, DARWIN_OPEN_FLAGS)


def darwin_prot_text(v: int) -> str:
    return format_bitmask(v, DARWIN_PROT_FLAGS, zero_name="PROT_NONE")


def darwin_mmap_flags_text(v: int) -> str:
    return format_bitmask(v, DARWIN_MMAP_FLAGS, zero_name="MAP_FILE")


def darwin_fcntl_cmd_text(v: int) -> str:
    name = DARWIN_FCNTL_COMMANDS.get(v)
    return name if name is not None else str(v)


def _numeric(text: Callable[[int], str]) -> ArgRenderer:
    def render(s: str) -> str:
        v = parse_number(s)
        if v is None or v < 0:
            return s
        return text(v)

    return render


format_open_flags = _numeric(darwin_open_flags_text)
format_prot_flags = _numeric(darwin_prot_text)
format_map_flags = _numeric(darwin_mmap_flags_text)
format_fcntl_cmd = _numeric(darwin_fcntl_cmd_text)


def format_arg_list(parts: Sequence[str]) -> str:
    return "(" + ", ".join(parts) + ")"


def signature(*renderers: ArgRenderer) -> Decoder:
    """
    Build a decoder from one renderer per positional argument. Positions
    missing from the captured arguments render as a placeholder.
    """

    def decode_args(args: Sequence[str]) -> str:
        parts = []
        for i, render in enumerate(renderers):
            if i < len(args):
                parts.append(render(args[i]))
            else:
                parts.append(MISSING_ARG)
        return format_arg_list(parts)

    return decode_args


def passthrough(count: int) -> Decoder:
    return signature(*([raw] * count))


def decode_default(args: Sequence[str]) -> str:
    return format_arg_list(args)


NO_ARGS = signature()

_open = signature(raw, format_open_flags, format_int)
_openat = signature(format_dirfd, raw, format_open_flags, format_int)
_close = signature(format_fd)
_read_write = signature(format_fd, raw, format_int)
_pread_pwrite = signature(format_fd, raw, format_int, format_int)
_fcntl = signature(format_fd, format_fcntl_cmd, raw)
_stat = passthrough(2)
_fstat = signature(format_fd, raw)

DECODERS: Dict[str, Decoder] = {
    # files
    "open": _open,
    "open_nocancel": _open,
    "openat": _openat,
    "openat_nocancel": _openat,
    "close": _close,
    "close_nocancel": _close,
    "sys_close": _close,
    "sys_close_nocancel": _close,
    "guarded_open_np": signature(raw, raw, raw, format_open_flags),
    # read/write
    "read": _read_write,
    "read_nocancel": _read_write,
    "write": _read_write,
    "write_nocancel": _read_write,
    "pread": _pread_pwrite,
    "pread_nocancel": _pread_pwrite,
    "pwrite": _pread_pwrite,
    "pwrite_nocancel": _pread_pwrite,
    # memory
    "mmap": signature(raw, raw, format_prot_flags, format_map_flags, format_fd, raw),
    "mprotect": signature(raw, raw, format_prot_flags),
    "munmap": passthrough(2),
    "madvise": signature(raw, raw, format_int),
    # fcntl
    "fcntl": _fcntl,
    "fcntl_nocancel": _fcntl,
    "sys_fcntl": _fcntl,
    "sys_fcntl_nocancel": _fcntl,
    # dup
    "dup": _close,
    "sys_dup": _close,
    "dup2": signature(format_fd, format_fd),
    # stat
    "stat": _stat,
    "stat64": _stat,
    "lstat": _stat,
    "lstat64": _stat,
    "fstat": _fstat,
    "fstat64": _fstat,
    "fstatat64": signature(format_dirfd, raw, raw, format_int),
    "statfs64": passthrough(2),
    "fstatfs64": signature(format_fd, raw),
    "getfsstat64": passthrough(3),
    # directories
    "getdirentries64": signature(format_fd, raw, format_int, raw),
    "ioctl": signature(format_fd, raw, raw),
    # sockets
    "socket": signature(format_int, format_int, format_int),
    "connect": signature(format_fd, raw, format_int),
    "connect_nocancel": signature(format_fd, raw, format_int),
    "bind": signature(format_fd, raw, format_int),
    "listen": signature(format_fd, format_int),
    "accept": signature(format_fd, raw, raw),
    "accept_nocancel": signature(format_fd, raw, raw),
    "sendto": signature(format_fd, raw, format_int, format_int, raw, format_int),
    "sendto_nocancel": signature(format_fd, raw, format_int, format_int, raw, format_int),
    "recvfrom": signature(format_fd, raw, format_int, format_int, raw, raw),
    "recvfrom_nocancel": signature(format_fd, raw, format_int, format_int, raw, raw),
    # processes
    "execve": passthrough(3),
    "fork": NO_ARGS,
    "vfork": NO_ARGS,
    "exit": passthrough(1),
    "wait4": passthrough(4),
    "wait4_nocancel": passthrough(4),
    "getpid": NO_ARGS,
    "getppid": NO_ARGS,
    "getuid": NO_ARGS,
    "geteuid": NO_ARGS,
    "getgid": NO_ARGS,
    "getegid": NO_ARGS,
    # threads
    "bsdthread_create": passthrough(4),
    "bsdthread_terminate": passthrough(4),
    "bsdthread_ctl": passthrough(4),
    "thread_selfid": NO_ARGS,
    # signals
    "sigaction": passthrough(3),
    "sigprocmask": passthrough(3),
    "__pthread_kill": passthrough(2),
    # kqueue
    "kqueue": NO_ARGS,
    "kevent": passthrough(6),
    "kevent64": passthrough(6),
    "kevent_qos": passthrough(6),
    # misc
    "sysctl": passthrough(6),
    "sysctlbyname": passthrough(5),
    "access": passthrough(2),
    "faccessat": signature(format_dirfd, raw, raw, raw),
    "getattrlist": passthrough(4),
    "fgetattrlist": signature(format_fd, raw, raw, raw),
    "setattrlist": passthrough(4),
    "getxattr": passthrough(6),
    "fgetxattr": signature(format_fd, raw, raw, raw, raw, raw),
    "listxattr": passthrough(4),
    "csops": passthrough(4),
    "csops_audittoken": passthrough(5),
    "proc_info": passthrough(6),
    "shared_region_check_np": passthrough(1),
    "getentropy": passthrough(2),
    # mach traps
    "mach_msg_trap": passthrough(4),
    "mach_msg": passthrough(4),
    "mach_msg2_trap": passthrough(4),
    "mach_vm_map_trap": passthrough(4),
    "mach_vm_allocate_trap": passthrough(4),
    "mach_vm_deallocate_trap": passthrough(3),
    "mach_port_deallocate_trap": passthrough(2),
    "task_self_trap": NO_ARGS,
    "host_self_trap": NO_ARGS,
    "thread_self_trap": NO_ARGS,
    "mach_reply_port": NO_ARGS,
    "semaphore_wait_trap": passthrough(1),
    "semaphore_signal_trap": passthrough(1),
    "semaphore_timedwait_trap": passthrough(3),
    "mk_timer_create": NO_ARGS,
    "mk_timer_arm": passthrough(2),
    "mk_timer_cancel": passthrough(2),
    "mk_timer_destroy": passthrough(1),
    # psynch
    "psynch_mutexwait": passthrough(4),
    "psynch_mutexdrop": passthrough(4),
    "psynch_cvwait": passthrough(4),
    "psynch_cvsignal": passthrough(4),
    "psynch_cvbroad": passthrough(4),
    # ulock
    "ulock_wait": passthrough(4),
    "ulock_wait2": passthrough(5),
    "ulock_wake": passthrough(3),
    # workq
    "workq_kernreturn": passthrough(4),
    "workq_open": NO_ARGS,
}


def decode(syscall: str, args: Sequence[str]) -> str:
    decoder = DECODERS.get(syscall, decode_default)
    return decoder(args)
