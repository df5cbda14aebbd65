from mactrace.decoders import MAX_FD, parse_number

# Values at or above this are -1/errno-shaped 64-bit patterns. Legitimate
# high kernel addresses land here too and are shown as pseudo-errors.
ERROR_BAND_START = 0xFFFFFFFF00000000
UINT64_LIMIT = 1 << 64
INT64_SIGN_BIT = 1 << 63

FD_RETURNING = frozenset(
    {
        "open",
        "openat",
        "open_nocancel",
        "openat_nocancel",
        "socket",
        "accept",
        "accept_nocancel",
        "dup",
        "dup2",
        "sys_dup",
        "kqueue",
        "shm_open",
        "sem_open",
        "pipe",
        "socketpair",
        "guarded_open_np",
        "guarded_open_dprotected_np",
        "open_dprotected_np",
        "openbyid_np",
        "fileport_makefd",
    }
)

ADDRESS_RETURNING = frozenset(
    {
        "mmap",
        "mremap_encrypted",
        "shmat",
    }
)

BYTE_COUNT_RETURNING = frozenset(
    {
        "read",
        "write",
        "pread",
        "pwrite",
        "read_nocancel",
        "write_nocancel",
        "pread_nocancel",
        "pwrite_nocancel",
        "readv",
        "writev",
        "readv_nocancel",
        "writev_nocancel",
        "sendto",
        "recvfrom",
        "sendmsg",
        "recvmsg",
        "sendto_nocancel",
        "recvfrom_nocancel",
        "sendmsg_nocancel",
        "recvmsg_nocancel",
        "getdirentries64",
        "getxattr",
        "fgetxattr",
        "listxattr",
    }
)


def is_error_shaped(v: int) -> bool:
    return v < 0 or INT64_SIGN_BIT <= v < UINT64_LIMIT


def format_result(syscall: str, result: str, is_error: bool) -> str:
    v = parse_number(result)
    if v is None:
        return result

    if is_error:
        if v == 0 or v == -1 or ERROR_BAND_START <= v < UINT64_LIMIT:
            return "-1"
        return str(v)

    if is_error_shaped(v):
        return result

    if syscall in FD_RETURNING:
        return f"<fd:{v}>"

    if syscall in ADDRESS_RETURNING:
        return result

    if syscall in BYTE_COUNT_RETURNING:
        return str(v)

    if v == 0:
        return "0"

    if v > MAX_FD:
        return result

    return str(v)
