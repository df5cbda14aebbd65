from typing import Dict

DARWIN_AT_FDCWD = "0xfffffffffffffffe"

DARWIN_O_ACCMODE = 0x3

DARWIN_OPEN_ACCESS_MODES: Dict[int, str] = {
    0x0: "O_RDONLY",
    0x1: "O_WRONLY",
    0x2: "O_RDWR",
    0x3: "O_ACCMODE",
}

DARWIN_OPEN_FLAGS: Dict[int, str] = {
    0x00000004: "O_NONBLOCK",
    0x00000008: "O_APPEND",
    0x00000010: "O_SHLOCK",
    0x00000020: "O_EXLOCK",
    0x00000040: "O_ASYNC",
    0x00000080: "O_FSYNC",
    0x00000100: "O_NOFOLLOW",
    0x00000200: "O_CREAT",
    0x00000400: "O_TRUNC",
    0x00000800: "O_EXCL",
    0x00001000: "O_RESOLVE_BENEATH",
    0x00002000: "O_UNIQUE",
    0x00008000: "O_EVTONLY",
    0x00020000: "O_NOCTTY",
    0x00100000: "O_DIRECTORY",
    0x00200000: "O_SYMLINK",
    0x00400000: "O_DSYNC",
    0x01000000: "O_CLOEXEC",
    0x20000000: "O_NOFOLLOW_ANY",
    0x40000000: "O_EXEC",
}

DARWIN_PROT_FLAGS: Dict[int, str] = {
    0x1: "PROT_READ",
    0x2: "PROT_WRITE",
    0x4: "PROT_EXEC",
}

DARWIN_MMAP_FLAGS: Dict[int, str] = {
    0x0001: "MAP_SHARED",
    0x0002: "MAP_PRIVATE",
    0x0010: "MAP_FIXED",
    0x0020: "MAP_RENAME",
    0x0040: "MAP_NORESERVE",
    0x0100: "MAP_NOEXTEND",
    0x0200: "MAP_HASSEMAPHORE",
    0x0400: "MAP_NOCACHE",
    0x0800: "MAP_JIT",
    0x1000: "MAP_ANON",
    0x2000: "MAP_RESILIENT_CODESIGN",
    0x4000: "MAP_RESILIENT_MEDIA",
    0x8000: "MAP_32BIT",
    0x20000: "MAP_TRANSLATED_ALLOW_EXECUTE",
    0x40000: "MAP_UNIX03",
    0x80000: "MAP_TPRO",
}

DARWIN_FCNTL_COMMANDS: Dict[int, str] = {
    0: "F_DUPFD",
    1: "F_GETFD",
    2: "F_SETFD",
    3: "F_GETFL",
    4: "F_SETFL",
    5: "F_GETOWN",
    6: "F_SETOWN",
    7: "F_GETLK",
    8: "F_SETLK",
    9: "F_SETLKW",
    10: "F_SETLKWTIMEOUT",
    40: "F_FLUSH_DATA",
    41: "F_CHKCLEAN",
    42: "F_PREALLOCATE",
    43: "F_SETSIZE",
    44: "F_RDADVISE",
    45: "F_RDAHEAD",
    48: "F_NOCACHE",
    49: "F_LOG2PHYS",
    50: "F_GETPATH",
    51: "F_FULLFSYNC",
    52: "F_PATHPKG_CHECK",
    53: "F_FREEZE_FS",
    54: "F_THAW_FS",
    55: "F_GLOBAL_NOCACHE",
    59: "F_ADDSIGS",
    61: "F_ADDFILESIGS",
    62: "F_NODIRECT",
    63: "F_GETPROTECTIONCLASS",
    64: "F_SETPROTECTIONCLASS",
    65: "F_LOG2PHYS_EXT",
    66: "F_GETLKPID",
    67: "F_DUPFD_CLOEXEC",
    70: "F_SETBACKINGSTORE",
    71: "F_GETPATH_MTMINFO",
    72: "F_GETCODEDIR",
    73: "F_SETNOSIGPIPE",
    74: "F_GETNOSIGPIPE",
    75: "F_TRANSCODEKEY",
    76: "F_SINGLE_WRITER",
    77: "F_GETPROTECTIONLEVEL",
    78: "F_FINDSIGS",
    83: "F_ADDFILESIGS_FOR_DYLD_SIM",
    85: "F_BARRIERFSYNC",
    90: "F_OFD_SETLK",
    91: "F_OFD_SETLKW",
    92: "F_OFD_GETLK",
    93: "F_OFD_SETLKWTIMEOUT",
    97: "F_ADDFILESIGS_RETURN",
    98: "F_CHECK_LV",
    99: "F_PUNCHHOLE",
    100: "F_TRIM_ACTIVE_FILE",
    101: "F_SPECULATIVE_READ",
    102: "F_GETPATH_NOFIRMLINK",
    103: "F_ADDFILESIGS_INFO",
    104: "F_ADDFILESUPPL",
    105: "F_GETSIGSINFO",
    106: "F_SETLEASE",
    107: "F_GETLEASE",
    110: "F_TRANSFEREXTENTS",
    111: "F_ATTRIBUTION_TAG",
    112: "F_NOCACHE_EXT",
    113: "F_ADDSIGS_MAIN_BINARY",
}

DARWIN_ERRNO: Dict[int, str] = {
    1: "EPERM",
    2: "ENOENT",
    3: "ESRCH",
    4: "EINTR",
    5: "EIO",
    6: "ENXIO",
    7: "E2BIG",
    8: "ENOEXEC",
    9: "EBADF",
    10: "ECHILD",
    11: "EDEADLK",
    12: "ENOMEM",
    13: "EACCES",
    14: "EFAULT",
    15: "ENOTBLK",
    16: "EBUSY",
    17: "EEXIST",
    18: "EXDEV",
    19: "ENODEV",
    20: "ENOTDIR",
    21: "EISDIR",
    22: "EINVAL",
    23: "ENFILE",
    24: "EMFILE",
    25: "ENOTTY",
    26: "ETXTBSY",
    27: "EFBIG",
    28: "ENOSPC",
    29: "ESPIPE",
    30: "EROFS",
    31: "EMLINK",
    32: "EPIPE",
    33: "EDOM",
    34: "ERANGE",
    35: "EAGAIN",
    36: "EINPROGRESS",
    37: "EALREADY",
    38: "ENOTSOCK",
    39: "EDESTADDRREQ",
    40: "EMSGSIZE",
    41: "EPROTOTYPE",
    42: "ENOPROTOOPT",
    43: "EPROTONOSUPPORT",
    44: "ESOCKTNOSUPPORT",
    45: "ENOTSUP",
    46: "EPFNOSUPPORT",
    47: "EAFNOSUPPORT",
    48: "EADDRINUSE",
    49: "EADDRNOTAVAIL",
    50: "ENETDOWN",
    51: "ENETUNREACH",
    52: "ENETRESET",
    53: "ECONNABORTED",
    54: "ECONNRESET",
    55: "ENOBUFS",
    56: "EISCONN",
    57: "ENOTCONN",
    58: "ESHUTDOWN",
    59: "ETOOMANYREFS",
    60: "ETIMEDOUT",
    61: "ECONNREFUSED",
    62: "ELOOP",
    63: "ENAMETOOLONG",
    64: "EHOSTDOWN",
    65: "EHOSTUNREACH",
    66: "ENOTEMPTY",
    67: "EPROCLIM",
    68: "EUSERS",
    69: "EDQUOT",
    70: "ESTALE",
    71: "EREMOTE",
    72: "EBADRPC",
    73: "ERPCMISMATCH",
    74: "EPROGUNAVAIL",
    75: "EPROGMISMATCH",
    76: "EPROCUNAVAIL",
    77: "ENOLCK",
    78: "ENOSYS",
    79: "EFTYPE",
    80: "EAUTH",
    81: "ENEEDAUTH",
    82: "EPWROFF",
    83: "EDEVERR",
    84: "EOVERFLOW",
    85: "EBADEXEC",
    86: "EBADARCH",
    87: "ESHLIBVERS",
    88: "EBADMACHO",
    89: "ECANCELED",
    90: "EIDRM",
    91: "ENOMSG",
    92: "EILSEQ",
    93: "ENOATTR",
    94: "EBADMSG",
    95: "EMULTIHOP",
    96: "ENODATA",
    97: "ENOLINK",
    98: "ENOSR",
    99: "ENOSTR",
    100: "EPROTO",
    101: "ETIME",
    102: "EOPNOTSUPP",
    103: "ENOPOLICY",
    104: "ENOTRECOVERABLE",
    105: "EOWNERDEAD",
    106: "EQFULL",
}


def darwin_errno_text(code: int) -> str:
    name = DARWIN_ERRNO.get(code)
    return name if name is not None else f"errno={code}"
