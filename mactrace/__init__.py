__version__ = "0.1.0"


class MactraceError(Exception):
    pass
