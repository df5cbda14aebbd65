import os

DATA_DIR = os.path.dirname(__file__)

SYSCALL_EXPORT_PATH = os.path.join(DATA_DIR, "syscall_export.xml")
TOC_PATH = os.path.join(DATA_DIR, "toc.xml")


def read_data(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()
