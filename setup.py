import re
from pathlib import Path

from setuptools import setup

SOURCE_ROOT = Path(__file__).resolve().parent

pkg_info = SOURCE_ROOT / "PKG-INFO"
in_source_package = pkg_info.exists()


def main():
    setup(
        name="mactrace",
        version=detect_version(),
        description="strace for macOS",
        long_description="Trace the system calls of a command on macOS using Instruments' `xctrace`.",
        long_description_content_type="text/markdown",
        license="MIT",
        zip_safe=False,
        keywords="strace syscall trace xctrace instruments macos dtrace",
        python_requires=">=3.8",
        install_requires=[
            "colorama >= 0.2.7, < 1.0.0",
            "defusedxml >= 0.7.0, < 1.0.0",
        ],
        classifiers=[
            "Development Status :: 4 - Beta",
            "Environment :: Console",
            "Environment :: MacOS X",
            "Intended Audience :: Developers",
            "Natural Language :: English",
            "Operating System :: MacOS :: MacOS X",
            "Programming Language :: Python :: 3",
            "Topic :: Software Development :: Debuggers",
            "Topic :: System :: Monitoring",
        ],
        packages=["mactrace"],
        entry_points={
            "console_scripts": [
                "mactrace = mactrace.stracer:main",
            ]
        },
    )


def detect_version() -> str:
    if in_source_package:
        version_line = [
            line for line in pkg_info.read_text(encoding="utf-8").split("\n") if line.startswith("Version: ")
        ][0].strip()
        return version_line[9:]

    init_source = (SOURCE_ROOT / "mactrace" / "__init__.py").read_text(encoding="utf-8")
    m = re.search(r'^__version__ = "([^"]+)"', init_source, re.MULTILINE)
    return m.group(1) if m is not None else "0.0.0"


if __name__ == "__main__":
    main()
