import re
import subprocess
from typing import Callable, List, Optional, Sequence

from defusedxml import ElementTree

from mactrace import MactraceError
from mactrace.model import UNKNOWN_SYSCALL, GenericNode, TraceEvent
from mactrace.resolver import ReferenceIndex, build_index, formatted_value, resolve, text_or_formatted

SYSCALL_TABLE_XPATH = '/trace-toc/run[@number="1"]/data/table[@schema="syscall"]'

CLASS_PREFIX_PATTERN = re.compile(r"^[BM]SC_")
SCHEMA_PATTERN = re.compile(r'schema="([^"]+)"')
DECIMAL_PATTERN = re.compile(r"\s*([+-]?\d+)")
HEX_PATTERN = re.compile(r"\s*([0-9A-Fa-f]+)")


class ExportError(MactraceError):
    pass


def run_xctrace_export(trace_file: str, args: Sequence[str]) -> str:
    result = subprocess.run(
        ["xcrun", "xctrace", "export", "--input", trace_file, *args],
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        encoding="utf-8",
        errors="replace",
    )
    if result.returncode != 0:
        raise ExportError(f"xctrace export failed: {result.stderr.strip()}")
    return result.stdout


def parse_document(xml_text: str) -> GenericNode:
    try:
        element = ElementTree.fromstring(xml_text)
    except ElementTree.ParseError as e:
        raise ExportError(f"unable to parse xctrace export: {e}") from e
    return _to_node(element)


def _to_node(element) -> GenericNode:
    text = element.text.strip() if element.text is not None else ""
    node = GenericNode(
        element.tag,
        id=element.get("id"),
        ref=element.get("ref"),
        fmt=element.get("fmt"),
        text=text if text else None,
    )
    for child in element:
        node.add_child(_to_node(child))
    return node


def export_trace(trace_file: str, on_missing_schema: Optional[Callable[[List[str]], None]] = None) -> List[TraceEvent]:
    """
    Export the syscall table of the first run in the trace bundle and turn it
    into events. A bundle recorded without syscall data yields no events; the
    schemas it does have are passed to on_missing_schema.
    """

    try:
        data_xml = run_xctrace_export(trace_file, ["--xpath", SYSCALL_TABLE_XPATH])
    except ExportError:
        toc_xml = run_xctrace_export(trace_file, ["--toc"])
        if 'schema="syscall"' not in toc_xml:
            if on_missing_schema is not None:
                on_missing_schema(SCHEMA_PATTERN.findall(toc_xml))
            return []
        raise

    return extract(parse_document(data_xml))


def list_schemas(trace_file: str) -> List[str]:
    return SCHEMA_PATTERN.findall(run_xctrace_export(trace_file, ["--toc"]))


def extract(document: Optional[GenericNode]) -> List[TraceEvent]:
    result_node = _find_result_node(document)
    if result_node is None:
        return []

    index = build_index(result_node)
    return [_extract_row(row, index) for row in result_node.children_named("row")]


def _find_result_node(document: Optional[GenericNode]) -> Optional[GenericNode]:
    if document is None:
        return None
    if document.tag != "trace-query-result":
        document = document.child("trace-query-result")
        if document is None:
            return None
    return document.child("node")


def _extract_row(row: GenericNode, index: ReferenceIndex) -> TraceEvent:
    syscall_el = row.child("syscall")
    raw_name = formatted_value(syscall_el, index)
    if raw_name is None:
        raw_name = text_or_formatted(syscall_el, index)
    syscall = normalize_syscall_name(raw_name) if raw_name else UNKNOWN_SYSCALL

    signature = formatted_value(row.child("formatted-label"), index) or syscall

    process_el = resolve(row.child("process"), index)
    process = formatted_value(process_el, index)
    pid = None
    if process_el is not None:
        pid = _parse_decimal(_value_of(process_el.child("pid"), index))

    tid = None
    thread_el = resolve(row.child("thread"), index)
    if thread_el is not None:
        tid = _parse_hex(_value_of(thread_el.child("tid"), index))

    result = None
    for candidate in row.children_named("syscall-return"):
        value = formatted_value(candidate, index)
        if value:
            result = value
            break

    errno = None
    narrative_el = resolve(row.child("narrative"), index)
    if narrative_el is not None:
        errno = _value_of(narrative_el.child("errno"), index)

    args = []
    for arg_el in row.children_named("syscall-arg"):
        value = formatted_value(arg_el, index)
        if value:
            args.append(value)

    return TraceEvent(
        timestamp=formatted_value(row.child("start-time"), index) or "",
        duration=formatted_value(row.child("duration"), index),
        syscall=syscall,
        signature=signature,
        pid=pid,
        tid=tid,
        process=process,
        result=result,
        errno=errno,
        args=tuple(args),
    )


def normalize_syscall_name(name: str) -> str:
    return CLASS_PREFIX_PATTERN.sub("", name)


def _value_of(node: Optional[GenericNode], index: ReferenceIndex) -> Optional[str]:
    value = formatted_value(node, index)
    if value is None:
        value = text_or_formatted(node, index)
    return value


def _parse_decimal(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    m = DECIMAL_PATTERN.match(value)
    return int(m.group(1)) if m is not None else None


def _parse_hex(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    m = HEX_PATTERN.match(value.replace("0x", ""))
    return int(m.group(1), 16) if m is not None else None
