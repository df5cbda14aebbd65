from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

UNKNOWN_SYSCALL = "unknown"


class GenericNode:
    """
    A node of an exported document: optional id/ref/fmt attributes, optional
    text, and named children kept in document order.
    """

    def __init__(
        self,
        tag: str,
        id: Optional[str] = None,
        ref: Optional[str] = None,
        fmt: Optional[str] = None,
        text: Optional[str] = None,
        children: Optional[Dict[str, List["GenericNode"]]] = None,
    ) -> None:
        self.tag = tag
        self.id = id
        self.ref = ref
        self.fmt = fmt
        self.text = text
        self.children: Dict[str, List[GenericNode]] = {}
        self._sequence: List[GenericNode] = []
        if children is not None:
            for name, nodes in children.items():
                for node in nodes:
                    self._append(name, node)

    def add_child(self, node: "GenericNode") -> "GenericNode":
        self._append(node.tag, node)
        return node

    def _append(self, name: str, node: "GenericNode") -> None:
        self.children.setdefault(name, []).append(node)
        self._sequence.append(node)

    def child(self, name: str) -> Optional["GenericNode"]:
        nodes = self.children.get(name)
        if not nodes:
            return None
        return nodes[0]

    def children_named(self, name: str) -> List["GenericNode"]:
        return self.children.get(name, [])

    def iter_children(self) -> Iterator["GenericNode"]:
        return iter(self._sequence)

    def __repr__(self) -> str:
        attrs = "".join(
            f", {key}={value!r}"
            for key, value in (("id", self.id), ("ref", self.ref), ("fmt", self.fmt), ("text", self.text))
            if value is not None
        )
        return f'GenericNode(tag="{self.tag}"{attrs})'


@dataclass(frozen=True)
class TraceEvent:
    timestamp: str
    syscall: str
    signature: str = ""
    duration: Optional[str] = None
    pid: Optional[int] = None
    tid: Optional[int] = None
    process: Optional[str] = None
    result: Optional[str] = None
    errno: Optional[str] = None
    args: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def decodable(self) -> bool:
        return self.syscall != UNKNOWN_SYSCALL
