from typing import Dict, List, Optional

from mactrace.model import GenericNode

ReferenceIndex = Dict[str, GenericNode]

# Exports only ever reference one level deep; anything longer is a broken or cyclic document.
MAX_REFERENCE_HOPS = 8


def build_index(root: Optional[GenericNode]) -> ReferenceIndex:
    """
    Map every id found under root (root included) to its node. Later
    duplicates win.
    """

    index: ReferenceIndex = {}
    if root is None:
        return index

    pending: List[GenericNode] = [root]
    while pending:
        node = pending.pop()
        if node.id is not None:
            index[node.id] = node
        pending.extend(reversed(list(node.iter_children())))

    return index


def resolve(node: Optional[GenericNode], index: ReferenceIndex) -> Optional[GenericNode]:
    if node is None:
        return None

    current = node
    for _ in range(MAX_REFERENCE_HOPS):
        if current.ref is None:
            break
        target = index.get(current.ref)
        if target is None or target is current:
            break
        current = target
    return current


def formatted_value(node: Optional[GenericNode], index: ReferenceIndex) -> Optional[str]:
    resolved = resolve(node, index)
    if resolved is None:
        return None
    return resolved.fmt


def text_or_formatted(node: Optional[GenericNode], index: ReferenceIndex) -> Optional[str]:
    resolved = resolve(node, index)
    if resolved is None:
        return None
    if resolved.text is not None:
        return resolved.text
    return resolved.fmt
