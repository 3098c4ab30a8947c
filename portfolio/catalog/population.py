"""
Reference population.
Replaces stored reference ids with a field subset of the referenced document, one batched
lookup per populate spec. Paths may cross lists of objects (`teamMembers.member`), and
nested specs populate references inside the documents that were just attached.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any, Protocol

from portfolio.catalog.descriptors import PopulateSpec

Document = dict[str, Any]


class DocumentLookup(Protocol):
    def get_many(self, collection: str, document_ids: Any) -> dict[str, Document]: ...


def _slots(node: Any, parts: Sequence[str]) -> Iterator[tuple[Document, str, Any]]:
    if not isinstance(node, dict) or not parts:
        return
    head, rest = parts[0], parts[1:]
    value = node.get(head)
    if value is None:
        return
    if rest:
        children = value if isinstance(value, list) else [value]
        for child in children:
            yield from _slots(child, rest)
    else:
        yield node, head, value


def _reference_ids(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


def select_fields(document: Document, fields: Sequence[str]) -> Document:
    subset: Document = {"id": document.get("id")}
    for name in fields:
        if name in document:
            subset[name] = document[name]
    return subset


def populate(
    store: DocumentLookup,
    documents: list[Document],
    specs: Sequence[PopulateSpec],
) -> list[Document]:
    """Populate `documents` in place and return them."""

    for spec in specs:
        parts = spec.path.split(".")
        slots = [slot for document in documents for slot in _slots(document, parts)]
        wanted = {ref for _, _, value in slots for ref in _reference_ids(value)}
        if not wanted:
            continue

        keep = tuple(spec.fields) + tuple(
            nested.path.split(".")[0] for nested in spec.nested if nested.path.split(".")[0] not in spec.fields
        )
        targets = {
            ref: select_fields(target, keep)
            for ref, target in store.get_many(spec.collection, wanted).items()
        }
        if spec.nested:
            populate(store, list(targets.values()), spec.nested)

        for container, key, value in slots:
            if isinstance(value, list):
                container[key] = [
                    targets[item] if isinstance(item, str) else item
                    for item in value
                    if not isinstance(item, str) or item in targets
                ]
            elif isinstance(value, str):
                container[key] = targets.get(value)
    return documents
