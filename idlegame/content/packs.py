"""
Content packs - dependency-ordered merge of declarative game content.

A pack is a named, versioned bundle of stats, equipment, tasks and
skills that may depend on other packs. Merging:

1. Builds a record per pack, validating its metadata.
2. Picks the active packs (the caller's list, or every pack).
3. Orders the required packs depth-first, dependencies first, with
   lexicographic tie-breaks so the result is deterministic.
4. Merges each collection in that order. Every entry id is scoped to
   its pack ("base:sword"). Stats support explicit overrides of earlier
   entries; every other collision is an error.

Any problem aborts the whole merge; callers never see partial content.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from idlegame.values import is_non_empty_string, is_plain_object


logger = logging.getLogger(__name__)

COLLECTIONS: tuple[str, ...] = ("stats", "equipment", "tasks", "skills")


class ContentPackError(Exception):
    """Base class for content merge failures."""


class PackFormatError(ContentPackError, TypeError):
    """A pack, its metadata or one of its collections is malformed."""


class DuplicateIdError(ContentPackError):
    """Two entries resolved to the same scoped id."""

    def __init__(self, collection: str, scoped_id: str):
        self.collection = collection
        self.scoped_id = scoped_id
        super().__init__(f"Duplicate content id collision in {collection}: '{scoped_id}'.")


class MissingDependencyError(ContentPackError):
    """A required pack is not available."""

    def __init__(self, pack_id: str, required_by: str | None = None):
        self.pack_id = pack_id
        self.required_by = required_by
        if required_by:
            message = f"Missing pack '{pack_id}' required by '{required_by}'."
        else:
            message = f"Missing pack '{pack_id}' required by active pack selection."
        super().__init__(message)


class DependencyCycleError(ContentPackError):
    """Pack dependencies form a cycle."""

    def __init__(self, cycle: list[str]):
        self.cycle = list(cycle)
        super().__init__(f"Detected cyclic pack dependency: {' -> '.join(self.cycle)}")


class MissingOverrideTargetError(ContentPackError):
    """A stat override names a stat no earlier pack added."""

    def __init__(self, pack_id: str, scoped_id: str):
        self.pack_id = pack_id
        self.scoped_id = scoped_id
        super().__init__(f"Pack '{pack_id}' attempted to override missing stat '{scoped_id}'.")


class ActivePackNotFoundError(ContentPackError):
    """An explicitly activated pack does not exist."""

    def __init__(self, pack_id: str):
        self.pack_id = pack_id
        super().__init__(f"Active pack '{pack_id}' does not exist.")


@dataclass(frozen=True)
class PackMetadata:
    """Descriptive metadata of a merged pack."""
    id: str
    name: str
    version: str
    dependencies: tuple[str, ...]
    lore_namespace: str


@dataclass
class PackRecord:
    """A pack source with its metadata resolved."""
    pack_id: str
    name: str
    version: str
    lore_namespace: str
    dependencies: list[str]
    stats: Any = None
    equipment: Any = None
    tasks: Any = None
    skills: Any = None

    @property
    def metadata(self) -> PackMetadata:
        return PackMetadata(
            id=self.pack_id,
            name=self.name,
            version=self.version,
            dependencies=tuple(self.dependencies),
            lore_namespace=self.lore_namespace,
        )


@dataclass
class MergedContent:
    """Result of merging the active packs."""
    active_pack_ids: list[str] = field(default_factory=list)
    resolved_order: list[str] = field(default_factory=list)
    metadata: list[PackMetadata] = field(default_factory=list)
    stats: list[dict[str, Any]] = field(default_factory=list)
    equipment: list[dict[str, Any]] = field(default_factory=list)
    tasks: list[dict[str, Any]] = field(default_factory=list)
    skills: list[dict[str, Any]] = field(default_factory=list)


def resolve_scoped_id(pack_id: str, raw_id: Any) -> str:
    """
    Scope a content id to its pack.

    ``"sword"`` in pack ``base`` becomes ``"base:sword"``; an id that
    already has a namespace (``"other:sword"``) is kept as long as both
    halves are non-empty.

    Raises:
        PackFormatError: On empty ids or a malformed namespace
    """
    if not is_non_empty_string(pack_id):
        raise PackFormatError("packId must be a non-empty string.")
    if not is_non_empty_string(raw_id):
        raise PackFormatError("content entry id must be a non-empty string.")

    namespace, separator, local = raw_id.partition(":")
    if not separator:
        return f"{pack_id}:{raw_id}"

    if not is_non_empty_string(namespace) or not is_non_empty_string(local):
        raise PackFormatError(f"content entry id '{raw_id}' has an invalid namespace format.")
    return raw_id


def build_pack_record(pack_id: str, source: Any) -> PackRecord:
    """
    Validate a raw pack source and apply metadata defaults.

    The source is a mapping with an optional ``pack`` entry (the
    contents of pack.json) and optional collections.
    """
    if not is_plain_object(source):
        raise PackFormatError(f"Pack '{pack_id}' must be an object.")

    metadata = source.get("pack")
    if metadata is None:
        metadata = {}
    if not is_plain_object(metadata):
        raise PackFormatError(f"Pack '{pack_id}' has invalid pack metadata.")

    dependencies = metadata.get("dependencies")
    if dependencies is None:
        dependencies = []
    if not isinstance(dependencies, list) or not all(
        is_non_empty_string(dependency) for dependency in dependencies
    ):
        raise PackFormatError(f"Pack '{pack_id}' contains invalid dependency IDs.")

    def text(key: str, default: str) -> str:
        value = metadata.get(key)
        return value if is_non_empty_string(value) else default

    return PackRecord(
        pack_id=pack_id,
        name=text("name", pack_id),
        version=text("version", "0.0.0"),
        lore_namespace=text("loreNamespace", pack_id),
        dependencies=list(dependencies),
        stats=source.get("stats"),
        equipment=source.get("equipment"),
        tasks=source.get("tasks"),
        skills=source.get("skills"),
    )


def resolve_pack_order(
    active_pack_ids: Iterable[str],
    packs_by_id: Mapping[str, PackRecord],
) -> list[str]:
    """
    Order the packs required by the active selection.

    Depth-first; a pack is emitted only after all of its dependencies.
    Dependencies are visited in lexicographic order.

    Raises:
        DependencyCycleError: If a pack is reached again while being visited
        MissingDependencyError: If a required pack is unknown
    """
    order: list[str] = []
    visiting: set[str] = set()
    visited: set[str] = set()

    def visit(pack_id: str, path: list[str]) -> None:
        if pack_id in visited:
            return
        if pack_id in visiting:
            start = path.index(pack_id) if pack_id in path else 0
            raise DependencyCycleError(path[start:] + [pack_id])

        pack = packs_by_id.get(pack_id)
        if pack is None:
            raise MissingDependencyError(pack_id, path[-1] if path else None)

        visiting.add(pack_id)
        for dependency in sorted(pack.dependencies):
            visit(dependency, path + [pack_id])
        visiting.discard(pack_id)

        visited.add(pack_id)
        order.append(pack_id)

    for pack_id in active_pack_ids:
        visit(pack_id, [])

    return order


def merge_content_packs(
    packs: Mapping[str, Any] | None = None,
    active_pack_ids: Iterable[str] = (),
) -> MergedContent:
    """
    Merge content packs into one collision-free content set.

    Args:
        packs: pack id -> raw pack source
        active_pack_ids: Packs to activate (empty means all of them);
            their dependencies are pulled in automatically

    Returns:
        MergedContent with scoped ids and ``sourcePackId`` on every entry

    Raises:
        ContentPackError: On any authoring problem (nothing is merged)
    """
    packs = packs or {}
    pack_ids = sorted(packs)
    records = {pack_id: build_pack_record(pack_id, packs[pack_id]) for pack_id in pack_ids}

    requested = list(dict.fromkeys(active_pack_ids))
    active = requested or pack_ids
    for pack_id in active:
        if pack_id not in records:
            raise ActivePackNotFoundError(pack_id)

    resolved_order = resolve_pack_order(active, records)

    merged = MergedContent(active_pack_ids=list(active), resolved_order=resolved_order)
    indexes: dict[str, dict[str, dict[str, Any]]] = {name: {} for name in COLLECTIONS}

    for pack_id in resolved_order:
        record = records[pack_id]
        _merge_stats(merged.stats, indexes["stats"], pack_id, record.stats)
        for collection in ("equipment", "tasks", "skills"):
            _merge_unique(
                getattr(merged, collection),
                indexes[collection],
                pack_id,
                getattr(record, collection),
                collection,
            )

    merged.metadata = [records[pack_id].metadata for pack_id in resolved_order]

    logger.info(
        "Merged %d pack(s) [%s]: %d stats, %d equipment, %d tasks, %d skills",
        len(resolved_order),
        ", ".join(resolved_order),
        len(merged.stats),
        len(merged.equipment),
        len(merged.tasks),
        len(merged.skills),
    )
    return merged


def _scoped_entry(pack_id: str, entry: Mapping[str, Any], scoped_id: str) -> dict[str, Any]:
    return {**entry, "id": scoped_id, "sourcePackId": pack_id}


def _merge_unique(
    target: list[dict[str, Any]],
    index: dict[str, dict[str, Any]],
    pack_id: str,
    entries: Any,
    collection: str,
) -> None:
    if entries is None:
        return
    if not isinstance(entries, list):
        raise PackFormatError(f"Pack '{pack_id}' {collection}.json must be a list.")

    for position, entry in enumerate(entries):
        if not is_plain_object(entry):
            raise PackFormatError(f"Pack '{pack_id}' {collection}[{position}] must be an object.")

        scoped_id = resolve_scoped_id(pack_id, entry.get("id"))
        if scoped_id in index:
            raise DuplicateIdError(collection, scoped_id)

        merged_entry = _scoped_entry(pack_id, entry, scoped_id)
        index[scoped_id] = merged_entry
        target.append(merged_entry)


def _merge_stats(
    target: list[dict[str, Any]],
    index: dict[str, dict[str, Any]],
    pack_id: str,
    source: Any,
) -> None:
    if source is None:
        return

    if isinstance(source, list):
        additions, overrides = source, []
    elif is_plain_object(source):
        additions = source.get("additions")
        overrides = source.get("overrides")
        additions = [] if additions is None else additions
        overrides = [] if overrides is None else overrides
    else:
        additions = overrides = None

    if not isinstance(additions, list) or not isinstance(overrides, list):
        raise PackFormatError(
            f"Pack '{pack_id}' stats.json must be a list or {{ additions, overrides }}."
        )

    _merge_unique(target, index, pack_id, additions, "stats")

    for position, entry in enumerate(overrides):
        if not is_plain_object(entry):
            raise PackFormatError(f"Pack '{pack_id}' stats.overrides[{position}] must be an object.")

        scoped_id = resolve_scoped_id(pack_id, entry.get("id"))
        existing = index.get(scoped_id)
        if existing is None:
            raise MissingOverrideTargetError(pack_id, scoped_id)

        updated = {**existing, **entry, "id": scoped_id, "sourcePackId": pack_id}
        target[target.index(existing)] = updated
        index[scoped_id] = updated
