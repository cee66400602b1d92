"""
Snapshot: the self-describing persisted form of a tree.

A snapshot file is a YAML document with a comment header::

    # name      : prefs
    # generated : 2024-05-01 12:00:00
    # hash      : 3f7a...
    #
    # This file is generated by dotstore.store.PersistentStore.
    # Do not edit it manually.

    name: prefs
    path: /home/ana/.config/app/prefs.yaml
    generator: dotstore.store.PersistentStore
    generated: '2024-05-01 12:00:00'
    timestamp: 1714564800
    type: dict
    hash: 3f7a...
    data:
      theme: dark

Any YAML loader can read it back. ``name``, ``hash`` and ``data`` are
enough to rebuild a tree and check where it came from.
"""

from __future__ import annotations

import datetime as _datetime
import hashlib as _hashlib
import json as _json
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import yaml as _yaml

import dotstore.constants as constants
import dotstore.store.errors as errors


def content_hash(data: _typing.Any) -> str:
    """
    Return the SHA-256 hex digest of a canonical serialization of ``data``.

    The serialization is compact JSON in insertion order, so reordering
    keys changes the hash. Values JSON cannot represent are serialized
    through ``repr``.
    """
    payload = _json.dumps(
        data,
        separators=(",", ":"),
        ensure_ascii=False,
        default=repr,
    )
    return _hashlib.sha256(payload.encode("utf-8")).hexdigest()


class Snapshot(_pydantic.BaseModel):
    """
    Persisted form of a tree plus its provenance metadata.

    Unknown fields found in a snapshot file are preserved.
    """

    model_config = _pydantic.ConfigDict(extra="allow")

    name: str
    """Store identity, checked on load."""

    path: str = ""
    """Path the snapshot was written to. Informational."""

    generator: str = constants.SNAPSHOT_GENERATOR
    """Component that produced the snapshot. Informational."""

    generated: str = ""
    """Human-readable local generation time."""

    timestamp: int = 0
    """Unix generation time."""

    type: str = "dict"
    """Tag describing the shape of ``data``."""

    hash: str
    """Content hash of ``data`` at write time."""

    data: dict[str, _typing.Any] = _pydantic.Field(default_factory=dict)
    """The tree in raw plain form."""

    @classmethod
    def create(
        cls,
        name: str,
        data: dict[str, _typing.Any],
        *,
        path: _pathlib.Path | str = "",
        hash: str | None = None,  # noqa: A002 - matches the snapshot field
        generator: str = constants.SNAPSHOT_GENERATOR,
        now: _datetime.datetime | None = None,
    ) -> Snapshot:
        """
        Build a fresh snapshot stamped with the current time.

        Args:
            name: Store name.
            data: Tree content in raw plain form.
            path: Destination path, recorded for reference.
            hash: Precomputed content hash. Computed if omitted.
            generator: Identity of the producing component.
            now: Generation time (for tests). Defaults to local now.
        """
        generated_at = now or _datetime.datetime.now()
        return cls(
            name=name,
            path=str(path),
            generator=generator,
            generated=generated_at.strftime(constants.SNAPSHOT_TIME_FORMAT),
            timestamp=int(generated_at.timestamp()),
            type=type(data).__name__,
            hash=hash if hash is not None else content_hash(data),
            data=data,
        )

    def verify(self) -> bool:
        """Check that ``hash`` matches the content of ``data``."""
        return self.hash == content_hash(self.data)


class _SnapshotDumper(_yaml.SafeDumper):
    """SafeDumper that writes tuples as plain YAML sequences."""

    pass


_SnapshotDumper.add_representer(
    tuple,
    lambda dumper, value: dumper.represent_list(list(value)),
)


def render(snapshot: Snapshot) -> str:
    """
    Render a snapshot as YAML text with a comment header.

    Raises:
        SnapshotExportError: If the data holds values YAML cannot
            represent. The original error is chained as the cause.
    """
    try:
        body = _yaml.dump(
            snapshot.model_dump(),
            Dumper=_SnapshotDumper,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
    except _yaml.YAMLError as exc:
        raise errors.SnapshotExportError(
            f"Unable to export the {snapshot.name} snapshot."
        ) from exc

    header = "\n".join(
        [
            f"# name      : {snapshot.name}",
            f"# generated : {snapshot.generated}",
            f"# hash      : {snapshot.hash}",
            "#",
            f"# This file is generated by {snapshot.generator}.",
            "# Do not edit it manually.",
        ]
    )
    return f"{header}\n\n{body}"


def parse(text: str, path: _pathlib.Path | str | None = None) -> Snapshot:
    """
    Parse snapshot YAML text.

    Args:
        text: The file content.
        path: Where the text came from, for error messages.

    Raises:
        SnapshotLoadError: If the text is not valid YAML or does not
            describe a snapshot.
    """
    try:
        raw = _yaml.safe_load(text)
    except _yaml.YAMLError as exc:
        raise errors.SnapshotLoadError(path, f"invalid YAML: {exc}") from exc

    if not isinstance(raw, dict):
        raise errors.SnapshotLoadError(
            path, f"expected a mapping, got {type(raw).__name__}"
        )

    try:
        return Snapshot.model_validate(raw)
    except _pydantic.ValidationError as exc:
        raise errors.SnapshotLoadError(path, f"invalid snapshot: {exc}") from exc
