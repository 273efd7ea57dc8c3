"""Incremental hash tracker — skip regenerating unchanged scene modules.

A scene module's fingerprint digests everything the code generator reads
for it: the scene itself plus the project settings generated code depends
on.  When the fingerprint recorded by the previous export matches the
fresh one, the module on disk is still valid and the generator is not
called.

Tabby keeps no fingerprints of its own.  The caller hands the previous
:class:`FingerprintStore` to each export and gets an updated copy back in
the result; the store is immutable, so concurrent exports never share a
mutable mapping.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from tabby._errors import ConfigurationError

if TYPE_CHECKING:
    from tabby._types import Fingerprint, ModuleId
    from tabby.project import Project, Scene

# Hex digits kept from the sha256 digest
_DIGEST_LENGTH = 16


class FingerprintStore(Mapping[str, str]):
    """Immutable mapping of module id to content fingerprint.

    Example::

        store = FingerprintStore({"code0.js": "3f2a..."})
        store = store.with_updates({"code1.js": "9b1c..."})

    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = {str(k): str(v) for k, v in (data or {}).items()}

    def with_updates(self, updates: Mapping[str, str]) -> FingerprintStore:
        """Return a new store with ``updates`` applied on top of this one."""
        return FingerprintStore({**self._data, **updates})

    def to_dict(self) -> dict[str, str]:
        return dict(self._data)

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FingerprintStore({self._data!r})"

    # ----- persistence helpers for callers -----

    @classmethod
    def load(cls, path: Path) -> FingerprintStore:
        """Load a store saved with :meth:`save`; missing file -> empty store."""
        if not path.is_file():
            return cls()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            msg = f"Invalid fingerprint file {path}: {exc}"
            raise ConfigurationError(msg, stage="config", artifact=str(path)) from exc
        if not isinstance(data, dict):
            msg = f"Fingerprint file {path} must contain a JSON object"
            raise ConfigurationError(msg, stage="config", artifact=str(path))
        return cls(data)

    def save(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(self._data, indent=2, sort_keys=True) + "\n",
            encoding="utf-8",
        )
        return path


def should_regenerate(
    module_id: ModuleId,
    fresh: Fingerprint | None,
    prior: Mapping[str, str],
    *,
    force: bool = False,
) -> bool:
    """Decide whether a generated module must be regenerated.

    Returns False only when both the prior and the fresh fingerprint are
    present and equal, and no full rebuild is forced.
    """
    if force or not fresh:
        return True
    previous = prior.get(module_id)
    if not previous:
        return True
    return previous != fresh


def fingerprint_payload(payload: Any) -> Fingerprint:
    """Digest a JSON-serializable payload in canonical form."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:_DIGEST_LENGTH]


def scene_fingerprint(project: Project, scene: Scene) -> Fingerprint:
    """Fingerprint of everything the code generator reads for ``scene``."""
    return fingerprint_payload({
        "scene": {
            "name": scene.name,
            "events": scene.events,
            "includes": list(scene.includes),
            "data": scene.data,
        },
        "project": {
            "name": project.name,
            "extensions": [e.name for e in project.extensions],
            "properties": project.properties,
        },
    })
