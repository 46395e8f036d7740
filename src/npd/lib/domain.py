"""Core frozen domain dataclasses."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal, cast

from npd.lib.types import EventId, PackageName

if TYPE_CHECKING:
    from rich.text import Text

LogLevel = Literal["info", "warn", "error", "debug", "conflict", "action"]


def _empty_dependencies() -> dict[str, PackageNode]:
    return {}


def _optional_str(payload: Mapping[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    return str(value)


def _as_mapping(value: object) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected an object, got {type(value).__name__} ({value!r}).")
    return cast("Mapping[str, Any]", value)


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One structured log record emitted by the tool core."""

    id: EventId
    level: str = "info"
    message: str = ""
    origin: str | None = None
    data: Mapping[str, Any] | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> LogEntry:
        if "id" not in payload:
            raise KeyError("Log entry is missing 'id'")
        data = payload.get("data")
        return cls(
            id=EventId(str(payload["id"])),
            level=str(payload.get("level") or "info"),
            message=str(payload.get("message") or ""),
            origin=_optional_str(payload, "origin"),
            data=_as_mapping(data) if data is not None else None,
        )


@dataclass(frozen=True, slots=True)
class Endpoint:
    """Requested dependency reference."""

    name: PackageName
    source: str | None = None
    target: str | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Endpoint:
        return cls(
            name=PackageName(str(payload.get("name") or "")),
            source=_optional_str(payload, "source"),
            target=_optional_str(payload, "target"),
        )


@dataclass(frozen=True, slots=True)
class PkgMeta:
    """Resolved package metadata for an installed package."""

    name: PackageName
    version: str | None = None
    release: str | None = None
    source: str | None = None
    target: str | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> PkgMeta:
        return cls(
            name=PackageName(str(payload.get("name") or "")),
            version=_optional_str(payload, "version"),
            release=_optional_str(payload, "_release"),
            source=_optional_str(payload, "_source"),
            target=_optional_str(payload, "_target"),
        )


@dataclass(frozen=True, slots=True)
class UpdateInfo:
    """Newer versions known for an installed package."""

    target: str | None = None
    latest: str | None = None


@dataclass(frozen=True, slots=True)
class PackageNode:
    """Dependency tree node handed to the renderer by the caller."""

    endpoint: Endpoint
    pkg_meta: PkgMeta | None = None
    dependencies: dict[str, PackageNode] = field(default_factory=_empty_dependencies)
    missing: bool = False
    different: bool = False
    linked: bool = False
    incompatible: bool = False
    extraneous: bool = False
    update: UpdateInfo | None = None
    canonical_dir: str | None = None
    root: bool = False

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> PackageNode:
        pkg_meta_raw = payload.get("pkgMeta")
        pkg_meta = PkgMeta.from_dict(_as_mapping(pkg_meta_raw)) if pkg_meta_raw else None
        endpoint_raw = payload.get("endpoint")
        if endpoint_raw:
            endpoint = Endpoint.from_dict(_as_mapping(endpoint_raw))
        else:
            endpoint = Endpoint(name=pkg_meta.name if pkg_meta is not None else PackageName(""))
        update_raw = payload.get("update")
        update = None
        if update_raw:
            update_payload = _as_mapping(update_raw)
            update = UpdateInfo(
                target=_optional_str(update_payload, "target"),
                latest=_optional_str(update_payload, "latest"),
            )
        dependencies = {
            str(name): cls.from_dict(_as_mapping(child))
            for name, child in _as_mapping(payload.get("dependencies")).items()
        }
        return cls(
            endpoint=endpoint,
            pkg_meta=pkg_meta,
            dependencies=dependencies,
            missing=bool(payload.get("missing")),
            different=bool(payload.get("different")),
            linked=bool(payload.get("linked")),
            incompatible=bool(payload.get("incompatible")),
            extraneous=bool(payload.get("extraneous")),
            update=update,
            canonical_dir=_optional_str(payload, "canonicalDir"),
            root=bool(payload.get("root")),
        )


@dataclass(frozen=True, slots=True)
class DisplayNode:
    """Label plus children, ready for tree presentation."""

    label: Text
    nodes: tuple[DisplayNode, ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.nodes

    def depth(self) -> int:
        if not self.nodes:
            return 1
        return 1 + max(child.depth() for child in self.nodes)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """One cached package as reported by `cache list`."""

    pkg_meta: PkgMeta
    canonical_dir: str | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> CacheEntry:
        return cls(
            pkg_meta=PkgMeta.from_dict(_as_mapping(payload.get("pkgMeta"))),
            canonical_dir=_optional_str(payload, "canonicalDir"),
        )


@dataclass(frozen=True, slots=True)
class LinkResult:
    """Outcome of `link`: the symlink created and any dependents installed."""

    src: str
    dst: str
    installed: dict[str, PackageNode] | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> LinkResult:
        installed_raw = payload.get("installed")
        installed = None
        if installed_raw:
            installed = {
                str(name): PackageNode.from_dict(_as_mapping(node))
                for name, node in _as_mapping(installed_raw).items()
            }
        return cls(
            src=str(payload.get("src") or ""),
            dst=str(payload.get("dst") or ""),
            installed=installed,
        )
