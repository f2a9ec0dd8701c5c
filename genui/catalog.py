"""
Artifact catalog supplied per call by the registry collaborator.

Also renders the catalog listing that every prompt embeds.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping

from genui.types import ArtifactDescriptor


class ArtifactCatalog(Mapping[str, ArtifactDescriptor]):
    """Read-only, insertion-ordered mapping of artifact name to descriptor."""

    def __init__(self, artifacts: Iterable[ArtifactDescriptor] = ()) -> None:
        self._artifacts: dict[str, ArtifactDescriptor] = {}
        for artifact in artifacts:
            self.register(artifact)

    @classmethod
    def coerce(
        cls,
        artifacts: ArtifactCatalog | Mapping[str, ArtifactDescriptor] | Iterable[ArtifactDescriptor],
    ) -> ArtifactCatalog:
        if isinstance(artifacts, ArtifactCatalog):
            return artifacts
        if isinstance(artifacts, Mapping):
            return cls(artifacts.values())
        return cls(artifacts)

    def register(self, artifact: ArtifactDescriptor, *, overwrite: bool = False) -> None:
        if artifact.name in self._artifacts and not overwrite:
            raise ValueError(f"Artifact already registered: {artifact.name}")
        self._artifacts[artifact.name] = artifact

    def __getitem__(self, name: str) -> ArtifactDescriptor:
        return self._artifacts[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._artifacts)

    def __len__(self) -> int:
        return len(self._artifacts)

    def describe(self) -> str:
        """Bullet listing of every artifact with its props."""
        lines = [
            f"- {a.name}: {a.description}{_describe_props(a.props)}"
            for a in self._artifacts.values()
        ]
        return "Available components and their descriptions:\n" + "\n".join(lines)


def _describe_props(props: dict) -> str:
    if not props:
        return ""
    # JSON-schema style props carry their fields under "properties".
    fields = props.get("properties") if isinstance(props.get("properties"), dict) else props
    required = set(props.get("required") or []) if fields is not props else set()

    parts = []
    for name, info in fields.items():
        type_str, description, is_required = "", "", name in required
        if isinstance(info, str):
            type_str = info
        elif isinstance(info, dict):
            type_str = str(info.get("type", ""))
            description = str(info.get("description", ""))
            is_required = is_required or bool(info.get("required", False))
        part = f"{name}: {type_str}"
        if is_required:
            part += " (required)"
        if description:
            part += f" - {description}"
        parts.append(part)
    return f" (Props: {', '.join(parts)})"
