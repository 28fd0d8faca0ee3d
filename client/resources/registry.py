from __future__ import annotations

from resources.base import ResourceSpec


class ResourceRegistry:
    def __init__(self):
        self._specs: dict[str, ResourceSpec] = {}

    def register(self, spec: ResourceSpec) -> None:
        if spec.name in self._specs:
            raise ValueError(f"Resource kind already registered: {spec.name}")
        self._specs[spec.name] = spec

    def list_specs(self) -> list[ResourceSpec]:
        return sorted(self._specs.values(), key=lambda s: s.name)

    def get_spec(self, name: str) -> ResourceSpec:
        spec = self._specs.get(name)
        if spec is None:
            raise KeyError(f"Unknown resource kind: {name}")
        return spec

    def __contains__(self, name: object) -> bool:
        return name in self._specs
