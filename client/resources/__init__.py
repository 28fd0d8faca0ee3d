from resources.registry import ResourceRegistry
from resources.kinds import register_resource_kinds

resource_registry = ResourceRegistry()
register_resource_kinds(resource_registry)

__all__ = ["resource_registry", "ResourceRegistry"]
