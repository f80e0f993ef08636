"""Streaming service registry for deep-link lookups."""

from typing import Dict, List

from where2watch.providers.base import StreamingService


class StreamingServiceRegistry:
    """Registry of streaming services with known link formats."""

    _services: Dict[str, StreamingService] = {}

    @classmethod
    def register(cls, service: StreamingService) -> None:
        """Register a service instance."""
        cls._services[service.name] = service

    @classmethod
    def get(cls, name: str) -> StreamingService | None:
        """Get a service by its display name."""
        return cls._services.get(name)

    @classmethod
    def all(cls) -> List[StreamingService]:
        """Get all registered services."""
        return list(cls._services.values())

    @classmethod
    def names(cls) -> List[str]:
        """Get names of all registered services."""
        return list(cls._services.keys())

    @classmethod
    def match(cls, provider_name: str) -> StreamingService | None:
        """Find the service a cleaned, lowercase provider name refers to.

        Longer aliases are tried first so "hbo max" wins over "max".
        """
        candidates = sorted(
            ((alias, service) for service in cls.all() for alias in service.aliases),
            key=lambda pair: len(pair[0]),
            reverse=True,
        )
        for alias, service in candidates:
            if provider_name == alias or provider_name.startswith(alias + " "):
                return service
        return None


# Convenience function for registration
def register_service(service: StreamingService) -> None:
    """Register a service with the global registry."""
    StreamingServiceRegistry.register(service)
