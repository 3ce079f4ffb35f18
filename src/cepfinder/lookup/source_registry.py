"""Registry of upstream sources queried by the dispatcher."""
from typing import Dict, List
from cepfinder.config import Settings
from cepfinder.lookup.models import SourceSpec


class SourceRegistry:
    """
    Ordered registry of upstream source specs keyed by name.

    Registration order is preserved; it is the launch order of a dispatch,
    which does not imply resolution order.
    """

    def __init__(self):
        """Initialize empty source registry."""
        self._sources: Dict[str, SourceSpec] = {}

    def register_source(self, name: str, endpoint: str) -> SourceSpec:
        """
        Register an upstream source.

        Args:
            name: Source label reported in envelopes
            endpoint: URL template containing a ``{cep}`` placeholder

        Returns:
            SourceSpec: The registered spec

        Raises:
            ValueError: If the name is empty or already registered, or the
                endpoint has no placeholder
        """
        if not name:
            raise ValueError("Source name must not be empty")
        if name in self._sources:
            raise ValueError(f"Source '{name}' already registered")
        if "{cep}" not in endpoint:
            raise ValueError(f"Endpoint for source '{name}' has no {{cep}} placeholder")

        spec = SourceSpec(name=name, endpoint=endpoint)
        self._sources[name] = spec
        return spec

    def get_source(self, name: str) -> SourceSpec:
        """
        Get the spec registered under ``name``.

        Raises:
            KeyError: If no source registered with this name
        """
        if name not in self._sources:
            raise KeyError(f"No source registered with name: {name}")

        return self._sources[name]

    def has_source(self, name: str) -> bool:
        return name in self._sources

    def list_sources(self) -> List[str]:
        """
        List registered source names in registration order.

        Returns:
            List[str]: Source names
        """
        return list(self._sources.keys())

    def specs(self) -> List[SourceSpec]:
        return list(self._sources.values())

    @classmethod
    def from_settings(cls, settings: Settings) -> "SourceRegistry":
        """
        Build the default registry (BrasilAPI, ViaCEP) from settings.

        Args:
            settings: Application settings

        Returns:
            SourceRegistry: Registry with both public CEP services
        """
        registry = cls()
        registry.register_source("BrasilAPI", settings.BRASILAPI_URL)
        registry.register_source("ViaCEP", settings.VIACEP_URL)
        return registry
