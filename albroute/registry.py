from typing import Type, Dict, TYPE_CHECKING

if TYPE_CHECKING:
    from .core.adapters.abstract import Adapter  # noqa:F401


class AdapterRegistry:
    """
    A registry of adapters which turn data from a config source into the
    structures our models are built from.
    """

    def __init__(self) -> None:
        self.adapters: Dict[str, Dict[str, Type["Adapter"]]] = {}

    def register(self, name: str, source: str, adapter_class: Type["Adapter"]) -> None:
        """
        Register a new Adapter class for the model (or value type) called
        ``name`` and the config source ``source``.
        """
        if name not in self.adapters:
            self.adapters[name] = {}
        self.adapters[name][source] = adapter_class

    def get(self, name: str, source: str) -> Type["Adapter"]:
        return self.adapters[name][source]


importer_registry: AdapterRegistry = AdapterRegistry()
