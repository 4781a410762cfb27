"""
Format handler interface for binary-analysis hosts.

A host owns a PluginRegistry, registers the handlers it wants at start-up
and then drives them through the BinPlugin contract:

    registry = default_registry()
    plugin = registry.find_plugin(data)
    if plugin is not None:
        ok, state = plugin.load_buffer(data, name)
        if ok:
            sections = plugin.sections(state)

Handlers are stateless; everything a load produces lives in the opaque state
object the host keeps and passes back to the query methods.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from .format_detect import check_buffer
from .loader import DolBinary, DolLoadError
from .types import BinInfo, EntryPoint, Section

logger = logging.getLogger(__name__)


class BinPlugin(ABC):
    """Abstract base class for binary format handlers."""

    name: str = ""
    desc: str = ""
    license: str = ""

    @abstractmethod
    def check_buffer(self, data: bytes | bytearray | memoryview) -> bool:
        """Return True if data looks like this handler's format."""
        ...

    @abstractmethod
    def load_buffer(
        self, data: bytes | bytearray | memoryview, name: str
    ) -> tuple[bool, Any]:
        """Load data.

        Returns:
            (True, state) on success, (False, None) on failure
        """
        ...

    @abstractmethod
    def sections(self, state: Any) -> list[Section]: ...

    @abstractmethod
    def entries(self, state: Any) -> list[EntryPoint]: ...

    @abstractmethod
    def info(self, state: Any) -> BinInfo: ...

    @abstractmethod
    def baddr(self, state: Any) -> int: ...


class DolPlugin(BinPlugin):
    """Handler for GameCube/Wii DOL executables."""

    name = "dol"
    desc = "Nintendo Dolphin binary format"
    license = "BSD"

    def check_buffer(self, data: bytes | bytearray | memoryview) -> bool:
        return check_buffer(data)

    def load_buffer(
        self, data: bytes | bytearray | memoryview, name: str
    ) -> tuple[bool, DolBinary | None]:
        try:
            return True, DolBinary.load_buffer(data, name)
        except DolLoadError as e:
            logger.debug("dol: failed to load %s: %s", name, e)
            return False, None

    def sections(self, state: DolBinary) -> list[Section]:
        return state.sections()

    def entries(self, state: DolBinary) -> list[EntryPoint]:
        return state.entries()

    def info(self, state: DolBinary) -> BinInfo:
        return state.info()

    def baddr(self, state: DolBinary) -> int:
        return state.baddr()


class PluginRegistry:
    """Host-owned table of format handlers, kept in registration order."""

    def __init__(self):
        self._plugins: dict[str, BinPlugin] = {}

    def register(self, plugin: BinPlugin) -> None:
        """Register a handler.

        Raises:
            ValueError: If a handler with the same name is already registered
        """
        if plugin.name in self._plugins:
            raise ValueError(f"Plugin '{plugin.name}' is already registered")
        self._plugins[plugin.name] = plugin

    def get(self, name: str) -> BinPlugin | None:
        """Look up a handler by name."""
        return self._plugins.get(name)

    @property
    def plugins(self) -> list[BinPlugin]:
        return list(self._plugins.values())

    def find_plugin(self, data: bytes | bytearray | memoryview) -> BinPlugin | None:
        """Return the first handler whose check_buffer accepts data."""
        for plugin in self._plugins.values():
            if plugin.check_buffer(data):
                return plugin
        return None


def default_registry() -> PluginRegistry:
    """Create a registry with the DOL handler registered."""
    registry = PluginRegistry()
    registry.register(DolPlugin())
    return registry
