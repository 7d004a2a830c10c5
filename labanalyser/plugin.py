"""Device plugins: the interface a device offers and the loading of device files."""

from __future__ import annotations

import xml.etree.ElementTree as ElementTree
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from labanalyser.interface_data import InterfaceData

_ROOT_TAG = "LEDevice"


class PlatformInterface(ABC):
    """A loaded device: it publishes symbols and receives commands for them."""

    #: the device name the interface is registered under
    name: str = ""

    @abstractmethod
    def get_symbol(self, id: str) -> InterfaceData | None:
        """Return the data entry published under ``id``, or None if there is none."""

    @abstractmethod
    def message_receiver(self, command: str, id: str, data: InterfaceData) -> None:
        """Handle ``command`` addressed to the entry ``id`` with ``data``."""


class PlatformFactory(ABC):
    """Creates the interface of one kind of device."""

    @abstractmethod
    def create_interface(self, messenger: Any) -> PlatformInterface:
        """Return a new device interface that reports through ``messenger``."""


class DeviceFileError(Exception):
    """A device file could not be read or its plugin could not be loaded."""


@dataclass(frozen=True)
class DeviceDescription:
    """What a device file names: the plugin to load and the device's name."""

    plugin: str
    name: str


def parse_device(text: str) -> DeviceDescription:
    """Read a device description from the text of a device file.

    Raises DeviceFileError when the text is not a device file or an
    attribute is missing.
    """
    try:
        root = ElementTree.fromstring(text)
    except ElementTree.ParseError as exc:
        raise DeviceFileError(f"Parse error reading device file: {exc}") from exc
    if root.tag != _ROOT_TAG:
        raise DeviceFileError("Not a LEDevice file")
    plugin = root.get("DevicePlugin")
    if plugin is None:
        raise DeviceFileError("Error Reading plugin file, DevicePlugin tag missing.")
    name = root.get("DeviceName")
    if name is None:
        raise DeviceFileError("Error Reading plugin file, DeviceName tag missing.")
    return DeviceDescription(plugin=plugin, name=name)


def parse_device_file(path: str | Path) -> DeviceDescription:
    """Read the device description stored in the file at ``path``."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise DeviceFileError(f"Cannot read file: {path} Reason: {exc}") from exc
    return parse_device(text)


class PluginRegistry:
    """Device factories, looked up by the plugin name a device file gives."""

    def __init__(self) -> None:
        self._factories: dict[str, PlatformFactory] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def register(self, name: str, factory: PlatformFactory) -> None:
        """Make ``factory`` the one used for the plugin ``name``."""
        self._factories[name] = factory

    def create(self, name: str, messenger: Any) -> PlatformInterface:
        """Create a device interface from the plugin ``name``; KeyError if unknown."""
        try:
            factory = self._factories[name]
        except KeyError:
            raise KeyError(f"no plugin registered as {name!r}") from None
        return factory.create_interface(messenger)


class PluginLoader:
    """Loads device files and keeps the devices they created, by name."""

    def __init__(self, registry: PluginRegistry, messenger: Any = None) -> None:
        self._registry = registry
        self._messenger = messenger
        self._devices: dict[str, tuple[str, PlatformInterface]] = {}

    def load(self, path: str | Path) -> PlatformInterface | None:
        """Load the device described in ``path``.

        Returns the new device, or None when a device of that name is
        already loaded. Raises DeviceFileError when the file is unusable or
        its plugin cannot be created.
        """
        description = parse_device_file(path)
        if description.name in self._devices:
            return None
        try:
            device = self._registry.create(description.plugin, self._messenger)
        except KeyError as exc:
            raise DeviceFileError(
                f"the xml-Device: {description.plugin} couldn't be loaded! Reason: {exc.args[0]}"
            ) from exc
        device.name = description.name
        self._devices[description.name] = (str(path), device)
        return device

    def device(self, name: str) -> PlatformInterface | None:
        """The device loaded under ``name``, or None."""
        entry = self._devices.get(name)
        return entry[1] if entry else None

    @property
    def device_paths(self) -> list[str]:
        """Paths of the device files loaded, in loading order."""
        return [path for path, _ in self._devices.values()]