"""Saving an experiment: forms, devices, figure windows, widgets and connections."""

from __future__ import annotations

import base64
import os
import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass, field
from pathlib import Path

from labanalyser.kinds import ValueKind, format_value

_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


@dataclass
class FormEntry:
    """A form file loaded into the experiment, under the name it was given."""

    name: str
    path: str


@dataclass
class FigureWindow:
    """A figure window with its grid of plots, position and size."""

    rows: int
    cols: int
    pos_x: int = 0
    pos_y: int = 0
    width: int = 0
    height: int = 0
    plot_widgets: list[str] = field(default_factory=list)


@dataclass
class WidgetState:
    """The saved state of one widget: its attributes and its text."""

    name: str
    attributes: list[tuple[str, str]] = field(default_factory=list)
    text: str = ""


@dataclass
class Connection:
    """A data entry and the widgets bound to it.

    ``alias`` of None means the entry has no alias and is saved under its
    own identifier. ``role`` and ``data_type`` describe the entry when it
    is known.
    """

    id: str
    minimum: float = 0.0
    maximum: float = 0.0
    alias: str | None = None
    role: str | None = None
    data_type: str | None = None
    object_names: list[str] = field(default_factory=list)


@dataclass
class Experiment:
    """Everything an experiment file records."""

    forms: list[FormEntry] = field(default_factory=list)
    device_paths: list[str] = field(default_factory=list)
    figure_windows: list[FigureWindow] = field(default_factory=list)
    widgets: list[WidgetState] = field(default_factory=list)
    connections: list[Connection] = field(default_factory=list)
    state: bytes = b""


def _relative(path: str, base: Path) -> str:
    try:
        relative = os.path.relpath(path, base)
    except ValueError:
        return path
    return relative.replace(os.sep, "/")


def _text_element(parent: ElementTree.Element, tag: str, text: str) -> ElementTree.Element:
    element = ElementTree.SubElement(parent, tag)
    element.text = text
    return element


def _number(value: float) -> str:
    return format_value(value, ValueKind.DOUBLE)


def _write_tabs(root: ElementTree.Element, forms: list[FormEntry], base: Path) -> None:
    tabs = ElementTree.SubElement(root, "Tabs")
    for form in forms:
        element = ElementTree.SubElement(tabs, "Form", {"Name": form.name})
        _text_element(element, "AbsPath", form.path)
        _text_element(element, "RelPath", _relative(form.path, base))


def _write_devices(root: ElementTree.Element, paths: list[str], base: Path) -> None:
    devices = ElementTree.SubElement(root, "Devices")
    for path in paths:
        element = ElementTree.SubElement(devices, "Device")
        _text_element(element, "AbsPath", path)
        _text_element(element, "RelPath", _relative(path, base))


def _write_figure_windows(root: ElementTree.Element, windows: list[FigureWindow]) -> None:
    figures = ElementTree.SubElement(root, "FigureWindows")
    for window in windows:
        element = ElementTree.SubElement(
            figures,
            "Window",
            {
                "Rows": str(window.rows),
                "Cols": str(window.cols),
                "PosX": str(window.pos_x),
                "PosY": str(window.pos_y),
                "Width": str(window.width),
                "Height": str(window.height),
            },
        )
        for name in window.plot_widgets:
            _text_element(element, "PlotWidgetName", name)


def _write_widgets(root: ElementTree.Element, widgets: list[WidgetState]) -> None:
    container = ElementTree.SubElement(root, "Widgets")
    for widget in widgets:
        element = ElementTree.SubElement(container, "Widget", {"Name": widget.name})
        for key, value in widget.attributes:
            element.set(key, value)
        if widget.text:
            element.text = widget.text


def _write_connections(root: ElementTree.Element, connections: list[Connection]) -> None:
    container = ElementTree.SubElement(root, "Connections")
    for connection in connections:
        if not connection.object_names:
            continue
        element = ElementTree.SubElement(container, "connect")
        attributes = {
            "Min": _number(connection.minimum),
            "Max": _number(connection.maximum),
            "Alias": connection.id if connection.alias is None else connection.alias,
        }
        if connection.role is not None or connection.data_type is not None:
            attributes["Type"] = connection.role or ""
            attributes["DataType"] = connection.data_type or ""
        id_element = ElementTree.SubElement(element, "ID", attributes)
        id_element.text = connection.id
        for name in connection.object_names:
            _text_element(element, "ObjectName", name)


def experiment_to_xml(experiment: Experiment, base_dir: str | Path) -> str:
    """Render ``experiment`` as XML; relative paths are taken from ``base_dir``."""
    base = Path(base_dir).absolute()
    root = ElementTree.Element("Experiment")
    _write_tabs(root, experiment.forms, base)
    _write_devices(root, experiment.device_paths, base)
    _write_figure_windows(root, experiment.figure_windows)
    _write_widgets(root, experiment.widgets)
    _write_connections(root, experiment.connections)
    state = ElementTree.SubElement(root, "State")
    state.text = base64.b64encode(experiment.state).decode("ascii")
    ElementTree.indent(root, space="    ")
    return _DECLARATION + ElementTree.tostring(root, encoding="unicode") + "\n"


def write_experiment(experiment: Experiment, path: str | Path) -> None:
    """Save ``experiment`` to ``path``; raises OSError when it cannot be written."""
    target = Path(path)
    text = experiment_to_xml(experiment, target.absolute().parent)
    target.write_text(text, encoding="utf-8")