"""Loading an experiment file back into the description it was saved from."""

from __future__ import annotations

import base64
import binascii
import os
import xml.etree.ElementTree as ElementTree
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from labanalyser.experiment import (
    Connection,
    Experiment,
    FigureWindow,
    FormEntry,
    WidgetState,
)
from labanalyser.kinds import ValueKind, parse_text

_ROOT_TAG = "Experiment"


class ExperimentFormatError(Exception):
    """The text is not an experiment file."""


@dataclass
class ExperimentLoad:
    """An experiment as read from a file, with the problems met on the way.

    Forms and devices whose files cannot be found are left out of
    ``experiment``; every missing form is reported in ``errors``.
    """

    experiment: Experiment = field(default_factory=Experiment)
    errors: list[str] = field(default_factory=list)


def _existing(candidate: str) -> str | None:
    if candidate and os.path.exists(candidate):
        return os.path.abspath(candidate)
    return None


def _relative_candidate(rel_path: str, base_dir: str | Path) -> str:
    return f"{Path(base_dir).absolute().as_posix()}/{rel_path}"


def resolve_path(abs_path: str | None, rel_path: str | None, base_dir: str | Path) -> str | None:
    """Find the file an entry names, as an absolute path, or None if neither exists.

    The absolute path is tried first and the path relative to ``base_dir``
    second; when both exist the relative one wins.
    """
    found = None
    if abs_path is not None:
        found = _existing(abs_path) or found
    if rel_path is not None:
        found = _existing(_relative_candidate(rel_path, base_dir)) or found
    return found


def _locate(element: ElementTree.Element, base_dir: str | Path) -> tuple[str | None, str]:
    """Resolve the AbsPath/RelPath children of ``element``.

    Returns the file found, if any, and the last candidate tried.
    """
    found: str | None = None
    tried = ""
    for child in element:
        text = child.text or ""
        if child.tag == "AbsPath":
            tried = text
        elif child.tag == "RelPath":
            tried = _relative_candidate(text, base_dir)
        else:
            continue
        found = _existing(tried) or found
    return found, tried


def _to_int(text: str | None) -> int:
    return parse_text(text or "", ValueKind.INT32)


def _to_double(text: str | None) -> float:
    return parse_text(text or "", ValueKind.DOUBLE)


def _children(element: ElementTree.Element, tag: str) -> Iterable[ElementTree.Element]:
    return (child for child in element if child.tag == tag)


def _read_tabs(element: ElementTree.Element, base_dir: str | Path, load: ExperimentLoad) -> None:
    for form in _children(element, "Form"):
        name = form.get("Name", "")
        found, tried = _locate(form, base_dir)
        if found:
            load.experiment.forms.append(FormEntry(name=name, path=found))
        else:
            load.errors.append(f"Form File {tried} not found!")


def _read_devices(element: ElementTree.Element, base_dir: str | Path, load: ExperimentLoad) -> None:
    for device in _children(element, "Device"):
        found, _ = _locate(device, base_dir)
        if found:
            load.experiment.device_paths.append(found)


def _read_figure_windows(element: ElementTree.Element, load: ExperimentLoad) -> None:
    for window in _children(element, "Window"):
        load.experiment.figure_windows.append(
            FigureWindow(
                rows=_to_int(window.get("Rows")),
                cols=_to_int(window.get("Cols")),
                pos_x=_to_int(window.get("PosX")),
                pos_y=_to_int(window.get("PosY")),
                width=_to_int(window.get("Width")),
                height=_to_int(window.get("Height")),
                plot_widgets=[child.text or "" for child in _children(window, "PlotWidgetName")],
            )
        )


def _read_widgets(element: ElementTree.Element, load: ExperimentLoad) -> None:
    for widget in _children(element, "Widget"):
        name = widget.get("Name", "")
        attributes = [(key, value) for key, value in widget.attrib.items() if key != "Name"]
        text = "".join(widget.itertext()).strip()
        load.experiment.widgets.append(WidgetState(name=name, attributes=attributes, text=text))


def _read_connection(element: ElementTree.Element, load: ExperimentLoad) -> None:
    current: Connection | None = None
    for child in element:
        if child.tag == "ID":
            identifier = (child.text or "").strip()
            alias = child.get("Alias", "")
            role = child.get("Type", "")
            data_type = child.get("DataType", "")
            described = bool(role) and bool(data_type)
            current = Connection(
                id=identifier,
                minimum=_to_double(child.get("Min")),
                maximum=_to_double(child.get("Max")),
                alias=alias if alias and alias != identifier else None,
                role=role if described else None,
                data_type=data_type if described else None,
            )
            load.experiment.connections.append(current)
        elif child.tag == "ObjectName" and current is not None and current.id:
            current.object_names.append(child.text or "")


def _read_connections(element: ElementTree.Element, load: ExperimentLoad) -> None:
    for connection in _children(element, "connect"):
        _read_connection(connection, load)


def _read_state(element: ElementTree.Element, load: ExperimentLoad) -> None:
    try:
        load.experiment.state = base64.b64decode((element.text or "").strip())
    except (binascii.Error, ValueError):
        load.experiment.state = b""


def parse_experiment(text: str, base_dir: str | Path) -> ExperimentLoad:
    """Read an experiment from ``text``; relative paths are taken from ``base_dir``.

    Raises ExperimentFormatError when the text is not well formed or is not
    an experiment.
    """
    try:
        root = ElementTree.fromstring(text)
    except ElementTree.ParseError as exc:
        raise ExperimentFormatError(f"Parse error reading experiment: {exc}") from exc
    if root.tag != _ROOT_TAG:
        raise ExperimentFormatError("Not a Experiment file")
    load = ExperimentLoad()
    for section in root:
        if section.tag == "Tabs":
            _read_tabs(section, base_dir, load)
        elif section.tag == "Devices":
            _read_devices(section, base_dir, load)
        elif section.tag == "Widgets":
            _read_widgets(section, load)
        elif section.tag == "State":
            _read_state(section, load)
        elif section.tag == "FigureWindows":
            _read_figure_windows(section, load)
        elif section.tag == "Connections":
            _read_connections(section, load)
    return load


def read_experiment(path: str | Path) -> ExperimentLoad:
    """Read the experiment saved at ``path``; raises OSError if it cannot be read."""
    source = Path(path)
    text = source.read_text(encoding="utf-8")
    return parse_experiment(text, source.absolute().parent)