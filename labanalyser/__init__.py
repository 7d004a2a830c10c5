"""Typed lab data values, device plugin loading, experiment files, ID trees and a remote-control server."""

__version__ = "1.1.1"
__all__ = [
    "kinds",
    "interface_data",
    "plugin",
    "remote_control",
    "experiment",
    "experiment_reader",
    "tree",
]