"""Reporting helpers for scenario results."""

from .export import export_csv, export_json, snapshots_frame, stakers_frame

__all__ = ["export_csv", "export_json", "snapshots_frame", "stakers_frame"]
