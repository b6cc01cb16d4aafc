"""Destinations for completed runs: static JSON export and the notice store."""

from .base import NoticeSink
from .database import DatabaseSink
from .json_export import JsonExportSink, export_notice

__all__ = ["DatabaseSink", "JsonExportSink", "NoticeSink", "export_notice"]
