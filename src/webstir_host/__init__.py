"""Webstir host processes - provider orchestration over a framed stdio protocol."""

__version__ = "0.1.0"
