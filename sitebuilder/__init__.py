"""Sitebuilder — element tree engine and editing API for a drag-and-drop page builder."""

__version__ = "0.1.0"
