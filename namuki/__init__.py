"""Wiki engine core: storage access, permissions, user display, settings, markup rendering and JSON API handlers."""

__version__ = "0.1.0"