"""cdpbind: Chrome DevTools Protocol bindings compiler and runtime."""

__version__ = "0.1.0"
