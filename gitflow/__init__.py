"""Git-flow automation driven by pull-request review events."""

__version__ = "0.4.0"
