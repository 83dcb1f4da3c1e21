"""chaosselect — pod targeting core for fault-injection experiments."""

__version__ = "0.1.0"
