"""A TCP chat room: relay server, terminal client and their shared message protocol."""

__version__ = "0.1.0"