"""Client-side IPC layer for talking to a tiling window manager."""

__version__ = "0.1.0"
