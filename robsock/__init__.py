"""Client library for robot agents of a maze-robot simulator: UDP link, message parsing and measures."""

__version__ = "0.1.0"
__all__ = ["state", "netif", "parser", "roblink", "api"]