"""Console utilities for the planwise CLI."""

from functools import lru_cache

from rich.console import Console


@lru_cache(maxsize=2)
def get_console(highlight: bool = True) -> Console:
    """Shared Rich console, one per highlight setting."""
    return Console(highlight=highlight)
