"""Transport layer configuration."""

from dataclasses import dataclass


@dataclass
class TransportConfig:
    """Configuration for the message transport."""

    stop_on_exit: bool = True
    """Stop reading once the exit notification has been received."""
