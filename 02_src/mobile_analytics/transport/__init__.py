"""Transport module."""

from .transport import HttpTransport, ITransport

__all__ = ["HttpTransport", "ITransport"]
