"""dcon - PostgreSQL inspection and CRUD command-line client."""

from dcon.__about__ import __version__

__all__ = ["__version__"]
