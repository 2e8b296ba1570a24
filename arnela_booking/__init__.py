"""Client-side appointment booking for the Arnela clinic backend."""

__version__ = "0.1.0"
