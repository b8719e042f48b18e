"""Daily open/middle/close shift assignment for small crews."""

__version__ = "0.1.0"
