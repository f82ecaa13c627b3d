"""Tool dispatch engine serving backend API catalogues to agents."""

__version__ = "0.1.0"
