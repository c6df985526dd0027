"""An interactive shell with quoting, expansion, redirections and pipelines."""

__version__ = "0.1.0"