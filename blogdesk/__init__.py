"""blogdesk: posts and categories behind a typed RPC layer."""

__version__ = "0.1.0"
