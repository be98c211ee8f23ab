"""
streamgate - Multi-provider streaming chat gateway

Unifies several chat-completion backends behind one streaming contract
and fails over between them so callers always receive a response.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("streamgate")
except PackageNotFoundError:
    __version__ = "0.3.0"

__all__ = [
    "__version__",
]
