"""Tester configuration.

TesterConfig is a frozen dataclass: immutable after creation, no
string-key dict lookups. Nothing is read from files or the environment.
"""

from dataclasses import dataclass
from typing import Any

from httptester.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class TesterConfig:
    """How requests are presented to the application under test.

    All fields have sensible defaults. Override what you need::

        config = TesterConfig(backend="trio", default_headers=(("Accept", "text/html"),))
    """

    __test__ = False  # Tell pytest this is not a test class

    # Event loop used to drive the application (any anyio backend)
    backend: str = "asyncio"
    backend_options: dict[str, Any] | None = None

    # ASGI scope
    scheme: str = "http"
    http_version: str = "1.1"
    root_path: str = ""
    server: tuple[str, int] = ("testserver", 80)
    client: tuple[str, int] = ("127.0.0.1", 0)

    # Request body is delivered to receive() in pieces of this size
    chunk_size: int = 64 * 1024

    # Sent with every request; per-request headers are appended after these
    default_headers: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            msg = f"chunk_size must be positive, got {self.chunk_size}"
            raise ConfigurationError(msg)
        if self.scheme not in ("http", "https"):
            msg = f"scheme must be 'http' or 'https', got {self.scheme!r}"
            raise ConfigurationError(msg)
        if self.root_path and not self.root_path.startswith("/"):
            msg = f"root_path must start with '/', got {self.root_path!r}"
            raise ConfigurationError(msg)
