"""HackMD MCP server package."""

__version__ = "1.0.0"

from .config import Config, load_config  # noqa: E402
from .logging import configure_logging  # noqa: E402
from .server import build_server, main  # noqa: E402

__all__ = [
    "__version__",
    "Config",
    "load_config",
    "configure_logging",
    "build_server",
    "main",
]
