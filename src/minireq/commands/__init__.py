"""CLI commands for minireq."""

from .request_cmd import get, post, put
from .encode_cmd import encode
from .config_cmd import config
from .version import version

__all__ = [
    "get",
    "post",
    "put",
    "encode",
    "config",
    "version",
]
