"""Environment collaborator used to describe the client in the User-Agent."""

from __future__ import annotations

import platform
from typing import Optional, Protocol

from . import __version__

PRODUCT = f"minireq/{__version__}"


class Environment(Protocol):
    """Protocol for reading host operating system details."""

    def operating_system_name(self) -> str:
        ...

    def operating_system_release(self) -> str:
        ...


class PlatformEnvironment:
    """Environment backed by the ``platform`` module."""

    def operating_system_name(self) -> str:
        return platform.system() or "unknown"

    def operating_system_release(self) -> str:
        return platform.release() or "unknown"


def user_agent(
    environment: Optional[Environment] = None,
    product: str = PRODUCT,
) -> str:
    """Build the client identifier sent as User-Agent.

    Examples:
        minireq/0.1.0 Linux/6.8.0-45-generic
        minireq/0.1.0 Darwin/23.4.0
    """
    env = environment or PlatformEnvironment()
    return f"{product} {env.operating_system_name()}/{env.operating_system_release()}"
