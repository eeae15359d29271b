"""Router configuration.

RouterConfig is a frozen dataclass and cannot change once a Router holds it.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(basepath="/app", secure_port=8443)
    """

    # Prefix the app is mounted under; prepended when matching and generating
    basepath: str = ""

    # A request on this port counts as secure even without HTTPS=on
    secure_port: int = 443
