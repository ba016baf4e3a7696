from __future__ import annotations

import ipaddress
import re

from dynamic_secrets.core.config import settings

_HOSTNAME_LABEL = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?$")
_INTERNAL_NAMES = {"localhost", "localhost.localdomain", "ip6-localhost"}


def validate_host(value: str) -> str:
    """Accept a DNS hostname or an IP literal; reject internal hosts unless allowed.

    Purely syntactic, no resolution is attempted.
    """
    host = value.strip()
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    if not host:
        raise ValueError("host is required")

    try:
        addr = ipaddress.ip_address(host)
    except ValueError:
        addr = None

    if addr is not None:
        internal = addr.is_loopback or addr.is_link_local or addr.is_unspecified
    else:
        name = host.rstrip(".").lower()
        if len(name) > 253 or not all(_HOSTNAME_LABEL.match(label) for label in name.split(".")):
            raise ValueError(f"invalid host {value!r}")
        internal = name in _INTERNAL_NAMES
        host = name

    if internal and not settings.DYNAMIC_SECRET_ALLOW_INTERNAL_HOSTS:
        raise ValueError(f"host {value!r} points to an internal address")
    return host
