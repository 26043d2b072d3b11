"""Decide whether a hostname names the machine running the controller."""

from __future__ import annotations

import logging
import socket
import threading
from typing import FrozenSet, Iterable, Optional

import psutil

logger = logging.getLogger(__name__)

LOOPBACK_NAMES = frozenset({"localhost", "127.0.0.1"})


def primary_interface_address() -> Optional[str]:
    """Return the IPv4 address of the first up, non-loopback interface.

    Falls back to a forward lookup of this machine's FQDN when interfaces
    cannot be enumerated or none qualifies. Returns None when both fail.
    """
    try:
        stats = psutil.net_if_stats()
        addresses = psutil.net_if_addrs()
    except (OSError, psutil.Error) as exc:
        logger.debug("Interface enumeration failed: %s", exc)
    else:
        for name, stat in stats.items():
            if not stat.isup or "loopback" in getattr(stat, "flags", "") or name == "lo":
                continue
            for addr in addresses.get(name, []):
                if addr.family == socket.AF_INET and not addr.address.startswith("127."):
                    return addr.address
    try:
        return socket.gethostbyname(socket.getfqdn())
    except OSError as exc:
        logger.debug("Own FQDN lookup failed: %s", exc)
        return None


def discover_local_names() -> FrozenSet[str]:
    """Collect the names and address this machine answers to."""
    names = set(LOOPBACK_NAMES)
    try:
        hostname = socket.gethostname()
    except OSError as exc:
        logger.debug("Hostname lookup failed: %s", exc)
        hostname = ""
    if hostname:
        names.add(hostname)
        names.add(hostname.split(".", 1)[0])
    try:
        names.add(socket.getfqdn())
    except OSError as exc:
        logger.debug("FQDN lookup failed: %s", exc)
    address = primary_interface_address()
    if address:
        names.add(address)
    names.discard("")
    return frozenset(names)


def _normalize(names: Iterable[str]) -> FrozenSet[str]:
    # DNS names are case-insensitive
    return frozenset(name.strip().lower() for name in names if name and name.strip())


class LocalIdentity:
    """Capability answering ``is_local(host)``.

    Pass ``names`` to pin the identity (tests, containers); otherwise the
    names are discovered on first use and cached.
    """

    def __init__(self, names: Optional[Iterable[str]] = None) -> None:
        self._names: Optional[FrozenSet[str]] = (
            _normalize(names) | LOOPBACK_NAMES if names is not None else None
        )
        self._lock = threading.Lock()

    @property
    def names(self) -> FrozenSet[str]:
        with self._lock:
            if self._names is None:
                try:
                    self._names = _normalize(discover_local_names())
                except Exception as exc:
                    logger.warning("Local identity discovery failed, treating hosts as remote: %s", exc)
                    self._names = LOOPBACK_NAMES
            return self._names

    def is_local(self, host: str) -> bool:
        host = (host or "").strip().lower()
        if not host:
            return False
        if host in LOOPBACK_NAMES:
            return True
        return host in self.names
