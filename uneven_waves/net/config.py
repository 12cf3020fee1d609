"""
Network stream configuration.
Applied to every transport socket; never affects round resolution.
"""

import socket
from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class NetworkConfig:
    """
    Fields:
    - transfer_ms: how long a blocked read waits before polling again
    - timeout_ms: read/write timeout for the stream (0 means no timeout)
    - packet_ttl: IP time-to-live
    - non_blocking: True puts the socket in non-blocking mode (overrides timeout_ms)
    - nodelay: True disables Nagle's algorithm
    """
    transfer_ms: int = 33
    timeout_ms: int = 1000
    packet_ttl: int = 60
    non_blocking: bool = False
    nodelay: bool = True

    @property
    def timeout_seconds(self) -> float | None:
        return self.timeout_ms / 1000 if self.timeout_ms > 0 else None

    @property
    def transfer_seconds(self) -> float:
        return max(self.transfer_ms, 0) / 1000

    def configure_stream(self, stream: socket.socket) -> None:
        """Apply this configuration to a connected TCP socket."""
        stream.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1 if self.nodelay else 0)
        stream.setsockopt(socket.IPPROTO_IP, socket.IP_TTL, self.packet_ttl)
        # Python sockets share one timeout for reads and writes; blocking mode is a timeout of None
        if self.non_blocking:
            stream.setblocking(False)
        else:
            stream.settimeout(self.timeout_seconds)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NetworkConfig":
        if not isinstance(data, dict):
            data = {}
        default = cls()

        def _int(key: str) -> int:
            try:
                return max(0, int(data.get(key, getattr(default, key))))
            except (TypeError, ValueError):
                return getattr(default, key)

        def _bool(key: str) -> bool:
            value = data.get(key)
            return value if isinstance(value, bool) else getattr(default, key)

        return cls(
            transfer_ms=_int("transfer_ms"),
            timeout_ms=_int("timeout_ms"),
            packet_ttl=_int("packet_ttl"),
            non_blocking=_bool("non_blocking"),
            nodelay=_bool("nodelay"),
        )
