"""
TCP host for a client/host match.

Protocol: one JSON object per line in, one JSON object per line out.
    {"op": "claim", "public_coord": [x, y], "private_coord": [x, y]}
    {"op": "suppress", "suppression_zone": [[x, y], ...]}
    {"op": "state", "viewer": "resistance" | "suppression" | null}
Replies are {"ok": true, "events": [...], "state": {...}} or {"ok": false, "error": "..."}.
"""

import json
import socket
import socketserver
import threading
import time
from typing import Any, Iterator

from uneven_waves.engine import RESISTANCE, SIDES, SUPPRESSION
from uneven_waves.engine.actions import ResistanceAction, SuppressionAction
from uneven_waves.engine.queries import public_view
from uneven_waves.engine.round_manager import (
    GameOverError,
    intake_resistance_action,
    intake_suppression_action,
)
from uneven_waves.engine.state import RoundState
from uneven_waves.net.config import NetworkConfig


class MatchHost:
    """
    Owns the hosted RoundState. Every message is handled under one lock so an
    intake and the resolution it triggers are seen atomically by other connections.
    """

    def __init__(self, state: RoundState | None = None):
        self.state = state if state is not None else RoundState()
        self._lock = threading.Lock()

    def handle_message(self, message: Any) -> dict[str, Any]:
        if not isinstance(message, dict):
            return {"ok": False, "error": "Message must be a JSON object"}
        op = message.get("op")
        try:
            with self._lock:
                if op == "claim":
                    return self._intake(ResistanceAction.from_dict(message), RESISTANCE)
                if op == "suppress":
                    return self._intake(SuppressionAction.from_dict(message), SUPPRESSION)
                if op == "state":
                    viewer = message.get("viewer")
                    if viewer is not None and viewer not in SIDES:
                        return {"ok": False, "error": f"Unknown viewer: {viewer}"}
                    return {"ok": True, "events": [], "state": public_view(self.state, viewer)}
        except GameOverError as e:
            return {"ok": False, "error": str(e), "game_over": True}
        except ValueError as e:
            return {"ok": False, "error": str(e)}
        return {"ok": False, "error": f"Unknown op: {op!r}"}

    def _intake(self, action, side: str) -> dict[str, Any]:
        if side == RESISTANCE:
            events = intake_resistance_action(self.state, action)
        else:
            events = intake_suppression_action(self.state, action)
        return {
            "ok": True,
            "events": [e.to_dict() for e in events],
            "state": public_view(self.state, side),
        }


# Longest message accepted from a peer, newline excluded
MAX_LINE_BYTES = 64 * 1024


def read_lines(
    stream: socket.socket,
    network: NetworkConfig,
    max_line_bytes: int = MAX_LINE_BYTES,
) -> Iterator[bytes]:
    """
    Yield newline-terminated messages from stream until the peer closes it.
    A read that times out (or would block) waits transfer_ms and tries again.
    Stops early if a message grows past max_line_bytes without a newline.
    """
    buffer = b""
    while True:
        try:
            chunk = stream.recv(4096)
        except (TimeoutError, BlockingIOError):
            time.sleep(network.transfer_seconds)
            continue
        if not chunk:
            return
        buffer += chunk
        while b"\n" in buffer:
            line, buffer = buffer.split(b"\n", 1)
            if line.strip():
                yield line
        if len(buffer) > max_line_bytes:
            print(f"Dropping connection: message exceeds {max_line_bytes} bytes", flush=True)
            return


def _encode(reply: dict[str, Any]) -> bytes:
    return (json.dumps(reply) + "\n").encode("utf-8")


class MatchRequestHandler(socketserver.BaseRequestHandler):
    """One connected player. Replies to each message in order."""

    def setup(self):
        self.server.network.configure_stream(self.request)

    def handle(self):
        for line in read_lines(self.request, self.server.network):
            try:
                message = json.loads(line)
            except ValueError:
                # Covers undecodable bytes as well as malformed JSON
                reply = {"ok": False, "error": "Invalid JSON"}
            else:
                reply = self.server.host.handle_message(message)
            self.request.sendall(_encode(reply))


class MatchServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address: tuple[str, int], host: MatchHost, network: NetworkConfig | None = None):
        self.host = host
        self.network = network or NetworkConfig()
        super().__init__(address, MatchRequestHandler)


class MatchClient:
    """Blocking client for a MatchServer. One request, one reply."""

    def __init__(self, address: tuple[str, int], network: NetworkConfig | None = None):
        self.network = network or NetworkConfig()
        self.stream = socket.create_connection(address)
        self.network.configure_stream(self.stream)
        self._lines = read_lines(self.stream, self.network)

    def request(self, message: dict[str, Any]) -> dict[str, Any]:
        self.stream.sendall(_encode(message))
        try:
            return json.loads(next(self._lines))
        except StopIteration:
            raise ConnectionError("Host closed the connection") from None

    def claim(self, public_coord, private_coord=None) -> dict[str, Any]:
        message = {"op": "claim", "public_coord": list(public_coord)}
        if private_coord is not None:
            message["private_coord"] = list(private_coord)
        return self.request(message)

    def suppress(self, zone) -> dict[str, Any]:
        return self.request({"op": "suppress", "suppression_zone": [list(c) for c in zone]})

    def state(self, viewer: str | None = None) -> dict[str, Any]:
        return self.request({"op": "state", "viewer": viewer})

    def close(self) -> None:
        self.stream.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def serve(host: str, port: int, state: RoundState | None = None, network: NetworkConfig | None = None) -> None:
    """Host a single match until interrupted."""
    match_host = MatchHost(state)
    with MatchServer((host, port), match_host, network) as server:
        print(f"Hosting match on {host}:{port}", flush=True)
        print("Press Ctrl+C to stop", flush=True)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("\nShutting down...", flush=True)
