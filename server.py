"""
Host a single Uneven Waves match over TCP.
Both players connect to this process and exchange one JSON message per line.
Usage: python server.py [port]
"""

import sys

from uneven_waves.config import TCP_HOST, TCP_PORT
from uneven_waves.net.config import NetworkConfig
from uneven_waves.net.tcp import serve

if __name__ == "__main__":
    port = int(sys.argv[1]) if len(sys.argv) > 1 else TCP_PORT
    serve(TCP_HOST, port, network=NetworkConfig())
