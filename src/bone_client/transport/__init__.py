"""Transport layer: blocking TCP/TLS streams."""

from .tcp_connection import PeerInfo, SocketStream, Stream, open_stream
