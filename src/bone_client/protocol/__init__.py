"""Protocol layer: serialization, framing, commands, login and telemetry decoding."""

from .framing import Frame, encode_request, read_frame
from .commands import Family, build_command
from .serialization import SerializationMode, get_serializer
