"""Protocol layer: frame synchronization, target decoding, and command builders."""

from .framing import FrameSynchronizer, ParserState, has_valid_tail
from .commands import Command, build_command
from .parser import decode_target, decode_targets
