# Copyright (c) 2024 iiPython

__version__ = "0.4.0"

from .challenge import Challenge, accept, solve, solve_token  # noqa: E402
from .controller import LRCLib, Track  # noqa: E402
from .errors import (  # noqa: E402
    LRCLibError, NotFound, DecodeError, TransportError,
    InvalidChallenge, SolveCancelled, SolveTimeout, PublishRejected
)
from .synced import (  # noqa: E402
    SyncedLyricLine, MalformedLine,
    format_synced_lyrics, parse_synced_lyrics, parse_synced_lyrics_strict, split_lyrics
)
