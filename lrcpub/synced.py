# Copyright (c) 2024 iiPython

# Modules
import re
from datetime import timedelta
from typing import Iterable

from pydantic import BaseModel, ConfigDict

# Regular expressions
MINUTES_EXPR = re.compile(r"[+-]?[0-9]+", re.ASCII)
SECONDS_EXPR = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", re.ASCII)

# Models
class SyncedLyricLine(BaseModel):
    model_config = ConfigDict(frozen = True)

    offset: timedelta = timedelta()
    text:   str = ""
    index:  int = 0

    @property
    def lyric(self) -> str:
        """The text without the delimiter space kept by `parse_synced_lyrics`."""
        return self.text[1:] if self.text.startswith(" ") else self.text

class MalformedLine(BaseModel):
    model_config = ConfigDict(frozen = True)

    index:  int
    raw:    str

# Formatting
def format_timestamp(offset: timedelta) -> str:
    minutes, centiseconds = divmod(round(offset.total_seconds() * 100), 6000)
    return f"[{minutes}:{centiseconds / 100:05.2f}]"

def format_synced_lyrics(lines: Iterable[SyncedLyricLine]) -> str:
    return "\n".join([f"{format_timestamp(line.offset)} {line.text}" for line in lines])

# Parsing
def parse_line(index: int, line: str) -> SyncedLyricLine | None:
    space = line.find(" ")
    if space == -1:
        return None

    stamp, text = line[:space], line[space:]
    if len(stamp) < 2 or stamp[0] != "[" or stamp[-1] != "]":
        return None

    parts = stamp[1:-1].split(":")
    if len(parts) != 2:
        return None

    # ASCII digits only, no whitespace or underscores
    if not (MINUTES_EXPR.fullmatch(parts[0]) and SECONDS_EXPR.fullmatch(parts[1])):
        return None

    try:
        offset = timedelta(minutes = int(parts[0]), seconds = float(parts[1]))

    except (ValueError, OverflowError):
        return None

    return SyncedLyricLine(offset = offset, text = text, index = index)

def parse_synced_lyrics_strict(lyrics: str) -> list[SyncedLyricLine | MalformedLine]:
    """Parse LRC text, keeping one entry per input line.

    Lines that fail to parse come back as `MalformedLine` holding the original
    text, so a line stamped at zero can be told apart from a broken one."""
    return [
        parse_line(index, line) or MalformedLine(index = index, raw = line)
        for index, line in enumerate(lyrics.split("\n"))
    ]

def parse_synced_lyrics(lyrics: str) -> list[SyncedLyricLine]:
    """Parse LRC text, keeping one entry per input line.

    Lines that fail to parse are replaced by a zero-valued `SyncedLyricLine`
    (offset 0, empty text, index 0) at their position. The space separating
    the timestamp from the lyric stays at the front of `text`."""
    return [
        line if isinstance(line, SyncedLyricLine) else SyncedLyricLine()
        for line in parse_synced_lyrics_strict(lyrics)
    ]

# Plain/synced detection
def is_synced(lyrics: str) -> bool:
    lines = [line for line in lyrics.splitlines() if line.strip()]
    return bool(lines) and all([line.startswith("[") for line in lines])

def split_lyrics(lyrics: str) -> tuple[str, str | None]:
    """Return the plain rendition of `lyrics` and, when it is LRC, the synced text."""
    if not is_synced(lyrics):
        return lyrics, None

    lines = [line for line in lyrics.splitlines() if line.strip()]
    return "\n".join([line.partition("]")[2].lstrip() for line in lines]), "\n".join(lines)
