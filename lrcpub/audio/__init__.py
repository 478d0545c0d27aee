# Copyright (c) 2024 iiPython

# Modules
from datetime import timedelta
from pathlib import Path
from typing import Literal, Sequence

from mutagen.mp3 import MP3
from mutagen.flac import FLAC
from mutagen.mp4 import MP4
from mutagen.id3._frames import USLT, SYLT

from ..synced import SyncedLyricLine, format_synced_lyrics, parse_synced_lyrics_strict

# Initialization
CLASS_MAPPING = {
    ".mp3": MP3,
    ".flac": FLAC,
    ".m4a": MP4
}

# Tag Mapping based on FileType
TAG_MAPPING = {
    MP3: {
        "TITLE": "TIT2",
        "ALBUM": "TALB",
        "ARTIST": "TPE1",
        "ALBUMARTIST": "TPE2"
    },
    MP4: { # reference: https://mutagen.readthedocs.io/en/latest/api/mp4.html#mutagen.mp4.MP4Tags
        "TITLE": "\xa9nam",
        "ALBUM": "\xa9alb",
        "ARTIST": "\xa9ART",
        "ALBUMARTIST": "aART"
    },
}

# Exceptions
class UnsupportedSuffix(ValueError):
    pass

# SYLT conversion (SYLT stores (text, milliseconds) pairs)
def sylt_to_lines(entries: Sequence[tuple[str, int]]) -> list[SyncedLyricLine]:
    return [
        SyncedLyricLine(offset = timedelta(milliseconds = time), text = text, index = index)
        for index, (text, time) in enumerate(entries)
    ]

def lines_to_sylt(lines: Sequence[SyncedLyricLine]) -> list[tuple[str, int]]:
    return [
        (line.lyric, round(line.offset.total_seconds() * 1000))
        for line in lines
    ]

# Audio handler
class AudioFile:
    def __init__(self, path: Path) -> None:
        self.path = path
        if path.suffix not in CLASS_MAPPING:
            raise UnsupportedSuffix(f"Unsupported file extension: '{path.suffix}'!")

        self.type = CLASS_MAPPING[path.suffix]
        self.file = self.type(path)
        self.length = self.file.info.length

    def __repr__(self) -> str:
        return f"<AudioFile '{self.path}' length={round(self.length)} fields={len(self.file)} />"

    def get_tag(self, tag: str, as_string: bool = True) -> str | None:
        if self.type in TAG_MAPPING:
            tag = TAG_MAPPING[self.type].get(tag, tag)

        if tag in self.file:
            field = self.file[tag]
            return field[0] if isinstance(field, list) else (str(field) if as_string else field)

    def set_tag(self, tag: str, value: object) -> None:
        if self.type in TAG_MAPPING:
            tag = TAG_MAPPING[self.type].get(tag, tag)

        self.file[tag] = value
        self.file.save()

    def publish_fields(self) -> tuple[str, str, str, int]:
        """Track, artist, album and duration in the order `LRCLib.publish` takes them."""
        title = self.get_tag("TITLE")
        artist = self.get_tag("ALBUMARTIST") or self.get_tag("ARTIST")
        if not (title and artist):
            raise ValueError(f"'{self.path}' is missing a title or artist tag!")

        return title, artist, self.get_tag("ALBUM") or title, round(self.length)

    def get_lyrics(self, language: str | None = None) -> str | None:
        if self.type in [FLAC, MP4]:
            return self.get_tag("LYRICS" if self.type == FLAC else "\xa9lyr")

        lyrics = None
        if language is not None:
            lyrics = self.get_tag(f"USLT::{language}", False) or self.get_tag(f"SYLT::{language}", False)

        else:

            # Take the first lyrics frame since no language was asked for
            lyrics = [
                value for tag, value in self.file.items()
                if tag[:4] in ["USLT", "SYLT"]
            ]
            lyrics = lyrics[0] if lyrics else None

        if isinstance(lyrics, SYLT):
            lyrics = format_synced_lyrics(sylt_to_lines(lyrics.text))  # type: ignore

        return str(lyrics) if lyrics else None

    def set_lyrics(
        self,
        state: Literal["synced", "unsynced"],
        lyrics: str | Sequence[SyncedLyricLine],
        language: str = "XXX"
    ) -> None:
        if self.type in [FLAC, MP4]:
            if not isinstance(lyrics, str):
                lyrics = format_synced_lyrics(lyrics)

            return self.set_tag("LYRICS" if self.type == FLAC else "\xa9lyr", lyrics)

        arguments: dict = {"lang": language}
        if state == "synced":
            if isinstance(lyrics, str):
                lyrics = [line for line in parse_synced_lyrics_strict(lyrics) if isinstance(line, SyncedLyricLine)]

            arguments |= {"text": lines_to_sylt(lyrics), "format": 2, "type": 1}

        else:
            arguments["text"] = lyrics if isinstance(lyrics, str) else "\n".join([line.lyric for line in lyrics])

        frame = {"unsynced": USLT, "synced": SYLT}[state](**arguments)
        self.set_tag(f"{type(frame).__name__}::{language}", frame)
