from datetime import timedelta
from pathlib import Path

import pytest
from mutagen.flac import FLAC
from mutagen.mp3 import MP3
from mutagen.mp4 import MP4
from mutagen.id3._frames import SYLT, USLT

from lrcpub.audio import AudioFile, UnsupportedSuffix, lines_to_sylt, sylt_to_lines
from lrcpub.synced import SyncedLyricLine


class FakeTags(dict):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.saved = 0

    def save(self):
        self.saved += 1


def make_audio(file_type, tags, length=201.6, name="song.flac"):
    audio = AudioFile.__new__(AudioFile)
    audio.path = Path(name)
    audio.type = file_type
    audio.file = FakeTags(tags)
    audio.length = length
    return audio


def test_unsupported_suffix():
    with pytest.raises(UnsupportedSuffix):
        AudioFile(Path("song.ogg"))


def test_sylt_to_lines():
    lines = sylt_to_lines([("hello", 1500), ("world", 65250)])
    assert lines[0] == SyncedLyricLine(offset=timedelta(seconds=1.5), text="hello", index=0)
    assert lines[1].offset == timedelta(seconds=65.25)
    assert lines[1].index == 1


def test_lines_to_sylt_drops_delimiter_space():
    lines = [SyncedLyricLine(offset=timedelta(seconds=1.5), text=" hello")]
    assert lines_to_sylt(lines) == [("hello", 1500)]


def test_publish_fields_falls_back_to_title_for_album():
    audio = make_audio(FLAC, {"TITLE": ["Song"], "ARTIST": ["Band"]})
    assert audio.publish_fields() == ("Song", "Band", "Song", 202)


def test_publish_fields_prefers_album_artist():
    audio = make_audio(FLAC, {"TITLE": ["Song"], "ARTIST": ["Band"], "ALBUMARTIST": ["Group"], "ALBUM": ["LP"]})
    assert audio.publish_fields() == ("Song", "Group", "LP", 202)


def test_publish_fields_requires_title():
    with pytest.raises(ValueError):
        make_audio(FLAC, {"ARTIST": ["Band"]}).publish_fields()


def test_flac_lyrics_are_formatted_text():
    audio = make_audio(FLAC, {})
    audio.set_lyrics("synced", [SyncedLyricLine(offset=timedelta(seconds=65.25), text="la la")])
    assert audio.file["LYRICS"] == "[1:05.25] la la"
    assert audio.file.saved == 1
    assert audio.get_lyrics() == "[1:05.25] la la"


def test_mp3_synced_lyrics_round_trip():
    audio = make_audio(MP3, {}, name="song.mp3")
    audio.set_lyrics("synced", "[0:01.50] hello\nbroken\n[1:00.00] world")

    frame = audio.file["SYLT::XXX"]
    assert isinstance(frame, SYLT)
    assert frame.text == [("hello", 1500), ("world", 60000)]
    assert audio.get_lyrics() == "[0:01.50] hello\n[1:00.00] world"


def test_mp4_lyrics_use_lyr_atom():
    audio = make_audio(MP4, {}, name="song.m4a")
    audio.set_lyrics("synced", [SyncedLyricLine(offset=timedelta(seconds=1.5), text="hello")])
    assert audio.file["\xa9lyr"] == "[0:01.50] hello"
    assert audio.get_lyrics() == "[0:01.50] hello"


def test_get_lyrics_by_language():
    audio = make_audio(MP3, {
        "USLT::eng": USLT(lang="eng", text="plain words"),
        "SYLT::jpn": SYLT(lang="jpn", text=[("a", 1000)], format=2, type=1),
    }, name="song.mp3")

    assert audio.get_lyrics("eng") == "plain words"
    assert audio.get_lyrics("jpn") == "[0:01.00] a"
    assert audio.get_lyrics("deu") is None


def test_mp3_unsynced_lyrics_from_text():
    audio = make_audio(MP3, {}, name="song.mp3")
    audio.set_lyrics("unsynced", "hello\nworld", language="eng")

    frame = audio.file["USLT::eng"]
    assert isinstance(frame, USLT)
    assert frame.text == "hello\nworld"
    assert audio.get_lyrics("eng") == "hello\nworld"


def test_mp3_unsynced_lyrics_from_lines():
    audio = make_audio(MP3, {}, name="song.mp3")
    lines = [
        SyncedLyricLine(offset=timedelta(seconds=1), text=" hello", index=0),
        SyncedLyricLine(offset=timedelta(seconds=2), text="world", index=1),
    ]
    audio.set_lyrics("unsynced", lines)
    assert audio.file["USLT::XXX"].text == "hello\nworld"
