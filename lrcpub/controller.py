# Copyright (c) 2024 iiPython

# Modules
import typing
import logging
import threading

import requests
from pydantic import BaseModel, ValidationError

from . import __version__
from .challenge import Challenge, solve_token
from .errors import DecodeError, NotFound, PublishRejected, TransportError
from .synced import SyncedLyricLine, format_synced_lyrics, parse_synced_lyrics

# Initialization
logger = logging.getLogger(__name__)

ModelType = typing.TypeVar("ModelType", bound = BaseModel)

# Models
class Track(BaseModel):
    id:             int
    trackName:      str
    artistName:     str
    albumName:      str
    duration:       int | float
    instrumental:   bool
    plainLyrics:    str | None
    syncedLyrics:   str | None

    def synced_lines(self) -> list[SyncedLyricLine]:
        return parse_synced_lyrics(self.syncedLyrics) if self.syncedLyrics else []

class PublishFailure(BaseModel):
    code:       int
    name:       str
    message:    str

# API Controller
class LRCLib:
    def __init__(
        self,
        api_url: str = "https://lrclib.net/api/",
        user_agent: str | None = None,
        timeout: float | None = 30,
        workers: int = 1
    ) -> None:
        self.session = requests.Session()
        self.api_url = f"{api_url.rstrip('/')}/"
        self.user_agent = user_agent or f"lrcpub v{__version__}"
        self.timeout = timeout
        self.workers = workers

    def _request(self, method: str, endpoint: str, headers: dict = {}, **kwargs) -> requests.Response:
        headers = {
            "User-Agent": self.user_agent,
            **headers
        }
        logger.debug("%s %s%s", method.upper(), self.api_url, endpoint)
        try:
            return getattr(self.session, method)(
                self.api_url + endpoint,
                headers = headers,
                timeout = self.timeout,
                **kwargs
            )

        except requests.RequestException as e:
            raise TransportError(f"Request to '{endpoint}' failed: {e}") from e

    @staticmethod
    def _json(response: requests.Response) -> typing.Any:
        try:
            return response.json()

        except ValueError as e:
            raise DecodeError(f"Response from '{response.url}' is not valid JSON!") from e

    @classmethod
    def _decode(cls, response: requests.Response, model: type[ModelType]) -> ModelType:
        if response.status_code == 404:
            raise NotFound(f"No record found at '{response.url}'.")

        try:
            return model.model_validate(cls._json(response))

        except ValidationError as e:
            raise DecodeError(f"Response from '{response.url}' does not match {model.__name__}!") from e

    def get(
        self,
        track: str,
        artist: str,
        album: str,
        duration: int | float,
        cached: bool = False
    ) -> Track:
        return self._decode(self._request("get", "get-cached" if cached else "get", params = {
            "track_name": track,
            "artist_name": artist,
            "album_name": album,
            "duration": int(duration)
        }), Track)

    def get_by_id(self, record_id: int) -> Track:
        return self._decode(self._request("get", f"get/{record_id}"), Track)

    def search(
        self,
        query: typing.Optional[str] = None,
        track: typing.Optional[str] = None,
        artist: typing.Optional[str] = None,
        album: typing.Optional[str] = None
    ) -> list[Track]:
        if not (query or track):
            raise ValueError("Either query or track must be specified! Please see https://lrclib.net/docs.")

        response = self._request("get", "search", params = {
            "q": query,
            "track_name": track,
            "artist_name": artist,
            "album_name": album
        })
        if response.status_code == 404:
            raise NotFound("Search returned no results.")

        records = self._json(response)
        if not isinstance(records, list):
            raise DecodeError("Search response is not a list of records!")

        try:
            return [Track.model_validate(record) for record in records]

        except ValidationError as e:
            raise DecodeError("Search response does not match Track!") from e

    def fetch_challenge(self) -> Challenge:
        return self._decode(self._request("post", "request-challenge"), Challenge)

    def request_challenge(
        self,
        timeout: float | None = None,
        cancel: threading.Event | None = None
    ) -> str:
        challenge = self.fetch_challenge()
        return solve_token(
            challenge.prefix,
            challenge.target,
            workers = self.workers,
            timeout = timeout,
            cancel = cancel
        )

    def publish(
        self,
        track: str,
        artist: str,
        album: str,
        duration: int | float,
        plain_lyrics: typing.Optional[str] = "",
        synced_lyrics: typing.Optional[str | typing.Sequence[SyncedLyricLine]] = "",
        token: typing.Optional[str] = None,
        solve_timeout: float | None = None,
        cancel: threading.Event | None = None
    ) -> None:
        if synced_lyrics is not None and not isinstance(synced_lyrics, str):
            synced_lyrics = format_synced_lyrics(synced_lyrics)

        # Tokens are single use, so fetch a fresh one for every publish
        if token is None:
            token = self.request_challenge(solve_timeout, cancel)

        response = self._request(
            "post",
            "publish",
            headers = {"X-Publish-Token": token},
            json = {
                "trackName": track,
                "artistName": artist,
                "albumName": album,
                "duration": duration,
                "plainLyrics": plain_lyrics,
                "syncedLyrics": synced_lyrics
            }
        )
        if response.status_code == 201:
            return

        try:
            failure = PublishFailure.model_validate(self._json(response))

        except ValidationError as e:
            raise DecodeError(f"Publish failed with status {response.status_code} and an unreadable body!") from e

        logger.warning("publish of '%s' by '%s' rejected: %s (code %d)", track, artist, failure.name, failure.code)
        raise PublishRejected(failure.code, failure.name, failure.message)
