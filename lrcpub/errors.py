# Copyright (c) 2024 iiPython

# Exceptions
class LRCLibError(Exception):
    pass

class NotFound(LRCLibError):
    pass

class DecodeError(LRCLibError):
    pass

class TransportError(LRCLibError):
    pass

class InvalidChallenge(LRCLibError, ValueError):
    pass

class SolveCancelled(LRCLibError):
    pass

class SolveTimeout(SolveCancelled):
    pass

class PublishRejected(LRCLibError):
    def __init__(self, code: int, name: str, message: str) -> None:
        self.code, self.name, self.message = code, name, message
        super().__init__(f"{name} (code {code}): {message}")
