"""The set of trace log files a simulation run writes to."""

from __future__ import annotations

import shutil
from enum import Enum
from os import PathLike
from pathlib import Path
from typing import TextIO, Union


class LogName(Enum):
    """Every trace log, named by its file name."""

    MSG_INTEREST = "logMsgInterest"
    MSG_INTEREST_BROADCAST = "logMsgInterestBroadcast"
    MSG_CAPSULE = "logMsgCapsule"
    MSG_CAP_ACK = "logMsgCapAck"
    MSG_CQ_UPDATE = "logMsgCQUpdate"
    MSG_ECHO = "logMsgEcho"
    CONSUMER = "logConsumer"
    CONSUMER_QUEUE_SIZE = "logConsumerQueueSize"
    CONSUMER_RESEQ = "logConsumerReseq"
    PRODUCER = "logProducer"
    ROUTES = "logRoutes"
    CONGESTION_CONTROL = "logCongestionControl"
    BUFFER = "logBuffer"
    ENERGY = "logEnergy"
    OTHERS = "logOthers"


class LogSet:
    """Trace logs kept in one directory, opened and closed together."""

    def __init__(self, log_dir: Union[str, PathLike]) -> None:
        self.log_dir = Path(log_dir)
        self._streams: dict[LogName, TextIO] = {}

    @property
    def is_open(self) -> bool:
        return bool(self._streams)

    def path(self, name: Union[LogName, str]) -> Path:
        """Path of the file behind a log."""
        return self.log_dir / LogName(name).value

    def open(self) -> None:
        """Open every log, truncating what an earlier run left."""
        self.close()
        self.log_dir.mkdir(parents=True, exist_ok=True)
        try:
            for name in LogName:
                self._streams[name] = open(self.path(name), "w", encoding="utf-8")
        except OSError:
            self.close()
            raise

    def close(self) -> None:
        """Close every open log."""
        streams, self._streams = self._streams, {}
        for stream in streams.values():
            stream.close()

    def clean(self) -> None:
        """Remove everything named ``log*`` in the log directory."""
        if not self.log_dir.is_dir():
            return
        for entry in self.log_dir.glob("log*"):
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()

    def stream(self, name: Union[LogName, str]) -> TextIO:
        """The open file of one log."""
        key = LogName(name)
        try:
            return self._streams[key]
        except KeyError:
            raise ValueError(f"log {key.value} is not open") from None

    def __enter__(self) -> "LogSet":
        self.open()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()