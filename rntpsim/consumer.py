"""The consumer application and its resequencing receive queue."""

from __future__ import annotations

import heapq
import itertools
import logging
import random
import struct
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from rntpsim.events import Event, Scheduler
from rntpsim.logs import LogName, LogSet

_log = logging.getLogger(__name__)

_UINT32_MAX = 0xFFFFFFFF
_NO_HOP = 0xFFFFFFFF
DEFAULT_QUEUE_SIZE = 2000
DEFAULT_INTEREST_LIFETIME = 10.0


@dataclass
class CapsuleInfo:
    """What a capsule Data name says about the capsule."""

    prefix: str
    data_id: int
    trans_hop_node_id: int = _NO_HOP
    node_ids: list[int] = field(default_factory=list)
    nonce: int = 0
    n_hops: int = 0


@dataclass
class InterestBroadcastInfo:
    """Fields of an InterestBroadcast message."""

    producer_prefix: str
    consumer_node_id: int
    trans_hop_node_id: int
    nonce: int
    hop_count: int = 0
    end: bool = False
    visited_node_ids: list[int] = field(default_factory=list)
    channel_qualities: list[float] = field(default_factory=list)


def _to_uint(text: str) -> int:
    text = text.strip()
    if not text.isdigit():
        raise ValueError(f"name component {text!r} is not a number")
    return int(text) & _UINT32_MAX


def parse_capsule_name(name: str) -> CapsuleInfo:
    """Read a capsule Data name ``/a/b/Capsule/<id>[/<nonce>/<hop>/<ids>/<hops>]``."""
    components = [c for c in name.split("/") if c]
    if len(components) < 4:
        raise ValueError(f"capsule name {name!r} has too few components")
    info = CapsuleInfo(prefix=f"/{components[0]}/{components[1]}", data_id=_to_uint(components[3]))
    if len(components) >= 7:
        if len(components) < 8:
            raise ValueError(f"capsule name {name!r} lacks the hop count")
        info.nonce = _to_uint(components[4])
        info.trans_hop_node_id = _to_uint(components[5])
        info.node_ids = [_to_uint(part) for part in components[6].split("-") if part]
        info.n_hops = _to_uint(components[7])
    return info


def interest_broadcast_name(info: InterestBroadcastInfo) -> str:
    """Name of the Data that carries an InterestBroadcast message."""
    end = "true" if info.end else "false"
    return (
        f"{info.producer_prefix}/InterestBroadcast/{info.hop_count}"
        f"/{info.consumer_node_id}/{info.trans_hop_node_id}/{info.nonce}/{end}"
    )


def interest_broadcast_content() -> bytes:
    """Content of an InterestBroadcast: zero visited nodes and zero channel qualities."""
    return struct.pack("<QQ", 0, 0)


def format_capsule_log(node_id: int, now: float, info: CapsuleInfo) -> str:
    """One log line for a received capsule, without the line end."""
    node_ids = "|".join(str(n) for n in info.node_ids)
    return (
        f"{node_id},{now:g},r,Data,{info.trans_hop_node_id},{info.prefix},"
        f"{info.data_id},{node_ids},{info.n_hops}"
    )


@dataclass
class _Element:
    info: CapsuleInfo
    arrival: float
    data: Any


class ResequenceQueue:
    """Puts capsules back in data-id order, giving up on gaps after a wait."""

    def __init__(
        self,
        size: int,
        max_wait_time: float,
        scheduler: Scheduler,
        on_release: Optional[Callable[[CapsuleInfo, Any], None]] = None,
    ) -> None:
        self.size = size
        self.max_wait_time = max_wait_time
        self.scheduler = scheduler
        self.on_release = on_release
        self.last_data_id = -1
        self._seq: list[tuple[int, int, _Element]] = []
        self._time: deque[_Element] = deque()
        self._order = itertools.count()
        self._timer: Optional[Event] = None

    def __len__(self) -> int:
        return len(self._seq)

    def _send(self, element_info: CapsuleInfo, data: Any) -> None:
        if self.on_release is not None:
            self.on_release(element_info, data)

    def _pop(self) -> _Element:
        return heapq.heappop(self._seq)[2]

    def receive(self, info: CapsuleInfo, data: Any = None) -> None:
        """Accept one capsule, releasing whatever is now in order."""
        if self.last_data_id == -1:
            self._send(info, data)
            self.last_data_id = info.data_id
            return
        if info.data_id == self.last_data_id + 1:
            self._send(info, data)
            self.last_data_id += 1
            return

        if len(self._seq) == self.size:
            oldest = self._pop()
            self._send(oldest.info, oldest.data)
            self.last_data_id = oldest.info.data_id

        now = self.scheduler.now
        element = _Element(info, now, data)
        heapq.heappush(self._seq, (info.data_id, next(self._order), element))
        self._time.append(element)

        self.release(now)

        if self._seq and self._time:
            if self._timer is not None and self._timer.is_running():
                self._timer.cancel()
            delay = max(0.0, self._time[0].arrival + self.max_wait_time - now)
            self._timer = self.scheduler.schedule(delay, self._auto_release)

    def _auto_release(self) -> None:
        self.release(self.scheduler.now)

    def release(self, now: float) -> None:
        """Release capsules that are in order or whose wait has run out."""
        while self._seq and self._seq[0][0] == self.last_data_id + 1:
            element = self._pop()
            self._send(element.info, element.data)
            self.last_data_id += 1

        if not self._seq:
            return

        newest_expired = -1
        while self._time and self._time[0].arrival <= now - self.max_wait_time:
            expired = self._time.popleft()
            newest_expired = max(newest_expired, expired.info.data_id)
        if newest_expired == -1:
            return

        while self._seq and self._seq[0][0] <= newest_expired:
            element = self._pop()
            self._send(element.info, element.data)
            self.last_data_id = element.info.data_id


class GenericConsumer:
    """Requests a producer's stream once and resequences the capsules that arrive."""

    def __init__(
        self,
        scheduler: Scheduler,
        interest_name: str,
        node_id: int,
        max_wait_time: float,
        *,
        send_interest: Optional[Callable[[str, int, float], None]] = None,
        send_data: Optional[Callable[[str, bytes], None]] = None,
        logs: Optional[LogSet] = None,
        terminate_after: Optional[float] = None,
        interest_lifetime: float = DEFAULT_INTEREST_LIFETIME,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.scheduler = scheduler
        self.interest_name = interest_name
        self.node_id = node_id
        self.max_wait_time = max_wait_time
        self.send_interest = send_interest
        self.send_data = send_data
        self.logs = logs
        self.terminate_after = terminate_after
        self.interest_lifetime = interest_lifetime
        self.queue_size = queue_size
        self.rng = rng if rng is not None else random.Random()
        self.queue: Optional[ResequenceQueue] = None
        self.n_received = 0
        self.resequenced: list[CapsuleInfo] = []

    def _write(self, name: LogName, line: str) -> None:
        if self.logs is not None:
            self.logs.stream(name).write(line + "\n")

    def start(self) -> int:
        """Send the one Interest, set up the queue; return the Interest nonce."""
        nonce = self.rng.randint(0, _UINT32_MAX)
        _log.info("==> nonce: %d", nonce)
        if self.send_interest is not None:
            self.send_interest(self.interest_name, nonce, self.interest_lifetime)

        self.queue = ResequenceQueue(
            self.queue_size, self.max_wait_time, self.scheduler, self._on_resequenced
        )
        self._write(
            LogName.CONSUMER,
            f"{self.node_id},{self.scheduler.now:g},s,Interest,{self.interest_name}",
        )
        if self.terminate_after is not None:
            self.scheduler.schedule(self.terminate_after, self.terminate_transport)
        return nonce

    def terminate_transport(self) -> str:
        """Broadcast the end of the transport; return the name sent."""
        info = InterestBroadcastInfo(
            producer_prefix=self.interest_name,
            consumer_node_id=self.node_id,
            trans_hop_node_id=self.node_id,
            nonce=self.rng.randint(1, _UINT32_MAX),
            hop_count=0,
            end=True,
        )
        name = interest_broadcast_name(info)
        if self.send_data is not None:
            self.send_data(name, interest_broadcast_content())
        _log.info(
            "send terminateTransport with prefix: %s, consumerNodeID: %d, time: %g",
            info.producer_prefix,
            info.consumer_node_id,
            self.scheduler.now,
        )
        return name

    def on_data(self, name: str, data: Any = None) -> CapsuleInfo:
        """Handle one arriving capsule Data."""
        if self.queue is None:
            raise RuntimeError("consumer received data before it was started")
        info = parse_capsule_name(name)
        now = self.scheduler.now
        self._write(LogName.CONSUMER, format_capsule_log(self.node_id, now, info))
        _log.info(
            "consumer recv Data with prefix %s, dataID: %d, time: %g",
            info.prefix,
            info.data_id,
            now,
        )
        self.queue.receive(info, data)
        self._write(LogName.CONSUMER_QUEUE_SIZE, f"{now:g},{len(self.queue)}")
        self.n_received += 1
        return info

    def _on_resequenced(self, info: CapsuleInfo, data: Any) -> None:
        self.resequenced.append(info)
        self._write(
            LogName.CONSUMER_RESEQ, format_capsule_log(self.node_id, self.scheduler.now, info)
        )