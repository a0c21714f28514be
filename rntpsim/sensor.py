"""The sensor application that streams capsules to a requesting consumer."""

from __future__ import annotations

import logging
import math
import random
from typing import Callable, Optional

from rntpsim.events import Scheduler
from rntpsim.logs import LogName, LogSet

_log = logging.getLogger(__name__)

_LOW_MASK = 0xFFFFFFFF
CAPSULE_CONTENT_SIZE = 1024
_JITTER_NS = 1e3


def capsule_name(sensor_name: str, data_id: int) -> str:
    """Name of the capsule with a given data id."""
    return f"{sensor_name}/Capsule/{data_id}"


def pack_consumer_tag(consumer_node_id: int) -> int:
    """Consumer-id tag value: the node id in the high 32 bits, all ones below."""
    return ((consumer_node_id & _LOW_MASK) << 32) | _LOW_MASK


def unpack_consumer_tag(tag: Optional[int]) -> int:
    """Consumer node id from a tag value; all ones when there is no tag."""
    if tag is None:
        return _LOW_MASK
    return (tag >> 32) & _LOW_MASK


class SensorApp:
    """Answers an Interest by sending capsules at a fixed rate until its stop time."""

    def __init__(
        self,
        scheduler: Scheduler,
        sensor_name: str,
        node_id: int,
        freq: float,
        *,
        send_data: Optional[Callable[[str, bytes, int, int], None]] = None,
        stop_time: float = math.inf,
        logs: Optional[LogSet] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if freq <= 0:
            raise ValueError(f"sending frequency must be positive, got {freq}")
        self.scheduler = scheduler
        self.sensor_name = sensor_name
        self.node_id = node_id
        self.piat = 1.0 / freq
        self.send_data = send_data
        self.stop_time = stop_time
        self.logs = logs
        self.rng = rng if rng is not None else random.Random()
        self.data_id = 0
        self.n_sent = 0
        self.sent_times: dict[int, float] = {}

    def _write(self, line: str) -> None:
        if self.logs is not None:
            self.logs.stream(LogName.PRODUCER).write(line + "\n")

    def on_interest(self, consumer_tag: Optional[int]) -> int:
        """Start streaming to the consumer named by the tag; return its node id."""
        consumer_node_id = unpack_consumer_tag(consumer_tag)
        self._write(f"{self.node_id},{self.scheduler.now:g},r,Interest,{consumer_node_id}")
        self._send(consumer_node_id)
        return consumer_node_id

    def _send(self, consumer_node_id: int) -> None:
        now = self.scheduler.now
        name = capsule_name(self.sensor_name, self.data_id)
        if self.send_data is not None:
            self.send_data(name, bytes(CAPSULE_CONTENT_SIZE), pack_consumer_tag(consumer_node_id), 0)

        self.sent_times[self.data_id] = now
        self._write(f"{self.node_id},{now:g},s,Data,{self.data_id},{consumer_node_id}")
        _log.info("send data %s, time: %g", name, now)
        self.data_id += 1
        self.n_sent += 1

        if now > self.stop_time:
            return

        jitter = self.rng.uniform(-_JITTER_NS, _JITTER_NS) * 1e-9
        self.scheduler.schedule(max(0.0, self.piat + jitter), self._send, consumer_node_id)