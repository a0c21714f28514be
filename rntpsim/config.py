"""Simulation settings read from ``NAME = value`` configuration files."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from os import PathLike
from typing import Callable, Iterable, Union

STANDARD_MODES: tuple[tuple[str, str], ...] = (
    ("802.11a", "OfdmRate6Mbps"),
    ("802.11a", "OfdmRate9Mbps"),
    ("802.11a", "OfdmRate12Mbps"),
    ("802.11a", "OfdmRate18Mbps"),
    ("802.11a", "OfdmRate24Mbps"),
    ("802.11a", "OfdmRate36Mbps"),
    ("802.11a", "OfdmRate48Mbps"),
    ("802.11a", "OfdmRate54Mbps"),
    ("802.11b", "DsssRate1Mbps"),
    ("802.11b", "DsssRate2Mbps"),
    ("802.11b", "DsssRate5_5Mbps"),
    ("802.11b", "DsssRate11Mbps"),
    ("802.11g", "ErpOfdmRate6Mbps"),
    ("802.11g", "ErpOfdmRate9Mbps"),
    ("802.11g", "ErpOfdmRate12Mbps"),
    ("802.11g", "ErpOfdmRate18Mbps"),
    ("802.11g", "ErpOfdmRate24Mbps"),
    ("802.11g", "ErpOfdmRate36Mbps"),
    ("802.11g", "ErpOfdmRate48Mbps"),
    ("802.11g", "ErpOfdmRate54Mbps"),
    *(("802.11n", f"HtMcs{i}") for i in range(8)),
    *(("802.11ac", f"VhtMcs{i}") for i in range(10)),
    *(("802.11ax", f"HeMcs{i}") for i in range(12)),
)


class WifiStandard(Enum):
    """Physical-layer standards a simulation can run on."""

    UNSPECIFIED = "unspecified"
    IEEE_80211A = "802.11a"
    IEEE_80211B = "802.11b"
    IEEE_80211G = "802.11g"
    IEEE_80211N_2_4GHZ = "802.11n-2.4GHz"
    IEEE_80211AC = "802.11ac"
    IEEE_80211AX_2_4GHZ = "802.11ax-2.4GHz"


_STANDARDS = {
    "802.11a": WifiStandard.IEEE_80211A,
    "802.11b": WifiStandard.IEEE_80211B,
    "802.11g": WifiStandard.IEEE_80211G,
    "802.11n": WifiStandard.IEEE_80211N_2_4GHZ,
    "802.11ac": WifiStandard.IEEE_80211AC,
    "802.11ax": WifiStandard.IEEE_80211AX_2_4GHZ,
}

_FREQUENCIES = {
    "802.11a": 5.0e9,
    "802.11b": 2.4e9,
    "802.11g": 2.4e9,
    "802.11n": 2.4e9,
    "802.11ax": 2.4e9,
    "802.11ac": 5.0e9,
}

_SETTING = re.compile(r"\s*([A-Za-z0-9_]+)\s*=\s*(\S*)\s*")
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


def _parse_int(text: str) -> int:
    """Read a leading integer the lenient way: no digits gives 0."""
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def _parse_uint32(text: str) -> int:
    return _parse_int(text) & 0xFFFFFFFF


def _parse_float(text: str) -> float:
    """Read a leading real number the lenient way: no number gives 0.0."""
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else 0.0


def _parse_bool(text: str) -> bool:
    return text == "true"


@dataclass
class RntpConfig:
    """All tunable settings of a simulation run."""

    log_dir: str = "/tmp/"
    standard: str = "802.11a"
    data_mode: str = "OfdmRate54Mbps"
    tx_power_start_in_dbm: float = 20.0
    tx_power_end_in_dbm: float = 20.0
    rx_gain_in_dbm: float = 0.0
    n_nodes: int = 64
    grid_width_in_nodes: int = 8
    grid_delta_x: float = 10.0
    grid_delta_y: float = 10.0
    consumer_node_id: int = 0
    producer_node_id: int = 63
    noise: bool = True
    node_ids_under_noises: str = "4,7,9"
    noise_start_sec: float = 5.0
    noise_stop_sec: float = 15.0
    noise_mean: float = 10.0
    noise_var: float = 5.0
    sim_time_in_secs: float = 20.0
    extension_time_in_secs: float = 10.0
    capsule_per_hop_timeout: float = 1.0
    capsule_retrying_times: int = 3
    congestion_control_threshold: int = 16
    congestion_control_init_win: int = 1
    throughput_queue_size_in_secs: int = 2
    piat_estimation_confident_ratio: float = 0.9999
    interest_send_times: int = 3
    echo_period_in_secs: float = 1.0
    msg_timeout_in_secs: float = 3.5
    interest_contention_time_in_secs: float = 0.005
    consumer_max_wait_time_in_secs: float = 5.0
    quality_alpha: float = 1.0 / 8.0
    producer_freq: int = 10
    consumer_need_to_terminate_transport: bool = False
    consumer_terminate_transport_delay_in_secs: float = 100.0
    energy_battery_capacity_in_mah: float = 3000.0
    energy_battery_voltage_in_v: float = 1.5
    trace_battery: bool = False

    @classmethod
    def from_file(cls, path: Union[str, PathLike]) -> "RntpConfig":
        """Build a configuration from defaults overridden by a settings file."""
        config = cls()
        with open(path, encoding="utf-8", errors="replace") as stream:
            config.update_from_lines(stream)
        return config

    def update_from_lines(self, lines: Iterable[str]) -> None:
        """Apply every ``NAME = value`` line; other lines and unknown names are ignored."""
        for line in lines:
            match = _SETTING.fullmatch(line)
            if match is None:
                continue
            key, value = match.group(1), match.group(2)
            entry = _KEYS.get(key)
            if entry is None:
                continue
            attribute, parse = entry
            setattr(self, attribute, parse(value))

    def frequency(self) -> float:
        """Carrier frequency in hertz for the configured standard."""
        try:
            return _FREQUENCIES[self.standard]
        except KeyError:
            raise ValueError(f"unknown Wi-Fi standard {self.standard!r}") from None

    def phy_standard(self) -> WifiStandard:
        """Physical-layer standard named by the configuration."""
        return _STANDARDS.get(self.standard, WifiStandard.UNSPECIFIED)


_KEYS: dict[str, tuple[str, Callable[[str], object]]] = {
    "LOG_DIR": ("log_dir", str),
    "STANDARD": ("standard", str),
    "DATA_MODE": ("data_mode", str),
    "TX_POWER_START_IN_DBM": ("tx_power_start_in_dbm", _parse_float),
    "TX_POWER_END_IN_DBM": ("tx_power_end_in_dbm", _parse_float),
    "RX_GAIN_IN_DBM": ("rx_gain_in_dbm", _parse_float),
    "N_NODES": ("n_nodes", _parse_uint32),
    "GRID_WIDTH_IN_NODES": ("grid_width_in_nodes", _parse_uint32),
    "GRID_DELTA_X": ("grid_delta_x", _parse_float),
    "GRID_DELTA_Y": ("grid_delta_y", _parse_float),
    "CONSUMER_NODE_ID": ("consumer_node_id", _parse_uint32),
    "PRODUCER_NODE_ID": ("producer_node_id", _parse_uint32),
    "NOISE": ("noise", _parse_bool),
    "NODE_IDS_UNDER_NOISES": ("node_ids_under_noises", str),
    "NOISE_START_SEC": ("noise_start_sec", _parse_float),
    "NOISE_STOP_SEC": ("noise_stop_sec", _parse_float),
    "THROUGHPUT_QUEUE_SIZE_IN_SECS": ("throughput_queue_size_in_secs", _parse_uint32),
    "PIAT_ESTIMATION_CONFIDENT_RATIO": ("piat_estimation_confident_ratio", _parse_float),
    "NOISE_MEAN": ("noise_mean", _parse_float),
    "NOISE_VAR": ("noise_var", _parse_float),
    "SIM_TIME_IN_SECS": ("sim_time_in_secs", _parse_float),
    "EXTENSION_TIME_IN_SECS": ("extension_time_in_secs", _parse_float),
    "CAPSULE_PER_HOP_TIMEOUT": ("capsule_per_hop_timeout", _parse_float),
    "CAPSULE_RETRYING_TIMES": ("capsule_retrying_times", _parse_uint32),
    "CONGESTION_CONTROL_THRESHOLD": ("congestion_control_threshold", _parse_uint32),
    "INTEREST_SEND_TIMES": ("interest_send_times", _parse_uint32),
    "CONGESTION_CONTROL_INIT_WIN": ("congestion_control_init_win", _parse_uint32),
    "ECHO_PERIOD_IN_SECS": ("echo_period_in_secs", _parse_float),
    "MSG_TIMEOUT_IN_SECS": ("msg_timeout_in_secs", _parse_float),
    "INTEREST_CONTENTION_TIME_IN_SECS": ("interest_contention_time_in_secs", _parse_float),
    "QUALITY_ALPHA": ("quality_alpha", _parse_float),
    "CONSUMER_MAX_WAIT_TIME_IN_SECS": ("consumer_max_wait_time_in_secs", _parse_float),
    "PRODUCER_FREQ": ("producer_freq", _parse_uint32),
    "ENEGERY_BATTERY_CAPACITY_IN_MAH": ("energy_battery_capacity_in_mah", _parse_float),
    "ENEGERY_BATTERY_VOLTAGE_IN_V": ("energy_battery_voltage_in_v", _parse_float),
    "TRACE_BATTERY": ("trace_battery", _parse_bool),
    "CONSUMER_NEED_TO_TERMINATE_TRANSPORT": ("consumer_need_to_terminate_transport", _parse_bool),
    "CONSUMER_TERMINATE_TRANSPORT_DELAY_IN_SECS": (
        "consumer_terminate_transport_delay_in_secs",
        _parse_float,
    ),
}