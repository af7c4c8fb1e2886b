"""
EDF+ writer (and a small reader) for a single-lead trace.

Layout written by :func:`write_edf`::

    main header          256 bytes, fixed-width space-padded ASCII
    channel headers      256 bytes per channel, each field grouped across
                         all channels before the next field starts
    data records         n_records x [signal samples <i2][annotation TAL]

The second channel is the mandatory ``EDF Annotations`` channel; every
record carries one time-keeping TAL (``+<onset>\\x14\\x14``) null-padded to
the channel's byte width.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import numpy as np

from .config import RecordingInfo

DIG_MIN = -32768
DIG_MAX = 32767
PHYS_MARGIN = 0.1
MAIN_HEADER_BYTES = 256
CHANNEL_HEADER_BYTES = 256
ANNOTATION_LABEL = "EDF Annotations"
TAL_SEPARATOR = b"\x14"

MAIN_FIELDS: Tuple[Tuple[str, int], ...] = (
    ("version", 8),
    ("patient_id", 80),
    ("recording_id", 80),
    ("start_date", 8),
    ("start_time", 8),
    ("header_bytes", 8),
    ("reserved", 44),
    ("n_records", 8),
    ("record_duration", 8),
    ("n_channels", 4),
)

CHANNEL_FIELDS: Tuple[Tuple[str, int], ...] = (
    ("label", 16),
    ("transducer", 80),
    ("physical_dimension", 8),
    ("physical_min", 8),
    ("physical_max", 8),
    ("digital_min", 8),
    ("digital_max", 8),
    ("prefiltering", 80),
    ("samples_per_record", 8),
    ("reserved", 32),
)

_MONTHS = ("JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC")


def edf_field(value: str, width: int) -> bytes:
    """Space-pad (or truncate) ``value`` to exactly ``width`` ASCII bytes."""

    raw = value.encode("ascii", errors="replace")
    return raw[:width].ljust(width, b" ")


def format_edf_number(value: float, width: int = 8) -> str:
    for precision in range(6, -1, -1):
        text = f"{value:.{precision}f}"
        if len(text) <= width:
            return text
    return f"{value:.0f}"


def edf_startdate(start: datetime) -> str:
    """EDF+ ``Startdate dd-MMM-yyyy`` token for the recording id field."""

    return f"Startdate {start.day:02d}-{_MONTHS[start.month - 1]}-{start.year:04d}"


def physical_range(signal: Sequence[float], margin: float = PHYS_MARGIN) -> Tuple[float, float]:
    if len(signal) == 0:
        raise ValueError("Cannot encode an empty signal")
    values = np.asarray(signal, dtype=float)
    return float(values.min()) - margin, float(values.max()) + margin


def physical_to_digital(values, phys_min: float, phys_max: float) -> np.ndarray:
    """Linear physical-to-digital mapping, rounded half away from zero and clamped."""

    values = np.asarray(values, dtype=float)
    scaled = DIG_MIN + (values - phys_min) / (phys_max - phys_min) * (DIG_MAX - DIG_MIN)
    rounded = np.sign(scaled) * np.floor(np.abs(scaled) + 0.5)
    return np.clip(rounded, DIG_MIN, DIG_MAX).astype("<i2")


def digital_to_physical(
    values,
    phys_min: float,
    phys_max: float,
    dig_min: int = DIG_MIN,
    dig_max: int = DIG_MAX,
) -> np.ndarray:
    values = np.asarray(values, dtype=float)
    return phys_min + (values - dig_min) / (dig_max - dig_min) * (phys_max - phys_min)


def annotation_block(onset_seconds: int, width: int) -> bytes:
    tal = f"+{onset_seconds}".encode("ascii") + TAL_SEPARATOR + TAL_SEPARATOR
    return tal[:width].ljust(width, b"\x00")


def build_header(
    info: RecordingInfo,
    n_records: int,
    phys_min: float,
    phys_max: float,
) -> bytes:
    n_channels = 2
    main = {
        "version": "0",
        "patient_id": info.patient_id,
        "recording_id": info.recording_id,
        "start_date": info.start.strftime("%d.%m.%y"),
        "start_time": info.start.strftime("%H.%M.%S"),
        "header_bytes": str(MAIN_HEADER_BYTES + n_channels * CHANNEL_HEADER_BYTES),
        "reserved": "EDF+C",
        "n_records": str(n_records),
        "record_duration": str(info.record_duration),
        "n_channels": str(n_channels),
    }
    channels: List[Dict[str, str]] = [
        {
            "label": info.label,
            "transducer": info.transducer,
            "physical_dimension": info.physical_dimension,
            "physical_min": format_edf_number(phys_min),
            "physical_max": format_edf_number(phys_max),
            "digital_min": str(DIG_MIN),
            "digital_max": str(DIG_MAX),
            "prefiltering": info.prefiltering,
            "samples_per_record": str(info.samples_per_record),
            "reserved": "",
        },
        {
            "label": ANNOTATION_LABEL,
            "transducer": "",
            "physical_dimension": "",
            "physical_min": "-1",
            "physical_max": "1",
            "digital_min": str(DIG_MIN),
            "digital_max": str(DIG_MAX),
            "prefiltering": "",
            "samples_per_record": str(info.annotation_samples),
            "reserved": "",
        },
    ]

    chunks = [edf_field(main[name], width) for name, width in MAIN_FIELDS]
    for name, width in CHANNEL_FIELDS:
        chunks.extend(edf_field(channel[name], width) for channel in channels)
    return b"".join(chunks)


def write_edf(destination: Path, signal: Sequence[float], info: RecordingInfo | None = None) -> int:
    """
    Encode ``signal`` (millivolts) as EDF+ at ``destination``.  The final
    record is zero-padded in physical units.  Returns the record count.
    """

    info = info or RecordingInfo()
    samples_per_record = info.samples_per_record
    n_records = math.ceil(len(signal) / samples_per_record)
    phys_min, phys_max = physical_range(signal)
    header = build_header(info, n_records, phys_min, phys_max)

    padded = np.zeros(n_records * samples_per_record, dtype=float)
    padded[: len(signal)] = np.asarray(signal, dtype=float)
    digital = physical_to_digital(padded, phys_min, phys_max)

    with Path(destination).open("wb") as fh:
        fh.write(header)
        for rec in range(n_records):
            block = digital[rec * samples_per_record : (rec + 1) * samples_per_record]
            fh.write(block.tobytes())
            fh.write(annotation_block(rec * info.record_duration, info.annotation_bytes))
    return n_records


@dataclass
class ChannelHeader:
    label: str
    transducer: str
    physical_dimension: str
    physical_min: float
    physical_max: float
    digital_min: int
    digital_max: int
    prefiltering: str
    samples_per_record: int
    reserved: str = ""

    @property
    def is_annotation(self) -> bool:
        return self.label == ANNOTATION_LABEL


@dataclass
class EDFFile:
    header: Dict[str, str]
    channels: List[ChannelHeader]
    samples: Dict[str, np.ndarray] = field(default_factory=dict)
    annotations: List[bytes] = field(default_factory=list)

    @property
    def n_records(self) -> int:
        return int(self.header["n_records"])

    def physical(self, label: str) -> np.ndarray:
        channel = next(ch for ch in self.channels if ch.label == label)
        return digital_to_physical(
            self.samples[label],
            channel.physical_min,
            channel.physical_max,
            channel.digital_min,
            channel.digital_max,
        )

    def onsets(self) -> List[str]:
        """First TAL onset of each record, e.g. ``"+0"``."""

        return [block.split(TAL_SEPARATOR, 1)[0].decode("ascii") for block in self.annotations]


def read_edf(path: Path) -> EDFFile:
    blob = Path(path).read_bytes()
    offset = 0
    header: Dict[str, str] = {}
    for name, width in MAIN_FIELDS:
        header[name] = blob[offset : offset + width].decode("ascii").strip()
        offset += width

    n_channels = int(header["n_channels"])
    raw: Dict[str, List[str]] = {}
    for name, width in CHANNEL_FIELDS:
        raw[name] = []
        for _ in range(n_channels):
            raw[name].append(blob[offset : offset + width].decode("ascii").strip())
            offset += width

    channels = [
        ChannelHeader(
            label=raw["label"][idx],
            transducer=raw["transducer"][idx],
            physical_dimension=raw["physical_dimension"][idx],
            physical_min=float(raw["physical_min"][idx]),
            physical_max=float(raw["physical_max"][idx]),
            digital_min=int(raw["digital_min"][idx]),
            digital_max=int(raw["digital_max"][idx]),
            prefiltering=raw["prefiltering"][idx],
            samples_per_record=int(raw["samples_per_record"][idx]),
            reserved=raw["reserved"][idx],
        )
        for idx in range(n_channels)
    ]

    offset = int(header["header_bytes"])
    chunks: Dict[str, List[np.ndarray]] = {ch.label: [] for ch in channels if not ch.is_annotation}
    annotations: List[bytes] = []
    for _ in range(int(header["n_records"])):
        for channel in channels:
            size = channel.samples_per_record * 2
            if offset + size > len(blob):
                raise ValueError(f"Truncated data record at byte {offset}")
            if channel.is_annotation:
                annotations.append(blob[offset : offset + size])
            else:
                chunks[channel.label].append(
                    np.frombuffer(blob, dtype="<i2", count=channel.samples_per_record, offset=offset)
                )
            offset += size

    samples = {
        label: np.concatenate(parts) if parts else np.zeros(0, dtype="<i2") for label, parts in chunks.items()
    }
    return EDFFile(header=header, channels=channels, samples=samples, annotations=annotations)
