from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

DEFAULT_PAGE_HEIGHT = 792.0
MEDIABOX_MAX_DEPTH = 10

# Calibration: 1 mV = 10 mm at 2.8346 pt/mm.
CAL_PT_PER_MV = 28.346
SAMPLE_RATE = 300


@dataclass(frozen=True)
class LayoutConfig:
    """Thresholds tuned to the single-lead, four-row print layout."""

    row_count: int = 4
    grid_width_min: float = 0.35
    grid_width_max: float = 0.45
    baseline_min_segments: int = 4
    horizontal_tol: float = 0.01
    baseline_min_span: float = 500.0
    visible_y_limit: float = 760.0
    trace_min_segments: int = 40
    point_tol: float = 1e-3
    row_max_distance: float = 80.0
    dedup_x_tol: float = 0.01
    cal_pt_per_mv: float = CAL_PT_PER_MV

    def width_in_band(self, width: float) -> bool:
        return self.grid_width_min < width < self.grid_width_max


@dataclass(frozen=True)
class RecordingInfo:
    """Identity and channel fields written into the EDF+ header."""

    patient_id: str = "X M 04-MAY-1970 Joel_Henderson"
    recording_id: str = "Startdate 13-FEB-2026 X X KardiaMobile_1L"
    start: datetime = datetime(2026, 2, 13, 22, 42, 0)
    label: str = "EKG I"
    transducer: str = "KardiaMobile 1L electrode"
    physical_dimension: str = "mV"
    prefiltering: str = "Enhanced Filter, 50Hz mains"
    sample_rate: int = SAMPLE_RATE
    record_duration: int = 1
    # 57 two-byte samples per record, as pyedflib writes it.
    annotation_samples: int = 57

    @property
    def samples_per_record(self) -> int:
        return self.sample_rate * self.record_duration

    @property
    def annotation_bytes(self) -> int:
        return self.annotation_samples * 2
