"""
Recover a single-lead ECG trace from a vector PDF printout and write it as EDF+.
"""

from .config import CAL_PT_PER_MV, DEFAULT_PAGE_HEIGHT, SAMPLE_RATE, LayoutConfig, RecordingInfo
from .content import ContentInterpreter, cmyk_to_rgb, extract_paths, load_page_paths, page_height
from .edf import EDFFile, digital_to_physical, physical_to_digital, read_edf, write_edf
from .entities import DrawingPath, GraphicsState, Point
from .errors import (
    BaselinesNotFound,
    ContentStreamError,
    ECGPDFError,
    IncompleteRowSet,
    MalformedOperand,
    PageNotFound,
)
from .geometry import apply, compose
from .logging import RowReportLogger, log_paths
from .waveform import (
    concatenate_to_signal,
    dedupe_x,
    extract_baselines,
    extract_waveform_rows,
    points_to_voltage,
)

__all__ = [
    "CAL_PT_PER_MV",
    "DEFAULT_PAGE_HEIGHT",
    "SAMPLE_RATE",
    "LayoutConfig",
    "RecordingInfo",
    "ContentInterpreter",
    "cmyk_to_rgb",
    "extract_paths",
    "load_page_paths",
    "page_height",
    "EDFFile",
    "digital_to_physical",
    "physical_to_digital",
    "read_edf",
    "write_edf",
    "DrawingPath",
    "GraphicsState",
    "Point",
    "BaselinesNotFound",
    "ContentStreamError",
    "ECGPDFError",
    "IncompleteRowSet",
    "MalformedOperand",
    "PageNotFound",
    "apply",
    "compose",
    "RowReportLogger",
    "log_paths",
    "concatenate_to_signal",
    "dedupe_x",
    "extract_baselines",
    "extract_waveform_rows",
    "points_to_voltage",
]
