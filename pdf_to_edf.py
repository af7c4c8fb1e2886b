#!/usr/bin/env python3
"""
Convert a vector ECG printout (single lead spread over several rows) into an
EDF+ file.

The page content stream is replayed to recover the stroked line work, the
row baselines are located from the faint black grid rulings, and the dense
trace polylines are assigned to rows, calibrated to millivolts and joined in
time order.  Example:

    python pdf_to_edf.py kardiamobile-1l-ecg.pdf -o kardiamobile-1l-ecg.edf

Layout thresholds are tuned to the KardiaMobile 1L report; see
``ecgpdf.config.LayoutConfig``.
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from datetime import datetime
from pathlib import Path
from typing import Sequence

from ecgpdf.config import CAL_PT_PER_MV, SAMPLE_RATE, LayoutConfig, RecordingInfo
from ecgpdf.content import load_page_paths
from ecgpdf.edf import edf_startdate, write_edf
from ecgpdf.errors import ECGPDFError
from ecgpdf.logging import RowReportLogger, log_paths
from ecgpdf.waveform import concatenate_to_signal, extract_baselines, extract_waveform_rows

DEFAULT_PAGE = 2


def convert(
    source: Path,
    destination: Path,
    *,
    page: int = DEFAULT_PAGE,
    layout: LayoutConfig | None = None,
    info: RecordingInfo | None = None,
    row_log: Path | None = None,
    dump_paths: Path | None = None,
) -> list[float]:
    layout = layout or LayoutConfig()
    info = info or RecordingInfo()

    paths, height = load_page_paths(source, page)
    print(f"[+] Page {page}: {len(paths)} drawing paths (page height {height:.1f})")
    if dump_paths:
        log_paths(paths, dump_paths)
        print(f"[i] Path dump written to {dump_paths}")

    baselines = extract_baselines(paths, layout)
    print(f"[+] Baselines (page y): {', '.join(f'{b:.1f}' for b in baselines)}")

    rows = extract_waveform_rows(paths, baselines, layout)
    report = RowReportLogger(row_log) if row_log else None
    signal = concatenate_to_signal(rows, baselines, layout, report=report)
    if report:
        report.flush()
        print(f"[i] Row report written to {row_log}")
    if not signal:
        raise ECGPDFError("No trace samples were recovered from any row.")

    duration = len(signal) / info.sample_rate
    print(f"[+] Total samples: {len(signal)}")
    print(f"[+] Duration: {duration:.2f} seconds at {info.sample_rate} Hz")
    print(f"[+] Voltage range: [{min(signal):.3f}, {max(signal):.3f}] mV")

    n_records = write_edf(destination, signal, info)
    size = destination.stat().st_size
    print(f"[+] EDF written to {destination} ({n_records} records, {size} bytes)")
    return signal


def _parse_start(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid start datetime: {value!r}") from exc


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Recover the ECG trace from a vector PDF printout and write EDF+."
    )
    parser.add_argument("input", type=Path, help="Path to the source PDF")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Optional EDF destination (defaults to <input>.edf)",
    )
    parser.add_argument(
        "--page",
        type=int,
        default=DEFAULT_PAGE,
        help="1-based page holding the trace (default: %(default)s)",
    )
    parser.add_argument(
        "--sample-rate",
        type=int,
        default=SAMPLE_RATE,
        help="Samples per second written to the EDF header (default: %(default)s)",
    )
    parser.add_argument(
        "--calibration",
        type=float,
        default=CAL_PT_PER_MV,
        help="Page units per millivolt (default: %(default)s)",
    )
    parser.add_argument("--patient", help="EDF+ patient identification field")
    parser.add_argument("--recording", help="EDF+ recording identification field")
    parser.add_argument(
        "--start",
        type=_parse_start,
        help="Recording start as ISO datetime, e.g. 2026-02-13T22:42:00",
    )
    parser.add_argument("--label", help="Signal channel label (default: 'EKG I')")
    parser.add_argument(
        "--row-log",
        type=Path,
        help="Write per-row sample statistics to this path",
    )
    parser.add_argument(
        "--dump-paths",
        type=Path,
        help="Write a one-line summary of every extracted drawing path to this path",
    )
    return parser.parse_args(argv)


def build_recording_info(args: argparse.Namespace) -> RecordingInfo:
    info = RecordingInfo(sample_rate=args.sample_rate)
    changes: dict[str, object] = {}
    if args.patient:
        changes["patient_id"] = args.patient
    if args.start:
        changes["start"] = args.start
        if not args.recording:
            changes["recording_id"] = f"{edf_startdate(args.start)} X X KardiaMobile_1L"
    if args.recording:
        changes["recording_id"] = args.recording
    if args.label:
        changes["label"] = args.label
    return dataclasses.replace(info, **changes)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    layout = LayoutConfig(cal_pt_per_mv=args.calibration)
    info = build_recording_info(args)
    output_path = args.output or args.input.with_suffix(".edf")
    try:
        convert(
            args.input,
            output_path,
            page=args.page,
            layout=layout,
            info=info,
            row_log=args.row_log,
            dump_paths=args.dump_paths,
        )
    except (ECGPDFError, OSError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
