#!/usr/bin/env python3
"""
Print the header fields of an EDF/EDF+ file and the first TAL onset of each
data record, to check the converter's output against other readers.
"""

from __future__ import annotations

import argparse
from dataclasses import asdict
from pathlib import Path
from typing import Sequence

from ecgpdf.edf import read_edf


def dump(path: Path, max_records: int) -> None:
    edf = read_edf(path)
    print(f"{path.name}: {path.stat().st_size} bytes")
    for name, value in edf.header.items():
        print(f"  {name:<16} {value!r}")
    for idx, channel in enumerate(edf.channels):
        print(f"  channel {idx}:")
        for name, value in asdict(channel).items():
            print(f"    {name:<20} {value!r}")
    for label, samples in edf.samples.items():
        if len(samples) == 0:
            print(f"  {label}: no samples")
            continue
        physical = edf.physical(label)
        print(
            f"  {label}: {len(samples)} samples, digital [{samples.min()}, {samples.max()}], "
            f"physical [{physical.min():.4f}, {physical.max():.4f}]"
        )
    onsets = edf.onsets()
    for idx, onset in enumerate(onsets[:max_records]):
        print(f"  record[{idx:03}] onset={onset}")
    if len(onsets) > max_records:
        print(f"  ... {len(onsets) - max_records} more record(s)")


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Dump EDF header fields and record onsets.")
    parser.add_argument("input", type=Path)
    parser.add_argument("--records", type=int, default=10, help="Onsets to print (default: 10)")
    args = parser.parse_args(argv)
    dump(args.input, args.records)


if __name__ == "__main__":
    main()
