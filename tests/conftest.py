from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest

PDF_BASELINES = (700, 550, 400, 250)


def build_pdf(
    contents: Sequence[bytes | None],
    *,
    media_box: tuple[int, int, int, int] = (0, 0, 612, 792),
    inherit_media_box: bool = True,
    stream_filter: bytes | None = None,
) -> bytes:
    """
    Assemble a minimal PDF with one page per ``contents`` entry.  The content
    bytes are written as given; ``stream_filter`` only labels them with a
    /Filter name.
    """

    box = b"[%d %d %d %d]" % media_box
    objects: dict[int, bytes] = {1: b"<< /Type /Catalog /Pages 2 0 R >>"}
    page_ids: list[int] = []
    next_id = 3
    for content in contents:
        page_id = next_id
        next_id += 1
        entries = b"/Type /Page /Parent 2 0 R"
        if not inherit_media_box:
            entries += b" /MediaBox " + box
        if content is not None:
            content_id = next_id
            next_id += 1
            header = b"/Length %d" % len(content)
            if stream_filter is not None:
                header += b" /Filter /" + stream_filter
            objects[content_id] = b"<< " + header + b" >>\nstream\n" + content + b"\nendstream"
            entries += b" /Contents %d 0 R" % content_id
        objects[page_id] = b"<< " + entries + b" >>"
        page_ids.append(page_id)

    kids = b" ".join(b"%d 0 R" % pid for pid in page_ids)
    pages = b"<< /Type /Pages /Kids [" + kids + b"] /Count %d" % len(page_ids)
    if inherit_media_box:
        pages += b" /MediaBox " + box
    objects[2] = pages + b" >>"

    out = bytearray(b"%PDF-1.4\n")
    offsets: dict[int, int] = {}
    for oid in sorted(objects):
        offsets[oid] = len(out)
        out += b"%d 0 obj\n" % oid + objects[oid] + b"\nendobj\n"
    xref = len(out)
    size = max(objects) + 1
    out += b"xref\n0 %d\n" % size
    out += b"0000000000 65535 f \n"
    for oid in range(1, size):
        out += b"%010d 00000 n \n" % offsets[oid]
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (size, xref)
    return bytes(out)


def ecg_page_content(baselines: Sequence[int] = PDF_BASELINES, segments: int = 60) -> bytes:
    """Grid rulings plus one spiky trace polyline per row, in the report's pen style."""

    cmds = ["q", "0 0 0 RG", "0.4 w"]
    for y in baselines:
        cmds += [f"20 {y} m", f"580 {y} l"]
    cmds.append("S")
    for y in baselines:
        cmds.append(f"30 {y} m")
        for i in range(1, segments + 1):
            dy = 10 if i % 10 == 5 else 0
            cmds.append(f"{30 + i} {y + dy} l")
        cmds.append("S")
    cmds += ["0.5 0.5 0.5 RG", "0.1 w", "0 0 612 792 re", "S", "Q"]
    return "\n".join(cmds).encode("ascii")


@pytest.fixture
def ecg_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "report.pdf"
    path.write_bytes(build_pdf([None, ecg_page_content()]))
    return path
