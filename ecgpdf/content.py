"""
Replay a PDF page content stream and recover its stroked line work.

Only the operators that build and paint straight-line paths are honoured:
graphics-state save/restore, ``cm``, stroke width and stroke color, ``m``,
``l``, ``h``, ``re`` and the painting operators.  Text, images, curves and
clipping are skipped.  Every point leaves the interpreter already mapped
through the CTM and flipped to a top-left origin, so downstream code works
in the same frame a rasterizer would.
"""

from __future__ import annotations

import numbers
from pathlib import Path
from typing import Callable, Iterable, List, Mapping, Sequence, Tuple

from pypdf import PdfReader
from pypdf.errors import DependencyError, PyPdfError
from pypdf.generic import ArrayObject, IndirectObject, StreamObject

from .config import DEFAULT_PAGE_HEIGHT, MEDIABOX_MAX_DEPTH
from .entities import Color, DrawingPath, GraphicsState, Point, Subpath
from .errors import ContentStreamError, MalformedOperand, PageNotFound
from .geometry import POINT_TOL, apply, compose, points_match

Operation = Tuple[Sequence[object], bytes]

STROKE_OPS = {"S", "B", "B*", "b", "b*"}
DISCARD_OPS = {"f", "F", "f*", "n"}


def _number(operator: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise MalformedOperand(operator, value)
    return float(value)


def _numbers(operator: str, operands: Sequence[object]) -> List[float]:
    return [_number(operator, value) for value in operands]


def cmyk_to_rgb(c: float, m: float, y: float, k: float) -> Color:
    return ((1.0 - c) * (1.0 - k), (1.0 - m) * (1.0 - k), (1.0 - y) * (1.0 - k))


class ContentInterpreter:
    """Graphics-state machine that turns content-stream operations into paths."""

    def __init__(self, page_height: float) -> None:
        self.page_height = page_height
        self.state = GraphicsState()
        self.paths: List[DrawingPath] = []
        self._stack: List[GraphicsState] = []
        self._subpath = Subpath()

    def run(self, operations: Iterable[Operation]) -> List[DrawingPath]:
        for operands, operator in operations:
            self.feed(operator, operands)
        return self.paths

    def feed(self, operator: bytes | str, operands: Sequence[object]) -> None:
        op = operator.decode("latin-1") if isinstance(operator, (bytes, bytearray)) else operator
        n = len(operands)

        if op == "q":
            self._stack.append(self.state.copy())
        elif op == "Q":
            if self._stack:
                self.state = self._stack.pop()
        elif op == "cm":
            if n == 6:
                self.state.ctm = compose(self.state.ctm, tuple(_numbers(op, operands)))
        elif op == "w":
            if n:
                self.state.line_width = _number(op, operands[0])
        elif op == "G":
            if n:
                gray = _number(op, operands[0])
                self.state.stroke_color = (gray, gray, gray)
        elif op == "RG":
            if n == 3:
                self.state.stroke_color = tuple(_numbers(op, operands))
        elif op == "K":
            if n == 4:
                self.state.stroke_color = cmyk_to_rgb(*_numbers(op, operands))
        elif op in ("SC", "SCN"):
            self._set_generic_color(op, operands)
        elif op == "m":
            if n == 2:
                point = self._map(*_numbers(op, operands))
                self._subpath.current = point
                self._subpath.start = point
        elif op == "l":
            if n == 2:
                point = self._map(*_numbers(op, operands))
                self._subpath.segments.append((self._subpath.current, point))
                self._subpath.current = point
        elif op == "h":
            self._close()
        elif op == "re":
            if n == 4:
                self._rectangle(*_numbers(op, operands))
        elif op == "s":
            self._close()
            self._emit()
        elif op in STROKE_OPS:
            self._emit()
        elif op in DISCARD_OPS:
            self._subpath.segments.clear()

    def _set_generic_color(self, op: str, operands: Sequence[object]) -> None:
        if len(operands) not in (1, 3, 4):
            return
        values = _numbers(op, operands)
        if len(values) == 1:
            self.state.stroke_color = (values[0], values[0], values[0])
        elif len(values) == 3:
            self.state.stroke_color = (values[0], values[1], values[2])
        else:
            self.state.stroke_color = cmyk_to_rgb(*values)

    def _map(self, x: float, y: float) -> Point:
        return apply(x, y, self.state.ctm, self.page_height)

    def _close(self) -> None:
        sub = self._subpath
        if not points_match(sub.current, sub.start, POINT_TOL):
            sub.segments.append((sub.current, sub.start))
            sub.current = sub.start

    def _rectangle(self, x: float, y: float, w: float, h: float) -> None:
        corners = [
            self._map(x, y),
            self._map(x + w, y),
            self._map(x + w, y + h),
            self._map(x, y + h),
        ]
        for idx, corner in enumerate(corners):
            self._subpath.segments.append((corner, corners[(idx + 1) % 4]))
        self._subpath.current = corners[0]
        self._subpath.start = corners[0]

    def _emit(self) -> None:
        segments = self._subpath.segments
        if segments:
            self.paths.append(
                DrawingPath(
                    segments=tuple(segments),
                    color=self.state.stroke_color,
                    width=self.state.line_width,
                )
            )
        self._subpath.segments = []


def extract_paths(operations: Iterable[Operation], page_height: float) -> List[DrawingPath]:
    return ContentInterpreter(page_height).run(operations)


def _resolve_indirect(obj: object) -> object:
    if isinstance(obj, IndirectObject):
        return obj.get_object()
    return obj


def page_height(
    node: Mapping[str, object],
    resolve: Callable[[object], object] = _resolve_indirect,
    *,
    depth: int = 0,
) -> float:
    """
    Height of a page's MediaBox, inherited from the nearest ancestor in the
    page tree when the page itself does not carry one.  ``resolve`` turns a
    reference into the object it names.
    """

    if depth > MEDIABOX_MAX_DEPTH:
        return DEFAULT_PAGE_HEIGHT
    box = node.get("/MediaBox")
    if box is not None:
        box = resolve(box)
        if isinstance(box, Sequence) and not isinstance(box, (str, bytes)) and len(box) == 4:
            return _number("MediaBox", resolve(box[3]))
    parent = node.get("/Parent")
    if parent is not None:
        parent = resolve(parent)
        if isinstance(parent, Mapping):
            return page_height(parent, resolve, depth=depth + 1)
    return DEFAULT_PAGE_HEIGHT


def _content_streams(page: Mapping[str, object]) -> List[object]:
    contents = _resolve_indirect(page.get("/Contents"))
    if isinstance(contents, ArrayObject):
        return [_resolve_indirect(item) for item in contents]
    return [] if contents is None else [contents]


def _check_decoded(page: Mapping[str, object], page_number: int) -> None:
    # pypdf recovers from corrupt Flate data by logging and returning nothing
    for stream in _content_streams(page):
        if not isinstance(stream, StreamObject) or stream.get("/Filter") is None:
            continue
        declared = _resolve_indirect(stream.get("/Length", 0))
        if isinstance(declared, numbers.Real) and declared > 0 and not stream.get_data():
            raise ContentStreamError(
                f"Page {page_number} content stream produced no data after {stream['/Filter']}"
            )


def load_page_paths(source: Path, page_number: int) -> Tuple[List[DrawingPath], float]:
    """Open ``source`` and interpret the 1-based ``page_number``."""

    try:
        reader = PdfReader(str(source), strict=True)
        page_count = len(reader.pages)
    except (PyPdfError, ValueError) as exc:
        raise ContentStreamError(f"Unable to read {source}: {exc}") from exc
    if not 1 <= page_number <= page_count:
        raise PageNotFound(f"Page {page_number} not found ({page_count} pages in {source})")

    page = reader.pages[page_number - 1]
    height = page_height(page)
    try:
        _check_decoded(page, page_number)
        contents = page.get_contents()
        operations = None if contents is None else contents.operations
    except (PyPdfError, DependencyError, NotImplementedError, ValueError) as exc:
        raise ContentStreamError(f"Unable to decode page {page_number} content: {exc}") from exc
    if operations is None:
        raise ContentStreamError(f"Page {page_number} has no content stream")
    return extract_paths(operations, height), height
