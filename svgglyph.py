#!/usr/bin/env python
"""Extract single glyph outline from an SVG document

Walks SVG element tree, bakes nested transforms into path data and merges all
`path` elements into one outline suitable for an icon font. Everything that can
not be represented by a plain outline is reported instead of approximated.

NOT SUPPORTED (reported as ignored):
    - shapes other than `path` (rect, circle, polygon, ...)
    - text, images, use/symbol references
    - any styling (fill, stroke, opacity, clipping, masks, filters, ...)
"""
from __future__ import annotations
import gzip
import io
import json
import math
import numpy as np
import numpy.typing as npt
import os
import re
import sys
import xml.etree.ElementTree as etree
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple, Union

FLOAT_RE = re.compile(r"[-+]?(?:(?:\d*\.\d+)|(?:\d+\.?))(?:[Ee][+-]?\d+)?")
FLOAT = np.float64

FNDArray = npt.NDArray[FLOAT]


# ------------------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------------------
class GlyphError(ValueError):
    """Base class for all errors reported while extracting a glyph"""


class XmlParseError(GlyphError):
    pass


class ViewBoxMalformedError(GlyphError):
    pass


class NegativeSizeError(GlyphError):
    pass


class MissingSizeError(GlyphError):
    pass


class TransformCompositionError(GlyphError):
    """Malformed transform or path data, fatal for the whole document"""


# ------------------------------------------------------------------------------
# Transform
# ------------------------------------------------------------------------------
class Transform:
    __slots__: List[str] = ["m"]
    m: FNDArray

    def __init__(self, matrix: Optional[FNDArray] = None):
        self.m = np.identity(3) if matrix is None else matrix

    def __matmul__(self, other: Transform) -> Transform:
        return Transform(self.m @ other.m)

    def __call__(self, points: FNDArray) -> FNDArray:
        if len(points) == 0:
            return points
        return points @ self.m[:2, :2].T + self.m[:2, 2]

    def matrix(
        self, m00: float, m01: float, m02: float, m10: float, m11: float, m12: float
    ) -> Transform:
        return Transform(self.m @ np.array([[m00, m01, m02], [m10, m11, m12], [0, 0, 1]]))

    def translate(self, tx: float, ty: float) -> Transform:
        return Transform(self.m @ np.array([[1, 0, tx], [0, 1, ty], [0, 0, 1]]))

    def scale(self, sx: float, sy: Optional[float] = None) -> Transform:
        sy = sx if sy is None else sy
        return Transform(self.m @ np.array([[sx, 0, 0], [0, sy, 0], [0, 0, 1]]))

    def rotate(self, angle: float) -> Transform:
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        return Transform(self.m @ np.array([[cos_a, -sin_a, 0], [sin_a, cos_a, 0], [0, 0, 1]]))

    def skew(self, ax: float, ay: float) -> Transform:
        return Transform(self.m @ np.array([[1, math.tan(ax), 0], [math.tan(ay), 1, 0], [0, 0, 1]]))

    def __repr__(self) -> str:
        return str(np.around(self.m, 4).tolist()[:2])


# ------------------------------------------------------------------------------
# Path
# ------------------------------------------------------------------------------
PATH_LINE = 0
PATH_QUAD = 1
PATH_CUBIC = 2
PATH_ARC = 3
PATH_CLOSED = 4
PATH_UNCLOSED = 5


class Path:
    """Parsed SVG path data

    `subpaths` is a list of subpaths, each one is a list of tuples:
        - `(PATH_LINE, (p0, p1))` - line from p0 to p1
        - `(PATH_QUAD, (p0, c0, p1))` - quadratic bezier curve
        - `(PATH_CUBIC, (p0, c0, c1, p1))` - cubic bezier curve
        - `(PATH_ARC, (center, rx, ry, phi, eta, eta_delta))` - parametric arc
        - `(PATH_CLOSED | PATH_UNCLOSED, (p0, p1))` - end of the subpath, p0 is
          the current point and p1 is the beginning of the subpath.
    """

    __slots__ = ["subpaths"]
    subpaths: List[List[Tuple[int, Any]]]

    def __init__(self, subpaths):
        self.subpaths = subpaths

    def __iter__(self):
        return iter(self.subpaths)

    def __bool__(self) -> bool:
        return bool(self.subpaths)

    def transform(self, transform: Transform) -> Path:
        """Apply transformation to a path

        Arcs are converted to cubic curves since transformed arc is not
        necessarily representable by SVG arc arguments.
        """
        paths_out = []
        for path_in in self.subpaths:
            path_out = []
            if not path_in:
                continue
            for cmd, args in path_in:
                if cmd == PATH_ARC:
                    cubics = arc_to_bezier3(*args)
                    for cubic in transform(cubics):
                        path_out.append((PATH_CUBIC, cubic.tolist()))
                else:
                    points = transform(np.array(args, dtype=FLOAT)).tolist()
                    path_out.append((cmd, points))
            paths_out.append(path_out)
        return Path(paths_out)

    def commands(self) -> Iterator[Tuple[str, List[List[float]]]]:
        """Iterate over absolute SVG commands as `(command, points)` pairs"""
        for path in self.subpaths:
            started = False
            for cmd, args in path:
                if cmd == PATH_ARC:
                    segments = [(PATH_CUBIC, cubic) for cubic in arc_to_bezier3(*args).tolist()]
                else:
                    segments = [(cmd, args)]
                for cmd, points in segments:
                    if cmd == PATH_UNCLOSED:
                        if not started:
                            # lone moveto
                            yield "M", [points[1]]
                            started = True
                        continue
                    if not started:
                        yield "M", [points[0]]
                        started = True
                    if cmd == PATH_LINE:
                        yield "L", points[1:]
                    elif cmd == PATH_QUAD:
                        yield "Q", points[1:]
                    elif cmd == PATH_CUBIC:
                        yield "C", points[1:]
                    elif cmd == PATH_CLOSED:
                        yield "Z", []
                    else:
                        raise ValueError(f"unhandled path type: `{cmd}`")

    def segments(self) -> int:
        """Number of commands in SVG representation of the path"""
        return sum(1 for _ in self.commands())

    def to_svg(self, precision: Optional[int] = None, relative: bool = False) -> str:
        """Convert to SVG path data

        Coordinates are rounded to `precision` digits after the decimal point if
        specified. With `relative` all commands are encoded relative to the
        current point, deltas are computed from already rounded points.
        """
        output = io.StringIO()
        current = start = (0.0, 0.0)
        for cmd, points in self.commands():
            points = [(svg_round(x, precision), svg_round(y, precision)) for x, y in points]
            if cmd == "Z":
                output.write("z" if relative else "Z")
                current = start
                continue
            if relative:
                cx, cy = current
                coords = [(svg_round(x - cx, precision), svg_round(y - cy, precision)) for x, y in points]
                output.write(cmd.lower())
            else:
                coords = points
                output.write(cmd)
            output.write(" ".join(f"{svg_number(x)},{svg_number(y)}" for x, y in coords))
            current = points[-1]
            if cmd == "M":
                start = current
        return output.getvalue()

    @staticmethod
    def from_svg(input: str) -> Path:
        """Parse SVG path

        For more info see [SVG spec](https://www.w3.org/TR/SVG11/paths.html)
        """
        input_len = len(input)
        input_offset = 0

        WHITESPACE = set(" \t\r\n,")
        COMMANDS = set("MmZzLlHhVvCcSsQqTtAa")

        def position(is_relative, pos, dst):
            return [pos[0] + dst[0], pos[1] + dst[1]] if is_relative else dst

        def smooth(points):
            px, py = points[-1]
            cx, cy = points[-2]
            return [px * 2 - cx, py * 2 - cy]

        # parser state
        paths = []
        path = []

        args = []
        cmd = None
        pos = [0.0, 0.0]
        first = True  # true if this is a first command
        moved = False  # true if current subpath has a moveto, possibly without segments
        start = [0.0, 0.0]

        smooth_cubic = None
        smooth_quad = None

        while input_offset <= input_len:
            char = input[input_offset] if input_offset < input_len else None

            if char in WHITESPACE:
                input_offset += 1

            elif char is None or char in COMMANDS:
                # process current command
                cmd_args, args = args, []

                if cmd is None:
                    if cmd_args:
                        raise ValueError(f"path data must start with a command: {input}")
                elif cmd in "Mm":
                    # terminate current path
                    if path or moved:
                        path.append((PATH_UNCLOSED, [pos, start]))
                        paths.append(path)
                        path = []
                    moved = True

                    is_relative = cmd == "m"
                    (move, *lineto) = chunk(cmd_args, 2)
                    pos = position(is_relative and not first, pos, move)
                    start = pos
                    for dst in lineto:
                        dst = position(is_relative, pos, dst)
                        path.append((PATH_LINE, [pos, dst]))
                        pos = dst
                elif cmd in "Ll":
                    for dst in chunk(cmd_args, 2):
                        dst = position(cmd == "l", pos, dst)
                        path.append((PATH_LINE, [pos, dst]))
                        pos = dst
                elif cmd in "Vv":
                    if not cmd_args:
                        raise ValueError(f"command '{cmd}' expects at least one argument")
                    is_relative = cmd == "v"
                    for dst in cmd_args:
                        dst = position(is_relative, pos, [0 if is_relative else pos[0], dst])
                        path.append((PATH_LINE, [pos, dst]))
                        pos = dst
                elif cmd in "Hh":
                    if not cmd_args:
                        raise ValueError(f"command '{cmd}' expects at least one argument")
                    is_relative = cmd == "h"
                    for dst in cmd_args:
                        dst = position(is_relative, pos, [dst, 0 if is_relative else pos[1]])
                        path.append((PATH_LINE, [pos, dst]))
                        pos = dst
                elif cmd in "Cc":
                    for points in chunk(cmd_args, 6):
                        points = [position(cmd == "c", pos, point) for point in chunk(points, 2)]
                        path.append((PATH_CUBIC, [pos, *points]))
                        pos = points[-1]
                        smooth_cubic = smooth(points)
                elif cmd in "Ss":
                    for points in chunk(cmd_args, 4):
                        points = [position(cmd == "s", pos, point) for point in chunk(points, 2)]
                        if smooth_cubic is None:
                            smooth_cubic = pos
                        path.append((PATH_CUBIC, [pos, smooth_cubic, *points]))
                        pos = points[-1]
                        smooth_cubic = smooth(points)
                elif cmd in "Qq":
                    for points in chunk(cmd_args, 4):
                        points = [position(cmd == "q", pos, point) for point in chunk(points, 2)]
                        path.append((PATH_QUAD, [pos, *points]))
                        pos = points[-1]
                        smooth_quad = smooth(points)
                elif cmd in "Tt":
                    for points in chunk(cmd_args, 2):
                        points = position(cmd == "t", pos, points)
                        if smooth_quad is None:
                            smooth_quad = pos
                        points = [pos, smooth_quad, points]
                        path.append((PATH_QUAD, points))
                        pos = points[-1]
                        smooth_quad = smooth(points)
                elif cmd in "Aa":
                    # NOTE: `large_f`, and `sweep_f` are flags which can only be 0 or 1,
                    #       some minimizers merge them with the next number.
                    for points in chunk(cmd_args, 7):
                        rx, ry, x_axis_rot, large_f, sweep_f, dst_x, dst_y = points
                        dst = position(cmd == "a", pos, [dst_x, dst_y])
                        src, pos = pos, dst
                        if src == dst:
                            continue
                        if rx == 0 or ry == 0:
                            path.append((PATH_LINE, [src, dst]))
                        else:
                            path.append(
                                (
                                    PATH_ARC,
                                    arc_svg_to_parametric(
                                        src,
                                        dst,
                                        rx,
                                        ry,
                                        x_axis_rot,
                                        large_f > 0.001,
                                        sweep_f > 0.001,
                                    ),
                                )
                            )
                elif cmd in "Zz":
                    if cmd_args:
                        raise ValueError(f"`z` command does not accept any argmuents: {cmd_args}")
                    path.append((PATH_CLOSED, [pos, start]))
                    paths.append(path)
                    path = []
                    moved = False
                    pos = start

                if cmd is not None and cmd not in "CcSs":
                    smooth_cubic = None
                if cmd is not None and cmd not in "QqTt":
                    smooth_quad = None
                if cmd is not None:
                    first = False
                input_offset += 1
                cmd = char

            else:
                match = FLOAT_RE.match(input, input_offset)
                if match is None:
                    raise ValueError(f"not recognized command '{char}' at: {input_offset}")
                match_str = match.group(0)
                args.append(svg_float(match_str))
                input_offset += len(match_str)

        if path or moved:
            path.append((PATH_UNCLOSED, [pos, start]))
            paths.append(path)

        return Path(paths)

    def __repr__(self):
        return self.to_svg() or "EMPTY"


def chunk(vs, size):
    """Chunk list `vs` into chunk of size `size`"""
    chunks = [vs[i : i + size] for i in range(0, len(vs), size)]
    if not chunks or len(chunks[-1]) != size:
        raise ValueError(f"list {vs} can not be chunked in {size}s")
    return chunks


def svg_round(value: float, precision: Optional[int] = None) -> float:
    """Round coordinate, default precision only removes floating point noise"""
    if not math.isfinite(value):
        raise ValueError(f"coordinate is out of range: {value}")
    # adding zero turns `-0.0` into `0.0`
    return round(value, 6 if precision is None else precision) + 0.0


def svg_number(value: float) -> str:
    return f"{value:.12g}"


# ------------------------------------------------------------------------------
# Arc
# ------------------------------------------------------------------------------
def arc_to_bezier3(center, rx, ry, phi, eta, eta_delta):
    """Approximate arc with a sequence of cubic bezier curves

    [Drawing an elliptical arc using polylines, quadratic or cubic Bezier curves]
    (http://www.spaceroots.org/documents/ellipse/elliptical-arc.pdf)

    Arc is split into segments no larger than `pi / 4`, each segment from
    `eta_1` to `eta_2` is approximated as:
        P0 = A(eta_1)
        P1 = P0 + alpha * A'(eta_1)
        P2 = P3 - alpha * A'(eta_2)
        P3 = A(eta_2)
    where
        alpha = sin(eta_2 - eta_1) * (sqrt(4 + 3 * tan((eta_2 - eta_1) / 2) ** 2) - 1) / 3
    """
    M = np.array([[math.cos(phi), -math.sin(phi)], [math.sin(phi), math.cos(phi)]])
    arc = lambda a: M @ [rx * math.cos(a), ry * math.sin(a)] + center
    arc_d = lambda a: M @ [-rx * math.sin(a), ry * math.cos(a)]

    segment_max_angle = math.pi / 4
    segments = []
    segments_count = max(1, math.ceil(abs(eta_delta) / segment_max_angle))
    etas = np.linspace(eta, eta + eta_delta, segments_count + 1)
    for eta_1, eta_2 in zip(etas, etas[1:]):
        sq = math.sqrt(4 + 3 * math.tan((eta_2 - eta_1) / 2) ** 2)
        alpha = math.sin(eta_2 - eta_1) * (sq - 1) / 3

        p0 = arc(eta_1)
        p3 = arc(eta_2)
        p1 = p0 + alpha * arc_d(eta_1)
        p2 = p3 - alpha * arc_d(eta_2)
        segments.append([p0, p1, p2, p3])

    return np.array(segments)


def arc_svg_to_parametric(src, dst, rx, ry, x_axis_rot, large_flag, sweep_flag):
    """Convert arc from SVG arguments to parametric curve

    Follows (Arc to Parametric)[https://www.w3.org/TR/SVG/implnote.html#ArcImplementationNotes]

    Returns `(center, rx, ry, phi, eta, eta_delta)` where curve is:
        eta(t) = eta + t * eta_delta
        arc(t) = [[cos(phi), -sin(phi)], [sin(phi), cos(phi)]] @ [rx * cos(eta(t)), ry * sin(eta(t))] + center
    """
    rx, ry = abs(rx), abs(ry)
    src, dst = np.array(src), np.array(dst)
    phi = x_axis_rot * math.pi / 180

    cos_phi, sin_phi = math.cos(phi), math.sin(phi)
    M = np.array([[cos_phi, sin_phi], [-sin_phi, cos_phi]])
    # Eq 5.1
    x1, y1 = np.matmul(M, (src - dst) / 2)
    # scale radii (Eq 6.2)
    s = (x1 / rx) ** 2 + (y1 / ry) ** 2
    if s > 1:
        s = math.sqrt(s)
        rx *= s
        ry *= s
    # Eq 5.2
    sq = math.sqrt(max(0, (rx * ry) ** 2 / ((rx * y1) ** 2 + (ry * x1) ** 2) - 1))
    if large_flag == sweep_flag:
        sq = -sq
    center = sq * np.array([rx * y1 / ry, -ry * x1 / rx])
    cx, cy = center
    # Eq 5.3
    center = np.matmul(M.T, center) + (dst + src) / 2
    # Eq 5.5-6
    v0 = np.array([1, 0])
    v1 = np.array([(x1 - cx) / rx, (y1 - cy) / ry])
    v2 = np.array([(-x1 - cx) / rx, (-y1 - cy) / ry])
    eta = angle_between(v0, v1)
    eta_delta = math.fmod(angle_between(v1, v2), 2 * math.pi)
    if not sweep_flag and eta_delta > 0:
        eta_delta -= 2 * math.pi
    if sweep_flag and eta_delta < 0:
        eta_delta += 2 * math.pi

    return center, rx, ry, phi, eta, eta_delta


def angle_between(v0, v1):
    """Calculate angle between two vectors"""
    angle_cos = np.dot(v0, v1) / (np.linalg.norm(v0) * np.linalg.norm(v1))
    angle = math.acos(np.clip(angle_cos, -1, 1))
    if v0[0] * v1[1] - v0[1] * v1[0] < 0:
        angle = -angle
    return angle


# ------------------------------------------------------------------------------
# SVG
# ------------------------------------------------------------------------------
TRANSFORM_RE = re.compile(r"\s*(translate|scale|rotate|skewX|skewY|matrix)\s*\(([^\)]+)\)\s*")
SVG_NAMESPACES = {
    "http://www.w3.org/2000/svg": None,
    "http://www.w3.org/XML/1998/namespace": "xml",
    "http://www.w3.org/1999/xlink": "xlink",
    "http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd": "sodipodi",
    "http://www.inkscape.org/namespaces/inkscape": "inkscape",
}
# subtrees of these elements never contribute to a glyph
SVG_QUIET_TAGS = frozenset(["desc", "title", "metadata", "defs"])
# attributes which change how an element looks or behaves, glyph can not keep them
SVG_IGNORED_ATTRS = frozenset(
    [
        "requiredFeatures",
        "requiredExtensions",
        "systemLanguage",
        "xml:base",
        "xml:lang",
        "xml:space",
        "onfocusin",
        "onfocusout",
        "onactivate",
        "onclick",
        "onmousedown",
        "onmouseup",
        "onmouseover",
        "onmousemove",
        "onmouseout",
        "onload",
        "alignment-baseline",
        "baseline-shift",
        "clip",
        "clip-path",
        "clip-rule",
        "color",
        "color-interpolation",
        "color-interpolation-filters",
        "color-profile",
        "color-rendering",
        "cursor",
        "direction",
        "display",
        "dominant-baseline",
        "enable-background",
        "fill",
        "fill-opacity",
        "fill-rule",
        "filter",
        "flood-color",
        "flood-opacity",
        "font-family",
        "font-size",
        "font-size-adjust",
        "font-stretch",
        "font-style",
        "font-variant",
        "font-weight",
        "glyph-orientation-horizontal",
        "glyph-orientation-vertical",
        "image-rendering",
        "kerning",
        "letter-spacing",
        "lighting-color",
        "marker-end",
        "marker-mid",
        "marker-start",
        "mask",
        "opacity",
        "overflow",
        "pointer-events",
        "shape-rendering",
        "stop-color",
        "stop-opacity",
        "stroke",
        "stroke-dasharray",
        "stroke-dashoffset",
        "stroke-linecap",
        "stroke-linejoin",
        "stroke-miterlimit",
        "stroke-opacity",
        "stroke-width",
        "text-anchor",
        "text-decoration",
        "text-rendering",
        "unicode-bidi",
        "visibility",
        "word-spacing",
        "writing-mode",
        "class",
        "style",
        "externalResourcesRequired",
        "pathLength",
    ]
)


class FlattenResult(NamedTuple):
    path: str
    ignored_tags: set
    ignored_attrs: set
    guaranteed: bool


class CoordinateBox(NamedTuple):
    x: float
    y: float
    width: Optional[float]
    height: Optional[float]
    error: Optional[GlyphError] = None


class GlyphRecord(NamedTuple):
    """Glyph extracted from an SVG document

    `guaranteed` is set only if outline is a faithful reduction of the source:
    single drawable element and no ignored styling.
    """

    d: str = ""
    x: float = 0.0
    y: float = 0.0
    width: Optional[float] = 0.0
    height: Optional[float] = 0.0
    ignored_tags: Tuple[str, ...] = ()
    ignored_attrs: Tuple[str, ...] = ()
    guaranteed: bool = False
    error: Optional[GlyphError] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "d": self.d,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "ignoredTags": list(self.ignored_tags),
            "ignoredAttrs": list(self.ignored_attrs),
            "guaranteed": self.guaranteed,
            "error": None if self.error is None else str(self.error),
        }


def svg_name(name: str) -> str:
    """Convert etree `{uri}local` name to a prefixed name as written in documents"""
    if not name.startswith("{"):
        return name
    uri, local = name[1:].split("}", 1)
    if uri not in SVG_NAMESPACES:
        return name  # foreign namespace, never matches svg names
    prefix = SVG_NAMESPACES[uri]
    return local if prefix is None else f"{prefix}:{local}"


def svg_flatten(
    node: etree.Element,
    transforms: str = "",
    path: str = "",
    ignored_tags: Optional[set] = None,
    ignored_attrs: Optional[set] = None,
) -> FlattenResult:
    """Merge all paths of the `node` subtree into single path

    `transforms` are transforms inherited from ancestors, `path` is an already
    accumulated path data. `ignored_tags` and `ignored_attrs` are collectors
    shared by the whole walk.
    """
    ignored_tags = set() if ignored_tags is None else ignored_tags
    ignored_attrs = set() if ignored_attrs is None else ignored_attrs
    guaranteed = True

    for child in node:
        if not isinstance(child.tag, str):
            continue  # comment or processing instruction
        tag = svg_name(child.tag)
        if tag in SVG_QUIET_TAGS:
            continue

        transform = child.get("transform")
        child_transforms = f"{transforms} {transform}" if transform else transforms

        if tag == "g":
            result = svg_flatten(child, child_transforms, path, ignored_tags, ignored_attrs)
            path = result.path
            guaranteed = guaranteed and result.guaranteed
            d = ""
        elif tag == "path":
            d = child.get("d", "")
        else:
            ignored_tags.add(tag)
            continue

        child_path = svg_path_transform(d, child_transforms)
        if path and child_path:
            guaranteed = False
        path += child_path

        for attr in child.attrib:
            attr = svg_name(attr)
            if attr in SVG_IGNORED_ATTRS:
                guaranteed = False
                ignored_attrs.add(attr)

    return FlattenResult(path, ignored_tags, ignored_attrs, guaranteed)


def svg_coordinates(root: etree.Element) -> CoordinateBox:
    """Resolve glyph box from `viewBox`, `x`, `y`, `width` and `height` of the root"""
    viewbox = None
    viewbox_attr = root.get("viewBox")
    if viewbox_attr:
        try:
            viewbox = svg_floats(viewbox_attr)
        except ValueError:
            viewbox = []
        if len(viewbox) < 4:
            return CoordinateBox(
                0.0, 0.0, None, None, ViewBoxMalformedError(f"viewBox has less than 4 numbers: {viewbox_attr}")
            )

    x = svg_length(root.get("x"))
    y = svg_length(root.get("y"))
    width = svg_length(root.get("width"))
    height = svg_length(root.get("height"))

    sizes = [width, height] + ([] if viewbox is None else viewbox[2:4])
    if any(size is not None and size < 0 for size in sizes):
        return CoordinateBox(0.0, 0.0, None, None, NegativeSizeError("svg sizes can not be negative"))

    box = CoordinateBox(x or 0.0, y or 0.0, width, height)
    if viewbox is None:
        if width and height:
            return box
        return box._replace(error=MissingSizeError("svg has no viewBox and no width or height"))
    if not width and not height:
        return box._replace(width=viewbox[2], height=viewbox[3])
    return box


def svg_glyph(source: Union[str, bytes]) -> GlyphRecord:
    """Extract glyph from SVG document text

    Parse and size errors are reported in the `error` field of the result,
    malformed geometry raises `TransformCompositionError`.
    """
    try:
        document = etree.fromstring(source)
    except etree.ParseError as error:
        return GlyphRecord(error=XmlParseError(f"failed to parse svg: {error}"))

    root = None
    for element in document.iter():
        if isinstance(element.tag, str) and svg_name(element.tag) == "svg":
            root = element
            break
    if root is None:
        return GlyphRecord(error=XmlParseError("document has no `svg` element"))

    flat = svg_flatten(root)
    box = svg_coordinates(root)
    if box.error is not None:
        return GlyphRecord(error=box.error)

    return GlyphRecord(
        d=flat.path,
        x=box.x,
        y=box.y,
        width=box.width,
        height=box.height,
        ignored_tags=tuple(sorted(flat.ignored_tags)),
        ignored_attrs=tuple(sorted(flat.ignored_attrs)),
        guaranteed=flat.guaranteed,
    )


def svg_glyph_from_filepath(path: str) -> GlyphRecord:
    """Extract glyph from SVG file at specified path"""
    _, ext = os.path.splitext(path)
    path = os.path.expanduser(path)
    if ext in {".gz", ".svgz"}:
        with gzip.open(path, mode="rb") as file:
            return svg_glyph(file.read())
    else:
        with open(path, "rb") as file:
            return svg_glyph(file.read())


def svg_path_transform(d: str, transforms: str) -> str:
    """Apply SVG transform list to path data, result is absolute path data"""
    try:
        transform = svg_transform(transforms)
        return Path.from_svg(d).transform(transform).to_svg()
    except ValueError as error:
        raise TransformCompositionError(str(error)) from error


def svg_transform(input: str) -> Transform:
    """Parse SVG transform"""

    def args_err(name, args_len, needs):
        raise ValueError(
            "`{}` transform requires {} arguments {} where given".format(name, needs, args_len)
        )

    tr = Transform()
    input = input.strip().replace(",", " ")
    while input:
        match = TRANSFORM_RE.match(input)
        if match is None:
            raise ValueError(f"failed to parse transform: {input}")
        input = input[len(match.group(0)) :]

        op, args = match.groups()
        args = list(filter(None, args.split()))
        args_len = len(args)
        if op == "matrix":
            args = list(map(svg_float, args))
            if args_len != 6:
                args_err("matrix", args_len, 6)
            a, b, c, d, e, f = args
            tr = tr.matrix(a, c, e, b, d, f)
        elif op == "translate":
            args = list(map(svg_float, args))
            if args_len == 2:
                tx, ty = args
            elif args_len == 1:
                tx, ty = args[0], 0
            else:
                args_err("translate", args_len, "{1,2}")
            tr = tr.translate(tx, ty)
        elif op == "scale":
            args = list(map(svg_float, args))
            if args_len == 2:
                sx, sy = args
            elif args_len == 1:
                sx, sy = args[0], args[0]
            else:
                args_err("scale", args_len, "{1,2}")
            tr = tr.scale(sx, sy)
        elif op == "rotate":
            if args_len == 1:
                tr = tr.rotate(svg_angle(args[0]))
            elif args_len == 3:
                a = svg_angle(args[0])
                x, y = list(map(svg_float, args[1:]))
                tr = tr.translate(x, y).rotate(a).translate(-x, -y)
            else:
                args_err("rotate", args_len, "{1,3}")
        elif op == "skewX":
            if args_len != 1:
                args_err("skewX", args_len, 1)
            tr = tr.skew(svg_angle(args[0]), 0)
        elif op == "skewY":
            if args_len != 1:
                args_err("skewY", args_len, 1)
            tr = tr.skew(0, svg_angle(args[0]))

    return tr


def svg_float(text: str) -> float:
    """Parse single SVG number, anything else than a finite number is an error"""
    match = FLOAT_RE.fullmatch(text.strip())
    if match is None:
        raise ValueError(f"invalid number: `{text}`")
    value = float(match.group(0))
    if not math.isfinite(value):
        raise ValueError(f"number is out of range: `{text}`")
    return value


def svg_floats(text: str) -> List[float]:
    return [svg_float(v) for v in re.split(r"[\s,]+", text.strip()) if v]


def svg_angle(angle: str) -> float:
    """Convert SVG angle to radians"""
    angle = angle.strip()
    if angle.endswith("deg"):
        return svg_float(angle[:-3]) * math.pi / 180
    elif angle.endswith("rad"):
        return svg_float(angle[:-3])
    return svg_float(angle) * math.pi / 180


def svg_length(length: Optional[str]) -> Optional[float]:
    """Parse absolute length, percentages can not be resolved and treated as missing"""
    if length is None:
        return None
    length = length.strip()
    if not length or length.endswith("%"):
        return None
    match = FLOAT_RE.match(length)
    if match is None:
        return None
    value = float(match.group(0))
    return value if math.isfinite(value) else None


# ------------------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------------------
FORMAT_JSON = "json"
FORMAT_PATH = "path"
FORMAT_ALL = [FORMAT_JSON, FORMAT_PATH]


def main(argv: Optional[List[str]] = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(description="extract glyph outline from SVG file")
    parser.add_argument("svg", help="input SVG file")
    parser.add_argument("output", nargs="?", default="-", help="output file, stdout if not provided")
    parser.add_argument("--format", "-f", choices=FORMAT_ALL, default=FORMAT_JSON, help="output format")
    parser.add_argument("-t", "--transform", help="apply additional transformation to the glyph path")
    opts = parser.parse_args(argv)

    if not os.path.exists(opts.svg):
        sys.stderr.write(f"[error] file does not exsits: {opts.svg}\n")
        return 1

    try:
        glyph = svg_glyph_from_filepath(opts.svg)
    except TransformCompositionError as error:
        sys.stderr.write(f"[error] {opts.svg}: {error}\n")
        return 1
    if glyph.error is not None:
        sys.stderr.write(f"[error] {opts.svg}: {glyph.error}\n")
        return 1
    if not glyph.guaranteed:
        sys.stderr.write(f"[warn] {opts.svg}: glyph may be visually incomplete\n")
    if glyph.ignored_tags:
        sys.stderr.write("[warn] ignored tags: {}\n".format(", ".join(glyph.ignored_tags)))
    if glyph.ignored_attrs:
        sys.stderr.write("[warn] ignored attributes: {}\n".format(", ".join(glyph.ignored_attrs)))

    if opts.transform:
        try:
            glyph = glyph._replace(d=svg_path_transform(glyph.d, opts.transform))
        except TransformCompositionError as error:
            sys.stderr.write(f"[error] invalid transform: {error}\n")
            return 1

    with open(opts.output if opts.output != "-" else os.dup(1), "w") as file:
        if opts.format == FORMAT_PATH:
            file.write(glyph.d)
            file.write("\n")
        else:
            json.dump(glyph.to_json(), file, indent=2)
            file.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
