#!/usr/bin/env python
"""Build icon font config and SVG font from a directory of SVG images"""
import argparse
import datetime
import json
import os
import re
import sys
import uuid
import warnings
import xml.etree.ElementTree as etree
from typing import Any, Dict, List, Optional

from svgglyph import (
    GlyphError,
    GlyphRecord,
    Path,
    Transform,
    svg_glyph_from_filepath,
    svg_number,
)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
GLYPH_SRC_CUSTOM = "custom_icons"
GLYPH_SIZE = 1000

DEFAULT_NAME = "fontello"
DEFAULT_PREFIX = "icon-"
DEFAULT_UNITS_PER_EM = 1000
DEFAULT_ASCENT = 850
DEFAULT_CODE = 0xE800
DEFAULT_COLUMNS = 4


def svg_files(directory: str) -> List[str]:
    """Sorted list of SVG files in a directory"""
    if not os.path.isdir(directory):
        raise FileNotFoundError(f"not a directory: {directory}")
    files = set()
    for file in os.listdir(directory):
        path = os.path.join(directory, file)
        if file.endswith(".svg") and os.path.isfile(path):
            files.add(path)
    return sorted(files)


def glyph_name(filename: str) -> str:
    name, _ = os.path.splitext(os.path.basename(filename))
    return re.sub(r"\s", "-", name)


def glyph_import(record: GlyphRecord, name: str, code: int) -> Dict[str, Any]:
    """Convert extracted glyph to a custom glyph entry of client config

    Outline is moved to the origin and scaled to `GLYPH_SIZE` height.
    """
    if record.error is not None:
        raise record.error
    if not record.height:
        raise GlyphError(f"glyph `{name}` has no height")
    scale = GLYPH_SIZE / record.height
    tr = Transform().scale(scale).translate(-record.x, -record.y)
    try:
        path = Path.from_svg(record.d).transform(tr).to_svg(precision=1)
    except ValueError as error:
        raise GlyphError(f"glyph `{name}` can not be normalized: {error}") from error
    if not path:
        raise GlyphError(f"glyph `{name}` has no path data")
    return {
        "uid": uuid.uuid4().hex,
        "css": name,
        "code": code,
        "src": GLYPH_SRC_CUSTOM,
        "selected": True,
        "svg": {"path": path, "width": GLYPH_SIZE},
        "search": [name],
    }


def client_config(
    glyphs: List[Dict[str, Any]],
    name: str = "",
    prefix: str = DEFAULT_PREFIX,
    units_per_em: int = DEFAULT_UNITS_PER_EM,
    ascent: int = DEFAULT_ASCENT,
) -> Dict[str, Any]:
    return {
        "name": name,
        "css_prefix_text": prefix,
        "css_use_suffix": False,
        "hinting": False,
        "units_per_em": units_per_em,
        "ascent": ascent,
        "glyphs": glyphs,
    }


def builder_glyphs(client: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Glyphs in font units, y axis pointing up, sorted by code"""
    scale = client["units_per_em"] / GLYPH_SIZE
    tr = Transform().translate(0, client["ascent"]).scale(scale, -scale)
    glyphs = []
    for glyph in client["glyphs"]:
        if glyph.get("src") != GLYPH_SRC_CUSTOM:
            warnings.warn(f"glyph from embedded font is not supported: {glyph.get('uid')}")
            continue
        if not glyph.get("selected"):
            continue
        path = Path.from_svg(glyph["svg"]["path"]).transform(tr)
        glyphs.append(
            {
                "src": glyph["src"],
                "uid": glyph["uid"],
                "code": glyph["code"],
                "css": glyph["css"],
                "width": round(glyph["svg"]["width"] * scale, 1),
                "d": path.to_svg(precision=0, relative=True),
                "segments": path.segments(),
            }
        )
    glyphs.sort(key=lambda glyph: glyph["code"])
    return glyphs


def builder_config(client: Dict[str, Any]) -> Dict[str, Any]:
    """Fill defaults of client config and convert it to font builder config"""
    client = dict(client)
    for key in ("fullname", "copyright"):
        if client.get(key) == "undefined":
            del client[key]
    client["css_use_suffix"] = bool(client.get("css_use_suffix"))
    client["css_prefix_text"] = client.get("css_prefix_text") or DEFAULT_PREFIX
    client["hinting"] = client.get("hinting") is not False
    client["units_per_em"] = int(client.get("units_per_em") or DEFAULT_UNITS_PER_EM)
    client["ascent"] = int(client.get("ascent") or DEFAULT_ASCENT)
    client.setdefault("glyphs", [])

    fontname = re.sub(r"[^a-z0-9\-_]+", "-", str(client.get("name") or "").lower()) or DEFAULT_NAME
    copyright = client.get("copyright") or "Copyright (C) {} by original authors @ fontello.com".format(
        datetime.date.today().year
    )
    return {
        "font": {
            "fontname": fontname,
            "fullname": fontname,
            # EOT requires `familyname` to be a prefix of `fullname`
            "familyname": fontname,
            "copyright": copyright,
            "ascent": client["ascent"],
            "descent": client["ascent"] - client["units_per_em"],
            "weight": 400,
        },
        "units_per_em": client["units_per_em"],
        "hinting": client["hinting"],
        "meta": {
            "columns": DEFAULT_COLUMNS,
            "css_prefix_text": client["css_prefix_text"],
            "css_use_suffix": client["css_use_suffix"],
        },
        "glyphs": builder_glyphs(client),
        "fonts_list": [],
    }


def svg_font(builder: Dict[str, Any]) -> str:
    """Render builder config as SVG font document"""
    font_info = builder["font"]
    units_per_em = svg_number(builder["units_per_em"])

    etree.register_namespace("", SVG_NAMESPACE)
    root = etree.Element(f"{{{SVG_NAMESPACE}}}svg")
    metadata = etree.SubElement(root, f"{{{SVG_NAMESPACE}}}metadata")
    metadata.text = font_info["copyright"]
    defs = etree.SubElement(root, f"{{{SVG_NAMESPACE}}}defs")
    font = etree.SubElement(defs, f"{{{SVG_NAMESPACE}}}font")
    font.attrib["id"] = font_info["fontname"]
    font.attrib["horiz-adv-x"] = units_per_em

    face = etree.SubElement(font, f"{{{SVG_NAMESPACE}}}font-face")
    face.attrib["font-family"] = font_info["familyname"]
    face.attrib["font-weight"] = str(font_info["weight"])
    face.attrib["font-stretch"] = "normal"
    face.attrib["units-per-em"] = units_per_em
    face.attrib["ascent"] = svg_number(font_info["ascent"])
    face.attrib["descent"] = svg_number(font_info["descent"])

    missing = etree.SubElement(font, f"{{{SVG_NAMESPACE}}}missing-glyph")
    missing.attrib["horiz-adv-x"] = units_per_em

    for glyph in builder["glyphs"]:
        element = etree.SubElement(font, f"{{{SVG_NAMESPACE}}}glyph")
        element.attrib["glyph-name"] = glyph["css"]
        element.attrib["unicode"] = chr(glyph["code"])
        element.attrib["d"] = glyph["d"]
        element.attrib["horiz-adv-x"] = svg_number(glyph["width"])

    etree.indent(root)
    return '<?xml version="1.0" standalone="no"?>\n' + etree.tostring(root, encoding="unicode")


def import_directory(
    directory: str, code: int = DEFAULT_CODE, strict: bool = False
) -> List[Dict[str, Any]]:
    """Import all SVG files of a directory as client glyphs

    Files which can not be converted are reported and skipped.
    """
    glyphs = []
    for file in svg_files(directory):
        name = glyph_name(file)
        try:
            record = svg_glyph_from_filepath(file)
            if record.error is None and not record.guaranteed:
                features = [*record.ignored_tags, *record.ignored_attrs]
                sys.stderr.write(
                    "[warn] {}: glyph may be visually incomplete{}\n".format(
                        file, ", ignored: {}".format(", ".join(features)) if features else ""
                    )
                )
                if strict:
                    continue
            glyph = glyph_import(record, name, code)
        except GlyphError as error:
            sys.stderr.write(f"[error] {file}: {error}\n")
            continue
        glyphs.append(glyph)
        code += 1
    return glyphs


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="build icon font from directory of SVG files")
    parser.add_argument("input", help="path to directory with source svg files")
    parser.add_argument("output", help="output directory for config.json and SVG font")
    parser.add_argument("-n", "--name", default="", help="font name")
    parser.add_argument("-p", "--prefix", default=DEFAULT_PREFIX, help="css class prefix")
    parser.add_argument(
        "--units-per-em", type=int, default=DEFAULT_UNITS_PER_EM, help="font units per em"
    )
    parser.add_argument("--ascent", type=int, default=DEFAULT_ASCENT, help="font ascent")
    parser.add_argument(
        "-c", "--code", type=lambda v: int(v, 0), default=DEFAULT_CODE, help="first code point"
    )
    parser.add_argument(
        "--strict", action="store_true", help="skip glyphs which are not guaranteed to be exact"
    )
    opts = parser.parse_args(argv)

    if not os.path.isdir(opts.input):
        sys.stderr.write(f"[error] input argument must be a directory: {opts.input}\n")
        return 1

    glyphs = import_directory(opts.input, opts.code, opts.strict)
    if not glyphs:
        sys.stderr.write("[error] no glyphs to build\n")
        return 1

    client = client_config(glyphs, opts.name, opts.prefix, opts.units_per_em, opts.ascent)
    builder = builder_config(client)

    os.makedirs(os.path.join(opts.output, "font"), exist_ok=True)
    with open(os.path.join(opts.output, "config.json"), "w", encoding="utf-8") as file:
        json.dump(client, file, indent=2)
    font_path = os.path.join(opts.output, "font", f"{builder['font']['fontname']}.svg")
    with open(font_path, "w", encoding="utf-8") as file:
        file.write(svg_font(builder))

    sys.stderr.write(f"[info] {len(glyphs)} glyphs written to {font_path}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
