import json
import xml.etree.ElementTree as etree

import pytest

from svgglyph import GlyphError, GlyphRecord, MissingSizeError
from svgfont import (
    builder_config,
    client_config,
    glyph_import,
    glyph_name,
    import_directory,
    main,
    svg_files,
    svg_font,
)

SVG_NS = {"svg": "http://www.w3.org/2000/svg"}
ICON = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">{}</svg>'


def test_glyph_name():
    assert glyph_name("/icons/arrow left.svg") == "arrow-left"
    assert glyph_name("home.svg") == "home"


def test_glyph_import():
    record = GlyphRecord(d="M2,2L26,2L26,26Z", x=2, y=2, width=24, height=24, guaranteed=True)
    glyph = glyph_import(record, "square", 0xE800)
    assert glyph["svg"] == {"path": "M0,0L1000,0L1000,1000Z", "width": 1000}
    assert glyph["code"] == 0xE800
    assert glyph["css"] == "square"
    assert glyph["search"] == ["square"]
    assert glyph["src"] == "custom_icons"
    assert glyph["selected"] is True
    assert len(glyph["uid"]) == 32


def test_glyph_import_errors():
    with pytest.raises(MissingSizeError):
        glyph_import(GlyphRecord(error=MissingSizeError("no size")), "a", 1)
    with pytest.raises(GlyphError):
        glyph_import(GlyphRecord(d="M0,0L1,1", height=None), "a", 1)
    with pytest.raises(GlyphError):
        glyph_import(GlyphRecord(d="", width=10, height=10), "a", 1)
    with pytest.raises(GlyphError):
        glyph_import(GlyphRecord(d="M0,0L1e10,1e10", width=1e-300, height=1e-300), "a", 1)


def test_builder_config():
    glyph = glyph_import(GlyphRecord(d="M0,0L24,0L24,24Z", width=24, height=24), "sq", 0xE801)
    other = glyph_import(GlyphRecord(d="M0,0L12,12", width=24, height=24), "ln", 0xE800)
    builder = builder_config(client_config([glyph, other]))

    assert builder["font"]["fontname"] == "fontello"
    assert builder["font"]["ascent"] == 850
    assert builder["font"]["descent"] == -150
    assert builder["meta"] == {"columns": 4, "css_prefix_text": "icon-", "css_use_suffix": False}
    assert builder["hinting"] is False

    first, second = builder["glyphs"]
    assert first["css"] == "ln"
    assert second["css"] == "sq"
    assert second["d"] == "m0,850l1000,0l0,-1000z"
    assert second["segments"] == 4
    assert second["width"] == 1000


def test_builder_config_scale():
    glyph = glyph_import(GlyphRecord(d="M0,0L24,24", width=24, height=24), "ln", 0xE800)
    client = client_config([glyph], name="My Icons", units_per_em=2048, ascent=1800)
    builder = builder_config(client)
    assert builder["font"]["fontname"] == "my-icons"
    assert builder["font"]["descent"] == -248
    (glyph,) = builder["glyphs"]
    assert glyph["d"] == "m0,1800l2048,-2048"
    assert glyph["width"] == 2048


def test_builder_config_skips_unselected():
    glyph = glyph_import(GlyphRecord(d="M0,0L24,24", width=24, height=24), "ln", 0xE800)
    glyph["selected"] = False
    assert builder_config(client_config([glyph]))["glyphs"] == []


def test_svg_font():
    glyph = glyph_import(GlyphRecord(d="M0,0L24,0L24,24Z", width=24, height=24), "sq", 0xE800)
    font = etree.fromstring(svg_font(builder_config(client_config([glyph]))))
    face = font.find("svg:defs/svg:font/svg:font-face", SVG_NS)
    assert face.get("units-per-em") == "1000"
    assert face.get("ascent") == "850"
    assert face.get("descent") == "-150"
    (element,) = font.findall("svg:defs/svg:font/svg:glyph", SVG_NS)
    assert element.get("glyph-name") == "sq"
    assert element.get("unicode") == "\ue800"
    assert element.get("d") == "m0,850l1000,0l0,-1000z"
    assert element.get("horiz-adv-x") == "1000"


def test_svg_files(tmp_path):
    (tmp_path / "b.svg").write_text(ICON)
    (tmp_path / "a.svg").write_text(ICON)
    (tmp_path / "notes.txt").write_text("")
    (tmp_path / "dir.svg").mkdir()
    assert svg_files(str(tmp_path)) == [str(tmp_path / "a.svg"), str(tmp_path / "b.svg")]
    with pytest.raises(FileNotFoundError):
        svg_files(str(tmp_path / "missing"))


def test_import_directory(tmp_path, capsys):
    (tmp_path / "a.svg").write_text(ICON.format('<path d="M0 0L24 24"/>'))
    (tmp_path / "b.svg").write_text("<svg>")
    (tmp_path / "c.svg").write_text(ICON.format('<path fill="red" d="M0 0L12 12"/>'))
    (tmp_path / "d.svg").write_text(ICON.format('<path d="M0 0 L"/>'))

    glyphs = import_directory(str(tmp_path))
    assert [glyph["css"] for glyph in glyphs] == ["a", "c"]
    assert [glyph["code"] for glyph in glyphs] == [0xE800, 0xE801]
    assert glyphs[1]["svg"]["path"] == "M0,0L500,500"
    err = capsys.readouterr().err
    assert "b.svg" in err
    assert "ignored: fill" in err
    assert "d.svg" in err

    glyphs = import_directory(str(tmp_path), code=0xF000, strict=True)
    assert [(glyph["css"], glyph["code"]) for glyph in glyphs] == [("a", 0xF000)]


def test_main(tmp_path):
    icons = tmp_path / "icons"
    icons.mkdir()
    (icons / "arrow up.svg").write_text(ICON.format('<path d="M0 0L24 24"/>'))
    output = tmp_path / "out"

    assert main([str(icons), str(output), "--name", "demo"]) == 0
    config = json.loads((output / "config.json").read_text())
    assert config["name"] == "demo"
    assert config["units_per_em"] == 1000
    assert [glyph["css"] for glyph in config["glyphs"]] == ["arrow-up"]
    font = etree.parse(str(output / "font" / "demo.svg")).getroot()
    assert len(font.findall("svg:defs/svg:font/svg:glyph", SVG_NS)) == 1


def test_main_errors(tmp_path):
    assert main([str(tmp_path / "missing"), str(tmp_path / "out")]) == 1
    assert main([str(tmp_path), str(tmp_path / "out")]) == 1
