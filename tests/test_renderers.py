"""Tests for the SVG, matplotlib, and Plotly renderers."""

import asyncio
import xml.etree.ElementTree as ET

from moonphases.compute import generate_stars
from moonphases.renderers.plotly_2d import render_fraction_chart
from moonphases.renderers.static import ViewRenderer, rasterize_views, save_static_views
from moonphases.renderers.svg_2d import (
    XML_DECLARATION,
    export_svg,
    render_moon_svg,
    render_orbit_svg,
)
from moonphases.state import AngleState

_SVG_NS = "{http://www.w3.org/2000/svg}"


def _parse(svg):
    return ET.fromstring(svg)


def _mean_gray(img, box):
    region = img.crop(box).convert("L")
    return sum(region.getdata()) / (region.width * region.height)


class TestSvgViews:
    def test_orbit_view_places_moon(self):
        root = _parse(render_orbit_svg(90))
        assert root.get("id") == "orbit-svg"
        assert root.get("viewBox") == "0 0 400 400"
        moon_groups = [
            g for g in root.iter(f"{_SVG_NS}g")
            if g.get("transform", "").startswith("translate(200.000, 80.000)")
        ]
        assert len(moon_groups) == 1

    def test_moon_view_contains_terminator_path(self):
        svg = render_moon_svg(45)
        root = _parse(svg)
        assert root.get("id") == "phase-svg"
        assert 'd="M 0 -100 A 100 100 0 0 1 0 100 A 70.7107 100 0 0 0 0 -100 Z"' in svg

    def test_new_moon_has_no_lit_path(self):
        svg = render_moon_svg(0)
        _parse(svg)
        assert "litClip" not in svg

    def test_stars_drawn_in_both_views(self):
        stars = generate_stars(count=5, seed=1)
        assert render_orbit_svg(0, stars).count('id="os-') == 5
        assert render_moon_svg(0, stars).count('id="ms-') == 5

    def test_japanese_labels(self):
        assert "太陽 (SUN)" in render_orbit_svg(0, lang="ja")
        assert "地球から見た月" in render_moon_svg(0, lang="ja")

    def test_export_prepends_xml_declaration(self):
        data = export_svg(render_moon_svg(200))
        assert data.startswith(b'<?xml version="1.0" standalone="no"?>\r\n<svg')
        assert XML_DECLARATION == '<?xml version="1.0" standalone="no"?>\r\n'
        _parse(data)


class TestRasterViews:
    def test_views_are_square_rgb(self):
        orbit, moon = rasterize_views(135)
        assert orbit.size == moon.size == (400, 400)
        assert orbit.mode == moon.mode == "RGB"

    def test_full_moon_is_brighter_than_new_moon(self):
        _, new = rasterize_views(0)
        _, full = rasterize_views(180)
        box = (150, 150, 250, 250)
        assert _mean_gray(full, box) > _mean_gray(new, box) + 100

    def test_waxing_lights_the_right_side(self):
        _, moon = rasterize_views(90)
        gray = moon.convert("L")
        assert gray.getpixel((250, 200)) > gray.getpixel((150, 200)) + 100

    def test_save_static_views(self, tmp_path):
        orbit_path, moon_path = save_static_views(270, tmp_path / "out")
        assert orbit_path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"
        assert moon_path.exists()


def test_view_renderer_acknowledges_drawn_angles():
    async def scenario():
        state = AngleState(0.0)
        renderer = ViewRenderer(state)
        try:
            drawn = state.drawn(225.0)
            state.set(225.0)
            assert await drawn == 225.0
            assert 'id="phase-svg"' in renderer.moon_svg
            orbit, moon = await renderer.render()
            return orbit.size, moon.size
        finally:
            renderer.close()

    assert asyncio.run(scenario()) == ((400, 400), (400, 400))


def test_view_renderer_redraws_synchronously_outside_a_loop():
    state = AngleState(0.0)
    renderer = ViewRenderer(state)
    before = renderer.moon_svg
    state.set(90.0)
    assert renderer.moon_svg != before
    renderer.close()


def test_fraction_chart_marks_current_angle():
    fig = render_fraction_chart(-90)
    curve, marker = fig.data
    assert len(curve.x) == 361
    assert list(marker.x) == [270.0]
    assert abs(marker.y[0] - 0.5) < 1e-9
    assert list(fig.layout.xaxis.ticktext)[4] == "Full Moon"


def test_view_renderer_render_returns_the_acknowledged_rasters(monkeypatch):
    import moonphases.renderers.static as static

    expected_orbit, expected_moon = rasterize_views(225.0)

    async def scenario():
        state = AngleState(0.0)
        renderer = ViewRenderer(state)
        try:
            drawn = state.drawn(225.0)
            state.set(225.0)
            await drawn
            assert renderer.drawn_angle == 225.0

            def no_redraw(*args, **kwargs):
                raise AssertionError("render() must reuse the drawn views")

            monkeypatch.setattr(static, "rasterize_views", no_redraw)
            return await renderer.render()
        finally:
            renderer.close()

    orbit, moon = asyncio.run(scenario())
    assert orbit.tobytes() == expected_orbit.tobytes()
    assert moon.tobytes() == expected_moon.tobytes()


def test_view_renderer_rasterizes_undrawn_angle():
    state = AngleState(0.0)
    renderer = ViewRenderer(state)
    state.set(180.0)
    assert renderer.drawn_angle is None
    orbit, moon = asyncio.run(renderer.render())
    renderer.close()
    _, expected_moon = rasterize_views(180.0)
    assert moon.tobytes() == expected_moon.tobytes()
