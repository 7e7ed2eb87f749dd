"""
Tests for the geometry engine and its ambient helpers.

Tests cover:
- Fingerprint cache behaviour
- End-to-end geometry builds per mode / style
- Label scaling
- Settings, colours and mesh export
"""

import dataclasses
import json

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sphere_engine import (
    Capability,
    SphereEngine,
    assign_layout,
    compute_geometry,
    compute_label_font_size,
    geometry_fingerprint,
    label_anchor,
    update_scores,
)
from common.config import (
    SphereSettings,
    SurfaceMetadata,
    ConnectionMode,
    ConnectionStyle,
    FillColorMode,
)
from common.colors import hex_to_rgb
from common.io import save_mesh, load_mesh
from common.mesh_ops import surface_to_trimesh, compute_mesh_stats
from build_sphere import make_capabilities, export_geometry, inspect_mesh


# ============== Fixtures ==============

@pytest.fixture
def capabilities():
    """Eight laid-out capabilities with varied scores."""
    return make_capabilities(8, scores=[0, 2, 5, 1, 3, 4, 0, 6])


@pytest.fixture
def settings():
    return SphereSettings(
        connection_mode=ConnectionMode.AUTO,
        connection_style=ConnectionStyle.CURVE_IN,
        fill_color_mode=FillColorMode.GRADIENT,
        fill_opacity=0.2,
    )


# ============== Engine Tests ==============

class TestSphereEngine:
    """Test memoised geometry builds."""

    def test_cache_hit_returns_same_object(self, capabilities, settings):
        engine = SphereEngine(settings)
        first = engine.build(capabilities)
        second = engine.build(list(capabilities))

        assert first is second
        assert engine.cache.hits == 1
        assert engine.cache.misses == 1

    def test_score_change_misses(self, capabilities, settings):
        engine = SphereEngine(settings)
        first = engine.build(capabilities)
        second = engine.build(update_scores(capabilities, {"1": 9.0}))

        assert first is not second
        assert first.fingerprint != second.fingerprint

    def test_setting_change_misses(self, capabilities, settings):
        engine = SphereEngine(settings)
        first = engine.build(capabilities)
        second = engine.build(capabilities, SphereSettings(fill_opacity=1.0))

        assert first is not second
        assert second.surface.is_opaque is True
        assert engine.cache.misses == 2

    def test_invalidate(self, capabilities, settings):
        engine = SphereEngine(settings)
        first = engine.build(capabilities)
        engine.invalidate()

        assert engine.build(capabilities) is not first

    def test_recompute_is_identical(self, capabilities, settings):
        first = compute_geometry(capabilities, settings)
        second = compute_geometry(capabilities, settings)

        assert first.surface.positions.tobytes() == second.surface.positions.tobytes()
        assert first.surface.colors.tobytes() == second.surface.colors.tobytes()
        assert [e.key for e in first.edges] == [e.key for e in second.edges]

    def test_fingerprint_ignores_solid_color_in_gradient_mode(self, capabilities):
        a = SphereSettings(fill_color_mode=FillColorMode.GRADIENT, fill_solid_color="#000000")
        b = SphereSettings(fill_color_mode=FillColorMode.GRADIENT, fill_solid_color="#ffffff")
        assert geometry_fingerprint(capabilities, a) == geometry_fingerprint(capabilities, b)

    def test_fingerprint_tracks_count(self, capabilities, settings):
        shorter = assign_layout(capabilities[:-1])
        assert geometry_fingerprint(capabilities, settings) != geometry_fingerprint(shorter, settings)

    def test_default_settings_not_shared(self):
        """Editing one engine's default settings leaves new engines untouched."""
        first = SphereEngine()
        first.settings.connection_mode = ConnectionMode.FIXED
        first.settings.fill_opacity = 1.0

        second = SphereEngine()

        assert second.settings is not first.settings
        assert second.settings.connection_mode == ConnectionMode.AUTO
        assert second.settings.fill_opacity == 0.2

    def test_cached_result_is_read_only(self, capabilities, settings):
        engine = SphereEngine(settings)
        first = engine.build(capabilities)
        n_faces = len(first.faces)

        assert isinstance(first.faces, tuple)
        assert isinstance(first.edges, tuple)
        with pytest.raises(AttributeError):
            first.faces.clear()
        with pytest.raises(dataclasses.FrozenInstanceError):
            first.faces = ()

        assert len(engine.build(capabilities).faces) == n_faces


class TestComputeGeometry:
    """End-to-end builds."""

    def test_hull_curved(self, capabilities, settings):
        geometry = compute_geometry(capabilities, settings)

        assert geometry.n_nodes == 8
        assert len(geometry.faces) > 0
        assert geometry.surface.n_vertices == 432 * len(geometry.faces)
        assert geometry.surface.is_opaque is False

    def test_hull_straight(self, capabilities):
        settings = SphereSettings(connection_style=ConnectionStyle.STRAIGHT)
        geometry = compute_geometry(capabilities, settings)

        assert geometry.surface.n_vertices == 3 * len(geometry.faces)

    def test_fixed_mode(self, capabilities):
        settings = SphereSettings(connection_mode=ConnectionMode.FIXED, connection_neighbors=7)
        geometry = compute_geometry(capabilities, settings)

        assert len(geometry.edges) == 28

    def test_hull_below_four(self):
        caps = make_capabilities(3)
        geometry = compute_geometry(caps, SphereSettings(connection_mode=ConnectionMode.AUTO))

        assert geometry.edges == ()
        assert geometry.faces == ()
        assert geometry.surface.n_vertices == 0

    def test_empty_capabilities(self):
        geometry = compute_geometry([], SphereSettings())
        assert geometry.n_nodes == 0
        assert geometry.surface.n_vertices == 0

    def test_fill_disabled(self, capabilities):
        geometry = compute_geometry(capabilities, SphereSettings(fill_mesh=False))

        assert len(geometry.faces) > 0
        assert geometry.surface.n_vertices == 0

    def test_style_none(self, capabilities):
        geometry = compute_geometry(capabilities, SphereSettings(connection_style=ConnectionStyle.NONE))

        assert geometry.edges == ()
        assert geometry.surface.n_vertices == 0
        assert geometry.n_nodes == 8

    def test_core_color_mode(self, capabilities):
        settings = SphereSettings(fill_color_mode=FillColorMode.CORE, core_color="#ff0000")
        geometry = compute_geometry(capabilities, settings)

        np.testing.assert_allclose(
            geometry.surface.colors,
            np.tile([1.0, 0.0, 0.0], (geometry.surface.n_vertices, 1)),
            atol=1e-6
        )

    def test_gradient_ignores_unused_solid_color(self, capabilities):
        """A malformed solid colour only matters when a solid mode reads it."""
        gradient = SphereSettings(fill_color_mode=FillColorMode.GRADIENT, fill_solid_color="bogus")
        geometry = compute_geometry(capabilities, gradient)
        assert geometry.surface.n_vertices > 0

        solid = SphereSettings(fill_color_mode=FillColorMode.SOLID, fill_solid_color="bogus")
        with pytest.raises(ValueError):
            compute_geometry(capabilities, solid)

    def test_solid_color_mode(self, capabilities):
        settings = SphereSettings(fill_color_mode=FillColorMode.SOLID, fill_solid_color="#0000ff")
        geometry = compute_geometry(capabilities, settings)

        np.testing.assert_allclose(geometry.surface.colors[:, 2], 1.0, atol=1e-6)
        np.testing.assert_allclose(geometry.surface.colors[:, :2], 0.0, atol=1e-6)


# ============== Label Tests ==============

class TestLabelScaler:
    """Test label font-size compensation."""

    def test_close_camera_keeps_label_size(self):
        assert compute_label_font_size(15.0, 12.0, 8.0) == 12.0

    def test_far_camera_boosts_size(self):
        # scale = 0.5 -> on-screen 6 < 8 -> font 16
        assert compute_label_font_size(30.0, 12.0, 8.0) == pytest.approx(16.0)

    def test_boost_meets_minimum(self):
        for distance in [20.0, 50.0, 100.0]:
            font = compute_label_font_size(distance, 12.0, 8.0)
            assert font * (15.0 / distance) >= 8.0 - 1e-9

    @pytest.mark.parametrize("distance", [1e-9, 0.0, -1.0, 1.0, 100.0, 1e4, 1e9])
    def test_never_above_ceiling(self, distance):
        assert compute_label_font_size(distance, 12.0, 8.0) <= 1500.0
        assert compute_label_font_size(distance, 5000.0, 8.0) <= 1500.0

    def test_ceiling_reached_far_away(self):
        assert compute_label_font_size(1e9, 12.0, 8.0) == 1500.0

    def test_label_anchor_offset(self):
        anchor = label_anchor(np.array([0.0, 2.0, 0.0]))
        np.testing.assert_allclose(anchor, [0.0, 2.4, 0.0])

    def test_label_anchor_origin(self):
        np.testing.assert_allclose(label_anchor(np.zeros(3)), np.zeros(3))


# ============== Settings / Colour Tests ==============

class TestSphereSettings:
    """Test settings dataclass."""

    def test_default_values(self):
        settings = SphereSettings()

        assert settings.core_radius == 1.0
        assert settings.bar_base_length == 0.5
        assert settings.score_scale == 0.3
        assert settings.connection_mode == ConnectionMode.AUTO
        assert settings.connection_style == ConnectionStyle.CURVE_IN
        assert settings.connection_neighbors == 3
        assert settings.fill_color_mode == FillColorMode.GRADIENT
        assert settings.fill_opacity == 0.2

    def test_tip_radius(self):
        assert SphereSettings().tip_radius(10) == pytest.approx(4.5)

    def test_reference_color(self):
        assert SphereSettings(fill_color_mode=FillColorMode.CORE, core_color="#123456").reference_color == "#123456"
        assert SphereSettings(fill_color_mode=FillColorMode.SOLID, fill_solid_color="#abcdef").reference_color == "#abcdef"

    def test_json_round_trip(self, tmp_path):
        settings = SphereSettings(
            connection_mode=ConnectionMode.FIXED,
            connection_style=ConnectionStyle.CURVE_OUT,
            connection_neighbors=4,
            fill_color_mode=FillColorMode.SOLID,
        )
        path = tmp_path / "settings.json"
        settings.save(path)
        loaded = SphereSettings.from_json(path)

        assert loaded.to_dict() == settings.to_dict()

    def test_partial_json(self, tmp_path):
        path = tmp_path / "partial.json"
        path.write_text(json.dumps({"connection_style": "straight", "core_radius": 2.0}))
        loaded = SphereSettings.from_json(path)

        assert loaded.connection_style == ConnectionStyle.STRAIGHT
        assert loaded.core_radius == 2.0
        assert loaded.connection_mode == ConnectionMode.AUTO

    def test_unknown_enum_raises(self):
        with pytest.raises(ValueError):
            SphereSettings.from_dict({"connection_mode": "sideways"})


class TestColors:
    """Test hex colour parsing."""

    def test_hex_to_rgb(self):
        assert hex_to_rgb("#ff0000") == (1.0, 0.0, 0.0)
        np.testing.assert_allclose(hex_to_rgb("#3b82f6"), (0x3b / 255, 0x82 / 255, 0xf6 / 255))

    def test_without_hash(self):
        assert hex_to_rgb("00ff00") == (0.0, 1.0, 0.0)

    @pytest.mark.parametrize("bad", ["#fff", "red", "#gg0000", "", None])
    def test_invalid_raises(self, bad):
        with pytest.raises(ValueError):
            hex_to_rgb(bad)


# ============== Export Tests ==============

class TestExport:
    """Test mesh conversion and export."""

    def test_surface_to_trimesh(self, capabilities, settings):
        geometry = compute_geometry(capabilities, settings)
        mesh = surface_to_trimesh(geometry.surface.positions, geometry.surface.colors)

        assert len(mesh.faces) == geometry.surface.n_triangles
        assert mesh.visual.vertex_colors.shape == (geometry.surface.n_vertices, 4)

    def test_mesh_stats(self, capabilities, settings):
        geometry = compute_geometry(capabilities, settings)
        stats = compute_mesh_stats(surface_to_trimesh(geometry.surface.positions, geometry.surface.colors))

        assert stats["n_faces"] == geometry.surface.n_triangles
        assert stats["surface_area"] > 0
        assert stats["max_extent"] > 0

    def test_empty_mesh_stats(self):
        stats = compute_mesh_stats(surface_to_trimesh(np.empty((0, 3)), np.empty((0, 3))))
        assert stats["n_vertices"] == 0

    def test_save_and_load(self, capabilities, settings, tmp_path):
        geometry = compute_geometry(capabilities, settings)
        mesh = surface_to_trimesh(geometry.surface.positions, geometry.surface.colors)
        metadata = SurfaceMetadata(
            n_nodes=geometry.n_nodes,
            n_edges=len(geometry.edges),
            n_faces=len(geometry.faces),
            n_vertices=geometry.surface.n_vertices,
            n_triangles=geometry.surface.n_triangles,
            is_opaque=geometry.surface.is_opaque,
            fingerprint=geometry.fingerprint,
        )

        path = tmp_path / "sphere.ply"
        save_mesh(mesh, path, metadata)
        loaded, loaded_meta = load_mesh(path)

        assert path.exists()
        assert path.with_suffix(".json").exists()
        assert len(loaded.faces) == geometry.surface.n_triangles
        assert loaded_meta.fingerprint == geometry.fingerprint

    def test_export_geometry(self, capabilities, settings, tmp_path):
        geometry = compute_geometry(capabilities, settings)
        metadata = export_geometry(geometry, settings, tmp_path / "out.glb")

        assert (tmp_path / "out.glb").exists()
        assert metadata.n_faces == len(geometry.faces)
        assert metadata.settings["connection_mode"] == "auto"

    def test_export_empty_writes_metadata_only(self, tmp_path):
        caps = make_capabilities(2)
        settings = SphereSettings()
        geometry = compute_geometry(caps, settings)
        export_geometry(geometry, settings, tmp_path / "empty.glb")

        assert not (tmp_path / "empty.glb").exists()
        assert (tmp_path / "empty.json").exists()

    def test_inspect_exported_mesh(self, capabilities, settings, tmp_path):
        geometry = compute_geometry(capabilities, settings)
        export_geometry(geometry, settings, tmp_path / "out.ply")

        report = inspect_mesh(tmp_path / "out.ply")

        assert report["mesh_stats"]["n_faces"] == geometry.surface.n_triangles
        assert report["metadata"]["fingerprint"] == geometry.fingerprint
        json.dumps(report)

    def test_inspect_without_sidecar(self, capabilities, settings, tmp_path):
        geometry = compute_geometry(capabilities, settings)
        export_geometry(geometry, settings, tmp_path / "out.ply")
        (tmp_path / "out.json").unlink()

        report = inspect_mesh(tmp_path / "out.ply")

        assert report["metadata"] is None
        assert report["mesh_stats"]["n_faces"] == geometry.surface.n_triangles


class TestDemoCapabilities:
    """Test the CLI's demo capability generator."""

    def test_count(self):
        caps = make_capabilities(11)
        assert len(caps) == 11
        assert len({c.id for c in caps}) == 11

    def test_scores_override_count(self):
        caps = make_capabilities(3, scores=[1, 2, 3, 4])
        assert [c.score for c in caps] == [1.0, 2.0, 3.0, 4.0]

    def test_laid_out(self):
        caps = make_capabilities(4)
        assert caps[1].phi == pytest.approx(np.arccos(-1 / 3))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
