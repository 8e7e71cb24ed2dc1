"""
Tests for compositing the source onto the canvas
"""

import numpy as np
import pytest

from imaging.compositor import composite, placement_matrix
from imaging.filters import FilterChain, build_filter_chain
from imaging.geometry import plan_geometry
from schemas.render import (
    FilterOptions,
    FlipOptions,
    OutputOptions,
    ResizeOptions,
    RotateOptions,
)


def quadrant_raster():
    """4x2 raster: left half red, right half blue"""
    raster = np.zeros((2, 4, 4), dtype=np.uint8)
    raster[..., 3] = 255
    raster[:, :2, 0] = 255
    raster[:, 2:, 2] = 255
    return raster


class TestCompositor:
    """Test canvas placement, transforms and background fill"""

    def test_identity_copies_source(self, gradient_raster, surface):
        plan = plan_geometry(80, 60)
        out = composite(gradient_raster, plan, FilterChain(), OutputOptions(), surface)

        assert np.array_equal(out, gradient_raster)
        assert out is not gradient_raster

    def test_horizontal_flip_mirrors_columns(self, gradient_raster, surface):
        plan = plan_geometry(80, 60, flip=FlipOptions(h=True))
        out = composite(gradient_raster, plan, FilterChain(), OutputOptions(), surface)

        assert np.array_equal(out, gradient_raster[:, ::-1])

    def test_vertical_flip_mirrors_rows(self, gradient_raster, surface):
        plan = plan_geometry(80, 60, flip=FlipOptions(v=True))
        out = composite(gradient_raster, plan, FilterChain(), OutputOptions(), surface)

        assert np.array_equal(out, gradient_raster[::-1])

    def test_rotate_90_is_clockwise(self, surface):
        """A clockwise quarter turn puts the left (red) half on top"""
        source = quadrant_raster()
        plan = plan_geometry(4, 2, rotate=RotateOptions(degrees=90))
        out = composite(source, plan, FilterChain(), OutputOptions(), surface)

        assert out.shape == (4, 2, 4)
        assert np.array_equal(out, np.rot90(source, k=-1))
        assert out[0, 0, 0] == 255 and out[3, 0, 2] == 255

    def test_rotate_180(self, gradient_raster, surface):
        plan = plan_geometry(80, 60, rotate=RotateOptions(degrees=180))
        out = composite(gradient_raster, plan, FilterChain(), OutputOptions(), surface)

        assert np.array_equal(out, gradient_raster[::-1, ::-1])

    def test_non_right_angle_keeps_canvas_and_clips_corners(self, flat_raster, surface):
        plan = plan_geometry(40, 30, rotate=RotateOptions(degrees=30))
        out = composite(flat_raster, plan, FilterChain(), OutputOptions(), surface)

        assert out.shape == flat_raster.shape
        assert out[0, 0, 3] == 0
        assert out[15, 20, 3] == 255

    def test_jpeg_output_gets_background(self, flat_raster, surface):
        plan = plan_geometry(40, 30, rotate=RotateOptions(degrees=30))
        output = OutputOptions.model_validate({"type": "image/jpg", "jpegBackground": "#00ff00"})
        out = composite(flat_raster, plan, FilterChain(), output, surface)

        assert tuple(out[0, 0]) == (0, 255, 0, 255)

    def test_png_output_stays_transparent(self, flat_raster, surface):
        plan = plan_geometry(40, 30, rotate=RotateOptions(degrees=30))
        output = OutputOptions.model_validate({"type": "image/png", "jpegBackground": "#00ff00"})
        out = composite(flat_raster, plan, FilterChain(), output, surface)

        assert tuple(out[0, 0]) == (0, 0, 0, 0)

    def test_resize_output_size(self, gradient_raster, surface):
        resize = ResizeOptions(enabled=True, mode="exact", width=33, height=17)
        plan = plan_geometry(80, 60, resize=resize, rotate=RotateOptions(degrees=-90))
        out = composite(gradient_raster, plan, FilterChain(), OutputOptions(), surface)

        assert out.shape == (33, 17, 4)

    def test_filters_apply_to_the_drawn_layer(self, flat_raster, surface):
        plan = plan_geometry(40, 30)
        chain = build_filter_chain(FilterOptions(grayscale=1))
        out = composite(flat_raster, plan, chain, OutputOptions(), surface)

        assert out[0, 0, 0] == out[0, 0, 1] == out[0, 0, 2]

    @pytest.mark.parametrize("degrees", [0, 90, 180, 270])
    def test_placement_maps_layer_into_canvas(self, degrees):
        resize = ResizeOptions(enabled=True, mode="exact", width=40, height=20)
        plan = plan_geometry(80, 60, resize=resize, rotate=RotateOptions(degrees=degrees))
        matrix = placement_matrix(plan)

        corners = np.array([[0, 40, 0, 40], [0, 0, 20, 20], [1, 1, 1, 1]], dtype=np.float64)
        mapped = matrix @ corners

        assert np.allclose(mapped[0].min(), 0) and np.allclose(mapped[0].max(), plan.canvas_width)
        assert np.allclose(mapped[1].min(), 0) and np.allclose(mapped[1].max(), plan.canvas_height)
