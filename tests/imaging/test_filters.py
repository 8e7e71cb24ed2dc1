"""
Tests for the filter chain
"""

import numpy as np
import pytest

from core.enums import FilterName
from imaging.filters import (
    FilterChain,
    FilterOp,
    apply_filter_chain,
    build_filter_chain,
    grayscale_matrix,
    saturate_matrix,
)
from schemas.render import FilterOptions


class TestBuildFilterChain:
    """Test normalization of filter options"""

    def test_defaults_are_identity(self):
        chain = build_filter_chain(FilterOptions())

        assert chain.is_identity
        assert chain.to_css() == "none"

    def test_missing_options_are_identity(self):
        assert build_filter_chain(None).is_identity

    def test_canonical_order(self):
        """Operations always come out grayscale, blur, brightness, contrast, saturate"""
        options = FilterOptions(saturation=50, contrast=120, brightness=80, blur=2, grayscale=0.5)
        chain = build_filter_chain(options)

        assert [op.name for op in chain.ops] == [
            FilterName.GRAYSCALE,
            FilterName.BLUR,
            FilterName.BRIGHTNESS,
            FilterName.CONTRAST,
            FilterName.SATURATE,
        ]

    def test_values_are_clamped(self):
        options = FilterOptions(grayscale=4, blur=100, brightness=500, contrast=-10, saturation=301)
        values = {op.name: op.value for op in build_filter_chain(options).ops}

        assert values[FilterName.GRAYSCALE] == 1.0
        assert values[FilterName.BLUR] == 30.0
        assert values[FilterName.BRIGHTNESS] == 300.0
        assert values[FilterName.CONTRAST] == 0.0
        assert values[FilterName.SATURATE] == 300.0

    def test_malformed_values_fall_back_to_identity(self):
        options = FilterOptions.model_validate({"brightness": "bright", "blur": None, "grayscale": "x"})
        assert build_filter_chain(options).is_identity

    def test_to_css(self):
        chain = build_filter_chain(FilterOptions(grayscale=0.5, blur=1.5, brightness=110))
        assert chain.to_css() == "grayscale(50%) blur(1.5px) brightness(110%)"


class TestColorMatrices:
    """Test the CSS color matrices"""

    def test_grayscale_zero_is_identity(self):
        assert np.allclose(grayscale_matrix(0.0), np.eye(3))

    def test_saturate_one_is_identity(self):
        assert np.allclose(saturate_matrix(1.0), np.eye(3))

    def test_full_grayscale_rows_are_luma(self):
        matrix = grayscale_matrix(1.0)
        for row in matrix:
            assert np.allclose(row, [0.2126, 0.7152, 0.0722])


class TestApplyFilterChain:
    """Test pixel application of each operation"""

    def test_empty_chain_returns_input(self, gradient_raster, surface):
        assert apply_filter_chain(gradient_raster, FilterChain(), surface) is gradient_raster

    def test_full_grayscale_equalizes_channels(self, gradient_raster, surface):
        chain = build_filter_chain(FilterOptions(grayscale=1))
        out = apply_filter_chain(gradient_raster, chain, surface)

        assert np.array_equal(out[..., 0], out[..., 1])
        assert np.array_equal(out[..., 1], out[..., 2])

    def test_brightness_scales_rgb(self, surface):
        raster = np.full((4, 4, 4), (100, 50, 200, 255), dtype=np.uint8)
        chain = FilterChain((FilterOp(FilterName.BRIGHTNESS, 150),))
        out = apply_filter_chain(raster, chain, surface)

        assert tuple(out[0, 0]) == (150, 75, 255, 255)

    def test_contrast_zero_is_mid_gray(self, surface):
        raster = np.full((4, 4, 4), (10, 240, 77, 255), dtype=np.uint8)
        chain = FilterChain((FilterOp(FilterName.CONTRAST, 0),))
        out = apply_filter_chain(raster, chain, surface)

        assert tuple(out[0, 0]) == (128, 128, 128, 255)

    def test_saturate_zero_matches_luma(self, surface):
        raster = np.full((2, 2, 4), (255, 0, 0, 255), dtype=np.uint8)
        chain = FilterChain((FilterOp(FilterName.SATURATE, 0),))
        out = apply_filter_chain(raster, chain, surface)

        # 0.213 * 255 = 54.3
        assert tuple(out[0, 0]) == (54, 54, 54, 255)

    def test_alpha_is_untouched_by_color_ops(self, surface):
        raster = np.full((3, 3, 4), (100, 100, 100, 77), dtype=np.uint8)
        chain = build_filter_chain(FilterOptions(brightness=200, contrast=150, saturation=20))
        out = apply_filter_chain(raster, chain, surface)

        assert np.all(out[..., 3] == 77)

    def test_input_is_not_modified(self, gradient_raster, surface):
        before = gradient_raster.copy()
        apply_filter_chain(gradient_raster, build_filter_chain(FilterOptions(brightness=50)), surface)

        assert np.array_equal(gradient_raster, before)

    def test_blur_smooths_an_edge(self, surface):
        raster = np.zeros((20, 20, 4), dtype=np.uint8)
        raster[..., 3] = 255
        raster[:, 10:, :3] = 255
        chain = FilterChain((FilterOp(FilterName.BLUR, 2),))
        out = apply_filter_chain(raster, chain, surface)

        assert out.shape == raster.shape
        assert 0 < int(out[10, 9, 0]) < 255
        assert 0 < int(out[10, 10, 0]) < 255

    @pytest.mark.parametrize("value", [0.5, 1.0])
    def test_partial_grayscale_keeps_gray_pixels(self, surface, value):
        raster = np.full((2, 2, 4), (90, 90, 90, 255), dtype=np.uint8)
        chain = FilterChain((FilterOp(FilterName.GRAYSCALE, value),))
        out = apply_filter_chain(raster, chain, surface)

        assert tuple(out[0, 0]) == (90, 90, 90, 255)
