"""
Tests for the Laplacian sharpen
"""

import numpy as np

from imaging.sharpen import apply_sharpen


class TestSharpen:
    """Test sharpen kernel behavior"""

    def test_zero_strength_is_noop(self, gradient_raster):
        """Strength 0 returns the raster byte-identical"""
        before = gradient_raster.copy()
        out = apply_sharpen(gradient_raster, 0)

        assert out is gradient_raster
        assert np.array_equal(out, before)

    def test_flat_raster_is_fixed_point(self, flat_raster):
        """Uniform rasters are unchanged at any strength"""
        for strength in (1, 2.5, 3):
            assert np.array_equal(apply_sharpen(flat_raster, strength), flat_raster)

    def test_alpha_passes_through(self, gradient_raster):
        gradient_raster[..., 3] = np.arange(gradient_raster.shape[1], dtype=np.uint8)[np.newaxis, :]
        out = apply_sharpen(gradient_raster, 2)

        assert np.array_equal(out[..., 3], gradient_raster[..., 3])

    def test_single_bright_pixel(self):
        """Center gets 1+4s, direct neighbours get -s, diagonals untouched"""
        raster = np.zeros((5, 5, 4), dtype=np.uint8)
        raster[..., 3] = 255
        raster[..., :3] = 10
        raster[2, 2, :3] = 50

        out = apply_sharpen(raster, 0.5)

        # 50 * 3 - 4 * 10 * 0.5 = 130
        assert out[2, 2, 0] == 130
        # 10 * 3 - 0.5 * (50 + 3 * 10) = -10 -> clamped
        assert out[1, 2, 0] == 0
        assert out[2, 1, 0] == 0
        assert out[1, 1, 0] == 10

    def test_edges_clamp_instead_of_wrapping(self):
        """Edge pixels reuse themselves for out-of-bounds neighbours"""
        raster = np.zeros((1, 3, 4), dtype=np.uint8)
        raster[..., 3] = 255
        raster[0, :, 0] = (100, 100, 200)

        out = apply_sharpen(raster, 1)

        # Left pixel: 5*100 - (100 + 100 + 100 + 100) = 100
        assert out[0, 0, 0] == 100
        # Right pixel: 5*200 - (100 + 200 + 200 + 200) = 300 -> 255
        assert out[0, 2, 0] == 255

    def test_strength_is_clamped(self, gradient_raster):
        assert np.array_equal(apply_sharpen(gradient_raster, 99), apply_sharpen(gradient_raster, 3))
        assert apply_sharpen(gradient_raster, -1) is gradient_raster

    def test_rounds_half_up(self):
        raster = np.zeros((1, 2, 4), dtype=np.uint8)
        raster[..., 3] = 255
        raster[0, :, 0] = (3, 4)

        out = apply_sharpen(raster, 0.5)

        # 3 * 3 - 0.5 * (3 + 4 + 3 + 3) = 2.5 -> 3
        assert out[0, 0, 0] == 3
