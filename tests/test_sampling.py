"""Tests for the scene → texel mapping and the texture sampler.

Run with:
    pytest tests/test_sampling.py -v
"""

from __future__ import annotations

import pytest
import torch

from spectra.config import AxisCoefficients, SceneToTexel
from spectra.kernels.sampling import TextureSampler, check_texture, map_scene_position


def _ramp_texture(h: int, w: int) -> torch.Tensor:
    re = torch.arange(h * w, dtype=torch.float32).view(h, w)
    im = -re * 0.5
    return torch.stack([re, im, torch.zeros_like(re)], dim=-1)


def test_affine_map_per_axis():
    coeffs = SceneToTexel(x=AxisCoefficients(2.0, 1.0), y=AxisCoefficients(0.5, -3.0))
    u, v = map_scene_position(coeffs, torch.tensor([1.5, 4.0]), torch.tensor([2.0, 10.0]))
    assert torch.allclose(u, torch.tensor([4.0, 9.0]))
    assert torch.allclose(v, torch.tensor([-2.0, 2.0]))


def test_for_texture_lands_on_texel_centers():
    coeffs = SceneToTexel.for_texture(8, 4)
    u, v = map_scene_position(coeffs, torch.tensor(3.5), torch.tensor(1.5))
    assert float(u) == pytest.approx(3.5 / 8.0)
    assert float(v) == pytest.approx(1.5 / 4.0)


def test_for_texture_origin_shifts_scene():
    coeffs = SceneToTexel.for_texture(8, 8, origin=(2.0, 4.0))
    u, v = map_scene_position(coeffs, torch.tensor(2.5), torch.tensor(4.5))
    assert float(u) == pytest.approx(0.5 / 8.0)
    assert float(v) == pytest.approx(0.5 / 8.0)


def test_for_texture_rejects_empty():
    with pytest.raises(ValueError):
        SceneToTexel.for_texture(0, 4)


@pytest.mark.parametrize("filter_mode", ["bilinear", "point"])
def test_texel_center_fetch_is_exact(filter_mode):
    tex = _ramp_texture(4, 8)
    sampler = TextureSampler(filter=filter_mode)
    coeffs = SceneToTexel.for_texture(8, 4)
    ys, xs = torch.meshgrid(torch.arange(4), torch.arange(8), indexing="ij")
    out = sampler.sample_scene(tex, coeffs, xs.float() + 0.5, ys.float() + 0.5)
    assert out.shape == (4, 8, 2)
    assert torch.allclose(out, tex[..., :2], atol=1e-5)


def test_bilinear_blends_neighbours():
    tex = _ramp_texture(2, 4)
    sampler = TextureSampler()
    # Halfway between texels (0,1) and (0,2) horizontally, on row 0.
    out = sampler.sample(tex, torch.tensor(2.0 / 4.0), torch.tensor(0.5 / 2.0))
    assert out[0].item() == pytest.approx(1.5)
    assert out[1].item() == pytest.approx(-0.75)


def test_clamp_and_wrap_differ_at_edge():
    tex = _ramp_texture(1, 4)
    u = torch.tensor(0.0)
    v = torch.tensor(0.5)
    clamped = TextureSampler(address="clamp").sample(tex, u, v)
    wrapped = TextureSampler(address="wrap").sample(tex, u, v)
    assert clamped[0].item() == pytest.approx(0.0)
    # Half of texel 3 and half of texel 0.
    assert wrapped[0].item() == pytest.approx(1.5)


def test_point_filter_picks_containing_texel():
    tex = _ramp_texture(2, 4)
    out = TextureSampler(filter="point").sample(tex, torch.tensor(0.74), torch.tensor(0.9))
    assert out[0].item() == pytest.approx(float(tex[1, 2, 0]))


@pytest.mark.parametrize(
    "sampler",
    [TextureSampler(filter="cubic"), TextureSampler(address="mirror")],
)
def test_unknown_sampler_state_rejected(sampler):
    with pytest.raises(ValueError):
        sampler.validate()


@pytest.mark.parametrize("shape", [(4, 4), (4, 4, 1), (0, 4, 2)])
def test_check_texture_rejects_bad_shapes(shape):
    with pytest.raises(ValueError):
        check_texture(torch.zeros(shape))
