import pytest
import torch

from spectra.config import DFTPassConfig, ResultRect
from spectra.kernels.dispatch import VerticalDFTPass
from spectra.kernels.sampling import TextureSampler


def _has_triton() -> bool:
    try:
        import triton  # noqa: F401
        import triton.language  # noqa: F401
    except Exception:
        return False
    return True


@pytest.mark.skipif(not torch.cuda.is_available(), reason="CUDA not available")
@pytest.mark.skipif(not _has_triton(), reason="Triton not available")
@pytest.mark.parametrize("sampler", [TextureSampler(), TextureSampler(filter="point", address="wrap")])
def test_triton_matches_torch_reference(sampler) -> None:
    # Odd sizes and an offset rectangle so groups overhang on both axes.
    rect = ResultRect(3, 2, 40, 31)
    gen = torch.Generator().manual_seed(0)
    tex = torch.randn(36, 48, 3, generator=gen, dtype=torch.float32)

    cfg_kwargs = dict(rect=rect, magnitude_scale=4.0, sampler=sampler, group_size=(24, 24, 1))
    ref = VerticalDFTPass(DFTPassConfig(backend="torch", device="cpu", **cfg_kwargs)).dispatch(tex)

    dft_pass = VerticalDFTPass(DFTPassConfig(backend="triton", device="cuda", **cfg_kwargs))
    sentinel = torch.full((rect.size, 4), -7.0, device="cuda")
    out = dft_pass.dispatch(tex.cuda(), out=sentinel)

    assert out.shape == (rect.size, 4)
    assert torch.isfinite(out).all().item()
    # Every cell written exactly once: nothing left at the sentinel.
    assert not (out[:, 3] == -7.0).any().item()
    assert torch.allclose(out.cpu(), ref, rtol=1e-4, atol=1e-3)


@pytest.mark.skipif(not torch.cuda.is_available(), reason="CUDA not available")
@pytest.mark.skipif(not _has_triton(), reason="Triton not available")
def test_triton_ones_scenario() -> None:
    tex = torch.zeros(4, 4, 2, device="cuda")
    tex[..., 0] = 1.0
    cfg = DFTPassConfig(rect=ResultRect(0, 0, 4, 4), magnitude_scale=2.0, backend="triton", device="cuda")
    out = VerticalDFTPass(cfg).dispatch(tex).view(4, 4, 4).cpu()

    assert torch.allclose(out[2, :, :3], torch.full((4, 3), 2.0), atol=1e-4)
    assert torch.allclose(out[[0, 1, 3], :, :3], torch.zeros(3, 4, 3), atol=1e-4)
    assert torch.equal(out[..., 3], torch.ones(4, 4))
