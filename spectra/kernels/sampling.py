"""Scene → texel coordinate mapping and filtered texture fetches.

The input texture is a complex field channel-packed into the first two channels
of an (H, W, C) tensor. Coordinates handed to the sampler are normalized
(u, v in [0, 1] spans the texture) and follow the texel-center convention:
texel i covers [i, i+1) and is sampled exactly at u = (i + 0.5) / W.

All operations are pure torch (works on CPU/CUDA/MPS) and broadcast over any
batch shape of coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import torch

if TYPE_CHECKING:
    from spectra.config import SceneToTexel

FILTERS = ("bilinear", "point")
ADDRESS_MODES = ("clamp", "wrap")


def check_texture(image: torch.Tensor) -> None:
    if image.ndim != 3 or image.shape[2] < 2:
        raise ValueError(f"texture must have shape (H, W, C) with C >= 2, got {tuple(image.shape)}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError(f"texture must be non-empty, got {tuple(image.shape)}")


def map_scene_position(
    coefficients: "SceneToTexel",
    scene_x: torch.Tensor,
    scene_y: torch.Tensor,
) -> tuple[torch.Tensor, torch.Tensor]:
    """Apply the per-axis affine map; callers pass pixel-center positions."""
    return coefficients.x.apply(scene_x), coefficients.y.apply(scene_y)


@dataclass(frozen=True)
class TextureSampler:
    """Sampler state bound next to the input texture."""

    filter: str = "bilinear"
    address: str = "clamp"

    def validate(self) -> "TextureSampler":
        if self.filter not in FILTERS:
            raise ValueError(f"filter must be one of {FILTERS}, got {self.filter!r}")
        if self.address not in ADDRESS_MODES:
            raise ValueError(f"address must be one of {ADDRESS_MODES}, got {self.address!r}")
        return self

    def _address(self, idx: torch.Tensor, size: int) -> torch.Tensor:
        if self.address == "wrap":
            return torch.remainder(idx, size)
        return idx.clamp(0, size - 1)

    def sample(self, image: torch.Tensor, u: torch.Tensor, v: torch.Tensor) -> torch.Tensor:
        """Fetch (real, imag) at normalized (u, v).

        u, v: float tensors of a common broadcast shape S.
        returns: (*S, 2) float32
        """
        check_texture(image)
        th, tw = int(image.shape[0]), int(image.shape[1])
        tex = image[..., :2].to(torch.float32)
        u, v = torch.broadcast_tensors(u.to(torch.float32), v.to(torch.float32))

        if self.filter == "point":
            ix = self._address(torch.floor(u * tw).to(torch.int64), tw)
            iy = self._address(torch.floor(v * th).to(torch.int64), th)
            return tex[iy, ix]

        px = u * tw - 0.5
        py = v * th - 0.5
        x0f = torch.floor(px)
        y0f = torch.floor(py)
        fx = (px - x0f)[..., None]
        fy = (py - y0f)[..., None]
        x0 = x0f.to(torch.int64)
        y0 = y0f.to(torch.int64)
        x1 = self._address(x0 + 1, tw)
        y1 = self._address(y0 + 1, th)
        x0 = self._address(x0, tw)
        y0 = self._address(y0, th)

        top = tex[y0, x0] * (1.0 - fx) + tex[y0, x1] * fx
        bottom = tex[y1, x0] * (1.0 - fx) + tex[y1, x1] * fx
        return top * (1.0 - fy) + bottom * fy

    def sample_scene(
        self,
        image: torch.Tensor,
        coefficients: "SceneToTexel",
        scene_x: torch.Tensor,
        scene_y: torch.Tensor,
    ) -> torch.Tensor:
        u, v = map_scene_position(coefficients, scene_x, scene_y)
        return self.sample(image, u, v)
