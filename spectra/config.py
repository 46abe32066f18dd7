"""Dispatch configuration for the vertical DFT pass.

These are the constant blocks the host binds before a dispatch: the result
rectangle, the scene-to-texel coefficients, the magnitude scale and the
work-group shape. Validation lives here, on the host side; the kernel itself
never checks numeric contracts.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import torch

from spectra.kernels.runtime import get_device
from spectra.kernels.sampling import TextureSampler

# Per-group thread budget of the target hardware (D3D11 / CUDA limit).
MAX_THREADS_PER_GROUP = 1024

BACKENDS = ("auto", "torch", "triton")


@dataclass(frozen=True)
class ResultRect:
    """Logical input/output region in scene space (right/bottom exclusive)."""

    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return int(self.right) - int(self.left)

    @property
    def height(self) -> int:
        return int(self.bottom) - int(self.top)

    @property
    def size(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class AxisCoefficients:
    """Affine scene → texel map for one axis: texel = scene * scale + offset."""

    scale: float
    offset: float = 0.0

    def apply(self, scene_pos):
        return scene_pos * self.scale + self.offset


@dataclass(frozen=True)
class SceneToTexel:
    x: AxisCoefficients
    y: AxisCoefficients

    @classmethod
    def for_texture(cls, width: int, height: int, *, origin: tuple[float, float] = (0.0, 0.0)) -> "SceneToTexel":
        """Map scene pixels 1:1 onto normalized coordinates of a width×height texture.

        `origin` is the scene position of the texture's top-left corner.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"texture size must be positive, got {width}x{height}")
        ox, oy = float(origin[0]), float(origin[1])
        return cls(
            x=AxisCoefficients(scale=1.0 / float(width), offset=-ox / float(width)),
            y=AxisCoefficients(scale=1.0 / float(height), offset=-oy / float(height)),
        )


def group_counts(width: int, height: int, group_size: tuple[int, int, int]) -> tuple[int, int, int]:
    """Number of work-groups per axis needed to cover a width×height region."""
    gx, gy, _gz = group_size
    return (int(math.ceil(width / gx)), int(math.ceil(height / gy)), 1)


@dataclass
class DFTPassConfig:
    """Everything the host supplies for one vertical-pass dispatch."""

    rect: ResultRect
    # None: map the rectangle 1:1 onto whatever texture is bound at dispatch.
    coefficients: SceneToTexel | None = None
    magnitude_scale: float = 1.0

    # Work-group shape (NUMTHREADS_X, NUMTHREADS_Y, NUMTHREADS_Z).
    group_size: tuple[int, int, int] = (24, 24, 1)
    sampler: TextureSampler = field(default_factory=TextureSampler)

    backend: str = "auto"
    device: str = field(default_factory=get_device)
    dtype: torch.dtype = field(default_factory=lambda: torch.float32)

    @property
    def width(self) -> int:
        return self.rect.width

    @property
    def height(self) -> int:
        return self.rect.height

    @property
    def groups(self) -> tuple[int, int, int]:
        return group_counts(self.width, self.height, self.group_size)

    def resolve_coefficients(self, texture_width: int, texture_height: int) -> SceneToTexel:
        if self.coefficients is not None:
            return self.coefficients
        return SceneToTexel.for_texture(texture_width, texture_height)

    def validate(self) -> "DFTPassConfig":
        """Check the host contract; raises ValueError on the first violation."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"result rect must have positive size, got {self.width}x{self.height} from {self.rect}"
            )
        if self.magnitude_scale == 0.0 or not math.isfinite(float(self.magnitude_scale)):
            raise ValueError(f"magnitude_scale must be finite and non-zero, got {self.magnitude_scale}")
        if len(self.group_size) != 3:
            raise ValueError(f"group_size must have 3 components, got {self.group_size}")
        gx, gy, gz = (int(v) for v in self.group_size)
        if gx <= 0 or gy <= 0:
            raise ValueError(f"group_size must be positive, got {self.group_size}")
        if gz != 1:
            raise ValueError(f"group_size z must be 1, got {gz}")
        if gx * gy * gz > MAX_THREADS_PER_GROUP:
            raise ValueError(
                f"group_size {self.group_size} exceeds {MAX_THREADS_PER_GROUP} threads per group"
            )
        if self.backend not in BACKENDS:
            raise ValueError(f"backend must be one of {BACKENDS}, got {self.backend!r}")
        self.sampler.validate()
        return self
