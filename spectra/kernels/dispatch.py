"""Vertical DFT pass: work items, bounds guard, magnitude writer and dispatch.

One invocation per output pixel:

1) bounds guard on the dispatch id (groups overhang the region)
2) DFT over the column, sampling the input at mapped pixel centers
3) frequency-shift remap of (x, y) to a linear output index
4) write (|acc|/scale, |acc|/scale, |acc|/scale, 1) to that cell

`run_work_item` is that invocation, one item at a time. `VerticalDFTPass`
runs the whole grid, either as an explicit loop over work-groups in torch or as
one fused Triton launch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import torch

from spectra.config import DFTPassConfig, SceneToTexel
from spectra.console import console
from spectra.kernels.dft import accumulate_work_item, column_dft
from spectra.kernels.runtime import select_backend, triton_supported
from spectra.kernels.sampling import TextureSampler, check_texture
from spectra.kernels.shift import shift_index, shift_indices

PIXEL_CHANNELS = 4


@dataclass(frozen=True)
class WorkItem:
    """Identity of one invocation.

    x, y: logical position in the region.
    dispatch_id: global (x, y, z) thread id; only the bounds guard reads it.
    """

    x: int
    y: int
    dispatch_id: tuple[int, int, int]

    @classmethod
    def from_group(
        cls,
        group_id: tuple[int, int, int],
        thread_id: tuple[int, int, int],
        group_size: tuple[int, int, int],
    ) -> "WorkItem":
        did = tuple(int(g) * int(s) + int(t) for g, t, s in zip(group_id, thread_id, group_size))
        return cls(x=did[0], y=did[1], dispatch_id=did)  # type: ignore[arg-type]


def in_bounds(item: WorkItem, width: int, height: int) -> bool:
    return not (item.dispatch_id[0] >= width or item.dispatch_id[1] >= height)


def magnitude_pixel(acc: torch.Tensor, magnitude_scale: float) -> torch.Tensor:
    """(..., 2) accumulators → (..., 4) RGBA pixels; no clamping."""
    acc = acc.to(torch.float32)
    mag = torch.sqrt(acc[..., 0] * acc[..., 0] + acc[..., 1] * acc[..., 1]) / magnitude_scale
    alpha = torch.ones_like(mag)
    return torch.stack((mag, mag, mag, alpha), dim=-1)


def allocate_output(width: int, height: int, *, device: torch.device | str = "cpu") -> torch.Tensor:
    return torch.zeros(width * height, PIXEL_CHANNELS, dtype=torch.float32, device=device)


def buffer_to_image(buffer: torch.Tensor, width: int, height: int) -> torch.Tensor:
    """View the linear output buffer as a (height, width, 4) image."""
    if buffer.shape != (width * height, PIXEL_CHANNELS):
        raise ValueError(
            f"buffer must have shape ({width * height}, {PIXEL_CHANNELS}), got {tuple(buffer.shape)}"
        )
    return buffer.view(height, width, PIXEL_CHANNELS)


def run_work_item(
    image: torch.Tensor,
    config: DFTPassConfig,
    item: WorkItem,
    out: torch.Tensor,
    *,
    coefficients: SceneToTexel | None = None,
) -> int | None:
    """Execute one invocation. Returns the output index written, or None if clipped."""
    rect = config.rect
    width, height = rect.width, rect.height
    if not in_bounds(item, width, height):
        return None

    check_texture(image)
    coeffs = coefficients or config.resolve_coefficients(int(image.shape[1]), int(image.shape[0]))
    sampler: TextureSampler = config.sampler
    dev = image.device
    scene_x = torch.tensor(float(item.x) + 0.5 + float(rect.left), dtype=torch.float32, device=dev)

    def fetch(n: int) -> torch.Tensor:
        scene_y = torch.tensor(float(n) + 0.5 + float(rect.top), dtype=torch.float32, device=dev)
        return sampler.sample_scene(image, coeffs, scene_x, scene_y)

    acc = accumulate_work_item(fetch, item.y, height, device=dev)
    index = shift_index(item.x, item.y, width, height)
    out[index] = magnitude_pixel(acc, config.magnitude_scale).to(out.device)
    return index


def iter_groups(config: DFTPassConfig) -> Iterator[tuple[int, int, int]]:
    groups_x, groups_y, groups_z = config.groups
    for gz in range(groups_z):
        for gy in range(groups_y):
            for gx in range(groups_x):
                yield (gx, gy, gz)


class VerticalDFTPass:
    """Host-side wrapper: validates the constant blocks and dispatches the grid."""

    def __init__(self, config: DFTPassConfig, *, verbose: bool = False) -> None:
        self.config = config.validate()
        self.verbose = bool(verbose)
        self.backend = select_backend(config.backend, config.device)

    def _prepare(self, image: torch.Tensor) -> tuple[torch.Tensor, SceneToTexel]:
        check_texture(image)
        image = image.to(device=self.config.device, dtype=torch.float32)
        coeffs = self.config.resolve_coefficients(int(image.shape[1]), int(image.shape[0]))
        return image, coeffs

    def _column_samples(
        self,
        image: torch.Tensor,
        coeffs: SceneToTexel,
        columns: torch.Tensor,
    ) -> torch.Tensor:
        """(H, len(columns), 2) samples at pixel centers of the given region columns."""
        rect = self.config.rect
        dev = image.device
        scene_x = columns.to(device=dev, dtype=torch.float32) + 0.5 + float(rect.left)
        scene_y = torch.arange(rect.height, device=dev, dtype=torch.float32) + 0.5 + float(rect.top)
        return self.config.sampler.sample_scene(image, coeffs, scene_x[None, :], scene_y[:, None])

    def accumulate(self, image: torch.Tensor) -> torch.Tensor:
        """Pre-shift accumulators for the whole region: (height, width, 2)."""
        image, coeffs = self._prepare(image)
        columns = torch.arange(self.config.width, device=image.device)
        return column_dft(self._column_samples(image, coeffs, columns))

    def dispatch(
        self,
        image: torch.Tensor,
        *,
        out: torch.Tensor | None = None,
        write_counts: torch.Tensor | None = None,
    ) -> torch.Tensor:
        """Run the full grid and return the (width*height, 4) output buffer.

        write_counts, if given, is an int tensor of length width*height that
        is incremented once per write (reference backend only).
        """
        cfg = self.config
        image, coeffs = self._prepare(image)
        if out is None:
            out = allocate_output(cfg.width, cfg.height, device=image.device)
        elif out.shape != (cfg.width * cfg.height, PIXEL_CHANNELS):
            raise ValueError(
                f"out must have shape ({cfg.width * cfg.height}, {PIXEL_CHANNELS}), got {tuple(out.shape)}"
            )

        if self.verbose:
            console.header(
                "Vertical DFT dispatch",
                region=f"{cfg.width}x{cfg.height} @ ({cfg.rect.left}, {cfg.rect.top})",
                groups=cfg.groups,
                group_size=cfg.group_size,
                backend=self.backend,
                device=str(image.device),
            )

        if self.backend == "triton":
            if write_counts is not None:
                raise ValueError("write_counts is only supported by the torch backend")
            if not triton_supported():
                raise RuntimeError("backend 'triton' requested but Triton is not installed")
            from spectra.kernels.triton.dft_kernels import vertical_dft

            vertical_dft(
                image=image,
                out=out,
                rect=cfg.rect,
                coefficients=coeffs,
                magnitude_scale=float(cfg.magnitude_scale),
                group_size=cfg.group_size,
                sampler=cfg.sampler,
            )
            return out

        self._dispatch_torch(image, coeffs, out, write_counts)
        return out

    def _dispatch_torch(
        self,
        image: torch.Tensor,
        coeffs: SceneToTexel,
        out: torch.Tensor,
        write_counts: torch.Tensor | None,
    ) -> None:
        cfg = self.config
        width, height = cfg.width, cfg.height
        tx, ty, _tz = cfg.group_size
        dev = image.device

        for gx, gy, _gz in iter_groups(cfg):
            # Dispatch ids covered by this group, then the bounds guard.
            xs = torch.arange(gx * tx, gx * tx + tx, device=dev)
            ys = torch.arange(gy * ty, gy * ty + ty, device=dev)
            xs = xs[xs < width]
            ys = ys[ys < height]
            if xs.numel() == 0 or ys.numel() == 0:
                continue

            acc = column_dft(self._column_samples(image, coeffs, xs), rows=ys)  # (len(ys), len(xs), 2)
            pixels = magnitude_pixel(acc, cfg.magnitude_scale)
            index = shift_indices(xs[None, :], ys[:, None], width, height)
            out[index.reshape(-1).to(out.device)] = pixels.reshape(-1, PIXEL_CHANNELS).to(out.device)
            if write_counts is not None:
                flat = index.reshape(-1).to(write_counts.device)
                write_counts.index_add_(0, flat, torch.ones_like(flat, dtype=write_counts.dtype))
