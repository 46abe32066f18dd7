"""Direct-summation DFT along a column.

For output row y of a region of height H the accumulator is

    acc(y) = sum_{n=0}^{H-1} s(n) * exp(-2πi * y * n / H)

written out as a complex multiply-accumulate on (real, imag) pairs. The angle
and the trig are evaluated in float32 and n always runs in ascending order, so
the single-item path and the vectorised path add the same terms in the same
sequence. This is O(H) per output element; there is no FFT here.
"""

from __future__ import annotations

import math
from typing import Callable

import torch

NEG_TWO_PI = -2.0 * math.pi


def basis_angle(y: torch.Tensor, n: torch.Tensor | int, height: int) -> torch.Tensor:
    """-2π·y·n/H in float32, left to right."""
    y32 = torch.as_tensor(y, dtype=torch.float32)
    n32 = torch.as_tensor(n, dtype=torch.float32, device=y32.device)
    return ((torch.tensor(NEG_TWO_PI, dtype=torch.float32, device=y32.device) * y32) * n32) / float(height)


def mac(acc: torch.Tensor, sample: torch.Tensor, angle: torch.Tensor) -> torch.Tensor:
    """acc + sample * exp(i·angle) on trailing (real, imag) pairs."""
    c = torch.cos(angle)
    s = torch.sin(angle)
    re = sample[..., 0]
    im = sample[..., 1]
    out_re = acc[..., 0] + (re * c - im * s)
    out_im = acc[..., 1] + (im * c + re * s)
    return torch.stack((out_re, out_im), dim=-1)


def accumulate_work_item(
    fetch: Callable[[int], torch.Tensor],
    y: int,
    height: int,
    *,
    device: torch.device | str = "cpu",
) -> torch.Tensor:
    """Sum one output row for one column; fetch(n) returns the (2,) sample for term n."""
    acc = torch.zeros(2, dtype=torch.float32, device=device)
    y_t = torch.tensor(float(y), dtype=torch.float32, device=device)
    for n in range(height):
        acc = mac(acc, fetch(n).to(torch.float32), basis_angle(y_t, n, height))
    return acc


def column_dft(samples: torch.Tensor, rows: torch.Tensor | None = None) -> torch.Tensor:
    """Column-wise DFT of pre-fetched samples.

    samples: (H, W, 2) with samples[n, x] the input for term n of column x.
    rows:    (R,) output row indices, default 0..H-1.
    returns: (R, W, 2) float32 accumulators.
    """
    if samples.ndim != 3 or samples.shape[2] != 2:
        raise ValueError(f"samples must have shape (H, W, 2), got {tuple(samples.shape)}")
    height, width = int(samples.shape[0]), int(samples.shape[1])
    dev = samples.device
    if rows is None:
        rows = torch.arange(height, device=dev)
    y = rows.to(device=dev, dtype=torch.float32)[:, None]  # (R,1)

    samples = samples.to(torch.float32)
    acc = torch.zeros(int(y.shape[0]), width, 2, dtype=torch.float32, device=dev)
    for n in range(height):
        angle = basis_angle(y, n, height)  # (R,1)
        acc = mac(acc, samples[n][None, :, :], angle)
    return acc
