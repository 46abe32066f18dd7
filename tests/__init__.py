"""Test suite for the Spectra vertical DFT pass.

This package contains:
- Unit tests for each kernel stage (sampling, summation, shift, magnitude)
- Dispatch tests for the full grid, including overhanging work-groups
- A CUDA/Triton smoke test checked against the torch reference
"""
