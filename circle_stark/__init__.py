"""Mersenne-31 fields, circle groups and cosets, a Blake2s channel and circle FFTs."""

__version__ = "0.1.0"

__all__ = [
    "m31",
    "lanes",
    "qm31",
    "channel",
    "circle",
    "fft_common",
    "rfft_butterflies",
    "ifft_butterflies",
    "rfft_radix",
    "ifft_radix",
    "rfft",
    "ifft",
]