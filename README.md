# circle_stark

Building blocks for circle-STARK provers over the Mersenne-31 prime field
`P = 2**31 - 1`. The package uses only the Python standard library.

## Modules

- `circle_stark.m31`: the base field element `M31`, which always holds a value in
  `[0, P)`, and `PackedM31`, a vector of `N_LANES = 16` lanes that are kept
  unreduced in `[0, P]`. `PackedM31` has lane-wise `+`, `-`, `*` and unary `-`,
  `inverse`, `double`, `interleave`, `deinterleave` and `pointwise_sum`. It can
  be read from and written into a flat list of raw words with `load` and
  `store`. `mul_doubled(a, b_double)` multiplies lane by lane, given the
  doubles of the right-hand lanes.
- `circle_stark.lanes`: the even/odd lane permutations `parity_interleave`,
  `interleave_evens` and `interleave_odds`.
- `circle_stark.qm31`: the complex extension `CM31` (`i² = -1`), the secure
  field `QM31` (`u² = 2 + i`), and their lane vectors `PackedCM31` and
  `PackedQM31`.
- `circle_stark.channel`: `Blake2sChannel`, a Fiat-Shamir channel over a
  32-byte Blake2s digest. It mixes in digests (`mix_digest`), secure field
  elements (`mix_felts`) and 64-bit nonces (`mix_nonce`), and draws random
  bytes (`draw_random_bytes`) and `QM31` elements (`draw_felt`, `draw_felts`).
  `ChannelTime` counts the challenges mixed in and the draws since the last one.
- `circle_stark.circle`: `CirclePoint` on the circle `x² + y² = 1` over `M31`
  or `QM31`, the generators `M31_CIRCLE_GEN` and `SECURE_FIELD_CIRCLE_GEN`,
  `CirclePointIndex` (integers modulo `2**31` standing for multiples of the
  generator) and `Coset`. `CirclePoint.get_random_point(channel)` samples a
  point of the secure circle group from a channel.
- `circle_stark.fft_common`: `transpose_vecs`, `compute_first_twiddles` and
  `mul_twiddle`, shared by both FFT directions.
- `circle_stark.rfft_butterflies` and `circle_stark.ifft_butterflies`: the
  butterflies (`simd_butterfly`, `simd_ibutterfly`), the four-layer
  in-vector passes (`vecwise_butterflies`, `vecwise_ibutterflies`) and the
  twiddle tables for a coset (`get_twiddle_dbls`, `get_itwiddle_dbls`).
- `circle_stark.rfft_radix` and `circle_stark.ifft_radix`: one-, two- and
  three-layer passes (`fft1`..`fft3`, `ifft1`..`ifft3`) and their loops.
- `circle_stark.rfft` and `circle_stark.ifft`: the full transforms `fft` and
  `ifft`, and the partial `*_lower_with_vecwise` / `*_lower_without_vecwise`.

## Example

```python
from circle_stark.m31 import M31, PackedM31
from circle_stark.channel import Blake2sChannel
from circle_stark.circle import CirclePoint, Coset

a = M31(5)
assert a * a.inverse() == M31.one()

lanes = PackedM31.from_array([M31(i) for i in range(16)])
assert (lanes + lanes).to_array() == lanes.double().to_array()

channel = Blake2sChannel(bytes(32))
felt = channel.draw_felt()           # a QM31
point = CirclePoint.get_random_point(channel)

coset = Coset.subgroup(3)
assert len(list(coset)) == coset.size()
```

## FFT

The transforms work on flat lists of raw `u32` words (field values in
`[0, P]`), at least `2**5` of them. `rfft.fft(src, dst, twiddles, log_size)`
reads coefficients from `src` and writes the bit-reversed evaluations to
`dst` (which may be the same list). `ifft.ifft(values, twiddles, log_size)`
works in place and leaves the coefficients multiplied by `2**log_size`.
Above `CACHED_FFT_LOG_SIZE = 16`, `fft` expects its input with the vectors
transposed by `transpose_vecs`, and `ifft` leaves its output so transposed.

The twiddle tables come from the half coset of the evaluation domain; for a
domain of `2**log_size` points that is `Coset.half_odds(log_size - 1)`:

```python
from circle_stark.circle import Coset
from circle_stark.rfft import fft
from circle_stark.rfft_butterflies import get_twiddle_dbls

log_size = 5
twiddles = get_twiddle_dbls(Coset.half_odds(log_size - 1))
values = list(range(1 << log_size))
out = [0] * len(values)
fft(values, out, twiddles, log_size)
```

## What the package does not do

It provides field arithmetic, circle geometry, a channel and the FFT
kernels only. There are no polynomial or evaluation types that wrap the
transforms, no FRI folding, no quotient accumulation, no commitment
scheme or prover, and no command-line tool.

## Tests

```
pip install -e .[test]
pytest
```