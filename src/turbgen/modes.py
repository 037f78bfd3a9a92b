"""
Construction of the Fourier mode set of the turbulence generator.

A mode is a wavevector inside the driving band ``[k_min, k_max]`` together with a scalar amplitude
that sets the spectral shape. Band and parabolic spectra sample the full integer lattice; the power
law samples random directions on each integer k-shell with the number of angles growing as
``ik**angles_exp``.
"""

import math
from enum import IntEnum
import numpy as np
from .rng import RandomState
from turbgen import logger


MAX_N_MODES = 100000
IK_MAX = 256

DICT_SPECTRAL_FORMS = {}


def register_spectral_form(form):
    def decorator(func):
        DICT_SPECTRAL_FORMS[form] = func
        return func
    return decorator


class SpectralForm(IntEnum):
    BAND = 0
    PARABOLA = 1
    POWER_LAW = 2

    @property
    def label(self) -> str:
        return {0: 'Band', 1: 'Parabola', 2: 'Power Law'}[self.value]


class ModeOverflowError(RuntimeError):
    """Raised when the requested number of modes exceeds the capacity of the generator."""

    def __init__(self, n_modes: int, max_n_modes: int):
        self.n_modes = n_modes
        self.max_n_modes = max_n_modes
        super().__init__(f"Too many driving modes: n_modes = {n_modes}, max_n_modes = {max_n_modes}.")


class Modes:
    """
    Fixed set of driving modes.

    Parameters
    ----------
    wavevectors : np.ndarray
        Physical wavevectors, shape (n_modes, 3). Components beyond the dimensionality are zero.
    amplitudes : np.ndarray
        Mode amplitudes, shape (n_modes,).
    """

    def __init__(self, wavevectors: np.ndarray, amplitudes: np.ndarray):
        wavevectors = np.ascontiguousarray(wavevectors, dtype=np.float64).reshape(-1, 3)
        amplitudes = np.ascontiguousarray(amplitudes, dtype=np.float64).reshape(-1)
        if len(wavevectors) != len(amplitudes):
            raise ValueError(
                f"Number of wavevectors ({len(wavevectors)}) must match number of amplitudes ({len(amplitudes)})."
            )

        wavevectors.flags.writeable = False
        amplitudes.flags.writeable = False
        self.wavevectors = wavevectors
        self.amplitudes = amplitudes

    def __len__(self):
        return len(self.amplitudes)

    def __repr__(self):
        return f"<Modes n_modes={len(self)}>"

    @property
    def wavenumbers(self) -> np.ndarray:
        k = self.wavevectors
        return np.sqrt(k[:, 0] * k[:, 0] + k[:, 1] * k[:, 1] + k[:, 2] * k[:, 2])


def round_half_away(x: float) -> float:
    """Round to the nearest integer with halfway cases away from zero (C ``round``)."""
    a = abs(x)
    r = math.floor(a)
    if a - r >= 0.5:
        r += 1.0
    return math.copysign(r, x)


def _axis_limit(length: float, k_max: float) -> int:
    # lattice indices beyond this have |k_axis| > k_max
    return min(IK_MAX, int(k_max * length / (2 * np.pi)) + 1)


def _mirror_signs(ndim: int) -> np.ndarray:
    signs = [(1.0, 1.0, 1.0)]
    if ndim > 1:
        signs.append((1.0, -1.0, 1.0))
    if ndim > 2:
        signs.append((1.0, 1.0, -1.0))
        signs.append((1.0, -1.0, -1.0))
    return np.array(signs)


def _lattice(ndim: int, lengths, k_min: float, k_max: float):
    """
    Wavevectors of the non-negative integer lattice inside the band, ordered by (ikx, iky, ikz).
    """
    Lx, Ly, Lz = lengths
    ik_max = [_axis_limit(lengths[d], k_max) if d < ndim else 0 for d in range(3)]

    ky_axis = 2 * np.pi * np.arange(ik_max[1] + 1) / Ly if ndim > 1 else np.zeros(1)
    kz_axis = 2 * np.pi * np.arange(ik_max[2] + 1) / Lz if ndim > 2 else np.zeros(1)
    ky, kz = np.meshgrid(ky_axis, kz_axis, indexing='ij')

    kvecs, kmags = [], []
    for ikx in range(ik_max[0] + 1):
        kx = 2 * np.pi * ikx / Lx
        k = np.sqrt(kx * kx + ky * ky + kz * kz)
        iy, iz = np.nonzero((k >= k_min) & (k <= k_max))
        if len(iy) == 0:
            continue
        kvecs.append(np.stack([np.full(len(iy), kx), ky[iy, iz], kz[iy, iz]], axis=-1))
        kmags.append(k[iy, iz])

    if not kvecs:
        return np.zeros((0, 3)), np.zeros(0)
    return np.concatenate(kvecs), np.concatenate(kmags)


def _lattice_modes(amplitude_func, ndim, lengths, k_min, k_max, max_n_modes, verbose):
    kvecs, k = _lattice(ndim, lengths, k_min, k_max)

    signs = _mirror_signs(ndim)
    n_mirror = len(signs)
    n_modes = n_mirror * len(k)
    if n_modes + 2 ** (ndim - 1) > max_n_modes:
        raise ModeOverflowError(n_modes, max_n_modes)
    if verbose:
        logger.info(f"TurbGen: Generating {n_modes} driving modes...")

    amplitudes = amplitude_func(k)

    # every lattice wavevector is followed by its y (and z) mirrored copies
    wavevectors = (kvecs[:, None, :] * signs[None, :, :]).reshape(-1, 3)
    amplitudes = np.repeat(amplitudes, n_mirror)
    if verbose:
        for n in range(1000, n_modes + 1, 1000):
            logger.info(f"TurbGen:  ... {n} modes generated...")
    return Modes(wavevectors, amplitudes)


@register_spectral_form(SpectralForm.BAND)
def _band(ndim, lengths, k_min, k_max, max_n_modes=MAX_N_MODES, verbose=True, **kwargs):
    kc = k_min

    def amplitude(k):
        # power spectrum ~ amplitude^2 (1D), amplitude^2 * 2pi k (2D), amplitude^2 * 4pi k^2 (3D)
        return np.power(kc / k, (ndim - 1) / 2.0)

    return _lattice_modes(amplitude, ndim, lengths, k_min, k_max, max_n_modes, verbose)


@register_spectral_form(SpectralForm.PARABOLA)
def _parabola(ndim, lengths, k_min, k_max, max_n_modes=MAX_N_MODES, verbose=True, **kwargs):
    kc = 0.5 * (k_min + k_max)
    # normalizes the amplitude to 1 at kc
    parab_prefact = -4.0 / (k_max - k_min) ** 2

    def amplitude(k):
        a = np.abs(parab_prefact * (k - kc) ** 2 + 1.0)
        return np.sqrt(a) * np.power(kc / k, (ndim - 1) / 2.0)

    return _lattice_modes(amplitude, ndim, lengths, k_min, k_max, max_n_modes, verbose)


@register_spectral_form(SpectralForm.POWER_LAW)
def _power_law(
    ndim,
    lengths,
    k_min,
    k_max,
    max_n_modes=MAX_N_MODES,
    verbose=True,
    rng: RandomState = None,
    power_law_exp: float = -2.0,
    angles_exp: float = 1.0,
    debug: bool = False,
):
    if rng is None:
        raise ValueError("The power-law spectrum requires a random state for sampling the angles.")

    Lx, Ly, Lz = lengths
    kc = k_min

    if verbose:
        n_full = len(_mirror_signs(ndim)) * len(_lattice(ndim, lengths, k_min, k_max)[1])
        logger.info(f"TurbGen: There would be {n_full} driving modes, if k-space were fully sampled (angles_exp = 2.0)...")
        logger.info(f"TurbGen: Here we are using angles_exp = {angles_exp:f}")

    rng.init_long_period()

    ik_min = max(1, int(round_half_away(k_min * Lx / (2 * np.pi))))
    ik_max = int(round_half_away(k_max * Lx / (2 * np.pi)))
    if verbose:
        logger.info(f"TurbGen: Generating driving modes within k = [{ik_min}, {ik_max}]")

    wavevectors, amplitudes = [], []
    for ik in range(ik_min, ik_max + 1):
        nang = int(2.0 ** ndim * math.ceil(float(ik) ** angles_exp))
        if verbose:
            logger.info(f"TurbGen: ik, number of angles = {ik}, {nang}")

        for _ in range(nang):
            phi = 2 * math.pi * rng.uniform_long()
            if ndim == 1:
                phi = 0.0 if phi < math.pi else math.pi
            theta = math.pi / 2.0
            if ndim > 2:
                theta = math.acos(1.0 - 2.0 * rng.uniform_long())
            if debug and verbose:
                logger.info(f"TurbGen: DEBUG: entering: theta = {theta:f}, phi = {phi:f}")

            radius = ik + rng.uniform_long() - 0.5
            kx = 2 * math.pi * round_half_away(radius * math.sin(theta) * math.cos(phi)) / Lx
            ky = 0.0
            if ndim > 1:
                ky = 2 * math.pi * round_half_away(radius * math.sin(theta) * math.sin(phi)) / Ly
            kz = 0.0
            if ndim > 2:
                kz = 2 * math.pi * round_half_away(radius * math.cos(theta)) / Lz

            k = math.sqrt(kx * kx + ky * ky + kz * kz)
            if k < k_min or k > k_max:
                continue

            if len(amplitudes) + 2 ** (ndim - 1) > max_n_modes:
                raise ModeOverflowError(len(amplitudes) + 2 ** (ndim - 1), max_n_modes)

            amplitude = (k / kc) ** power_law_exp
            # correct for the number of angles sampled relative to full sampling (k^2 per shell in 3D)
            amplitude = math.sqrt(amplitude * float(ik) ** (ndim - 1) / nang * 4.0 * math.sqrt(3.0)) \
                * (kc / k) ** ((ndim - 1) / 2.0)

            wavevectors.append((kx, ky, kz))
            amplitudes.append(amplitude)
            if verbose and len(amplitudes) % 1000 == 0:
                logger.info(f"TurbGen:  ... {len(amplitudes)} modes generated...")

    return Modes(np.array(wavevectors).reshape(-1, 3), np.array(amplitudes))


def build_modes(
    ndim: int,
    lengths,
    k_band,
    spect_form: SpectralForm = SpectralForm.BAND,
    power_law_exp: float = -2.0,
    angles_exp: float = 1.0,
    rng: RandomState = None,
    max_n_modes: int = MAX_N_MODES,
    verbose: bool = True,
    debug: bool = False,
) -> Modes:
    """
    Build the driving modes for a box.

    Parameters
    ----------
    ndim : int
        Number of spatial dimensions (1, 2 or 3).
    lengths : sequence of float
        Box lengths (Lx, Ly, Lz).
    k_band : tuple of float
        Physical wavenumber band (k_min, k_max).
    spect_form : SpectralForm
        Shape of the driving spectrum.
    power_law_exp, angles_exp : float
        Power-law exponent of the spectrum and of the number of sampled angles per shell
        (power-law spectrum only).
    rng : RandomState
        Random state used to sample the angles (power-law spectrum only). It is advanced.
    max_n_modes : int
        Capacity; exceeding it raises ``ModeOverflowError``.
    verbose : bool
        Report progress through the logger.
    """
    if ndim not in (1, 2, 3):
        raise ValueError(f"Invalid number of dimensions: {ndim}. Options are 1, 2 or 3.")

    spect_form = SpectralForm(spect_form)
    k_min, k_max = k_band
    lengths = tuple(float(length) for length in lengths)

    modes = DICT_SPECTRAL_FORMS[spect_form](
        ndim,
        lengths,
        k_min,
        k_max,
        max_n_modes=max_n_modes,
        verbose=verbose,
        rng=rng,
        power_law_exp=power_law_exp,
        angles_exp=angles_exp,
        debug=debug,
    )

    if debug and verbose:
        for m, a in enumerate(modes.amplitudes):
            logger.info(f"TurbGen: DEBUG: init_stir:  ampl[{m}] = {a:f}")

    return modes
