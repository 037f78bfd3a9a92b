"""
Pseudo-random number generators driving the turbulence pattern.

Two uniform generators share one integer state ``seed``:

- ``ran1s``: Park-Miller minimal standard linear congruential generator (Schrage's method).
- ``ran2``: L'Ecuyer combined generator with a Bays-Durham shuffle table, period > 2e18.

Gaussian deviates are drawn with the Box-Muller transform on top of ``ran1s``. All kernels work on
a flat int64 state array so that they can be called from other numba kernels (e.g. the OU update)
and reproduce the reference integer arithmetic exactly; every intermediate stays inside int32 range.

State layout::

    state[0]       seed, updated by every draw
    state[1]       second ran2 generator (idum2)
    state[2]       last ran2 output (iy)
    state[3:35]    ran2 shuffle table (iv)
"""

import numpy as np
import numba as nb


# ran1s
IA, IM, IQ, IR = 16807, 2147483647, 127773, 2836
AM = 1.0 / IM

# ran2
IM1, IM2 = 2147483563, 2147483399
IMM1 = IM1 - 1
IA1, IA2 = 40014, 40692
IQ1, IQ2 = 53668, 52774
IR1, IR2 = 12211, 3791
NTAB = 32
NDIV = 1 + IMM1 // NTAB
AM1 = 1.0 / IM1

EPS = 1.2e-7
RNMX = 1.0 - EPS

IDUM2_INIT = 123456789
STATE_SIZE = 3 + NTAB


@nb.njit
def _ran1s(idum):
    if idum <= 0:
        idum = max(-idum, 1)
    k = idum // IQ
    idum = IA * (idum - k * IQ) - IR * k
    if idum < 0:
        idum += IM
    return min(AM * idum, RNMX), idum


@nb.njit
def _ran2(table, idum):
    """
    One ran2 deviate. ``table`` is ``state[1:]``; a non-positive ``idum`` (re)initializes the
    shuffle table. Returns the deviate and the advanced ``idum``.
    """
    if idum <= 0:
        idum = max(-idum, 1)
        table[0] = idum
        for j in range(NTAB + 7, -1, -1):
            k = idum // IQ1
            idum = IA1 * (idum - k * IQ1) - k * IR1
            if idum < 0:
                idum += IM1
            if j < NTAB:
                table[2 + j] = idum
        table[1] = table[2]

    k = idum // IQ1
    idum = IA1 * (idum - k * IQ1) - k * IR1
    if idum < 0:
        idum += IM1

    idum2 = table[0]
    k = idum2 // IQ2
    idum2 = IA2 * (idum2 - k * IQ2) - k * IR2
    if idum2 < 0:
        idum2 += IM2
    table[0] = idum2

    j = table[1] // NDIV
    iy = table[2 + j] - idum2
    table[2 + j] = idum
    if iy < 1:
        iy += IMM1
    table[1] = iy

    return min(AM1 * iy, RNMX), idum


@nb.njit
def _uniform(state):
    r, idum = _ran1s(state[0])
    state[0] = idum
    return r


@nb.njit
def _uniform_long(state):
    r, idum = _ran2(state[1:], state[0])
    state[0] = idum
    return r


@nb.njit
def _grn(state):
    # polar Box-Muller; the second (sine) deviate is not used
    r1 = _uniform(state)
    r2 = _uniform(state)
    return np.sqrt(2.0 * np.log(1.0 / r1)) * np.cos(2 * np.pi * r2)


@nb.njit
def _fill_gaussian(out, state):
    for i in range(out.size):
        out[i] = _grn(state)


class RandomState:
    """
    Deterministic random engine of a turbulence generator.

    Parameters
    ----------
    random_seed : int
        Configured seed. It is kept for reporting only; the running ``seed`` is advanced by every draw.
    """

    def __init__(self, random_seed: int):
        self.random_seed = int(random_seed)
        self._state = np.zeros(STATE_SIZE, dtype=np.int64)
        self._state[0] = self.random_seed
        self._state[1] = IDUM2_INIT

    def __repr__(self):
        return f"<RandomState random_seed={self.random_seed} seed={self.seed}>"

    @property
    def seed(self) -> int:
        return int(self._state[0])

    def uniform(self) -> float:
        """Uniform deviate in (0, 1) from the fast generator."""
        return _uniform(self._state)

    def uniform_long(self) -> float:
        """Uniform deviate in (0, 1) from the long-period generator."""
        return _uniform_long(self._state)

    def gaussian(self) -> float:
        """Normal deviate with zero mean and unit variance."""
        return _grn(self._state)

    def gaussian_fill(self, out: np.ndarray) -> np.ndarray:
        """Fill a contiguous float64 array with normal deviates, in memory order."""
        _fill_gaussian(out.reshape(-1), self._state)
        return out

    def init_long_period(self) -> float:
        """
        Initialize the ran2 shuffle table from ``-seed`` without touching the running seed.

        The first deviate of the freshly seeded stream is drawn and discarded, so the table is left
        in the same state as after one ran2 call. Subsequent ``uniform_long`` calls advance ``seed``.
        """
        r, _ = _ran2(self._state[1:], -self._state[0])
        return r

    def get_state(self) -> np.ndarray:
        return self._state.copy()

    def set_state(self, state: np.ndarray):
        state = np.asarray(state, dtype=np.int64)
        if state.shape != (STATE_SIZE,):
            raise ValueError(f"Invalid random state shape. Expected ({STATE_SIZE},), got {state.shape}.")
        self._state[:] = state
