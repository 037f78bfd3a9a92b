import numpy as np
import numba as nb
from .rng import RandomState, _grn


@nb.njit
def _ou_fill(phases, variance, state):
    for i in range(phases.size):
        phases[i] = variance * _grn(state)


@nb.njit
def _ou_update(phases, damping_factor, variance, state):
    noise_factor = np.sqrt(1.0 - damping_factor * damping_factor) * variance
    for i in range(phases.size):
        phases[i] = phases[i] * damping_factor + noise_factor * _grn(state)


class OUProcess:
    """
    Ornstein-Uhlenbeck sequence of the complex mode phases.

    Every mode carries two real 3-vectors, ``phase_a`` and ``phase_b``, which are the coefficients of
    ``cos(k.x)`` and ``sin(k.x)`` before the solenoidal/compressive projection. Each of the 6 scalars
    follows

        x_{n+1} = f x_n + sigma sqrt(1 - f^2) z_n,    f = exp(-dt / decay),

    with z_n a unit Gaussian deviate. The sequence has zero mean, stationary variance sigma^2 and a
    one-step autocorrelation f (Eswaran & Pope 1988; Federrath et al. 2010).

    Parameters
    ----------
    n_modes : int
        Number of driving modes.
    variance : float
        Stationary standard deviation sigma of each phase.
    decay : float
        Autocorrelation time.
    dt : float
        Time between two OU steps.
    rng : RandomState
        Random engine, advanced by every initialization and step.
    """

    def __init__(self, n_modes: int, variance: float, decay: float, dt: float, rng: RandomState):
        self.n_modes = n_modes
        self.variance = variance
        self.decay = decay
        self.dt = dt
        self.rng = rng

        # memory order (mode, axis, a/b) is the order in which deviates are drawn
        self.phases = np.zeros((n_modes, 3, 2), dtype=np.float64)
        self.step = -1

    @property
    def damping_factor(self) -> float:
        return np.exp(-self.dt / self.decay)

    @property
    def phase_a(self) -> np.ndarray:
        return self.phases[:, :, 0]

    @property
    def phase_b(self) -> np.ndarray:
        return self.phases[:, :, 1]

    def initialize(self):
        """Draw the phases from the stationary distribution."""
        _ou_fill(self.phases.reshape(-1), self.variance, self.rng._state)

    def advance(self):
        """Advance all phases by one OU step."""
        _ou_update(self.phases.reshape(-1), self.damping_factor, self.variance, self.rng._state)
        self.step += 1
