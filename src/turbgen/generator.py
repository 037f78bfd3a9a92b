"""
Time-dependent, statistically stationary turbulent vector field (Federrath et al. 2010, A&A 512, A81).

The field is a truncated Fourier series over a fixed set of modes in a wavenumber band. The complex
phases of the modes follow an Ornstein-Uhlenbeck process, and their solenoidal and compressive
parts are mixed with a solenoidal weight. The host code calls ``check_for_update`` once per time
step and ``evaluate`` wherever it needs the driving vector.
"""

import numpy as np
from .io import Params, read_restart
from .modes import MAX_N_MODES, SpectralForm, build_modes
from .ou import OUProcess
from .rng import RandomState
from . import math
from turbgen import logger


class _AxisTrigCache:
    """sin/cos of ``k_axis * coord`` for all modes, recomputed only when ``coord`` changes."""

    def __init__(self, k_axis: np.ndarray, trig):
        self.k_axis = np.ascontiguousarray(k_axis)
        self._trig = trig
        # (coord, sin, cos), only ever replaced as one tuple
        self._entry = (None, None, None)

    def __call__(self, coord: float):
        entry = self._entry
        if entry[0] != coord:
            entry = (coord, *self._trig(self.k_axis, coord))
            self._entry = entry
        return entry[1], entry[2]


class TurbulenceGenerator:
    """
    Turbulence generator state: modes, OU phases, decomposition coefficients and random engine.

    Several independent generators may coexist. A generator is not thread-safe: ``check_for_update``
    mutates the state and must not run concurrently with ``evaluate`` or another update. Between updates,
    ``evaluate``, ``evaluate_points`` and ``evaluate_grid`` only read the state and may be called from
    several threads at once.

    Parameters
    ----------
    params : Params
        Generator parameters.
    rank : int, optional
        Rank of the calling process; only rank 0 reports. Default is 0.
    optimization : bool, optional
        Use numba-compiled kernels instead of numpy. Default is True. Only the numba kernels sum the
        modes sequentially in mode order and are bit-reproducible; the numpy kernels agree with them
        to round-off.
    max_n_modes : int, optional
        Capacity of the mode set. Default is 100000.
    """

    def __init__(
        self,
        params: Params,
        rank: int = 0,
        optimization: bool = True,
        max_n_modes: int = MAX_N_MODES,
    ):
        self.params = params
        self.rank = rank
        self.debug = bool(params.debug)
        self.optimization = optimization
        self.max_n_modes = max_n_modes

        self._derive_quantities()
        self.rng = RandomState(params.random_seed)

        self._info("=" * 79)
        self.modes = build_modes(
            self.ndim,
            self.lengths,
            (self.k_band_min, self.k_band_max),
            spect_form=self.spect_form,
            power_law_exp=params.power_law_exp,
            angles_exp=params.angles_exp,
            rng=self.rng,
            max_n_modes=max_n_modes,
            verbose=(rank == 0),
            debug=self.debug,
        )
        self._init_kernels()

        self.ou = OUProcess(self.n_modes, self.ou_variance, self.decay, self.dt, self.rng)
        self.ou.initialize()

        self.aka = np.zeros((self.n_modes, 3), dtype=np.float64)
        self.akb = np.zeros((self.n_modes, 3), dtype=np.float64)
        self.update_decomposition()

        self.print_info()
        self._info("=" * 79)

    @classmethod
    def from_file(cls, parameter_file, rank: int = 0, **kwargs):
        """Create a generator from a parameter file."""
        return cls(Params(parameter_file), rank=rank, **kwargs)

    def __repr__(self):
        return (
            f"<TurbulenceGenerator ndim={self.ndim} spect_form={self.spect_form.label} "
            f"n_modes={self.n_modes} step={self.step}>"
        )

    def _info(self, message: str):
        if self.rank == 0:
            logger.info(f"TurbGen: {message}")

    def _debug(self, message: str):
        if self.debug and self.rank == 0:
            logger.info(f"TurbGen: DEBUG: {message}")

    def _derive_quantities(self):
        p = self.params
        eps = np.finfo(np.float64).eps

        self.ndim = p.ndim
        self.spect_form = SpectralForm(p.spect_form)
        self.lengths = (p.xmax - p.xmin, p.ymax - p.ymin, p.zmax - p.zmin)
        self.Lx = self.lengths[0]

        # the band is widened by eps so that lattice modes on its edges are not lost to round-off
        self.k_band_min = (p.k_min - eps) * 2 * np.pi / self.Lx
        self.k_band_max = (p.k_max + eps) * 2 * np.pi / self.Lx

        # auto-correlation time = turbulent crossing time; k_driv is in units of 2pi/Lx
        self.decay = self.Lx / p.k_driv / p.velocity
        # energy input rate ~ velocity^3 / Lx; energy_coeff is tuned to reach the target dispersion
        self.energy = p.energy_coeff * p.velocity ** 3.0 / self.Lx
        self.ou_variance = np.sqrt(self.energy / self.decay)
        self.dt = self.decay / p.nsteps_per_turnover_time

        # keeps the rms of the field independent of the solenoidal weight
        w = p.sol_weight
        self.sol_weight = w
        self.sol_weight_norm = (
            np.sqrt(3.0 / self.ndim) * np.sqrt(3.0) * 1.0
            / np.sqrt(1.0 - 2.0 * w + self.ndim * w ** 2.0)
        )

    def _init_kernels(self):
        k = self.modes.wavevectors
        if self.optimization:
            trig = math.axis_trig_optimized
            self._decomposition = math.decomposition_optimized
            self._turb_vector = math.turb_vector_optimized
            self._points = math.points_optimized
            self._grid = math.grid_optimized
        else:
            trig = math.axis_trig_regular
            self._decomposition = math.decomposition_regular
            self._turb_vector = math.turb_vector_regular
            self._points = math.points_regular
            self._grid = math.grid_regular

        self._coef = 2.0 * self.sol_weight_norm * self.modes.amplitudes
        self._trig_cache = [_AxisTrigCache(k[:, d], trig) for d in range(3)]

    @property
    def n_modes(self) -> int:
        return len(self.modes)

    @property
    def step(self) -> int:
        return self.ou.step

    def update_decomposition(self):
        """Recompute the solenoidal/compressive coefficients ``aka, akb`` from the OU phases."""
        self._decomposition(
            self.aka,
            self.akb,
            self.modes.wavevectors,
            self.ou.phase_a,
            self.ou.phase_b,
            self.sol_weight,
            self.ndim,
        )
        if self.debug:
            for i in range(self.n_modes):
                for j in range(self.ndim):
                    self._debug(f"mode(dim={j:1d}, mode={i:3d}) = {self.modes.wavevectors[i, j]:12.6f}")
                    self._debug(f"aka (dim={j:1d}, mode={i:3d}) = {self.aka[i, j]:12.6f}")
                    self._debug(f"akb (dim={j:1d}, mode={i:3d}) = {self.akb[i, j]:12.6f}")
                    self._debug(f"ampl(dim={j:1d}, mode={i:3d}) = {self.modes.amplitudes[i]:12.6f}")

    def check_for_update(self, time: float) -> bool:
        """
        Bring the driving pattern up to ``time``.

        The OU process is advanced one step at a time up to ``floor(time / dt)`` and the
        decomposition is recomputed once at the end.

        Returns
        -------
        bool
            True if the pattern changed.
        """
        step_requested = int(np.floor(time / self.dt))
        self._debug(f"step_requested = {step_requested}")
        if step_requested <= self.step:
            self._debug("no update of pattern...returning.")
            return False

        while self.step < step_requested:
            self.ou.advance()
            self._debug(f"step = {self.step}, time = {self.step * self.dt:f}")

        self.update_decomposition()

        time_gen = self.step * self.dt
        self._info(
            f"Generated new turbulence driving pattern: #{self.step:6d}, "
            f"time = {time_gen:f}, time/t_turb = {time_gen / self.decay:f}"
        )
        return True

    def evaluate(self, x: float, y: float = 0.0, z: float = 0.0):
        """Turbulent vector (vx, vy, vz) at position (x, y, z)."""
        sinx, cosx = self._trig_cache[0](float(x))
        siny, cosy = self._trig_cache[1](float(y))
        sinz, cosz = self._trig_cache[2](float(z))
        vx, vy, vz = self._turb_vector(sinx, cosx, siny, cosy, sinz, cosz, self._coef, self.aka, self.akb)
        return float(vx), float(vy), float(vz)

    def evaluate_points(self, points: np.ndarray) -> np.ndarray:
        """Turbulent vectors at the positions ``points`` of shape (N, 3), returned as (N, 3)."""
        points = np.ascontiguousarray(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 3:
            raise ValueError(f"Invalid shape for the input points. Expected (N, 3), got {points.shape}.")

        v = np.zeros_like(points)
        self._points(v, points, self.modes.wavevectors, self._coef, self.aka, self.akb)
        return v

    def evaluate_grid(self, x: np.ndarray, y: np.ndarray = None, z: np.ndarray = None) -> np.ndarray:
        """
        Turbulent vector field on the tensor grid of the 1-D coordinates ``x, y, z``.
        Missing axes are taken as the single coordinate 0. Returns an array of shape (3, nx, ny, nz).
        """
        coords = [
            np.ascontiguousarray(np.atleast_1d(c if c is not None else 0.0), dtype=np.float64)
            for c in (x, y, z)
        ]
        if any(c.ndim != 1 for c in coords):
            raise ValueError("Grid coordinates must be one-dimensional.")

        v = np.zeros((3, *(len(c) for c in coords)), dtype=np.float64)
        self._grid(v, *coords, self.modes.wavevectors, self._coef, self.aka, self.akb)
        return v

    def print_info(self):
        """Report the configuration and the derived quantities."""
        p = self.params
        self._info(f"Initialized {self.n_modes} modes for turbulence based on parameter file '{p.parameter_file}'.")
        self._info(f" spectral form                                       = {int(self.spect_form)} ({self.spect_form.label})")
        if self.spect_form == SpectralForm.POWER_LAW:
            self._info(f" power-law exponent                                  = {p.power_law_exp:f}")
            self._info(f" power-law angles sampling exponent                  = {p.angles_exp:f}")
        self._info(f" box size Lx                                         = {self.Lx:f}")
        self._info(f" turbulent dispersion                                = {p.velocity:f}")
        self._info(f" auto-correlation time                               = {self.decay:f}")
        self._info(f"  -> characteristic turbulent wavenumber (in 2pi/Lx) = {self.Lx / p.velocity / self.decay:f}")
        self._info(f" minimum wavenumber (in 2pi/Lx)                      = {self.k_band_min / (2 * np.pi) * self.Lx:f}")
        self._info(f" maximum wavenumber (in 2pi/Lx)                      = {self.k_band_max / (2 * np.pi) * self.Lx:f}")
        self._info(f" driving energy (injection rate)                     = {self.energy:f}")
        self._info(f"  -> energy coefficient (energy / velocity^3 * Lx)   = {self.energy / p.velocity ** 3.0 * self.Lx:f}")
        self._info(f" solenoidal weight (0.0: comp, 0.5: mix, 1.0: sol)   = {self.sol_weight:f}")
        self._info(f"  -> solenoidal weight norm (set based on Ndim = {self.ndim})  = {self.sol_weight_norm:f}")
        self._info(f" random seed                                         = {self.rng.random_seed}")

    def state_dict(self) -> dict:
        """Time-dependent state needed to continue the random sequence exactly."""
        return {
            'step': self.step,
            'n_modes': self.n_modes,
            'random_seed': self.rng.random_seed,
            'phases': self.ou.phases.copy(),
            'rng_state': self.rng.get_state(),
            'params': self.params.as_dict(),
        }

    def load_state_dict(self, state: dict):
        if state['n_modes'] != self.n_modes:
            raise ValueError(
                f"Restart state has {state['n_modes']} modes, but the generator has {self.n_modes} modes."
            )
        if state['random_seed'] != self.rng.random_seed:
            raise ValueError(
                f"Restart state was generated with random_seed = {state['random_seed']}, "
                f"but the generator uses random_seed = {self.rng.random_seed}."
            )

        self.ou.phases[:] = np.asarray(state['phases']).reshape(self.ou.phases.shape)
        self.ou.step = int(state['step'])
        self.rng.set_state(state['rng_state'])
        self.update_decomposition()

    def restart(self, file_name: str) -> float:
        """Continue from a restart file; returns the time stored in it."""
        state = read_restart(file_name)
        self.load_state_dict(state)
        self._info(f"Restarted from '{file_name}' at step {self.step}.")
        return state['t']


def init_turbulence_generator(parameter_file, rank: int = 0, **kwargs) -> TurbulenceGenerator:
    """
    Initialize a turbulence generator from ``parameter_file``. If called from an MPI-parallel code,
    supply the rank of the calling process, otherwise use 0.
    """
    return TurbulenceGenerator.from_file(parameter_file, rank=rank, **kwargs)
