import numpy as np
from .generator import TurbulenceGenerator
from .io import HDF5Writer
from .utils import Timer, uniform_grid
from turbgen import logger


class FieldSampler:
    """
    Drive a turbulence generator through time like a host code would, and store every new
    driving pattern sampled on a uniform grid.

    Parameters
    ----------
    generator : TurbulenceGenerator
        The generator to drive.
    n : int or list of int, optional
        Number of grid cells per axis. Default is 32.
    t_end : float, optional
        End time. Default is one turnover time of the generator.
    dt_out : float, optional
        Host time step at which ``check_for_update`` is called. Default is the OU time step.
    output_file : str, optional
        Name of the HDF5 output file. Default is 'turbulence'.
    restart_file : str, optional
        If given, the generator state is written to this file at the end of the run.
    t_start : float, optional
        Start time, e.g. the time stored in a restart file. Default is 0.
    check_interval : int, optional
        Number of host steps between runtime reports. Default is 10.
    verbose : bool, optional
        Enable or disable runtime reports. Default is False.
    """

    def __init__(
        self,
        generator: TurbulenceGenerator,
        n: int | list = 32,
        t_end: float = None,
        dt_out: float = None,
        output_file: str = 'turbulence',
        restart_file: str = None,
        t_start: float = 0.0,
        check_interval: int = 10,
        verbose: bool = False,
    ):
        self.generator = generator
        self.t_start = t_start
        self.t_end = t_end if t_end is not None else generator.decay
        self.dt_out = dt_out if dt_out is not None else generator.dt
        self.restart_file = restart_file
        self.check_interval = check_interval

        if self.dt_out <= 0:
            raise ValueError(f"The output time step must be positive, got {self.dt_out}.")
        if self.t_end < self.t_start:
            raise ValueError(f"End time {self.t_end} lies before start time {self.t_start}.")

        p = generator.params
        bounds = [(p.xmin, p.xmax), (p.ymin, p.ymax), (p.zmin, p.zmax)]
        self.x, self.y, self.z = uniform_grid(bounds, n, generator.ndim)

        self.t = t_start
        self.n_snapshots = 0

        self.writer = None
        if generator.rank == 0:
            self.writer = HDF5Writer(output_file)
            self.writer.write_grid(self.x, self.y, self.z)
        self._timer = Timer(generator.rank, verbose)

    def sample(self) -> np.ndarray:
        """Current driving pattern on the grid, shape (3, nx, ny, nz)."""
        return self.generator.evaluate_grid(self.x, self.y, self.z)

    def run(self):
        gen = self.generator
        n_steps = int(np.floor((self.t_end - self.t_start) / self.dt_out + 1e-9))

        self._timer.start()
        for i in range(n_steps + 1):
            self.t = self.t_start + i * self.dt_out

            if gen.check_for_update(self.t):
                if self.writer is not None:
                    self.writer.write_data(gen.step, self.t, self.sample())
                self.n_snapshots += 1

            if i % self.check_interval == 0:
                self._timer(self.t, gen.step)

        if self.restart_file is not None and gen.rank == 0:
            HDF5Writer.write_restart(self.restart_file, gen.state_dict(), self.t)

        self._timer.final()
        if gen.rank == 0:
            logger.info(f"TurbGen: {self.n_snapshots} driving patterns written to '{self.writer.file_name}'.")
        return self.n_snapshots
