import numpy as np
import time
from datetime import datetime
from turbgen import logger


def format_time(seconds: float, format='dd-hh:mm:ss') -> str:
    """
    Format the time into various formats: 'dd-hh:mm:ss', 'hh:mm:ss', or 'mm:ss'.

    Parameters:
        seconds (float): Time in seconds.
        format (str): Desired format ('dd-hh:mm:ss', 'hh:mm:ss', 'mm:ss').

    Returns:
        str: Formatted time string.
    """
    days, remainder = divmod(seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)

    format = format.casefold()
    if format == 'mm:ss':
        return f"{int(minutes):02d}:{int(secs):02d}"
    elif format == 'hh:mm:ss':
        return f"{int(hours):02d}:{int(minutes):02d}:{int(secs):02d}"
    elif format == 'dd-hh:mm:ss':
        return f"{int(days):02d}-{int(hours):02d}:{int(minutes):02d}:{int(secs):02d}"
    else:
        raise ValueError("Invalid format. Choose 'dd-hh:mm:ss', 'hh:mm:ss', or 'mm:ss'.")


def uniform_grid(bounds, n, ndim: int = 3) -> list:
    """
    Cell-centred coordinates of a uniform grid.

    Parameters
    ----------
    bounds : sequence of (float, float)
        Domain bounds per axis.
    n : int or sequence of int
        Number of cells per axis.
    ndim : int
        Number of active axes; inactive axes get the single coordinate of their lower bound.
    """
    if np.isscalar(n):
        n = [int(n)] * 3

    coords = []
    for d, (lo, hi) in enumerate(bounds):
        if d < ndim:
            dx = (hi - lo) / n[d]
            coords.append(lo + (np.arange(n[d]) + 0.5) * dx)
        else:
            coords.append(np.array([lo], dtype=np.float64))
    return coords


class Timer:
    """Class to measure the time taken for a sampling run.

    Parameters
    ----------
    rank (int)
        Rank of the calling process; only rank 0 reports.
    verbose (bool)
        If True, prints timing information.
    """

    def __init__(self, rank: int = 0, verbose: bool = False):
        self.rank = rank
        self.verbose = verbose

        self.start_time = time.time()
        self.t0 = self.start_time

    def __call__(self, simulation_time: float, step: int):
        """
        Measure the time since the last call and print if verbose.

        Parameters:
            simulation_time (float): The current simulation time.
            step (int): The current driving pattern number.
        """
        t1 = time.time()
        dt = t1 - self.t0
        self.t0 = t1

        if self.verbose and self.rank == 0:
            logger.info(f"Step = {step:08d}, time = {simulation_time:.2e}, runtime since last check = {format_time(dt, 'mm:ss')}")

    def start(self):
        """Print the start time of the run."""
        self.start_time = self.t0 = time.time()
        if self.rank == 0:
            logger.info(f"Sampling started at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    def final(self):
        """Print the final timing information."""
        runtime = time.time() - self.start_time

        if self.rank == 0:
            logger.info(f"Sampling completed. Total run time: {format_time(runtime, 'hh:mm:ss')}")
        return runtime
