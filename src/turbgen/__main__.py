import argparse
import sys
import traceback
from turbgen import logger
from .generator import TurbulenceGenerator
from .io import ConfigurationError
from .modes import ModeOverflowError
from .sampler import FieldSampler


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="turbgen",
        description="Sample the turbulence driving field on a uniform grid and write it to HDF5."
    )
    parser.add_argument("parameter_file", help="Turbulence generator parameter file (key = value)")
    parser.add_argument("-n", type=int, nargs='+', default=[32], help="Number of grid cells per axis")
    parser.add_argument("--t-end", type=float, default=None, help="End time (default: one turnover time)")
    parser.add_argument("--dt-out", type=float, default=None, help="Sampling time step (default: OU time step)")
    parser.add_argument("--output", default="turbulence", help="Name of the HDF5 output file")
    parser.add_argument("--restart", default=None, help="Continue from this restart file")
    parser.add_argument("--write-restart", default=None, help="Write a restart file at the end")
    parser.add_argument("--regular", action="store_true", help="Use numpy instead of numba kernels")
    parser.add_argument("--verbose", action="store_true", help="Report runtime during sampling")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    n = args.n[0] if len(args.n) == 1 else args.n

    try:
        generator = TurbulenceGenerator.from_file(args.parameter_file, optimization=not args.regular)
        t_start = generator.restart(args.restart) if args.restart else 0.0
        sampler = FieldSampler(
            generator,
            n=n,
            t_end=args.t_end,
            dt_out=args.dt_out,
            output_file=args.output,
            restart_file=args.write_restart,
            t_start=t_start,
            verbose=args.verbose,
        )
    except (ConfigurationError, ModeOverflowError) as e:
        logger.critical(f"TurbGen: ERROR: {e}\n{traceback.format_exc()}")
        return 1

    sampler.run()
    return 0


if __name__ == '__main__':
    sys.exit(main())
