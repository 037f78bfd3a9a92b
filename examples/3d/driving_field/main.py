import argparse
from turbgen import FieldSampler, init_turbulence_generator


def parse_args():
    parser = argparse.ArgumentParser(description="Sample the 3D driving field over two turnover times.")
    parser.add_argument("--parameter-file", default="../../turbulence_generator.inp")
    parser.add_argument("-n", type=int, default=32, help="Number of grid cells per axis")
    parser.add_argument("--regular", action="store_true", help="Use numpy instead of numba kernels")
    return parser.parse_args()


if __name__ == '__main__':
    args = parse_args()

    generator = init_turbulence_generator(args.parameter_file, optimization=not args.regular)
    sampler = FieldSampler(
        generator,
        n=args.n,
        t_end=2 * generator.decay,
        output_file='driving_field',
        restart_file='driving_field_restart',
        verbose=True,
    )
    sampler.run()
