import numpy as np
from turbgen import init_turbulence_generator, logger


def advect(generator, positions, dt, n_steps, bounds):
    """Move tracers with the driving pattern, using it directly as a velocity (RK2 midpoint)."""
    lo, hi = bounds
    t = 0.0
    for _ in range(n_steps):
        generator.check_for_update(t)
        v = generator.evaluate_points(positions)
        mid = lo + np.mod(positions + 0.5 * dt * v - lo, hi - lo)
        positions = lo + np.mod(positions + dt * generator.evaluate_points(mid) - lo, hi - lo)
        t += dt
    return positions, t


if __name__ == '__main__':
    generator = init_turbulence_generator('../../turbulence_generator.inp')

    rng = np.random.default_rng(42)
    positions = rng.uniform(-0.5, 0.5, size=(4096, 3))
    start = positions.copy()

    # host time step: a quarter of the pattern update interval
    positions, t = advect(generator, positions, 0.25 * generator.dt, 200, (-0.5, 0.5))

    displacement = positions - start
    displacement -= np.round(displacement)
    logger.info(f"t = {t:.3f}, rms tracer displacement = {np.sqrt(np.mean(displacement ** 2)):.4e}")
