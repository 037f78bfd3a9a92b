import math
import sys
import pytest
from turbgen import Params


BASE_PARAMS = {
    'ndim': 3,
    'xmin': 0.0,
    'xmax': 1.0,
    'ymin': 0.0,
    'ymax': 1.0,
    'zmin': 0.0,
    'zmax': 1.0,
    'velocity': 1.0,
    'k_driv': 2.0,
    'k_min': 1.0,
    'k_max': 3.0,
    'sol_weight': 0.5,
    'spect_form': 0,
    'power_law_exp': -2.0,
    'angles_exp': 1.0,
    'energy_coeff': 5.0e-3,
    'random_seed': 140281,
    'nsteps_per_turnover_time': 10,
}


def write_parameter_file(path, params):
    lines = ["# turbulence generator parameters"]
    for key, value in params.items():
        lines.append(f"{key:<26s} = {value}   ! {key}")
    path.write_text("\n".join(lines) + "\n")
    return path


def count_lattice_modes(ndim, L, k_min, k_max):
    """Brute-force count of the band/parabola modes, including mirrored copies."""
    eps = sys.float_info.epsilon
    stir_min = (k_min - eps) * 2 * math.pi / L
    stir_max = (k_max + eps) * 2 * math.pi / L
    n = int(k_max) + 2
    count = 0
    for ikx in range(n + 1):
        kx = 2 * math.pi * ikx / L
        for iky in range(n + 1 if ndim > 1 else 1):
            ky = 2 * math.pi * iky / L
            for ikz in range(n + 1 if ndim > 2 else 1):
                kz = 2 * math.pi * ikz / L
                k = math.sqrt(kx * kx + ky * ky + kz * kz)
                if stir_min <= k <= stir_max:
                    count += 2 ** (ndim - 1)
    return count


@pytest.fixture
def base_params():
    return dict(BASE_PARAMS)


@pytest.fixture
def make_params():
    def _make(**overrides):
        data = dict(BASE_PARAMS)
        data.update(overrides)
        return Params.from_dict(data)
    return _make


@pytest.fixture
def parameter_file(tmp_path):
    return write_parameter_file(tmp_path / "turbulence_generator.inp", BASE_PARAMS)
