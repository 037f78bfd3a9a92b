import json
import numpy as np
import pytest
from turbgen import Params, ConfigurationError, HDF5Writer, read_restart
from conftest import BASE_PARAMS, write_parameter_file


def test_read_key_value_file(parameter_file):
    params = Params(parameter_file)
    assert params.ndim == 3
    assert isinstance(params.ndim, int)
    assert params.k_max == 3.0
    assert params.random_seed == 140281
    assert params.debug == 0
    assert params.parameter_file == str(parameter_file)


def test_comments_and_first_occurrence(tmp_path):
    path = write_parameter_file(tmp_path / "params.inp", BASE_PARAMS)
    text = path.read_text()
    text += "velocity = 7.0\n"
    text += "# k_driv = 9.0\n"
    text += "debug = 1 # switch on\n"
    path.write_text(text)

    params = Params(path)
    assert params.velocity == 1.0
    assert params.k_driv == 2.0
    assert params.debug == 1


def test_missing_key_names_the_key(tmp_path):
    data = dict(BASE_PARAMS)
    del data['angles_exp']
    path = write_parameter_file(tmp_path / "params.inp", data)
    with pytest.raises(ConfigurationError, match="angles_exp"):
        Params(path)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="cannot access"):
        Params(tmp_path / "nope.inp")


def test_invalid_value(tmp_path):
    data = dict(BASE_PARAMS)
    data['random_seed'] = 'abc'
    path = write_parameter_file(tmp_path / "params.inp", data)
    with pytest.raises(ConfigurationError, match="random_seed"):
        Params(path)


@pytest.mark.parametrize("overrides", [
    {'ndim': 4},
    {'spect_form': 3},
    {'velocity': 0.0},
    {'k_driv': -1.0},
    {'k_min': 3.0, 'k_max': 2.0},
    {'k_min': 0.0},
    {'sol_weight': 1.5},
    {'nsteps_per_turnover_time': 0},
    {'ndim': 1, 'sol_weight': 1.0},
    {'zmax': 0.0},
])
def test_invalid_parameters_are_rejected(overrides):
    data = dict(BASE_PARAMS)
    data.update(overrides)
    with pytest.raises(ConfigurationError):
        Params.from_dict(data)


def test_inactive_axes_are_not_checked():
    data = dict(BASE_PARAMS, ndim=2, zmin=0.0, zmax=0.0)
    assert Params.from_dict(data).ndim == 2


def test_configuration_error_is_value_error():
    assert issubclass(ConfigurationError, ValueError)


def test_json_file(tmp_path):
    path = tmp_path / "params.json"
    path.write_text(json.dumps(BASE_PARAMS))
    params = Params(path)
    assert params.as_dict() == dict(BASE_PARAMS, debug=0)


def test_update(make_params):
    params = make_params()
    params.update({'velocity': '2.5', 'debug': 1})
    assert params.velocity == 2.5
    assert params.debug == 1

    with pytest.raises(ConfigurationError, match="Invalid parameter"):
        params.update({'viscosity': 1.0})

    with pytest.raises(ConfigurationError):
        params.update({'sol_weight': 2.0})


def test_hdf5_writer(tmp_path):
    writer = HDF5Writer(tmp_path / "snapshots")
    assert writer.file_name.endswith("snapshots.h5")

    x = np.linspace(0.0, 1.0, 4)
    writer.write_grid(x, x[:2], x[:1])

    rng = np.random.default_rng(0)
    fields = {step: rng.standard_normal((3, 4, 2, 1)) for step in (0, 3)}
    for step, field in fields.items():
        writer.write_data(step, 0.1 * step, field)

    for step, field in fields.items():
        np.testing.assert_array_equal(writer.read_data(step), field)


def test_restart_file_round_trip(tmp_path, make_params):
    state = {
        'step': 4,
        'n_modes': 2,
        'random_seed': 11,
        'phases': np.arange(12, dtype=np.float64).reshape(2, 3, 2),
        'rng_state': np.arange(35, dtype=np.int64),
        'params': make_params().as_dict(),
    }
    file_name = HDF5Writer.write_restart(tmp_path / "restart", state, t=0.25)
    assert file_name.endswith(".h5")

    data = read_restart(tmp_path / "restart")
    assert data['t'] == 0.25
    assert data['step'] == 4
    assert data['random_seed'] == 11
    np.testing.assert_array_equal(data['phases'], state['phases'])
    np.testing.assert_array_equal(data['rng_state'], state['rng_state'])
    assert data['params']['k_max'] == 3.0


def test_read_restart_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_restart(tmp_path / "missing.h5")
