import h5py
import numpy as np
import pytest
from turbgen import TurbulenceGenerator, FieldSampler
from turbgen.__main__ import main
from turbgen.utils import uniform_grid, format_time
from conftest import BASE_PARAMS, write_parameter_file


def test_uniform_grid():
    x, y, z = uniform_grid([(0.0, 1.0), (0.0, 2.0), (-1.0, 1.0)], [4, 2, 8], ndim=2)
    np.testing.assert_allclose(x, [0.125, 0.375, 0.625, 0.875])
    np.testing.assert_allclose(y, [0.5, 1.5])
    np.testing.assert_array_equal(z, [-1.0])


def test_format_time():
    assert format_time(3725.0, 'hh:mm:ss') == "01:02:05"
    assert format_time(65.0, 'mm:ss') == "01:05"
    with pytest.raises(ValueError):
        format_time(1.0, 'ss')


def test_sampler_writes_every_new_pattern(make_params, tmp_path):
    gen = TurbulenceGenerator(make_params())
    sampler = FieldSampler(gen, n=4, t_end=4 * gen.dt, output_file=tmp_path / "drive")
    n_snapshots = sampler.run()
    assert 4 <= n_snapshots <= 5

    with h5py.File(sampler.writer.file_name, 'r') as f:
        assert len(f['vx']) == n_snapshots
        assert f['x'].shape == (4,)
        last = np.stack([f[name][str(gen.step)][()] for name in ('vx', 'vy', 'vz')])
    np.testing.assert_allclose(last, sampler.sample())


def test_sampler_rejects_bad_times(make_params, tmp_path):
    gen = TurbulenceGenerator(make_params())
    with pytest.raises(ValueError):
        FieldSampler(gen, n=2, dt_out=0.0, output_file=tmp_path / "a")
    with pytest.raises(ValueError):
        FieldSampler(gen, n=2, t_end=-1.0, output_file=tmp_path / "b")


def test_sampler_skips_output_on_other_ranks(make_params, tmp_path):
    gen = TurbulenceGenerator(make_params(), rank=1)
    sampler = FieldSampler(gen, n=2, t_end=gen.dt, output_file=tmp_path / "drive")
    assert sampler.writer is None
    sampler.run()
    assert not (tmp_path / "drive.h5").exists()


def test_cli_run_and_restart(parameter_file, tmp_path):
    out = tmp_path / "cli"
    restart = tmp_path / "restart"
    assert main([str(parameter_file), '-n', '4', '--t-end', '0.1', '--output', str(out),
                 '--write-restart', str(restart)]) == 0
    assert (tmp_path / "cli.h5").is_file()
    assert (tmp_path / "restart.h5").is_file()

    assert main([str(parameter_file), '-n', '4', '2', '2', '--t-end', '0.2', '--output', str(tmp_path / "cont"),
                 '--restart', str(restart), '--regular']) == 0
    with h5py.File(tmp_path / "cont.h5", 'r') as f:
        assert f['x'].shape == (4,)
        assert f['y'].shape == (2,)


def test_cli_reports_configuration_errors(tmp_path):
    data = dict(BASE_PARAMS)
    del data['k_driv']
    path = write_parameter_file(tmp_path / "broken.inp", data)
    assert main([str(path), '--output', str(tmp_path / "never")]) == 1
    assert not (tmp_path / "never.h5").exists()


def test_cli_reports_too_many_modes(tmp_path):
    path = write_parameter_file(tmp_path / "big.inp", dict(BASE_PARAMS, k_min=1.0, k_max=40.0))
    assert main([str(path), '--output', str(tmp_path / "never")]) == 1
