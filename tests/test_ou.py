import numpy as np
import pytest
from turbgen.ou import OUProcess
from turbgen.rng import RandomState


def _process(n_modes=2000, variance=0.3, decay=1.0, dt=0.1, seed=140281):
    return OUProcess(n_modes, variance, decay, dt, RandomState(seed))


def test_initial_phases_follow_stationary_distribution():
    ou = _process()
    assert ou.step == -1
    ou.initialize()
    assert ou.phases.shape == (2000, 3, 2)
    assert abs(ou.phases.mean()) < 0.02
    assert ou.phases.var() == pytest.approx(0.3 ** 2, rel=0.05)


def test_variance_converges_from_zero_initial_condition():
    ou = _process(dt=0.1)
    for _ in range(200):
        ou.advance()
    assert ou.step == 199
    assert ou.phases.var() == pytest.approx(0.3 ** 2, rel=0.05)
    assert abs(ou.phases.mean()) < 0.02


def test_one_step_autocorrelation_equals_damping_factor():
    ou = _process(dt=0.2)
    ou.initialize()
    before = ou.phases.copy().ravel()
    ou.advance()
    after = ou.phases.ravel()
    corr = np.corrcoef(before, after)[0, 1]
    assert ou.damping_factor == pytest.approx(np.exp(-0.2))
    assert corr == pytest.approx(ou.damping_factor, abs=0.02)


def test_phase_views_share_memory():
    ou = _process(n_modes=3)
    ou.initialize()
    np.testing.assert_array_equal(ou.phase_a, ou.phases[:, :, 0])
    np.testing.assert_array_equal(ou.phase_b, ou.phases[:, :, 1])
    ou.phases[0, 1, 0] = 42.0
    assert ou.phase_a[0, 1] == 42.0


def test_draw_order_is_mode_axis_parity():
    ou = _process(n_modes=4, variance=2.0, seed=5)
    ou.initialize()
    rng = RandomState(5)
    expected = np.array([2.0 * rng.gaussian() for _ in range(24)])
    np.testing.assert_array_equal(ou.phases.ravel(), expected)


def test_update_is_reproducible():
    a, b = _process(n_modes=50), _process(n_modes=50)
    for ou in (a, b):
        ou.initialize()
        for _ in range(7):
            ou.advance()
    np.testing.assert_array_equal(a.phases, b.phases)
    assert a.rng.seed == b.rng.seed
