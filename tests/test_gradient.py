import numpy as np
import pytest

from essfwi.solver.gradient import GradientEngine, ramp
from essfwi.solver.model import Velocity, update_vel
from essfwi.solver.misfit.waveform import residual, objective
from essfwi.solver.reconstruct.boundary import boundary
from essfwi.solver.reconstruct.checkpoint import checkpoint
from essfwi.tools.config import ParameterError

from conftest import DT, DX

T_WIDTH = 0.1


def observed(propagator, src, src_pos, geo_pos):
	obs, _, _ = propagator.model(src, propagator.positions(src_pos), propagator.positions(geo_pos))
	return propagator.remove_direct_arrival(src_pos, geo_pos, obs, T_WIDTH)


def homogeneous(propagator, v=1500.0):
	grid = propagator.grid
	vel = np.full(grid.nz * grid.nx, v, dtype='float32')
	return propagator.clone(Velocity.from_velocity(vel, grid, DX, DT))


def gradient(propagator, src, src_pos, obs, geo_pos, strategy=boundary, imaging='wavefield'):
	engine = GradientEngine(propagator, strategy(propagator), imaging, 0, 0, T_WIDTH)
	misfit, res, image, illum = engine.run(src, src_pos, obs, geo_pos)
	propagator.grid.mask(image)
	return misfit, res, image, illum


def misfit_at(propagator, direction, alpha, src, src_pos, obs, geo_pos):
	m = update_vel(propagator.vel.dat, direction, alpha, 1e-3, 1e3)
	trial = propagator.clone(Velocity(propagator.grid.refill(m), propagator.grid))
	syn = observed(trial, src, src_pos, geo_pos)
	return objective(residual(obs, syn))


def test_ramp():
	assert ramp(0.5, 0.3, 0.4) == 1.0
	assert ramp(0.35, 0.3, 0.4) == pytest.approx(0.5)
	assert ramp(0.3, 0.3, 0.4) is None
	assert ramp(0.1, 0, 0) == 1.0
	assert ramp(0, 0, 0) is None


def test_imaging_choice(small_setup):
	with pytest.raises(ParameterError):
		GradientEngine(small_setup[0], None, 'born')


def test_zero_residual(small_setup):
	propagator, src, src_pos, geo_pos = small_setup
	init = homogeneous(propagator)
	obs = observed(init, src, src_pos, geo_pos)

	misfit, res, image, _ = gradient(init, src, src_pos, obs, geo_pos)
	assert misfit == 0
	assert not res.any()
	assert not image.any()


def test_deterministic(small_setup):
	propagator, src, src_pos, geo_pos = small_setup
	obs = observed(propagator, src, src_pos, geo_pos)
	init = homogeneous(propagator)

	first = gradient(init, src, src_pos, obs, geo_pos)
	second = gradient(init, src, src_pos, obs, geo_pos)
	assert first[0] == second[0]
	assert np.array_equal(first[2], second[2])
	assert np.array_equal(first[3], second[3])


@pytest.mark.parametrize('imaging', ['wavefield', 'laplacian'])
def test_descent(small_setup, imaging):
	propagator, src, src_pos, geo_pos = small_setup
	obs = observed(propagator, src, src_pos, geo_pos)
	init = homogeneous(propagator)

	f0, _, image, _ = gradient(init, src, src_pos, obs, geo_pos, imaging=imaging)
	assert f0 > 0
	assert np.abs(image).max() > 0

	scale = init.vel.dat.max() / np.abs(image).max()
	trials = [misfit_at(init, image, a * scale, src, src_pos, obs, geo_pos) for a in [0.003, 0.01, 0.03]]
	assert min(trials) < f0


def test_strategies_agree(small_setup):
	propagator, src, src_pos, geo_pos = small_setup
	obs = observed(propagator, src, src_pos, geo_pos)
	init = homogeneous(propagator)

	first = gradient(init, src, src_pos, obs, geo_pos, boundary)
	second = gradient(init, src, src_pos, obs, geo_pos, lambda p: checkpoint(p, 64))

	assert first[0] == second[0]
	scale = np.abs(second[2]).max()
	assert np.abs(first[2] - second[2]).max() < 1e-2 * scale


def test_preconditioned_agree(small_setup):
	propagator, src, src_pos, geo_pos = small_setup
	obs = observed(propagator, src, src_pos, geo_pos)
	init = homogeneous(propagator)
	grid = init.grid

	images = []
	for strategy in [boundary, lambda p: checkpoint(p, 50)]:
		_, _, image, illum = gradient(init, src, src_pos, obs, geo_pos, strategy)
		images.append(grid.crop(image / (illum + 1e-3 * illum.max())))

	first, second = images
	scale = np.abs(second).max()
	assert np.abs(first - second).max() < 2e-2 * scale
