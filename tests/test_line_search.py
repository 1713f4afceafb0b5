import math

import numpy as np
import pytest

from essfwi.optimize.line_search.parabolic import parabolic, PreservedAlpha, parabola_vertex
from essfwi.solver.model import update_vel

CONFIG = {'maxdv': '200', 'ls_retry': '5'}


class Vel:
	def __init__(self, dat):
		self.dat = dat


class fake:
	""" uniform model, the misfit is a function of the mean model change
	"""
	dx = 10.0
	dt = 0.001

	def __init__(self, f, n=16):
		# 2000 m/s
		self.vel = Vel(np.full(n, 25, dtype='float32'))
		self.f = f
		self.calls = 0

	def update_vel(self, direction, steplen):
		return update_vel(self.vel.dat, direction, steplen, 1.0, 1000.0)

	def compute_misfit(self, vel):
		self.calls += 1
		return self.f(float(np.mean(vel.astype('float64'))) - 25)


def direction(n=16):
	return np.ones(n, dtype='float32')


def test_max_alpha():
	search = parabolic(fake(lambda a: a), CONFIG)
	alpha2, alpha3 = search.max_alpha(direction())
	# 1800 m/s
	assert alpha2 == pytest.approx((10 / (0.001 * 1800)) ** 2 - 25, rel=1e-5)
	assert alpha3 == pytest.approx(2 * alpha2)

	assert search.max_alpha(np.zeros(16, dtype='float32')) == (0.0, 0.0)


def test_parabola():
	search = parabolic(fake(lambda a: (a - 3) ** 2), CONFIG)
	alpha = search.run(direction(), 9.0, iteration=1)
	record = search.history[-1]

	assert record['parabolic']
	assert record['iter'] == 1
	assert alpha == pytest.approx(3, rel=1e-3)
	assert record['obj_val2'] <= record['obj_val1']
	assert record['obj_val4'] <= min(record['obj_val2'], record['obj_val3']) + 1e-6
	assert search.preserved.alpha[0] == alpha
	assert search.preserved.initialized[0]


def test_halving_fallback():
	solver = fake(lambda a: a * a)
	search = parabolic(solver, CONFIG)
	_, max_alpha3 = search.max_alpha(direction())
	alpha = search.run(direction(), 0.0)
	record = search.history[-1]

	assert not record['parabolic']
	assert 0 < alpha <= max_alpha3
	assert alpha == record['alpha2']
	assert alpha == pytest.approx(max_alpha3 / 2 ** 6)
	# two initial trials, five halvings and the final alpha3
	assert record['evaluations'] == 8
	assert solver.calls == 8


def test_doubling_fallback():
	preserved = PreservedAlpha()
	preserved.set(0, 1.0)
	search = parabolic(fake(lambda a: -a * a), {'maxdv': '200', 'ls_retry': '2'}, preserved)
	alpha = search.run(direction(), 0.0)
	record = search.history[-1]

	assert not record['parabolic']
	assert alpha == pytest.approx(4)
	assert record['alpha2'] == pytest.approx(2)
	assert preserved.alpha[0] == alpha


def test_doubling_target():
	# f(2) is above the line through (0, 0) and (1, -3) but still below the
	# line fitted before doubling, so doubling goes on to alpha3 = 4
	preserved = PreservedAlpha()
	preserved.set(0, 1.0)
	solver = fake(lambda a: float(np.interp(a, [0, 0.5, 1, 2, 4, 20], [0, -1, -3, -2.5, 1, 10])))
	search = parabolic(solver, CONFIG, preserved)
	alpha = search.run(direction(), 0.0)
	record = search.history[-1]

	assert record['parabolic']
	assert record['alpha2'] == pytest.approx(2)
	assert record['alpha3'] == pytest.approx(4)
	assert record['evaluations'] == 4
	assert alpha == pytest.approx(11 / 6, rel=1e-3)


def test_collinear():
	search = parabolic(fake(lambda a: 1.0), CONFIG)
	_, max_alpha3 = search.max_alpha(direction())
	alpha = search.run(direction(), 1.0)
	record = search.history[-1]

	assert record['parabolic']
	assert math.isnan(record['obj_val4'])
	assert alpha == pytest.approx(max_alpha3)


def test_warm_start():
	preserved = PreservedAlpha()
	preserved.set(0, 1e-9)
	search = parabolic(fake(lambda a: (a - 3e-5) ** 2), CONFIG, preserved)
	search.run(direction(), 9e-10)
	assert search.history[-1]['alpha3'] <= 1e-4
	assert search.history[-1]['alpha2'] == pytest.approx(5e-5, rel=1e-3)


def test_zero_direction():
	search = parabolic(fake(lambda a: a), CONFIG)
	assert search.run(np.zeros(16, dtype='float32'), 1.0) == 0.0
	assert search.history[-1]['evaluations'] == 0


def test_parabola_vertex():
	xv, yv = parabola_vertex(0, 4, 1, 1, 3, 1, 10)
	assert xv == pytest.approx(2)
	assert yv == pytest.approx(0)

	xv, yv = parabola_vertex(0, 0, 1, -1, 2, -4, 10)
	assert xv == 4
	assert math.isnan(yv)
