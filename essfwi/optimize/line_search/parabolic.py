import logging
import math

import numpy as np

logger = logging.getLogger(__name__)

# a warm start below MIN_ALPHA is replaced by RESET_ALPHA
MIN_ALPHA = 1e-7
RESET_ALPHA = 1e-4


class PreservedAlpha:
	""" last accepted step length of each velocity parameter
	"""
	def __init__(self, nvel=1):
		self.alpha = [0.0] * nvel
		self.initialized = [False] * nvel

	def get(self, ivel, default):
		if not self.initialized[ivel]:
			self.initialized[ivel] = True
			self.alpha[ivel] = default
		return self.alpha[ivel]

	def set(self, ivel, alpha):
		self.initialized[ivel] = True
		self.alpha[ivel] = alpha


def parabola_vertex(x1, y1, x2, y2, x3, y3, max_alpha):
	""" vertex of the parabola through three points, (min(2 x3, max_alpha), nan)
		when the points are close to a line
	"""
	fallback = min(2 * x3, max_alpha), float('nan')

	if x1 == x2 or x2 == x3 or x1 == x3:
		return fallback

	k1 = (y2 - y1) / (x2 - x1)
	k2 = (y3 - y2) / (x3 - x2)
	if abs(k2 - k1) <= 1e-3 * max(abs(k1), abs(k2)):
		return fallback

	denom = (x1 - x2) * (x1 - x3) * (x2 - x3)
	a = (x3 * (y2 - y1) + x2 * (y1 - y3) + x1 * (y3 - y2)) / denom
	b = (x3 * x3 * (y1 - y2) + x2 * x2 * (y3 - y1) + x1 * x1 * (y2 - y3)) / denom
	c = (x2 * x3 * (x2 - x3) * y1 + x3 * x1 * (x3 - x1) * y2 + x1 * x2 * (x1 - x2) * y3) / denom

	# opening downwards, the vertex is a maximum
	if a <= 0:
		return fallback

	xv = -b / (2 * a)
	yv = c - b * b / (4 * a)
	if not (math.isfinite(xv) and math.isfinite(yv)):
		return fallback

	return xv, yv


class parabolic:
	""" bracket a minimum with three step lengths then fit a parabola
	"""
	def __init__(self, solver, config, preserved=None):
		self.solver = solver
		self.maxdv = float(config['maxdv'])
		self.retry = int(config['ls_retry'])
		self.preserved = preserved if preserved is not None else PreservedAlpha()
		self.history = []
		self.count = 0

	def max_alpha(self, p):
		""" largest step keeping every velocity decrease below maxdv
		"""
		solver = self.solver
		m = solver.vel.dat.astype('float64')
		v = solver.dx / (solver.dt * np.sqrt(m))
		target = v - self.maxdv

		mask = (np.abs(p) >= 1e-10) & (target > 0)
		if not mask.any():
			return 0.0, 0.0

		mt = (solver.dx / (solver.dt * target[mask])) ** 2
		alpha2 = float(np.min((mt - m[mask]) / np.abs(p[mask])))
		return alpha2, 2 * alpha2

	def init_alpha(self, ivel, max_alpha3):
		alpha3 = min(self.preserved.get(ivel, max_alpha3), max_alpha3)
		if alpha3 < MIN_ALPHA:
			alpha3 = min(RESET_ALPHA, max_alpha3)
		return alpha3 / 2, alpha3

	def evaluate(self, p, alpha):
		self.count += 1
		f = self.solver.compute_misfit(self.solver.update_vel(p, alpha))
		logger.debug('  step %d: alpha = %e, misfit = %e', self.count, alpha, f)
		return f

	def select(self, p, f1, alpha2, alpha3, max_alpha3):
		""" returns alpha2, f2, alpha3, f3 and whether the points bracket a minimum
		"""
		f2 = self.evaluate(p, alpha2)
		f3 = self.evaluate(p, alpha3)

		# f2 may be far too large, halve alpha2
		tuned = [(alpha2, f2)]
		for _ in range(self.retry):
			if f2 <= f1:
				break
			alpha3, f3 = alpha2, f2
			alpha2 /= 2
			f2 = self.evaluate(p, alpha2)
			tuned.append((alpha2, f2))

		if f2 > f1:
			logger.warning('  unable to reduce the misfit by halving, taking the best step seen')
			alpha2, f2 = min(tuned, key=lambda x: x[1])
			alpha3 = min(2 * alpha2, max_alpha3)
			f3 = self.evaluate(p, alpha3)
			return alpha2, f2, alpha3, f3, False

		# (0, f1)-(alpha2, f2) line at the first alpha3, fixed while doubling
		target = f1 + (f2 - f1) / alpha2 * alpha3
		logger.debug('  linear fit at alpha3 = %e', target)

		def improving():
			return f3 < target and f3 < f1 and alpha3 < max_alpha3

		# still below the line, enlarge alpha3
		tuned = [(alpha3, f3)]
		for _ in range(self.retry):
			if not improving():
				break
			alpha2, f2 = alpha3, f3
			alpha3 = min(2 * alpha3, max_alpha3)
			f3 = self.evaluate(p, alpha3)
			tuned.append((alpha3, f3))

		if improving():
			logger.warning('  unable to bracket the minimum by doubling, taking the best step seen')
			alpha3, f3 = min(tuned, key=lambda x: x[1])
			alpha2 = alpha3 / 2
			f2 = self.evaluate(p, alpha2)
			return alpha2, f2, alpha3, f3, False

		return alpha2, f2, alpha3, f3, True

	def run(self, p, f1, iteration=0, ivel=0):
		""" step length along p from a baseline misfit f1
		"""
		self.count = 0
		max_alpha2, max_alpha3 = self.max_alpha(p)
		logger.debug('  max_alpha2 = %e, max_alpha3 = %e', max_alpha2, max_alpha3)

		if max_alpha3 <= 0:
			logger.warning('  search direction vanishes, step length set to 0')
			self.record(iteration, 0.0, f1, 0.0, f1, 0.0, f1, 0.0, f1, False)
			return 0.0

		alpha2, alpha3 = self.init_alpha(ivel, max_alpha3)
		alpha2, f2, alpha3, f3, bracketed = self.select(p, f1, alpha2, alpha3, max_alpha3)

		if bracketed:
			alpha4, f4 = parabola_vertex(0.0, f1, alpha2, f2, alpha3, f3, max_alpha3)
			if math.isnan(f4):
				logger.warning('  points do not fit a parabola, alpha4 set to %e', alpha4)
			alpha4 = min(max(alpha4, 0.0), max_alpha3)
		elif f2 <= f3:
			alpha4, f4 = alpha2, f2
		else:
			alpha4, f4 = alpha3, f3

		for i, (alpha, f) in enumerate([(0.0, f1), (alpha2, f2), (alpha3, f3), (alpha4, f4)]):
			logger.info('  alpha%d = %e, misfit = %e', i + 1, alpha, f)

		self.record(iteration, 0.0, f1, alpha2, f2, alpha3, f3, alpha4, f4, bracketed)
		self.preserved.set(ivel, alpha4)
		return alpha4

	def record(self, iteration, alpha1, f1, alpha2, f2, alpha3, f3, alpha4, f4, bracketed):
		self.history.append({
			'iter': iteration,
			'alpha1': alpha1, 'obj_val1': f1,
			'alpha2': alpha2, 'obj_val2': f2,
			'alpha3': alpha3, 'obj_val3': f3,
			'alpha4': alpha4, 'obj_val4': f4,
			'parabolic': bracketed,
			'evaluations': self.count
		})
