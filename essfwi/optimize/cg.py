import logging

import numpy as np

from essfwi.optimize.base import base
from essfwi.optimize.line_search.parabolic import parabolic, PreservedAlpha

logger = logging.getLogger(__name__)


class cg(base):
	def setup(self, workflow):
		self.solver = workflow.solver
		self.rng = np.random.default_rng(int(self.config['seed']))
		self.preserved = PreservedAlpha()
		self.parabolic = parabolic(workflow.solver, self.config, self.preserved)
		self.g_old = None
		self.p_old = None

	@property
	def history(self):
		return self.parabolic.history

	def line_search(self, misfit, iteration):
		return self.parabolic.run(self.p_new, misfit, iteration)

	def restart_search(self):
		self.g_old = None
		self.p_old = None

	def pollak(self, g_new, g_old):
		g_new = g_new.astype('float64')
		g_old = g_old.astype('float64')
		den = np.dot(g_old, g_old)
		if den == 0:
			return 0.0

		num = np.dot(g_new, g_new) - np.dot(g_new, g_old)
		return max(0.0, num / den)

	def compute_direction(self):
		""" g is the steepest-descent image, so p = g + beta p_old
		"""
		g_new = self.g_new

		if self.g_old is None:
			return g_new.copy()

		beta = self.pollak(g_new, self.g_old)
		p_new = (g_new + np.float32(beta) * self.p_old).astype('float32')

		if np.dot(p_new.astype('float64'), g_new) < 0:
			logger.info('  restarting CG: not descent')
			self.restart_search()
			return g_new.copy()

		logger.debug('  beta = %e', beta)
		return p_new
