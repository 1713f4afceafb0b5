import logging
from os import path
from time import time

import numpy as np

logger = logging.getLogger(__name__)


class base:
	def setup(self, workflow):
		raise NotImplementedError

	def compute_direction(self):
		raise NotImplementedError

	def line_search(self, misfit, iteration):
		raise NotImplementedError

	def restart_search(self):
		raise NotImplementedError

	def run(self):
		solver = self.solver
		niter = int(self.config['niter'])
		start = time()

		self.misfits = []
		self.steplens = []

		for i in range(niter):
			logger.info('Iteration %d', i + 1)

			solver.encode(self.rng)
			misfit, self.g_new, _ = solver.compute_gradient()
			self.misfits.append(misfit)
			logger.info('  misfit = %e', misfit)

			self.p_new = self.compute_direction()
			steplen = self.line_search(misfit, i + 1)
			self.steplens.append(steplen)

			solver.update_model(self.p_new, steplen)
			solver.export_model('vel_%d' % (i + 1))

			self.p_old = self.p_new
			self.g_old = self.g_new

		self.write_history()
		logger.info('Elapsed time: %.2fs', time() - start)

	def write_history(self):
		if self.system.rank() == 0:
			outdir = self.path['output']
			np.savetxt(path.join(outdir, 'misfits.txt'), np.array(self.misfits), fmt='%.8e')
			steplen = np.column_stack((np.arange(1, len(self.steplens) + 1), self.steplens))
			np.savetxt(path.join(outdir, 'steplen.txt'), steplen, fmt=['%d', '%.8e'])
