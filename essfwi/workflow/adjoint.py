import logging
from time import time

import numpy as np

from essfwi.workflow.base import base

logger = logging.getLogger(__name__)


class adjoint(base):
	""" one encoded gradient of the initial model
	"""

	def run(self):
		""" start workflow
		"""
		solver = self.solver
		solver.setup(self)
		solver.import_model(False)
		solver.import_sources()
		solver.import_stations()
		solver.import_traces()

		start = time()
		rng = np.random.default_rng(int(self.config['optimize']['seed']))
		solver.encode(rng)

		logger.info('Computing kernels')
		misfit, gradient, illum = solver.compute_gradient()
		logger.info('  misfit = %e', misfit)

		solver.export_field(gradient, 'gradient')
		solver.export_field(illum, 'illum')
		logger.info('Elapsed time: %.2fs', time() - start)

		self.misfit = misfit
		self.gradient = gradient
		self.illum = illum

	@property
	def modules(self):
		return ['solver']
