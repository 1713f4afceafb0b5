import logging
from os import path
from time import time

from essfwi.workflow.base import base
from essfwi.tools.io import write_shots

logger = logging.getLogger(__name__)


class born(base):
	""" linearized shot gathers of vtrue - vinit around the initial model
	"""

	def run(self):
		""" start workflow
		"""
		solver = self.solver
		solver.setup(self)
		solver.import_model(False)
		solver.import_perturbation()
		solver.import_sources()
		solver.import_stations()

		start = time()
		logger.info('Generating born traces')

		shots = []
		for i in solver.tasks:
			logger.info('  task %02d / %02d', i + 1, solver.ns)
			shots.append(solver.run_born(i))

		shots = self.system.gather(shots)

		if self.system.rank() == 0:
			filename = self.path.get('born', path.join(self.path['output'], 'born.bin'))
			write_shots(filename, shots, **solver.shot_header())

		logger.info('Elapsed time: %.2fs', time() - start)
		self.shots = shots

	@property
	def modules(self):
		return ['solver']
