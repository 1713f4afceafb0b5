import logging
from os import path
from time import time

from essfwi.workflow.base import base
from essfwi.tools.io import write_shots

logger = logging.getLogger(__name__)


class forward(base):
	""" forward simulation of every shot on the true model
	"""

	def run(self):
		""" start workflow
		"""
		solver = self.solver
		solver.setup(self)
		solver.import_model(True)
		solver.import_sources()
		solver.import_stations()

		start = time()
		logger.info('Generating traces')

		shots = []
		for i in solver.tasks:
			logger.info('  task %02d / %02d', i + 1, solver.ns)
			shots.append(solver.run_forward(i))

		shots = self.system.gather(shots)

		if self.system.rank() == 0:
			filename = self.path.get('shots', path.join(self.path['output'], 'shots.bin'))
			write_shots(filename, shots, **solver.shot_header())

		logger.info('Elapsed time: %.2fs', time() - start)
		return shots

	@property
	def modules(self):
		""" modules to load
		"""
		return ['solver']
