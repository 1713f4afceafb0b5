from essfwi.workflow.base import base


class inversion(base):
	""" encoded-shot full waveform inversion
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

		self.optimize.setup(self)
		self.optimize.run()

	@property
	def modules(self):
		return ['solver', 'optimize']
