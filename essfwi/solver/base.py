class base:
	""" solver interface used by the workflows and the optimizer
	"""
	def setup(self, workflow):
		raise NotImplementedError

	def import_model(self, true=False):
		raise NotImplementedError

	def import_sources(self):
		raise NotImplementedError

	def import_stations(self):
		raise NotImplementedError

	def import_traces(self):
		raise NotImplementedError

	def run_forward(self, isrc):
		raise NotImplementedError

	def import_perturbation(self):
		raise NotImplementedError

	def run_born(self, isrc):
		raise NotImplementedError

	def compute_misfit(self, vel):
		raise NotImplementedError

	def compute_gradient(self):
		raise NotImplementedError

	def update_model(self, direction, steplen):
		raise NotImplementedError

	def export_model(self, name):
		raise NotImplementedError

	def export_field(self, field, name):
		raise NotImplementedError
