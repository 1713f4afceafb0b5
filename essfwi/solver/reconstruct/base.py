class base:
	""" rebuild the forward wavefield, in reverse time order, during the
		adjoint pass
	"""
	def __init__(self, propagator):
		self.propagator = propagator
		self.illum = None

	def forward(self, src, src_ids, geo_ids):
		""" model the encoded shot, keep what the backward pass needs and
			return the synthetic gather (nt, ng)
		"""
		raise NotImplementedError

	def backward(self):
		""" yield (it, field, lap) for it = nt - 1 down to 0, field is the
			wavefield at time level it and lap the Laplacian the forward
			step took from it
		"""
		raise NotImplementedError
