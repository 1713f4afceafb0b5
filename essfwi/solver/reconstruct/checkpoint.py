import numpy as np

from essfwi.solver.reconstruct.base import base
from essfwi.solver.reconstruct.storage import MemoryStorage


class checkpoint(base):
	""" save the full state every check_step steps and replay each
		segment forward during the backward pass
	"""
	def __init__(self, propagator, check_step=50, storage=None):
		super().__init__(propagator)
		self.check_step = check_step
		self.storage = storage if storage is not None else MemoryStorage()
		self.src = None
		self.src_ids = None

	def forward(self, src, src_ids, geo_ids):
		self.storage.clear()
		self.storage.save(0, np.zeros((2, self.propagator.grid.size), dtype='float32'))

		def save(it, prev, curr):
			if (it + 1) % self.check_step == 0 and it + 1 < src.shape[0]:
				self.storage.save(it + 1, np.stack((prev, curr)))

		dcal, _, _ = self.propagator.model(src, src_ids, geo_ids, callback=save)
		self.src = src
		self.src_ids = src_ids
		return dcal

	def segment(self, begin, end):
		""" replay begin..end-1 and return the fields and Laplacians of each step
		"""
		fields = []
		laps = []

		def collect(it, prev, curr):
			field = prev.copy()
			self.propagator.sub_source(field, self.src[it], self.src_ids)
			fields.append(field)
			laps.append(self.propagator.u2.copy())

		state = self.storage.load(begin)
		self.propagator.model(self.src, self.src_ids, begin=begin, end=end, state=state, callback=collect)
		return fields, laps

	def backward(self):
		nt = self.src.shape[0]
		self.illum = self.propagator.zeros()
		starts = list(range(0, nt, self.check_step))
		for begin in reversed(starts):
			end = min(begin + self.check_step, nt)
			fields, laps = self.segment(begin, end)
			for i in range(len(fields) - 1, -1, -1):
				self.propagator.illuminate(self.illum, fields[i])
				yield begin + i, fields[i], laps[i]
