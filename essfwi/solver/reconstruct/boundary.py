import numpy as np

from essfwi.solver.damp4t10d import REACH
from essfwi.solver.reconstruct.base import base


class boundary(base):
	""" keep a thin shell of the wavefield at every step and run the
		propagator backwards from the final state
	"""
	def __init__(self, propagator, width=REACH):
		super().__init__(propagator)
		self.width = width
		self.ids = self.shell()
		self.bndr = None
		self.state = None
		self.src = None
		self.src_ids = None

	def shell(self):
		""" padded flat indices of the interior cells the reverse step cannot rebuild
		"""
		grid = self.propagator.grid
		nb, nx, nz, nzpad = grid.nb, grid.nx, grid.nz, grid.nzpad
		w = self.width

		left = np.arange(nb, nb + w)
		right = np.arange(nb + nx - w, nb + nx)
		middle = np.arange(nb + w, nb + nx - w)

		ids = [(ix * nzpad + np.arange(nz)) for ix in np.concatenate((left, right))]
		ids += [(ix * nzpad + np.arange(nz - w, nz)) for ix in middle]
		return np.concatenate(ids).astype('int64')

	def forward(self, src, src_ids, geo_ids):
		nt = src.shape[0]
		self.bndr = np.zeros((nt, len(self.ids)), dtype='float32')

		def save(it, prev, curr):
			self.bndr[it] = prev[self.ids]

		dcal, prev, curr = self.propagator.model(src, src_ids, geo_ids, callback=save)
		self.state = (prev, curr)
		self.src = src
		self.src_ids = src_ids
		return dcal

	def backward(self):
		propagator = self.propagator
		nt = self.src.shape[0]
		lap = propagator.zeros()
		self.illum = propagator.zeros()

		# a holds level it with the source injected, b the level after it
		a, b = self.state[0].copy(), self.state[1].copy()
		for it in range(nt - 1, -1, -1):
			propagator.step_backward(b, a, lap, self.width)
			propagator.sub_source(a, self.src[it], self.src_ids)
			propagator.illuminate(self.illum, a)
			yield it, a, lap

			if it > 0:
				b[self.ids] = self.bndr[it - 1]
			a, b = b, a
