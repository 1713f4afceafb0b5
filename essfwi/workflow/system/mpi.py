from math import ceil

from mpi4py import MPI
import numpy as np


class mpi:
	""" shots split into contiguous ranges across MPI ranks
	"""
	def rank(self):
		return MPI.COMM_WORLD.Get_rank()

	def size(self):
		return MPI.COMM_WORLD.Get_size()

	def sum(self, data):
		if np.ndim(data) == 0:
			return MPI.COMM_WORLD.allreduce(float(data), op=MPI.SUM)

		data = np.ascontiguousarray(data)
		out = np.zeros_like(data)
		MPI.COMM_WORLD.Allreduce(data, out, op=MPI.SUM)
		return out

	def partition(self, ntask):
		""" worker r owns [r k, min((r + 1) k, ntask)), k = ceil(ntask / size)
		"""
		k = int(ceil(ntask / self.size()))
		begin = min(self.rank() * k, ntask)
		return range(begin, min(begin + k, ntask))

	def gather(self, items):
		""" items of every rank in rank order, at rank 0 only
		"""
		parts = MPI.COMM_WORLD.gather(items, root=0)
		if self.rank() == 0:
			return np.array([item for part in parts for item in part], dtype='float32')
		return None
