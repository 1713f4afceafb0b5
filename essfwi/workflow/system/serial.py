import numpy as np


class serial:
	""" every shot on the current process
	"""
	def rank(self):
		return 0

	def size(self):
		return 1

	def sum(self, data):
		return data

	def partition(self, ntask):
		return range(ntask)

	def gather(self, items):
		return np.array(items, dtype='float32')
