from os import path, makedirs
import numpy as np


class CheckpointError(IOError):
	pass


class MemoryStorage:
	""" keep wavefield checkpoints in memory
	"""
	def __init__(self):
		self.buffers = {}

	def save(self, step, buffer):
		self.buffers[step] = np.array(buffer, dtype='float32', copy=True)

	def load(self, step):
		if step not in self.buffers:
			raise CheckpointError('no checkpoint at step %d' % step)
		return self.buffers[step].copy()

	def clear(self):
		self.buffers = {}


class DiskStorage:
	""" raw float32 dumps, one file per time step and buffer role
	"""
	def __init__(self, directory, size):
		self.directory = directory
		self.size = size
		if not path.exists(directory):
			makedirs(directory)

	def filename(self, step, role):
		return path.join(self.directory, 'check_time_%d_%d.bin' % (step, role))

	def save(self, step, buffer):
		buffer = np.asarray(buffer, dtype='float32').reshape(2, -1)
		if buffer.shape[1] != self.size:
			raise CheckpointError('checkpoint of %d samples, expected %d' % (buffer.shape[1], self.size))

		for role in (1, 2):
			buffer[role - 1].tofile(self.filename(step, role))

	def load(self, step):
		out = np.zeros((2, self.size), dtype='float32')
		for role in (1, 2):
			name = self.filename(step, role)
			if not path.exists(name):
				raise CheckpointError('missing checkpoint file %s' % name)

			data = np.fromfile(name, dtype='float32')
			if data.size != self.size:
				raise CheckpointError('%s holds %d samples, expected %d' % (name, data.size, self.size))

			out[role - 1] = data

		return out

	def clear(self):
		pass
