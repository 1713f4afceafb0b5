import numpy as np

from essfwi.tools.config import ParameterError


class ShotPosition:
	""" regular line of sources or receivers in interior grid coordinates
	"""
	def __init__(self, zbeg, xbeg, jz, jx, n, nz, nx=None):
		if n <= 0:
			raise ParameterError('number of positions must be positive, got %d' % n)

		self.zbeg = zbeg
		self.xbeg = xbeg
		self.jz = jz
		self.jx = jx
		self.n = n
		self.nz = nz
		self.nx = nx

		i = np.arange(n)
		self.zs = zbeg + i * jz
		self.xs = xbeg + i * jx

		if self.zs.min() < 0 or self.zs.max() >= nz:
			raise ParameterError('positions exceed the computing zone in z: %d..%d, nz=%d'
				% (self.zs.min(), self.zs.max(), nz))

		if self.xs.min() < 0 or (nx is not None and self.xs.max() >= nx):
			raise ParameterError('positions exceed the computing zone in x: %d..%d, nx=%s'
				% (self.xs.min(), self.xs.max(), nx))

	def __len__(self):
		return self.n

	def clip_range(self, begin, end):
		""" positions begin..end-1 as a new line
		"""
		if not 0 <= begin < end <= self.n:
			raise ParameterError('invalid range %d..%d of %d positions' % (begin, end, self.n))

		return ShotPosition(self.zbeg + begin * self.jz, self.xbeg + begin * self.jx,
			self.jz, self.jx, end - begin, self.nz, self.nx)
