import numpy as np

from essfwi.tools.config import ParameterError


def transform(v, dx, dt):
	""" velocity (m/s) to the stencil coefficient (dx / (v dt))^2
	"""
	v = np.asarray(v, dtype='float64')
	return ((dx / (dt * v)) ** 2).astype('float32')


def untransform(m, dx, dt):
	m = np.asarray(m, dtype='float64')
	return (dx / (dt * np.sqrt(m))).astype('float32')


def update_vel(vel, direction, steplen, vmin, vmax, out=None):
	""" vel + steplen * direction clamped to [vmin, vmax]
	"""
	if vmax <= vmin:
		raise ParameterError('vmax(%f) <= vmin(%f)' % (vmax, vmin))

	new_vel = vel + np.float32(steplen) * direction
	return np.clip(new_vel, vmin, vmax, out=out).astype('float32', copy=False)


class Grid:
	""" interior nz x nx with nb sponge cells on the left, right and bottom,
		the top is a free surface
	"""
	def __init__(self, nz, nx, nb):
		if nz <= 0 or nx <= 0 or nb < 0:
			raise ParameterError('invalid grid nz=%d nx=%d nb=%d' % (nz, nx, nb))

		self.nz = nz
		self.nx = nx
		self.nb = nb
		self.nzpad = nz + nb
		self.nxpad = nx + 2 * nb

	@property
	def size(self):
		return self.nzpad * self.nxpad

	def index(self, iz, ix):
		""" padded flat index of interior cell (iz, ix)
		"""
		return (np.asarray(ix) + self.nb) * self.nzpad + np.asarray(iz)

	def expand(self, dat):
		""" pad an interior array, the sponge copies the nearest interior values
		"""
		dat = np.asarray(dat, dtype='float32').reshape(self.nx, self.nz)
		out = np.zeros((self.nxpad, self.nzpad), dtype='float32')
		out[self.nb:self.nb + self.nx, :self.nz] = dat
		self.refill(out.reshape(-1))
		return out.reshape(-1)

	def refill(self, dat):
		""" overwrite the sponge with the nearest interior values, in place
		"""
		nb = self.nb
		nx = self.nx
		nz = self.nz
		pad = dat.reshape(self.nxpad, self.nzpad)
		pad[nb:nb + nx, nz:] = pad[nb:nb + nx, nz - 1:nz]
		pad[:nb, :] = pad[nb:nb + 1, :]
		pad[nb + nx:, :] = pad[nb + nx - 1:nb + nx, :]
		return dat

	def mask(self, dat):
		""" zero everything outside the interior, in place
		"""
		nb = self.nb
		pad = dat.reshape(self.nxpad, self.nzpad)
		pad[:nb, :] = 0
		pad[nb + self.nx:, :] = 0
		pad[:, self.nz:] = 0
		return dat

	def crop(self, dat):
		""" interior part as a flat array, z fastest
		"""
		nb = self.nb
		pad = np.asarray(dat).reshape(self.nxpad, self.nzpad)
		return np.ascontiguousarray(pad[nb:nb + self.nx, :self.nz]).reshape(-1)


class Velocity:
	""" transformed velocity on the padded grid
	"""
	def __init__(self, dat, grid):
		dat = np.asarray(dat, dtype='float32')
		if dat.size != grid.size:
			raise ParameterError('velocity has %d samples, grid needs %d' % (dat.size, grid.size))

		self.dat = dat.reshape(-1)
		self.grid = grid

	@classmethod
	def from_velocity(cls, v, grid, dx, dt):
		""" expand an interior velocity in m/s
		"""
		return cls(transform(grid.expand(v), dx, dt), grid)

	def to_velocity(self, dx, dt):
		""" interior velocity in m/s
		"""
		return untransform(self.grid.crop(self.dat), dx, dt)
