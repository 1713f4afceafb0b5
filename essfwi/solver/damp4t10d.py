import numpy as np

from numba import njit, prange

from essfwi.solver.model import untransform
from essfwi.tools.config import ParameterError

# Zhang Jinhai's 10th order coefficients
C0 = +1.53400796
C1 = +1.78858721
C2 = -0.31660756
C3 = +0.07612173
C4 = -0.01626042
C5 = +0.00216736

# cells at each edge never written by the stencil
REACH = 6


class StabilityError(ArithmeticError):
	""" wavefield blew up, dt/dx outside the stencil's stability limit
	"""
	pass


@njit(parallel=True)
def laplacian(u2, curr, nz, x0, x1, z0, z1):
	for ix in prange(x0, x1):
		for iz in range(z0, z1):
			k = ix * nz + iz
			u2[k] = (-4.0 * C0 * curr[k] +
				C1 * (curr[k - 1] + curr[k + 1] + curr[k - nz] + curr[k + nz]) +
				C2 * (curr[k - 2] + curr[k + 2] + curr[k - 2 * nz] + curr[k + 2 * nz]) +
				C3 * (curr[k - 3] + curr[k + 3] + curr[k - 3 * nz] + curr[k + 3 * nz]) +
				C4 * (curr[k - 4] + curr[k + 4] + curr[k - 4 * nz] + curr[k + 4 * nz]) +
				C5 * (curr[k - 5] + curr[k + 5] + curr[k - 5 * nz] + curr[k + 5 * nz]))


@njit(parallel=True)
def leapfrog(prev, curr, u2, vel, damp, nz, x0, x1, z0, z1):
	for ix in prange(x0, x1):
		for iz in range(z0, z1):
			k = ix * nz + iz
			d = damp[k]
			iv = 1.0 / vel[k]
			prev[k] = ((2.0 - 2.0 * d + d * d) * curr[k] - (1.0 - 2.0 * d) * prev[k] +
				iv * u2[k] +
				iv * iv / 12.0 * (u2[k - 1] + u2[k + 1] + u2[k - nz] + u2[k + nz] - 4.0 * u2[k]))


@njit(parallel=True)
def energy(illum, curr, nz, x0, x1, z0, z1):
	for ix in prange(x0, x1):
		for iz in range(z0, z1):
			k = ix * nz + iz
			illum[k] += curr[k] * curr[k]


def sponge(grid, max_delta):
	""" quadratic damping, 0 at the interior edge and max_delta at the outer edge
	"""
	nb = grid.nb
	dist = np.zeros((grid.nxpad, grid.nzpad), dtype='float32')
	if nb > 0:
		ramp = (np.arange(nb, 0, -1) / nb).astype('float32')
		dist[:nb, :] = ramp[:, None]
		dist[grid.nb + grid.nx:, :] = ramp[::-1, None]
		dist[:, grid.nz:] = np.maximum(dist[:, grid.nz:], ramp[::-1][None, :])

	return (max_delta * dist * dist).reshape(-1)


class damp4t10d:
	""" 2nd order in time, 10th order in space acoustic propagator with
		a sponge absorbing boundary
	"""
	def __init__(self, dt, dx, grid, max_delta=0.05):
		if grid.nzpad <= 2 * REACH or grid.nxpad <= 2 * REACH:
			raise ParameterError('grid %d x %d is too small for the stencil' % (grid.nzpad, grid.nxpad))

		self.dt = dt
		self.dx = dx
		self.grid = grid
		self.max_delta = max_delta
		self.damp = sponge(grid, max_delta)
		self.u2 = self.zeros()
		self.vel = None

	def zeros(self):
		return np.zeros(self.grid.size, dtype='float32')

	def bind_velocity(self, vel):
		if vel.dat.size != self.grid.size:
			raise ParameterError('velocity does not match the propagator grid')

		self.vel = vel
		return self

	def clone(self, vel):
		""" same propagator on another velocity
		"""
		out = damp4t10d(self.dt, self.dx, self.grid, self.max_delta)
		return out.bind_velocity(vel)

	def positions(self, pos):
		""" padded flat indices of a shot line
		"""
		if pos.zs.min() < REACH:
			raise ParameterError('positions at depth %d lie in the free surface strip (< %d)'
				% (pos.zs.min(), REACH))

		if pos.xs.max() >= self.grid.nx or pos.zs.max() >= self.grid.nz:
			raise ParameterError('positions exceed the computing zone')

		return self.grid.index(pos.zs, pos.xs).astype('int64')

	def step_forward(self, prev, curr):
		""" advance one step, the new time level overwrites prev
		"""
		nz = self.grid.nzpad
		nx = self.grid.nxpad
		laplacian(self.u2, curr, nz, REACH - 1, nx - REACH + 1, REACH - 1, nz - REACH + 1)
		leapfrog(prev, curr, self.u2, self.vel.dat, self.damp, nz, REACH, nx - REACH, REACH, nz - REACH)
		return prev

	def inner(self, width):
		""" region of the interior reconstructible from a shell of width cells
		"""
		grid = self.grid
		x0 = grid.nb + width
		x1 = grid.nb + grid.nx - width
		z0 = REACH
		z1 = grid.nz - width
		if x1 <= x0 or z1 <= z0:
			raise ParameterError('interior %d x %d is too small for a %d cell shell'
				% (grid.nz, grid.nx, width))

		return x0, x1, z0, z1

	def step_backward(self, prev, curr, lap, width=REACH):
		""" same stencil in reverse: prev <- 2 curr - prev + F(curr) inside the shell,
			lap receives the Laplacian of curr
		"""
		nz = self.grid.nzpad
		x0, x1, z0, z1 = self.inner(width)
		laplacian(lap, curr, nz, x0 - 1, x1 + 1, z0 - 1, z1 + 1)
		leapfrog(prev, curr, lap, self.vel.dat, self.damp, nz, x0, x1, z0, z1)
		return prev

	def illuminate(self, illum, field):
		""" illum += field^2 over the computing zone
		"""
		grid = self.grid
		energy(illum, field, grid.nzpad, grid.nb, grid.nb + grid.nx, 0, grid.nz)
		return illum

	def add_source(self, field, values, ids):
		np.add.at(field, ids, np.asarray(values, dtype='float32'))

	def sub_source(self, field, values, ids):
		np.subtract.at(field, ids, np.asarray(values, dtype='float32'))

	def record_seis(self, out, field, ids):
		out[:] = field[ids]

	def model(self, src, src_ids, geo_ids=None, begin=0, end=None, state=None, callback=None):
		""" plain forward modeling from step begin to end

			src: (nt, ns) source samples
			state: (prev, curr) at step begin, zeros when None
			callback(it, prev, curr) runs after step it with curr holding level it + 1
		"""
		nt = src.shape[0]
		end = nt if end is None else end

		if state is None:
			prev = self.zeros()
			curr = self.zeros()
		else:
			prev = state[0].copy()
			curr = state[1].copy()

		dcal = None
		if geo_ids is not None:
			dcal = np.zeros((nt, len(geo_ids)), dtype='float32')

		for it in range(begin, end):
			self.add_source(curr, src[it], src_ids)
			prev = self.step_forward(prev, curr)
			prev, curr = curr, prev

			if dcal is not None:
				self.record_seis(dcal[it], curr, geo_ids)

			if callback is not None:
				callback(it, prev, curr)

		if dcal is not None and not np.isfinite(dcal).all():
			raise StabilityError('non-finite samples in synthetic data, check dt/dx')

		return dcal, prev, curr

	def remove_direct_arrival(self, src_pos, geo_pos, data, t_width):
		""" zero each direct wave from its travel time to travel time + t_width
		"""
		nt = data.shape[0]
		src_ids = self.positions(src_pos)
		vsrc = untransform(self.vel.dat[src_ids], self.dx, self.dt).astype('float64')

		offset = np.hypot(src_pos.xs[:, None] - geo_pos.xs[None, :],
			src_pos.zs[:, None] - geo_pos.zs[None, :]) * self.dx
		tdirect = offset / vsrc[:, None]

		t = np.arange(nt) * self.dt
		for i in range(src_pos.n):
			window = (t[:, None] >= tdirect[i][None, :]) & (t[:, None] <= tdirect[i][None, :] + t_width)
			data[window] = 0

		return data
