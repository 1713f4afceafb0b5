import logging
from os import path
from time import time

import numpy as np

from essfwi.solver.base import base
from essfwi.solver.model import Grid, Velocity
from essfwi.solver.model import update_vel
from essfwi.solver.geometry import ShotPosition
from essfwi.solver.damp4t10d import damp4t10d, StabilityError
from essfwi.solver.encoder import Encoder, gen_plus1_minus1
from essfwi.solver.gradient import GradientEngine
from essfwi.solver.source.ricker import ricker
from essfwi.solver.misfit.waveform import residual, objective
from essfwi.solver.reconstruct.boundary import boundary
from essfwi.solver.reconstruct.checkpoint import checkpoint
from essfwi.solver.reconstruct.storage import DiskStorage, MemoryStorage
from essfwi.tools.config import ParameterError
from essfwi.tools.io import read_velocity, write_velocity, read_shots

logger = logging.getLogger(__name__)


class fwi(base):
	""" acoustic encoded-shot full waveform inversion on a damp4t10d grid
	"""
	def setup(self, workflow):
		config = self.config
		self.nt = int(config['nt'])
		self.dt = float(config['dt'])
		self.nb = int(config['nb'])
		self.fm = float(config['fm'])
		self.amp = float(config['amp'])
		self.max_delta = float(config['max_delta'])
		self.ns = int(config['ns'])
		self.ng = int(config['ng'])
		self.t0 = float(config['xcorr_t0'])
		self.t1 = float(config['xcorr_t1'])
		self.t_width = float(config['direct_window']) / self.fm
		self.precond = config['precond'] == 'yes'

		optimize = workflow.config['optimize']
		self.vmin = float(optimize['vmin'])
		self.vmax = float(optimize['vmax'])

		self.wlt = ricker(self.nt, self.dt, self.fm, self.amp)
		self.tasks = self.system.partition(self.ns)

	def import_model(self, true=False):
		""" import model
		"""
		filename = self.path['vtrue'] if true else self.path['vinit']
		v, nz, nx, dz, dx = read_velocity(filename)
		if abs(dz - dx) > 1e-6 * dx:
			raise ParameterError('dz(%g) != dx(%g) in %s' % (dz, dx, filename))

		self.nz = nz
		self.nx = nx
		self.dx = dx
		self.grid = Grid(nz, nx, self.nb)
		self.vel = Velocity.from_velocity(v, self.grid, dx, self.dt)
		self.propagator = damp4t10d(self.dt, dx, self.grid, self.max_delta).bind_velocity(self.vel)

		# bounds of the transformed velocity
		self.mmin = (dx / self.dt / self.vmax) ** 2
		self.mmax = (dx / self.dt / self.vmin) ** 2

	def import_sources(self):
		config = self.config
		self.src_all = ShotPosition(int(config['szbeg']), int(config['sxbeg']),
			int(config['jsz']), int(config['jsx']), self.ns, self.nz, self.nx)

		# validate the whole line once on every worker
		self.propagator.positions(self.src_all)

		tasks = self.tasks
		if len(tasks) > 0:
			self.src_pos = self.src_all.clip_range(tasks.start, tasks.stop)
		else:
			self.src_pos = None

	def import_stations(self):
		config = self.config
		self.geo_pos = ShotPosition(int(config['gzbeg']), int(config['gxbeg']),
			int(config['jgz']), int(config['jgx']), self.ng, self.nz, self.nx)
		self.propagator.positions(self.geo_pos)

	def import_traces(self):
		data, header = read_shots(self.path['shots'])
		keys = ['ns', 'nt', 'ng', 'szbeg', 'sxbeg', 'jsz', 'jsx', 'gzbeg', 'gxbeg', 'jgz', 'jgx']
		for key in keys:
			value = int(self.config[key])
			if key not in header or int(header[key]) != value:
				raise ParameterError('shot file has %s=%s, configuration has %d'
					% (key, header.get(key), value))

		if abs(float(header['dt']) - self.dt) > 1e-9:
			raise ParameterError('shot file has dt=%s, configuration has %g' % (header['dt'], self.dt))

		self.dobs = data[self.tasks.start:self.tasks.stop]

	def strategy(self):
		""" wavefield reconstruction selected by configuration
		"""
		config = self.config
		if config['reconstruct'] == 'checkpoint':
			if config['storage'] == 'disk':
				directory = path.join(self.path['checkpoints'], '%06d' % self.system.rank())
				storage = DiskStorage(directory, self.grid.size)
			else:
				storage = MemoryStorage()

			return checkpoint(self.propagator, int(config['check_step']), storage)

		return boundary(self.propagator)

	def encode(self, rng):
		""" new super-shot of the local shots, codes are drawn for every shot
			so that all workers consume the generator identically
		"""
		codes = gen_plus1_minus1(self.ns, rng)[self.tasks.start:self.tasks.stop]
		encoder = Encoder(codes)
		self.codes = codes
		self.encsrc = encoder.encode_source(self.wlt)
		self.encobs = encoder.encode_obs(self.dobs)

		if self.src_pos is not None:
			self.propagator.remove_direct_arrival(self.src_pos, self.geo_pos, self.encobs, self.t_width)

		return codes

	def compute_gradient(self):
		""" summed misfit, masked (and optionally preconditioned) gradient and
			illumination of the current super-shot
		"""
		start = time()
		if self.src_pos is not None:
			engine = GradientEngine(self.propagator, self.strategy(), self.config['imaging'],
				self.t0, self.t1, self.t_width)
			misfit, _, gradient, illum = engine.run(self.encsrc, self.src_pos, self.encobs, self.geo_pos)
		else:
			misfit = 0.0
			gradient = self.propagator.zeros()
			illum = self.propagator.zeros()

		misfit = self.system.sum(misfit)
		gradient = self.system.sum(gradient)
		illum = self.system.sum(illum)

		self.grid.mask(gradient)
		if self.precond:
			eps = 1e-3 * illum.max()
			if eps > 0:
				gradient /= illum + eps
			else:
				logger.warning('zero illumination, gradient left unpreconditioned')

		logger.debug('gradient computed in %.2fs', time() - start)
		return misfit, gradient, illum

	def compute_misfit(self, vel):
		""" misfit of the current super-shot on a trial transformed velocity
		"""
		self.grid.refill(vel)
		if self.src_pos is None:
			return self.system.sum(0.0)

		propagator = self.propagator.clone(Velocity(vel, self.grid))
		src_ids = propagator.positions(self.src_pos)
		geo_ids = propagator.positions(self.geo_pos)
		dcal, _, _ = propagator.model(self.encsrc, src_ids, geo_ids)
		propagator.remove_direct_arrival(self.src_pos, self.geo_pos, dcal, self.t_width)
		return self.system.sum(objective(residual(self.encobs, dcal)))

	def update_vel(self, direction, steplen):
		""" clamped trial velocity, the current model is left untouched
		"""
		return update_vel(self.vel.dat, direction, steplen, self.mmin, self.mmax)

	def update_model(self, direction, steplen):
		self.vel.dat = self.grid.refill(self.update_vel(direction, steplen))
		self.propagator.bind_velocity(self.vel)

	def run_forward(self, isrc):
		""" shot gather (nt, ng) of shot isrc
		"""
		propagator = self.propagator
		src_ids = propagator.positions(self.src_all.clip_range(isrc, isrc + 1))
		geo_ids = propagator.positions(self.geo_pos)
		dcal, _, _ = propagator.model(self.wlt[:, None], src_ids, geo_ids)
		return dcal

	def import_perturbation(self):
		""" scattering strength -(m' - m) / m of the true model around the
			current one, zero outside the computing zone
		"""
		filename = self.path['vtrue']
		v, nz, nx, dz, dx = read_velocity(filename)
		if (nz, nx) != (self.nz, self.nx) or abs(dx - self.dx) > 1e-6 * self.dx:
			raise ParameterError('%s does not match the initial model grid' % filename)

		mtrue = Velocity.from_velocity(v, self.grid, dx, self.dt).dat
		m = self.vel.dat
		self.scatter = self.grid.mask(((m - mtrue) / m).astype('float32'))

	def run_born(self, isrc):
		""" linearized shot gather (nt, ng) of shot isrc, the background field
			drives the scattered field through its second time difference
		"""
		propagator = self.propagator
		src_ids = propagator.positions(self.src_all.clip_range(isrc, isrc + 1))
		geo_ids = propagator.positions(self.geo_pos)

		born = np.zeros((self.nt, self.ng), dtype='float32')
		sp0 = propagator.zeros()
		sp1 = propagator.zeros()
		last = propagator.zeros()

		def scatter(it, prev, curr):
			nonlocal sp0, sp1, last
			# prev holds level it with the source, last the level before
			d2 = curr - 2 * prev + last
			last = prev.copy()

			sp0 = propagator.step_forward(sp0, sp1)
			sp0, sp1 = sp1, sp0
			sp1 += self.scatter * d2
			propagator.record_seis(born[it], sp1, geo_ids)

		propagator.model(self.wlt[:, None], src_ids, callback=scatter)
		if not np.isfinite(born).all():
			raise StabilityError('non-finite samples in born data, check dt/dx')

		return born

	def shot_header(self):
		""" sidecar fields of a shot file written by this solver
		"""
		config = self.config
		return dict(ns=self.ns, nt=self.nt, dt=self.dt, ng=self.ng,
			szbeg=config['szbeg'], sxbeg=config['sxbeg'], jsz=config['jsz'], jsx=config['jsx'],
			gzbeg=config['gzbeg'], gxbeg=config['gxbeg'], jgz=config['jgz'], jgx=config['jgx'],
			nb=self.nb, amp=self.amp, fm=self.fm, vmin=self.vmin, vmax=self.vmax)

	def export_model(self, name):
		if self.system.rank() == 0:
			filename = path.join(self.path['output'], name + '.bin')
			write_velocity(filename, self.vel.to_velocity(self.dx, self.dt), self.nz, self.nx, self.dx, self.dx)

	def export_field(self, field, name):
		if self.system.rank() == 0:
			filename = path.join(self.path['output'], name + '.bin')
			write_velocity(filename, self.grid.crop(field), self.nz, self.nx, self.dx, self.dx)
