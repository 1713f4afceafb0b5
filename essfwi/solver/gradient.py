import logging

import numpy as np

from essfwi.solver.misfit.waveform import waveform, virtual_source
from essfwi.tools.config import ParameterError

logger = logging.getLogger(__name__)


def ramp(t, t0, t1):
	""" cross-correlation weight at time t, None below the cutoff
	"""
	if t1 <= t0:
		return 1.0 if t > t0 else None

	if t > t1:
		return 1.0
	elif t > t0:
		return (t - t0) / (t1 - t0)
	else:
		return None


class GradientEngine:
	""" one forward and adjoint pass of an encoded super-shot
	"""
	def __init__(self, propagator, strategy, imaging='wavefield', t0=0.3, t1=0.4, t_width=0.0):
		if imaging not in ('wavefield', 'laplacian'):
			raise ParameterError('unknown imaging condition %s' % imaging)

		self.propagator = propagator
		self.strategy = strategy
		self.imaging = imaging
		self.t0 = t0
		self.t1 = t1
		self.t_width = t_width

	def run(self, src, src_pos, obs, geo_pos):
		""" src: (nt, ns) encoded source, obs: (nt, ng) encoded and muted
			observed gather

			returns misfit, residual, gradient and illumination; the gradient
			is the steepest-descent image on the padded grid
		"""
		propagator = self.propagator
		src_ids = propagator.positions(src_pos)
		geo_ids = propagator.positions(geo_pos)

		dcal = self.strategy.forward(src, src_ids, geo_ids)
		propagator.remove_direct_arrival(src_pos, geo_pos, dcal, self.t_width)
		misfit, res = waveform(obs, dcal)

		if self.imaging == 'wavefield':
			adj = virtual_source(res)
		else:
			adj = res

		image = propagator.zeros()
		sp0 = propagator.zeros()
		sp1 = propagator.zeros()
		vel = propagator.vel.dat
		dt = propagator.dt

		for it, field, lap in self.strategy.backward():
			scale = ramp(it * dt, self.t0, self.t1)
			if scale is None:
				break

			sp0 = propagator.step_forward(sp0, sp1)
			sp0, sp1 = sp1, sp0
			propagator.add_source(sp1, adj[it], geo_ids)

			if self.imaging == 'wavefield':
				image -= np.float32(scale) * field * sp1
			else:
				image -= np.float32(scale) * lap * sp1 / vel

		logger.debug('misfit %e, |gradient| %e', misfit, np.abs(image).max())
		return misfit, res, image, self.strategy.illum
