import numpy as np
import pytest

from essfwi.solver.model import Grid, Velocity
from essfwi.solver.damp4t10d import damp4t10d
from essfwi.solver.geometry import ShotPosition
from essfwi.solver.source.ricker import ricker
from essfwi.tools.io import write_velocity

DX = 10.0
DT = 0.001


def layered(nz, nx, depth, v1=1500.0, v2=2000.0):
	vel = np.full((nx, nz), v1, dtype='float32')
	vel[:, depth:] = v2
	return vel.reshape(-1)


def make_propagator(v, nz, nx, nb, max_delta=0.05):
	grid = Grid(nz, nx, nb)
	vel = Velocity.from_velocity(v, grid, DX, DT)
	return damp4t10d(DT, DX, grid, max_delta).bind_velocity(vel)


@pytest.fixture
def small_setup():
	""" two-layer model with one source and a short receiver line
	"""
	nz, nx, nb, nt = 40, 40, 15, 300
	v = layered(nz, nx, 25)
	propagator = make_propagator(v, nz, nx, nb)
	src_pos = ShotPosition(10, 12, 0, 1, 1, nz, nx)
	geo_pos = ShotPosition(10, 8, 0, 3, 10, nz, nx)
	src = ricker(nt, DT, 15.0, 1000.0)[:, None]
	return propagator, src, src_pos, geo_pos


def write_workdir(workdir, mode, ns=1, niter=5, extra=''):
	""" layered true model, homogeneous starting model and a config file
	"""
	nz, nx = 70, 40
	write_velocity(str(workdir / 'vtrue.bin'), layered(nz, nx, 50), nz, nx, DX, DX)
	write_velocity(str(workdir / 'vinit.bin'), np.full(nz * nx, 1500, dtype='float32'), nz, nx, DX, DX)

	text = """
[workflow]
mode = %s
log_level = INFO

[solver]
nb = 20
nt = 500
dt = %g
fm = 10
amp = 1000
ns = %d
ng = 1
szbeg = 30
sxbeg = 15
jsx = 10
gzbeg = 30
gxbeg = 25
xcorr_t0 = 0
xcorr_t1 = 0
%s

[optimize]
niter = %d
vmin = 1200
vmax = 3000
maxdv = 200

[directory]
vtrue = vtrue.bin
vinit = vinit.bin
shots = shots.bin
output = output
""" % (mode, DT, ns, extra, niter)

	name = mode + '.ini'
	(workdir / name).write_text(text)
	return name
