""" writes a three-layer true model and its smoothed starting model,
	run the forward workflow first (mode = forward) to create model/shots.bin
"""
from os import path, makedirs

import numpy as np

from essfwi.tools.io import write_velocity

nz = 100
nx = 200
dx = 10.0

def layered():
	vel = np.full((nx, nz), 1500, dtype='float32')
	vel[:, 40:] = 2000
	vel[:, 70:] = 2800
	return vel

def smooth(vel, width=15):
	kernel = np.ones(width) / width
	out = np.empty_like(vel)
	for ix in range(nx):
		pad = np.pad(vel[ix], width, mode='edge')
		out[ix] = np.convolve(pad, kernel, mode='same')[width:-width]
	return out

if __name__ == '__main__':
	workdir = path.dirname(path.abspath(__file__))
	modeldir = path.join(workdir, 'model')
	if not path.exists(modeldir):
		makedirs(modeldir)

	vtrue = layered()
	write_velocity(path.join(modeldir, 'vtrue.bin'), vtrue, nz, nx, dx, dx)
	write_velocity(path.join(modeldir, 'vinit.bin'), smooth(vtrue), nz, nx, dx, dx)
