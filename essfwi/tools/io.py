from configparser import ConfigParser
from os import path
import numpy as np


def header_name(filename):
	return filename + '.hdr'


def read_header(filename):
	""" read sidecar key/value fields of a binary file
	"""
	name = header_name(filename)
	if not path.exists(name):
		raise IOError('missing header file %s' % name)

	config = ConfigParser()
	config.read(name)
	return dict(config['header'])


def write_header(filename, **fields):
	config = ConfigParser()
	config['header'] = {key: str(value) for key, value in fields.items()}
	with open(header_name(filename), 'w') as f:
		config.write(f)


def read_bin(filename, count):
	""" read exactly count float32 samples
	"""
	if not path.exists(filename):
		raise IOError('missing data file %s' % filename)

	data = np.fromfile(filename, dtype='float32')
	if data.size != count:
		raise IOError('%s holds %d samples, expected %d' % (filename, data.size, count))

	return data


def write_bin(filename, data):
	np.asarray(data, dtype='float32').tofile(filename)


def read_velocity(filename):
	""" velocity grid, z fastest
	"""
	header = read_header(filename)
	nz = int(header['n1'])
	nx = int(header['n2'])
	dz = float(header['d1'])
	dx = float(header['d2'])
	vel = read_bin(filename, nz * nx)
	return vel, nz, nx, dz, dx


def write_velocity(filename, vel, nz, nx, dz, dx):
	write_bin(filename, vel)
	write_header(filename, n1=nz, n2=nx, d1=dz, d2=dx)


def read_shots(filename):
	""" shot gathers ordered (shot, time, receiver)
	"""
	header = read_header(filename)
	ns = int(header['ns'])
	nt = int(header['nt'])
	ng = int(header['ng'])
	data = read_bin(filename, ns * nt * ng)
	return data.reshape(ns, nt, ng), header


def write_shots(filename, data, **header):
	write_bin(filename, data)
	write_header(filename, **header)
