from os import path, makedirs
from importlib import import_module
from configparser import ConfigParser
import logging

logger = logging.getLogger(__name__)


class ParameterError(ValueError):
	""" invalid or missing configuration parameter
	"""
	def __init__(self, *args):
		if len(args) == 2:
			section, key = args
			super().__init__('%s.%s is missing or invalid' % (section, key))
		else:
			super().__init__(*args)


# default values, everything else is required
defaults = {
	'workflow': {
		'log_level': 'INFO'
	},
	'system': {
		'method': 'serial'
	},
	'solver': {
		'method': 'fwi',
		'nb': '30',
		'fm': '10',
		'amp': '1000',
		'max_delta': '0.05',
		'jsz': '0',
		'jgx': '1',
		'jgz': '0',
		'reconstruct': 'boundary',
		'storage': 'disk',
		'check_step': '50',
		'imaging': 'wavefield',
		'xcorr_t0': '0.3',
		'xcorr_t1': '0.4',
		'direct_window': '1.5',
		'precond': 'no'
	},
	'optimize': {
		'method': 'cg',
		'seed': '10',
		'vmin': '1500',
		'vmax': '5500',
		'maxdv': '200',
		'ls_retry': '5'
	},
	'directory': {
		'output': 'output'
	}
}

required = {
	'workflow': ['mode'],
	'solver': ['nt', 'dt', 'ns', 'ng', 'sxbeg', 'szbeg', 'jsx', 'gxbeg', 'gzbeg']
}

integers = {
	'solver': ['nb', 'nt', 'ns', 'ng', 'sxbeg', 'szbeg', 'jsx', 'jsz',
		'gxbeg', 'gzbeg', 'jgx', 'jgz', 'check_step'],
	'optimize': ['niter', 'seed', 'ls_retry']
}

floats = {
	'solver': ['dt', 'fm', 'amp', 'max_delta', 'xcorr_t0', 'xcorr_t1', 'direct_window'],
	'optimize': ['vmin', 'vmax', 'maxdv']
}

choices = {
	('workflow', 'mode'): ['forward', 'adjoint', 'inversion', 'born'],
	('system', 'method'): ['serial', 'mpi'],
	('solver', 'reconstruct'): ['boundary', 'checkpoint'],
	('solver', 'storage'): ['disk', 'memory'],
	('solver', 'imaging'): ['wavefield', 'laplacian'],
	('solver', 'precond'): ['yes', 'no']
}


def import_object(section, name):
	module = import_module('essfwi.' + section + '.' + name)
	return getattr(module, name)()


def get_config(workdir, config_file):
	""" read config.ini and resolve paths relative to workdir
	"""
	config_file = path.join(workdir, config_file)
	if not path.exists(workdir):
		raise ParameterError('work directory %s does not exist' % workdir)
	if not path.exists(config_file):
		raise ParameterError('config file %s does not exist' % config_file)

	config = ConfigParser()
	config.read_dict(defaults)
	config.read(config_file)

	directory = config['directory']
	directory['workdir'] = workdir
	for key in directory:
		if key != 'workdir':
			directory[key] = path.join(workdir, directory[key])

	if 'checkpoints' not in directory:
		directory['checkpoints'] = path.join(directory['output'], 'checkpoints')

	# ensure output directory exists
	outdir = directory['output']
	if not path.exists(outdir):
		logger.info('created directory %s', outdir)
		makedirs(outdir)

	return config


def check(config):
	""" validate parameters before any simulation work
	"""
	for section, keys in required.items():
		if section not in config:
			raise ParameterError('section [%s] is missing' % section)
		for key in keys:
			if not config[section].get(key, '').strip():
				raise ParameterError(section, key)

	for section, keys in integers.items():
		for key in (k for k in keys if k in config[section]):
			try:
				int(config[section][key])
			except ValueError:
				raise ParameterError(section, key)

	for section, keys in floats.items():
		for key in (k for k in keys if k in config[section]):
			try:
				float(config[section][key])
			except ValueError:
				raise ParameterError(section, key)

	for (section, key), values in choices.items():
		if config[section][key] not in values:
			raise ParameterError('%s.%s must be one of %s' % (section, key, ', '.join(values)))

	solver = config['solver']
	optimize = config['optimize']

	for key in ['nt', 'ns', 'ng', 'nb', 'check_step']:
		if int(solver[key]) <= 0:
			raise ParameterError('solver', key)

	for key in ['dt', 'fm']:
		if float(solver[key]) <= 0:
			raise ParameterError('solver', key)

	if float(optimize['vmax']) <= float(optimize['vmin']):
		raise ParameterError('vmax(%s) <= vmin(%s)' % (optimize['vmax'], optimize['vmin']))

	if float(optimize['maxdv']) <= 0:
		raise ParameterError('optimize', 'maxdv')

	if config['workflow']['log_level'].upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR'):
		raise ParameterError('workflow', 'log_level')

	mode = config['workflow']['mode']
	paths = {
		'forward': ['vtrue'],
		'born': ['vinit', 'vtrue'],
		'adjoint': ['vinit', 'shots'],
		'inversion': ['vinit', 'shots']
	}
	for key in paths[mode]:
		if key not in config['directory']:
			raise ParameterError('directory', key)

	if mode == 'inversion':
		if 'niter' not in optimize:
			raise ParameterError('optimize', 'niter')
		if int(optimize['niter']) <= 0:
			raise ParameterError('optimize', 'niter')
