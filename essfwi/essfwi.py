import logging
import sys
from os import getcwd
from argparse import ArgumentParser

from essfwi.tools.config import get_config, check, import_object, ParameterError
from essfwi.solver.damp4t10d import StabilityError

logger = logging.getLogger(__name__)


def setup(workdir, config_file):
	config = get_config(workdir, config_file)
	check(config)

	system = import_object('workflow.system', config['system']['method'])

	# only the head rank reports progress
	level = config['workflow']['log_level'].upper() if system.rank() == 0 else 'WARNING'
	logging.basicConfig(level=level, format='%(message)s')

	# create workflow
	workflow = import_object('workflow', config['workflow']['mode'])
	workflow.system = system
	workflow.path = config['directory']

	# load components
	for section in workflow.modules:
		module = import_object(section, config[section]['method'])
		module.config = config[section]
		module.path = config['directory']
		module.system = system
		setattr(workflow, section, module)

	# initialize
	workflow.setup(config)

	# start workflow
	workflow.run()
	return workflow


def main():
	parser = ArgumentParser()

	parser.add_argument('--workdir', nargs='?',
		default=getcwd())

	parser.add_argument('--config_file', nargs='?',
		default='config.ini')

	args = parser.parse_args()

	try:
		setup(args.workdir, args.config_file)
	except (ParameterError, IOError, StabilityError) as e:
		logger.error('%s: %s', type(e).__name__, e)
		sys.exit(1)


if __name__ == '__main__':
	main()
