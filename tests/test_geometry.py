import numpy as np
import pytest

from essfwi.solver.geometry import ShotPosition
from essfwi.tools.config import ParameterError


def test_line():
	pos = ShotPosition(2, 3, 1, 4, 3, 20, 20)
	assert len(pos) == 3
	assert np.array_equal(pos.zs, [2, 3, 4])
	assert np.array_equal(pos.xs, [3, 7, 11])


def test_out_of_bounds():
	with pytest.raises(ParameterError):
		ShotPosition(2, 3, 0, 10, 3, 20, 20)

	with pytest.raises(ParameterError):
		ShotPosition(18, 0, 1, 0, 3, 20)

	with pytest.raises(ParameterError):
		ShotPosition(2, 3, 0, 1, 0, 20)


def test_clip_range():
	pos = ShotPosition(5, 0, 0, 2, 10, 20, 30)
	part = pos.clip_range(3, 6)
	assert len(part) == 3
	assert np.array_equal(part.xs, pos.xs[3:6])
	assert np.array_equal(part.zs, pos.zs[3:6])

	with pytest.raises(ParameterError):
		pos.clip_range(4, 4)
