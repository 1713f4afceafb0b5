from numba import njit, prange
import numpy as np

# second difference along time, 4th order
FILTER = (-1.0 / 12, 4.0 / 3, -2.5, 4.0 / 3, -1.0 / 12)


@njit(parallel=True)
def diff2(res, vsrc, nt, ng):
	for ig in prange(ng):
		for it in range(2, nt - 2):
			vsrc[it, ig] = (FILTER[0] * res[it - 2, ig] + FILTER[1] * res[it - 1, ig] +
				FILTER[2] * res[it, ig] + FILTER[3] * res[it + 1, ig] + FILTER[4] * res[it + 2, ig])


def residual(obs, syn):
	return (np.asarray(obs, dtype='float32') - np.asarray(syn, dtype='float32')).astype('float32')


def objective(res):
	""" sum of squared residual samples, accumulated in double precision
	"""
	res = np.asarray(res, dtype='float64')
	return float(np.sum(res * res))


def virtual_source(res):
	""" adjoint source of the wavefield cross-correlation, 2 samples at
		each end of the trace are left at zero
	"""
	res = np.ascontiguousarray(res, dtype='float32')
	if res.ndim == 1:
		return virtual_source(res[:, None])[:, 0]

	nt, ng = res.shape
	vsrc = np.zeros((nt, ng), dtype='float32')
	if nt > 4:
		diff2(res, vsrc, nt, ng)

	return vsrc


def waveform(obs, syn):
	""" misfit and residual of a (nt, ng) gather
	"""
	res = residual(obs, syn)
	return objective(res), res
