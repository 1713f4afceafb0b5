import numpy as np

def ricker(nt, dt, fm, amp=1.0):
	""" Ricker wavelet delayed by one period
	"""
	t = np.arange(nt) * dt - 1.0 / fm
	arg = (np.pi * fm * t) ** 2
	stf = amp * (1 - 2 * arg) * np.exp(-arg)
	return stf.astype('float32')
