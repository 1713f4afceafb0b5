import numpy as np


def gen_plus1_minus1(n, rng):
	""" n independent codes drawn uniformly from {+1, -1}
	"""
	return (rng.integers(0, 2, size=n) * 2 - 1).astype('int32')


class Encoder:
	""" sign-weighted sum of shots into one super-shot
	"""
	def __init__(self, codes):
		self.codes = np.asarray(codes, dtype='int32')

	def encode_source(self, wlt):
		""" (nt, ns) pseudo-source, code[is] * wlt at every source position
		"""
		wlt = np.asarray(wlt, dtype='float32')
		return (wlt[:, None] * self.codes[None, :]).astype('float32')

	def encode_obs(self, dobs):
		""" (nt, ng) pseudo-observed gather from (ns, nt, ng) shot gathers
		"""
		if dobs.shape[0] != len(self.codes):
			raise ValueError('%d shots for %d codes' % (dobs.shape[0], len(self.codes)))

		encobs = np.zeros(dobs.shape[1:], dtype='float32')
		for code, shot in zip(self.codes, dobs):
			if code > 0:
				encobs += shot
			else:
				encobs -= shot

		return encobs
