"""
Example: Directional Data on Spheres and Stiefel Manifolds
-----------------------------------------------------------

This example draws from three measures and checks the draws against
known summaries:

    x ~ vMF(mu, kappa) on S^2          E[<mu, x>] = coth(kappa) - 1/kappa
    x ~ Bingham(B) on S^1              density proportional to exp(x^T B x)
    X ~ matrix vMF(F) on St(4, 2)      mode U V^T for F = U D V^T

It also shows how the rejection samplers can be bounded with
`option_context(max_rejections=...)`.
"""

import logging
import math

import numpy as np
from manifoldmeasures import (
    Bingham,
    Hausdorff,
    RejectionLimitError,
    Sphere,
    Stiefel,
    VonMisesFisher,
    option_context,
)

logging.basicConfig(level=logging.INFO)

rng = np.random.default_rng(0)

# von Mises-Fisher on the 2-sphere
mu = np.array([0.0, 0.6, 0.8])
kappa = 5.0
vmf = VonMisesFisher(Sphere(2), mu=mu, kappa=kappa)
X = vmf.sample(5000, rng=rng)
print("mean <mu, x>:", np.mean(X @ mu), "expected:", 1.0 / math.tanh(kappa) - 1.0 / kappa)
print("log-density at the mode:", vmf.log_density(vmf.mode()))

# Bingham on the circle: mass concentrates around +-e_2
bingham = Bingham(Sphere(1), B=np.diag([0.0, 3.0]))
Y = bingham.sample(5000, rng=rng)
print("E[x_2^2]:", np.mean(Y[:, 1] ** 2))
print("normalizing constant:", math.exp(bingham.log_normalizer()))

# Matrix von Mises-Fisher on St(4, 2)
U = np.eye(4)[:, :2]
V = np.array([[0.0, 1.0], [1.0, 0.0]])
matrix_vmf = VonMisesFisher(Stiefel(4, 2), U=U, D=np.array([20.0, 10.0]), V=V)
Z = matrix_vmf.sample(200, rng=rng)
print("mode:\n", matrix_vmf.mode())
print("sample mean:\n", Z.mean(axis=0).round(2))

# Volumes of the reference measures
for M in (Sphere(2), Stiefel(3, 2)):
    print(M, "volume:", math.exp(Hausdorff(M).log_mass()))

# Bounded rejection sampling
with option_context(max_rejections=0):
    try:
        Bingham(Sphere(2), B=np.diag([0.0, 10.0, 20.0])).sample(100, rng=rng)
    except RejectionLimitError as e:
        print("gave up:", e)
