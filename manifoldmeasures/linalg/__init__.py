from .linop import LinOp, DenseLinOp, TriangularLinOp, CholeskyLinOp
from .operations import (
    logdet,
    solve,
    real_inner,
    quad_form,
    qr_unique,
    svd_unique,
    polar,
    householder_reflect,
    orthogonal_complement,
)
from .utils import hermitianize
