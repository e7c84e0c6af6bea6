from .functions import log_multivariate_gamma, log_bessel_i, log_bessel_i_ratio
from .hypergeometric import (
    hypergeometric_0f0,
    hypergeometric_0f1,
    hypergeometric_1f1,
    log_hypergeometric_0f1,
    log_hypergeometric_1f1,
    log_hypergeometric_pfq,
    log_hypergeometric_series,
)
