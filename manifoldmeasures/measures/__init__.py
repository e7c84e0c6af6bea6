from .measure import Measure
from .primitive import Hausdorff, Haar, LeftHaar, RightHaar, hausdorff_log_mass
from .normalized import Normalized, normalize_measure, mass
from .parameterized import ParameterizedMeasure, ParameterRecord
from .angular_central_gaussian import AngularCentralGaussian, Precision, CholeskyFactor
from .bingham import Bingham, QuadraticForm, log_bingham_normalizer
from .von_mises_fisher import (
    VonMisesFisher,
    Langevin,
    VonMises,
    Fisher,
    ModeConcentration,
    MeanVector,
    Loading,
    SvdForm,
    PolarForm,
    log_vmf_normalizer,
)
