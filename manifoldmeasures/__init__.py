import logging

from .config import options, option_context
from .errors import ManifoldMeasuresError, RejectionLimitError
from .manifolds import (
    Field,
    REAL,
    COMPLEX,
    QUATERNION,
    Manifold,
    ManifoldKind,
    Sphere,
    ProjectiveSpace,
    Stiefel,
    Grassmann,
    Rotations,
    SpecialOrthogonal,
    Circle,
)
from .measures import (
    Measure,
    Hausdorff,
    Haar,
    LeftHaar,
    RightHaar,
    Normalized,
    normalize_measure,
    mass,
    AngularCentralGaussian,
    Bingham,
    VonMisesFisher,
    Langevin,
    VonMises,
    Fisher,
    Precision,
    CholeskyFactor,
    QuadraticForm,
    ModeConcentration,
    MeanVector,
    Loading,
    SvdForm,
    PolarForm,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
