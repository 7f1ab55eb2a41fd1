"""
timeFit: Continuous representations of time-series gene expression data.
"""

__version__ = "0.1.0"

from .bspline_basis import (
    SPLINE_ORDER,
    cox_de_boor,
    choose_control_points,
    place_knots,
    basis_matrix
)

from .exceptions import (
    InvalidInputError,
    SingularModelError,
    NumericDegeneracyWarning
)

from .gene_curve import GeneCurve

from .time_fitter import TimeFit, FitState

# Import input helpers
from .timeseries_utils import (
    TimePoint,
    time_series_to_matrix,
    sample_test_data
)

# Import visualization functions
from .visualization import (
    plot_gene_curves,
    plot_class_centers
)
