#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Errors and warnings raised while fitting continuous time-series models.
"""

import numpy as np


class InvalidInputError(ValueError):
    """Malformed or mismatched time points or observation matrix."""


class SingularModelError(np.linalg.LinAlgError):
    """
    A matrix that has to be inverted during fitting (the class-centre system)
    is singular. The fit is aborted; restart with a different initialisation
    or fewer classes.
    """


class NumericDegeneracyWarning(RuntimeWarning):
    """Class responsibilities of a gene could not be computed in this iteration."""
