"""various utilities not related to the CMA-ES algorithm itself,
see `utils`, and linear algebra helpers, see `math`.
"""
from . import utils
from . import math
