"""
*wethumid*

Construction and completion of wet/humid gas PVT tables for black-oil reservoir simulation.
"""

from ._precision import *  # noqa
from .config import *  # noqa
from .errors import *  # noqa
from .types import *  # noqa
from .inputs import *  # noqa
from .tables import *  # noqa
from .validation import *  # noqa
from .saturated import *  # noqa
from .extrapolation import *  # noqa
from .salt import *  # noqa
from .pvt import *  # noqa
