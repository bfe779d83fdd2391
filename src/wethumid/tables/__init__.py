from .functions import *  # noqa
from .gas import *  # noqa
