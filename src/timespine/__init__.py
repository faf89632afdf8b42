"""
Timespine - ordered, generic, in-memory time series.

- timespine.core: the TimeSeries container and its window, join and
  resample engines
- timespine.io: delimited and tagged (JSON) text codecs
"""

__version__ = "0.1.0"

from timespine.core import *  # noqa
from timespine.core import __all__ as __all__  # noqa
