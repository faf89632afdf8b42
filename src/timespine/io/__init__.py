"""Text codecs for timespine series.

Both codecs operate on open text streams or strings and never open files.

    delimited.py   CSV / TSV / PSV via ``csv`` + pydantic cell parsing
    tagged.py      JSON array of {"key", "value"} objects via pydantic
"""

from timespine.io.delimited import read_delimited, write_delimited
from timespine.io.tagged import dump_series, dumps_series, load_series, loads_series

__all__ = [
    "read_delimited",
    "write_delimited",
    "dumps_series",
    "loads_series",
    "dump_series",
    "load_series",
]
