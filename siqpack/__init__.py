"""
siqpack - Quiz package normalizer and optimizer

Reads a .siq quiz package, turns its XML descriptor into one consistent
JSON model and writes a smaller package with recompressed images.
"""

__version__ = "1.0.0"
__license__ = "MIT"

# Make key entry points easily importable
from .errors import SiqpackError, MalformedDescriptorError
from .normalizer import normalize
from .pipeline import run

__all__ = [
    "__version__",
    "normalize",
    "run",
    "SiqpackError",
    "MalformedDescriptorError",
]
