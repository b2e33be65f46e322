"""
tandem - Run new code paths alongside the old ones.

Execute a control and a candidate, compare what they did, publish the
result, and keep returning the control's value.
"""

from tandem.errors import InvalidExperimentError, TandemError
from tandem.experiment import Experiment, RunContext
from tandem.observation import Observation
from tandem.result import Result

__version__ = "0.1.0"
__all__ = [
    "Experiment",
    "InvalidExperimentError",
    "Observation",
    "Result",
    "RunContext",
    "TandemError",
    "__version__",
]
