from .math_tools import MathTools
from .unit_converter import UnitConverter

__all__ = ["MathTools", "UnitConverter"]
