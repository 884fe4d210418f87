"""ChIPViz: overlap and composition plots for ChIP-Seq differential binding"""

from .config import OverlapConfig, VennConfig, UpSetConfig, PieConfig
from .errors import ConfigurationError, RenderError
from .overlaps import OverlapPlotter, OverlapResult, plot_overlaps
from .pie import PiePlotter, PieResult, plot_pie
from . import ranges, utils

__version__ = "0.1.0"
__all__ = [
    "OverlapConfig", "VennConfig", "UpSetConfig", "PieConfig",
    "ConfigurationError", "RenderError",
    "OverlapPlotter", "OverlapResult", "plot_overlaps",
    "PiePlotter", "PieResult", "plot_pie",
    "ranges", "utils"]
