from .aggregate import AnalysisError, aggregate_all, aggregate_stats
from .boxplots import DEFAULT_GROUPINGS, PlotGrouping, plot_asymmetry_groupings
from .export import export_latex, to_latex_table

__all__ = [
    "AnalysisError",
    "aggregate_all",
    "aggregate_stats",
    "DEFAULT_GROUPINGS",
    "PlotGrouping",
    "plot_asymmetry_groupings",
    "export_latex",
    "to_latex_table",
]
