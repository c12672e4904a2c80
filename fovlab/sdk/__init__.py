"""High-level entry points for evaluating layouts."""

from .run import LayoutReport, evaluate_from_config, evaluate_layout, export_point_cloud

__all__ = ["LayoutReport", "evaluate_from_config", "evaluate_layout", "export_point_cloud"]
