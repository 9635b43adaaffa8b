"""Domain logic module - pure business logic without HA dependencies."""

from .reconciler import ClientReconciler, ReconcilePlan, display_name, generate_unique_id

__all__ = ["ClientReconciler", "ReconcilePlan", "display_name", "generate_unique_id"]
