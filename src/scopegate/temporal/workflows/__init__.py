from src.scopegate.temporal.workflows.token_maintenance import TokenMaintenanceWorkflow

__all__ = ["TokenMaintenanceWorkflow"]
