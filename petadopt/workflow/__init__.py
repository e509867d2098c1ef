from .engine import DASHBOARDS, State, WorkflowEngine

__all__ = ["DASHBOARDS", "State", "WorkflowEngine"]
