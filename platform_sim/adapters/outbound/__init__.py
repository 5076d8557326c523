from .schedulers import ManualScheduler, AsyncioScheduler
from .yaml_loader import load_scenarios, load_layout, apply_layout, Layout, NodeSpec, DeploymentSpec
from .console_reporter import ConsoleReporter

__all__ = [
    "ManualScheduler",
    "AsyncioScheduler",
    "load_scenarios",
    "load_layout",
    "apply_layout",
    "Layout",
    "NodeSpec",
    "DeploymentSpec",
    "ConsoleReporter",
]
