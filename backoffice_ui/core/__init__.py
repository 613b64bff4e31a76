"""
Core package: browser sessions, the scenario registry and the runner.
Lightweight package init to avoid import cycles.

Consumers should import submodules directly, e.g.:
  from backoffice_ui.core.scenario import scenario, ScenarioContext
  from backoffice_ui.core.runner import ScenarioRunner
"""

__all__: list[str] = []
