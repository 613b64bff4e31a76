"""
Interaction package: widgets, the convergence actuator and the verified action.
Lightweight package init to avoid import cycles with `backoffice_ui.selectors`.

Consumers should import submodules directly, e.g.:
  from backoffice_ui.interaction.verified import perform_and_verify
  from backoffice_ui.interaction.widgets import Toggle, RadioGroup
"""

__all__: list[str] = []
