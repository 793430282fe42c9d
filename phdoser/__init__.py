"""pH watching and acid dosing controller: filtering, pH selection, pump control and reports."""

__version__ = "0.0.8"