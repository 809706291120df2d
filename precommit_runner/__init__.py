"""Local pre-commit quality-gate runner.

Selects the checks that apply to a set of changed files, runs each one
(preferring a project ``make`` target over the raw tool), classifies
failures into actionable errors and manages the git hook that triggers it.
"""

__version__ = "1.0.0"
