"""
Autonomous background task selection agents.

Import the engine from ``agents.task_selector``; submodules are not loaded
eagerly so that ``tasks`` can depend on ``agents.errors``.
"""
