"""
Strategy jobs package.

Available entry points:
    python -m strategy.jobs.run_scan   # One spread scan session
    python -m strategy.jobs.run_quote  # Quote one cross-chain move

NOTE: This __init__.py intentionally does NOT import the job modules
to avoid side effects when importing the package.
"""

__all__: list[str] = []
