"""Top-level ffl package (fantasy league manager).

Re-exports key subpackages so ``import ffl`` gives access to the whole tree.
"""

from importlib import import_module as _imp

_SUBPACKAGES = ["api", "compute", "importer", "report", "cli"]

for _name in _SUBPACKAGES:
    _imp(f"ffl.{_name}")

__all__ = list(_SUBPACKAGES)
