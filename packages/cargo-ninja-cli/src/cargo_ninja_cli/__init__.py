"""cargo-ninja-cli: Command-line interface for cargo-ninja.

Commands:
- generate: Write build.ninja for a Cargo project
- build: Generate if needed, then run ninja
- graph: Show the unit graph as a tree
- plan: Print the planned compilations as JSON
- bootstrap: Regenerate the plan of the tool's own source tree
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
