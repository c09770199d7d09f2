"""Domain and relation strategies.

Every .py file in this package that defines a `strategy` object is
auto-registered by cosaf.registry.discover().

The explicit imports below ensure PyInstaller includes these modules
in the frozen binary. Without them, pkgutil.iter_modules cannot find
the strategy files at runtime.
"""

# PyInstaller hidden imports: keep this list in sync with strategy modules
import cosaf.strategies.adjacent_radius as _adjacent_radius  # noqa: F401
import cosaf.strategies.global_radius as _global_radius  # noqa: F401
import cosaf.strategies.ratio_average as _ratio_average  # noqa: F401
import cosaf.strategies.ratio_per_vision as _ratio_per_vision  # noqa: F401
import cosaf.strategies.target_difference as _target_difference  # noqa: F401
