"""Auto-discovery of technique modules.

Every .py file in this package that defines a `technique` object is
auto-registered by lumat_checker.registry.discover().

The explicit imports below ensure PyInstaller includes these modules
in the frozen binary. Without them, pkgutil.iter_modules cannot find
the technique files at runtime.
"""

# PyInstaller hidden imports: keep this list in sync with technique modules
import lumat_checker.techniques.all as _all  # noqa: F401
import lumat_checker.techniques.autofix as _autofix  # noqa: F401
import lumat_checker.techniques.compliance as _compliance  # noqa: F401
import lumat_checker.techniques.guidelines as _guidelines  # noqa: F401
import lumat_checker.techniques.matrix as _matrix  # noqa: F401
import lumat_checker.techniques.opacity as _opacity  # noqa: F401
import lumat_checker.techniques.pairs as _pairs  # noqa: F401
import lumat_checker.techniques.recommend as _recommend  # noqa: F401
