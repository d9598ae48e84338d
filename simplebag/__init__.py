"""
a simple implementation of the BagIt packaging format (version 0.97).

The make_bag() function turns an ordinary directory into a bag, in place,
by moving its contents into a ``data`` payload directory and writing out the
bag's manifests and tag files; the BagMaker class exposes the individual
steps of that conversion.  The validate_bag() function and BagValidator
class check an existing bag against its manifests at one of three levels of
thoroughness (see ValidationMode).
"""
from .constants import VERSION, BAGIT_VERSION, DEFAULT_ALGORITHMS
from .digest import Algorithm, DigestProvider, SUPPORTED_ALGORITHMS
from .make import make_bag, BagMaker, MakeState
from .access.bag import open_bag, ReadOnlyBag
from .validate import (BagValidator, ValidationMode, validate_bag,
                       ValidationResults, ALL, ERROR, WARN, REC, PROB)
from .exceptions import (BagError, BagValidationError, BagPermissionError,
                         UsageError, DangerousPath, UnsupportedAlgorithm,
                         DigestFailed)

__version__ = VERSION
