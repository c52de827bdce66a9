from .core import build_descriptor, default_extract_properties  # noqa: F401
from .declarative import SQLADeclarative  # noqa: F401
