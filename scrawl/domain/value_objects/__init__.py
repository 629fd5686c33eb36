"""领域值对象"""

from scrawl.domain.value_objects.element_kind import ElementKind
from scrawl.domain.value_objects.identity import Identity

__all__ = ["ElementKind", "Identity"]
