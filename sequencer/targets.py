"""
Animation targets and target resolution.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from .exceptions import InvalidArgument

logger = logging.getLogger('targets')


@dataclass(eq=False)
class Target:
    """Something whose properties an animation writes to."""
    name: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    tags: Set[str] = field(default_factory=set)
    properties: Dict[str, Any] = field(default_factory=dict)

    def get(self, prop: str, default: Any = None) -> Any:
        return self.properties.get(prop, default)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "tags": sorted(self.tags),
            "properties": dict(self.properties)
        }


class TargetResolver:
    """
    Resolves target references into entities.

    References can be:
        - a selector string: "#id", ".tag", "*" or a target name,
          matched against registered targets
        - a Target (or any other object), used as-is
        - a callable, called and its result resolved
        - a list or tuple of any of these, flattened in order
    """

    def __init__(self, targets: Optional[List[Target]] = None):
        self._targets: List[Target] = []
        for target in targets or []:
            self.register(target)

    def register(self, target: Target) -> Target:
        """Make a target findable by selector."""
        if target not in self._targets:
            self._targets.append(target)
        return target

    def unregister(self, target: Target) -> bool:
        if target in self._targets:
            self._targets.remove(target)
            return True
        return False

    @property
    def targets(self) -> List[Target]:
        return list(self._targets)

    def resolve(self, reference: Any) -> List[Any]:
        """
        Resolve a reference to a list of entities.

        Raises:
            InvalidArgument: if reference is None
        """
        if reference is None:
            raise InvalidArgument("targets", "No targets given")

        if isinstance(reference, str):
            return self.select(reference)

        if isinstance(reference, (list, tuple)):
            entities = []
            for item in reference:
                entities.extend(self.resolve(item))
            return entities

        if callable(reference) and not isinstance(reference, Target):
            return self.resolve(reference())

        return [reference]

    def select(self, selector: str) -> List[Target]:
        """Find registered targets matching a selector string."""
        selector = selector.strip()
        if selector == "*":
            matches = list(self._targets)
        elif selector.startswith("#"):
            matches = [t for t in self._targets if t.id == selector[1:]]
        elif selector.startswith("."):
            matches = [t for t in self._targets if selector[1:] in t.tags]
        else:
            matches = [t for t in self._targets if t.name == selector]

        if not matches:
            logger.debug(f"Selector '{selector}' matched no targets")
        return matches
