# campus_gate/utils/identity.py
"""
Scanned credential → tagged identity.
The VIS- prefix is a wire convention only; inside the core every scan
carries an IdentityRef so nothing else has to inspect ID strings.
"""

import enum
from dataclasses import dataclass

VISITOR_PREFIX = "VIS-"


class IdentityKind(str, enum.Enum):
    STUDENT = "student"
    VISITOR = "visitor"


@dataclass(frozen=True)
class IdentityRef:
    kind: IdentityKind
    value: str

    @property
    def is_visitor(self) -> bool:
        return self.kind is IdentityKind.VISITOR


def parse_identity_ref(raw: str) -> IdentityRef:
    """Classify a scanned string. Raises ValueError on an empty scan."""
    value = (raw or "").strip()
    if not value:
        raise ValueError("identity_ref is empty")
    if value.startswith(VISITOR_PREFIX):
        return IdentityRef(IdentityKind.VISITOR, value)
    return IdentityRef(IdentityKind.STUDENT, value)
