# Campus Gate: Database Models
# Import all models here for SQLAlchemy discovery

from campus_gate.models.campus import Campus               # noqa
from campus_gate.models.gate import Gate, GateType         # noqa
from campus_gate.models.student import Student             # noqa
from campus_gate.models.schedule import ScheduleEntry      # noqa
from campus_gate.models.visitor import Visitor             # noqa
from campus_gate.models.access_log import AccessLog        # noqa
from campus_gate.models.violation import Violation         # noqa
from campus_gate.models.alert import Alert                 # noqa
