"""Imports every model so ``Base.metadata`` knows all tables.

Alembic's env.py and the test fixtures import this module before touching
the metadata.
"""

from liftlog.models.user import User  # noqa: F401
from liftlog.models.exercise import Exercise  # noqa: F401
from liftlog.models.hidden_system_exercise import HiddenSystemExercise  # noqa: F401
from liftlog.models.circuit import Circuit  # noqa: F401
from liftlog.models.circuit_exercise import CircuitExercise  # noqa: F401
from liftlog.models.hidden_system_circuit import HiddenSystemCircuit  # noqa: F401
from liftlog.models.workout_template import WorkoutTemplate  # noqa: F401
from liftlog.models.template_circuit_block import TemplateCircuitBlock  # noqa: F401
from liftlog.models.workout_template_exercise import WorkoutTemplateExercise  # noqa: F401
from liftlog.models.planned_set import PlannedSet  # noqa: F401
from liftlog.models.workout_schedule import WorkoutScheduleItem  # noqa: F401
from liftlog.models.workout_session import WorkoutSession  # noqa: F401
from liftlog.models.session_circuit_block import SessionCircuitBlock  # noqa: F401
from liftlog.models.session_exercise import SessionExercise  # noqa: F401
from liftlog.models.performed_set import PerformedSet  # noqa: F401
from liftlog.models.supplement import Supplement  # noqa: F401
from liftlog.models.supplement_log import SupplementLog  # noqa: F401
from liftlog.models.body_weight_log import BodyWeightLog  # noqa: F401
