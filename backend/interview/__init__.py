# Interview module
from .state import InterviewStateMachine
from .timer import TimerEngine
from .profile import ProfileCollector
from .scoring import ScoreAggregator
from .stages import resolve_stage
from .agents import Evaluator
from .controller import StageController
