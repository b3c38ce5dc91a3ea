from .child import Child
from .treatment_plan import TreatmentPlan
from .session_feedback import SessionFeedback

__all__ = [
    'Child',
    'TreatmentPlan',
    'SessionFeedback'
]
