"""
Submission finalization pipeline components.
"""

from .fanout import FanOutResult, OutcomeFanOut
from .pipeline import PipelineResult, PipelineStage, SubmissionPipeline

__all__ = [
    'FanOutResult',
    'OutcomeFanOut',
    'PipelineResult',
    'PipelineStage',
    'SubmissionPipeline',
]
