"""
Automation

Runs one short end to end and publishes it to the channel backend.
"""

from .short_pipeline import PipelineResult, ShortsPipeline
from .uploader import BackendUploader

__all__ = [
    'ShortsPipeline',
    'PipelineResult',
    'BackendUploader'
]
