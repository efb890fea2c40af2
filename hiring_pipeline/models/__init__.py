"""
Models package.

Import all models here so they are registered with SQLAlchemy.
This file also makes it easy to import models from one place.
"""

from hiring_pipeline.models.opportunity import Opportunity, PipelineStage
from hiring_pipeline.models.application import Application
from hiring_pipeline.models.verification_receipt import VerificationReceipt
from hiring_pipeline.models.reward import RewardAccount, RewardCredit

# Export all models
__all__ = [
    "Opportunity",
    "PipelineStage",
    "Application",
    "VerificationReceipt",
    "RewardAccount",
    "RewardCredit",
]
