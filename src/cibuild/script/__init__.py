"""cibuild.script - stage-hook contract, stage pipeline and language profiles."""

from cibuild.script.base import Script
from cibuild.script.registry import get_profile, list_languages, register_profile
from cibuild.script.stages import STAGES, Pipeline, Stage, stages

__all__ = [
    "Pipeline",
    "STAGES",
    "Script",
    "Stage",
    "get_profile",
    "list_languages",
    "register_profile",
    "stages",
]
