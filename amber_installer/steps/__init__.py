from .step_10_verify import VerifyArchivesStep
from .step_20_extract import ExtractSourcesStep
from .step_30_update import UpdateSourcesStep
from .step_40_patch import PatchSourcesStep
from .step_50_configure import ConfigureStep
from .step_60_build import BuildStep
from .step_70_install import InstallStep

__all__ = [
    "VerifyArchivesStep",
    "ExtractSourcesStep",
    "UpdateSourcesStep",
    "PatchSourcesStep",
    "ConfigureStep",
    "BuildStep",
    "InstallStep",
]
