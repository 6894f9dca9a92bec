from enum import Enum
from typing import Optional, List, Dict
from zerg.types.base import BaseModel


class CiCdProvider(str, Enum):
    TEKTON = "tekton"
    ARGO_WORKFLOWS = "argo-workflows"


class GitTrigger(BaseModel):
    repository: str
    branches: List[str]
    events: List[str]


class PipelineTrigger(BaseModel):
    git: Optional[GitTrigger] = None
    schedule: Optional[str] = None
    manual: bool = False


class PipelineStep(BaseModel):
    name: str
    image: str
    commands: List[str]
    env: Optional[Dict[str, str]] = None
    working_dir: Optional[str] = None


class Pipeline(BaseModel):
    name: str
    trigger: PipelineTrigger
    steps: List[PipelineStep]


class CiCdConfig(BaseModel):
    provider: CiCdProvider
    pipelines: List[Pipeline]
