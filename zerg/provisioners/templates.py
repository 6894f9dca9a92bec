"""Documents applied to the cluster by the GitOps and CI/CD provisioners.

Each builder returns a plain dict; `to_yaml` renders one or more of them as a
YAML stream for `kubectl apply -f -`. Generated objects carry the operator's
default labels and a hash annotation of their spec.
"""

import yaml
from typing import Any, Dict, List
from zerg.common.models.labels import Labels
from zerg.types.models import GitOpsConfig, Pipeline, PipelineStep
from zerg.utils.errors import SerializationError
from zerg.utils.helpers import compute_hash, prepare_hash_annotation

MANAGED_BY = "zerg-operator"

GITOPS_COMPONENT = "gitops"
CICD_COMPONENT = "cicd"

FLUX_NAMESPACE = "flux-system"
FLUX_SYNC_INTERVAL = "5m"
GIT_REPOSITORY_NAME = "zerg-repo"
KUSTOMIZATION_NAME = "zerg-kustomization"

ARGOCD_NAMESPACE = "argocd"
APPLICATION_NAME = "zerg-app"
IN_CLUSTER_SERVER = "https://kubernetes.default.svc"

DEFAULT_WORKING_DIR = "/workspace"
SHARED_WORKSPACE = "shared-data"
TRIGGERS_SERVICE_ACCOUNT = "tekton-triggers-sa"
WORKSPACE_STORAGE = "1Gi"


def resource_document(
    api_version: str,
    kind: str,
    name: str,
    namespace: str,
    spec: Dict[str, Any],
    component_type: str,
) -> Dict[str, Any]:
    labels = Labels.generate_default_labels(
        resource_name=name,
        component_type=component_type,
        managed_by=MANAGED_BY,
    )
    return {
        "apiVersion": api_version,
        "kind": kind,
        "metadata": {
            "name": name,
            "namespace": namespace,
            "labels": labels.as_dict(),
            "annotations": prepare_hash_annotation(compute_hash(spec)),
        },
        "spec": spec,
    }


def to_yaml(*documents: Dict[str, Any]) -> str:
    try:
        return yaml.safe_dump_all(
            documents, default_flow_style=False, sort_keys=False
        )
    except yaml.YAMLError as e:
        raise SerializationError(f"Failed to render document: {e}") from e


# ------------------------------------------------
# ---- Flux ----
# ------------------------------------------------


def flux_git_repository(config: GitOpsConfig, namespace: str) -> Dict[str, Any]:
    return resource_document(
        "source.toolkit.fluxcd.io/v1beta2",
        "GitRepository",
        GIT_REPOSITORY_NAME,
        namespace,
        {
            "interval": FLUX_SYNC_INTERVAL,
            "url": config.repository,
            "ref": {"branch": config.branch},
        },
        GITOPS_COMPONENT,
    )


def flux_kustomization(config: GitOpsConfig, namespace: str) -> Dict[str, Any]:
    return resource_document(
        "kustomize.toolkit.fluxcd.io/v1beta2",
        "Kustomization",
        KUSTOMIZATION_NAME,
        namespace,
        {
            "interval": FLUX_SYNC_INTERVAL,
            "sourceRef": {"kind": "GitRepository", "name": GIT_REPOSITORY_NAME},
            "path": config.path,
            "prune": config.prune,
            "targetNamespace": namespace,
        },
        GITOPS_COMPONENT,
    )


# ------------------------------------------------
# ---- ArgoCD ----
# ------------------------------------------------


def argocd_application(config: GitOpsConfig, namespace: str) -> Dict[str, Any]:
    spec = {
        "project": "default",
        "source": {
            "repoURL": config.repository,
            "targetRevision": config.branch,
            "path": config.path,
        },
        "destination": {"server": IN_CLUSTER_SERVER, "namespace": namespace},
    }
    if config.automated:
        policy = config.sync_policy
        spec["syncPolicy"] = {
            "automated": {"prune": policy.prune, "selfHeal": policy.self_heal}
        }
    return resource_document(
        "argoproj.io/v1alpha1",
        "Application",
        APPLICATION_NAME,
        ARGOCD_NAMESPACE,
        spec,
        GITOPS_COMPONENT,
    )


# ------------------------------------------------
# ---- Pipeline steps ----
# ------------------------------------------------


def step_env(step: PipelineStep) -> List[Dict[str, str]]:
    return [{"name": k, "value": str(v)} for k, v in (step.env or {}).items()]


def step_working_dir(step: PipelineStep) -> str:
    return step.working_dir or DEFAULT_WORKING_DIR


def step_commands(step: PipelineStep) -> str:
    return "\n".join(step.commands)


# ------------------------------------------------
# ---- Tekton ----
# ------------------------------------------------


def tekton_task(pipeline: Pipeline, index: int, step: PipelineStep) -> Dict[str, Any]:
    container = {
        "name": step.name,
        "image": step.image,
        "workingDir": step_working_dir(step),
        "script": f"#!/bin/sh\n{step_commands(step)}\n",
    }
    env = step_env(step)
    if env:
        container["env"] = env
    task = {
        "name": f"{pipeline.name}-{index}",
        "workspaces": [{"name": SHARED_WORKSPACE, "workspace": SHARED_WORKSPACE}],
        "taskSpec": {
            "workspaces": [{"name": SHARED_WORKSPACE}],
            "steps": [container],
        },
    }
    if index > 0:
        task["runAfter"] = [f"{pipeline.name}-{index - 1}"]
    return task


def tekton_pipeline(pipeline: Pipeline, namespace: str) -> Dict[str, Any]:
    return resource_document(
        "tekton.dev/v1beta1",
        "Pipeline",
        pipeline.name,
        namespace,
        {
            "workspaces": [{"name": SHARED_WORKSPACE}],
            "tasks": [
                tekton_task(pipeline, i, step) for i, step in enumerate(pipeline.steps)
            ],
        },
        CICD_COMPONENT,
    )


def tekton_trigger_binding(pipeline: Pipeline, namespace: str) -> Dict[str, Any]:
    return resource_document(
        "triggers.tekton.dev/v1beta1",
        "TriggerBinding",
        f"{pipeline.name}-binding",
        namespace,
        {
            "params": [
                {"name": "git-repo-url", "value": "$(body.repository.url)"},
                {"name": "git-revision", "value": "$(body.head_commit.id)"},
            ]
        },
        CICD_COMPONENT,
    )


def tekton_trigger_template(pipeline: Pipeline, namespace: str) -> Dict[str, Any]:
    pipeline_run = {
        "apiVersion": "tekton.dev/v1beta1",
        "kind": "PipelineRun",
        "metadata": {"generateName": f"{pipeline.name}-run-"},
        "spec": {
            "pipelineRef": {"name": pipeline.name},
            "workspaces": [
                {
                    "name": SHARED_WORKSPACE,
                    "volumeClaimTemplate": {
                        "spec": {
                            "accessModes": ["ReadWriteOnce"],
                            "resources": {"requests": {"storage": WORKSPACE_STORAGE}},
                        }
                    },
                }
            ],
        },
    }
    return resource_document(
        "triggers.tekton.dev/v1beta1",
        "TriggerTemplate",
        f"{pipeline.name}-template",
        namespace,
        {
            "params": [{"name": "git-repo-url"}, {"name": "git-revision"}],
            "resourcetemplates": [pipeline_run],
        },
        CICD_COMPONENT,
    )


def tekton_event_listener(pipeline: Pipeline, namespace: str) -> Dict[str, Any]:
    return resource_document(
        "triggers.tekton.dev/v1beta1",
        "EventListener",
        f"{pipeline.name}-listener",
        namespace,
        {
            "serviceAccountName": TRIGGERS_SERVICE_ACCOUNT,
            "triggers": [
                {
                    "name": f"{pipeline.name}-trigger",
                    "bindings": [{"ref": f"{pipeline.name}-binding"}],
                    "template": {"ref": f"{pipeline.name}-template"},
                }
            ],
        },
        CICD_COMPONENT,
    )


# ------------------------------------------------
# ---- Argo Workflows ----
# ------------------------------------------------


def argo_container_template(index: int, step: PipelineStep) -> Dict[str, Any]:
    container = {
        "image": step.image,
        "workingDir": step_working_dir(step),
        "command": ["sh", "-c"],
        "args": [step_commands(step)],
    }
    env = step_env(step)
    if env:
        container["env"] = env
    return {"name": f"step-{index}-template", "container": container}


def argo_dag_template(pipeline: Pipeline) -> Dict[str, Any]:
    tasks = []
    for i, _ in enumerate(pipeline.steps):
        task = {"name": f"step-{i}", "template": f"step-{i}-template"}
        if i > 0:
            task["dependencies"] = [f"step-{i - 1}"]
        tasks.append(task)
    return {"name": "main", "dag": {"tasks": tasks}}


def argo_workflow_template(pipeline: Pipeline, namespace: str) -> Dict[str, Any]:
    templates = [argo_dag_template(pipeline)] + [
        argo_container_template(i, step) for i, step in enumerate(pipeline.steps)
    ]
    return resource_document(
        "argoproj.io/v1alpha1",
        "WorkflowTemplate",
        pipeline.name,
        namespace,
        {"entrypoint": "main", "templates": templates},
        CICD_COMPONENT,
    )


def argo_cron_workflow(pipeline: Pipeline, namespace: str) -> Dict[str, Any]:
    return resource_document(
        "argoproj.io/v1alpha1",
        "CronWorkflow",
        f"{pipeline.name}-cron",
        namespace,
        {
            "schedule": pipeline.trigger.schedule,
            "workflowSpec": {
                "entrypoint": "main",
                "workflowTemplateRef": {"name": pipeline.name},
            },
        },
        CICD_COMPONENT,
    )
