"""Unit tests for CI/CD pipeline provisioning."""

import asyncio
import pytest
from zerg.provisioners import PipelineProvisioner
from zerg.provisioners.cicd import (
    ARGO_WORKFLOWS_INSTALL_MANIFEST,
    TEKTON_DASHBOARD_RELEASE,
    TEKTON_NAMESPACE,
    TEKTON_PIPELINE_RELEASE,
)
from zerg.provisioners.templates import (
    argo_workflow_template,
    tekton_pipeline,
    tekton_trigger_template,
)
from zerg.types.schemas import CiCdConfigSchema, PipelineSchema
from zerg.utils.errors import CiCdError


def load_pipeline(name="build", trigger=None, steps=None):
    return PipelineSchema().load(
        {
            "name": name,
            "trigger": trigger or {},
            "steps": steps
            if steps is not None
            else [
                {"name": "test", "image": "python:3.11", "commands": ["pip install .", "pytest"]},
                {
                    "name": "package",
                    "image": "docker:24",
                    "commands": ["docker build ."],
                    "workingDir": "/src",
                    "env": {"DOCKER_HOST": "tcp://dind:2375"},
                },
            ],
        }
    )


def load_config(provider, *pipelines):
    return CiCdConfigSchema().load(
        {"provider": provider, "pipelines": list(pipelines)}
    )


class TestTektonDocuments:
    """Tests for the Tekton document builders."""

    def test_pipeline_tasks(self):
        doc = tekton_pipeline(load_pipeline(), "team-a")
        assert doc["kind"] == "Pipeline"
        assert doc["metadata"]["name"] == "build"
        first, second = doc["spec"]["tasks"]
        assert first["name"] == "build-0"
        assert second["name"] == "build-1"
        assert "runAfter" not in first
        assert second["runAfter"] == ["build-0"]

    def test_task_step(self):
        doc = tekton_pipeline(load_pipeline(), "team-a")
        first, second = doc["spec"]["tasks"]
        step = first["taskSpec"]["steps"][0]
        assert step["name"] == "test"
        assert step["image"] == "python:3.11"
        assert step["workingDir"] == "/workspace"
        assert step["script"] == "#!/bin/sh\npip install .\npytest\n"
        assert "env" not in step
        step = second["taskSpec"]["steps"][0]
        assert step["workingDir"] == "/src"
        assert step["env"] == [{"name": "DOCKER_HOST", "value": "tcp://dind:2375"}]

    def test_shared_workspace(self):
        doc = tekton_pipeline(load_pipeline(), "team-a")
        assert doc["spec"]["workspaces"] == [{"name": "shared-data"}]
        for task in doc["spec"]["tasks"]:
            assert task["workspaces"] == [
                {"name": "shared-data", "workspace": "shared-data"}
            ]

    def test_trigger_template_runs_pipeline(self):
        doc = tekton_trigger_template(load_pipeline(), "team-a")
        run = doc["spec"]["resourcetemplates"][0]
        assert run["kind"] == "PipelineRun"
        assert run["metadata"]["generateName"] == "build-run-"
        assert run["spec"]["pipelineRef"] == {"name": "build"}


class TestArgoDocuments:
    """Tests for the Argo Workflows document builders."""

    def test_workflow_template_dag(self):
        doc = argo_workflow_template(load_pipeline(), "team-a")
        assert doc["kind"] == "WorkflowTemplate"
        assert doc["spec"]["entrypoint"] == "main"
        dag, *containers = doc["spec"]["templates"]
        assert dag["name"] == "main"
        assert dag["dag"]["tasks"] == [
            {"name": "step-0", "template": "step-0-template"},
            {"name": "step-1", "template": "step-1-template", "dependencies": ["step-0"]},
        ]
        assert [c["name"] for c in containers] == ["step-0-template", "step-1-template"]

    def test_container_template(self):
        doc = argo_workflow_template(load_pipeline(), "team-a")
        container = doc["spec"]["templates"][1]["container"]
        assert container["command"] == ["sh", "-c"]
        assert container["args"] == ["pip install .\npytest"]
        assert container["workingDir"] == "/workspace"


class TestTektonProvisioner:
    """Tests for PipelineProvisioner with the Tekton provider."""

    def test_installs_tekton(self, runner):
        config = load_config("tekton", {"name": "build"})
        asyncio.run(PipelineProvisioner(runner).setup(config, "team-a"))
        assert runner.commands[:3] == [
            f"kubectl get namespace {TEKTON_NAMESPACE}",
            f"kubectl apply -f {TEKTON_PIPELINE_RELEASE}",
            f"kubectl apply -f {TEKTON_DASHBOARD_RELEASE}",
        ]
        assert [d["kind"] for d in runner.applied] == ["Pipeline"]

    def test_skips_install_when_present(self, runner):
        runner.namespaces.add(TEKTON_NAMESPACE)
        config = load_config("tekton", {"name": "build"})
        asyncio.run(PipelineProvisioner(runner).setup(config, "team-a"))
        assert TEKTON_PIPELINE_RELEASE not in " ".join(runner.commands)

    def test_dashboard_failure_is_not_fatal(self, runner):
        runner.fail_on(TEKTON_DASHBOARD_RELEASE, stderr="rate limited")
        config = load_config("tekton", {"name": "build"})
        asyncio.run(PipelineProvisioner(runner).setup(config, "team-a"))
        assert [d["kind"] for d in runner.applied] == ["Pipeline"]

    def test_pipeline_install_failure(self, runner):
        runner.fail_on(TEKTON_PIPELINE_RELEASE, stderr="forbidden")
        config = load_config("tekton", {"name": "build"})
        with pytest.raises(CiCdError, match="Tekton install failed: forbidden"):
            asyncio.run(PipelineProvisioner(runner).setup(config, "team-a"))

    def test_git_trigger(self, runner):
        runner.namespaces.add(TEKTON_NAMESPACE)
        config = load_config(
            "tekton",
            {
                "name": "build",
                "trigger": {
                    "git": {
                        "repository": "https://git.example.com/org/app.git",
                        "branches": ["main"],
                        "events": ["push"],
                    }
                },
            },
        )
        asyncio.run(PipelineProvisioner(runner).setup(config, "team-a"))
        assert [(d["kind"], d["metadata"]["name"]) for d in runner.applied] == [
            ("Pipeline", "build"),
            ("TriggerBinding", "build-binding"),
            ("TriggerTemplate", "build-template"),
            ("EventListener", "build-listener"),
        ]

    def test_pipeline_apply_failure(self, runner):
        runner.namespaces.add(TEKTON_NAMESPACE)
        runner.fail_on("apply -f -", stderr="admission denied")
        config = load_config("tekton", {"name": "build"})
        with pytest.raises(CiCdError, match="Failed to create Tekton pipeline build"):
            asyncio.run(PipelineProvisioner(runner).setup(config, "team-a"))


class TestArgoWorkflowsProvisioner:
    """Tests for PipelineProvisioner with the Argo Workflows provider."""

    def test_installs_argo_workflows(self, runner):
        config = load_config("argo-workflows", {"name": "build"})
        asyncio.run(PipelineProvisioner(runner).setup(config, "team-a"))
        assert runner.commands[:3] == [
            "kubectl get namespace argo",
            "kubectl create namespace argo",
            f"kubectl apply -n argo -f {ARGO_WORKFLOWS_INSTALL_MANIFEST}",
        ]
        assert [d["kind"] for d in runner.applied] == ["WorkflowTemplate"]

    def test_namespace_race_tolerated(self, runner):
        runner.fail_on("create namespace argo", stderr='namespaces "argo" already exists')
        config = load_config("argo-workflows", {"name": "build"})
        asyncio.run(PipelineProvisioner(runner).setup(config, "team-a"))
        assert [d["kind"] for d in runner.applied] == ["WorkflowTemplate"]

    def test_cron_workflow(self, runner):
        runner.namespaces.add("argo")
        config = load_config(
            "argo-workflows", {"name": "nightly", "trigger": {"schedule": "0 2 * * *"}}
        )
        asyncio.run(PipelineProvisioner(runner).setup(config, "team-a"))
        template, cron = runner.applied
        assert template["kind"] == "WorkflowTemplate"
        assert cron["kind"] == "CronWorkflow"
        assert cron["metadata"]["name"] == "nightly-cron"
        assert cron["spec"]["schedule"] == "0 2 * * *"
        assert cron["spec"]["workflowSpec"]["workflowTemplateRef"] == {"name": "nightly"}
