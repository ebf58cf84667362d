"""Builders and constants shared by the test modules."""

from __future__ import annotations

import itertools
import json
from datetime import datetime, timedelta, timezone

from revgate.models import GeneratedArtifact, WorkflowSession


BASE_TIME = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)

COMPOSE_OK = json.dumps({"componentName": "Widget", "layer": "blocks"})
TESTIDS_OK = json.dumps({"widget": {"root": "app-widget-root", "submit": "app-widget-submit"}})
SECTION_OK = "# Widget\n\nA widget section.\n"


class TickingClock:
    """Returns BASE_TIME, then one second later on every call."""

    def __init__(self, start: datetime = BASE_TIME, step: timedelta = timedelta(seconds=1)):
        self._counter = itertools.count()
        self.start = start
        self.step = step

    def __call__(self) -> datetime:
        return self.start + self.step * next(self._counter)


def make_artifact(path: str, content: str | None, artifact_id: str | None = None) -> GeneratedArtifact:
    return GeneratedArtifact(
        id=artifact_id or f"artifact-{path}",
        type="",
        path=path,
        content=content,
    )


def make_session(
    artifacts: list[GeneratedArtifact],
    *,
    session_id: str = "session-1",
    workflow_id: str = "new-component",
) -> WorkflowSession:
    return WorkflowSession(
        id=session_id,
        workflow_id=workflow_id,
        data={"intake": {"name": "Widget"}},
        artifacts=artifacts,
    )


def complete_artifacts() -> list[GeneratedArtifact]:
    """An artifact set that passes every gate and pre-checks every automatic item."""
    return [
        make_artifact("specs/SECTION_widget.md", SECTION_OK),
        make_artifact("specs/COMPOSE_Widget.json", COMPOSE_OK),
        make_artifact("specs/TESTIDS_widget.json", TESTIDS_OK),
    ]
