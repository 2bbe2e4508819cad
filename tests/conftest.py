"""Shared fixtures for kubemirror tests."""

from __future__ import annotations

import pytest

from kubemirror.models.resources import ResourceDescriptor
from tests.helpers import RecordingSink


@pytest.fixture
def widget_descriptor() -> ResourceDescriptor:
    return ResourceDescriptor(group="example.com", version="v1", kind="Widget", plural="widgets", namespaced=True)


@pytest.fixture
def node_descriptor() -> ResourceDescriptor:
    return ResourceDescriptor(group="", version="v1", kind="Node", plural="nodes", namespaced=False)


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()
