"""Shared fixtures: small hierarchy and flow payloads."""

from __future__ import annotations

import pytest

from archgraph.events import EventCollector, EventDispatcher
from archgraph.model import GraphModel


@pytest.fixture
def chain_records():
    """L1A -> L2A -> L3A, names equal to ids."""
    return [
        {"id": "L1A", "name": "L1A", "level": "L1", "parentId": None},
        {"id": "L2A", "name": "L2A", "level": "L2", "parentId": "L1A"},
        {"id": "L3A", "name": "L3A", "level": "L3", "parentId": "L2A"},
    ]


@pytest.fixture
def capability_records():
    return [
        {"id": "CUS", "name": "Customer Management", "level": "L1", "parentId": None},
        {"id": "ONB", "name": "Customer Onboarding", "level": "L2", "parentId": "CUS"},
        {
            "id": "KYC",
            "name": "Identity Verification",
            "level": "L3",
            "parentId": "ONB",
            "systemCount": 1,
            "metadata": {"projectName": "Portal", "architect": "R. Tan", "reviewStatus": "approved"},
        },
        {"id": "SYS-KYC", "name": "KYC Service", "level": "System", "parentId": "KYC", "systemCode": "KYC01"},
        {"id": "SUP", "name": "Customer Support", "level": "L2", "parentId": "CUS"},
        {"id": "FIN", "name": "Finance", "level": "L1", "parentId": None},
        {"id": "BIL", "name": "Billing", "level": "L2", "parentId": "FIN"},
        {"id": "ORPH", "name": "Orphan", "level": "L2", "parentId": "MISSING"},
        {"id": "ORPH-C", "name": "Orphan Child", "level": "L3", "parentId": "ORPH"},
    ]


@pytest.fixture
def flow_payload():
    """A is pinned; M-P is middleware; S1 talks to A only through M-P; S2 talks to A directly."""
    return {
        "nodes": [
            {"id": "S1", "name": "Orders", "type": "Producer", "criticality": "Major"},
            {"id": "M-P", "name": "Message Bus", "type": "Producer", "criticality": "Standard-1"},
            {"id": "S2", "name": "Billing", "type": "Producer", "criticality": "Standard-2"},
            {"id": "A", "name": "Core", "type": "Consumer", "criticality": "Major"},
        ],
        "links": [
            {"source": "S1", "target": "M-P", "pattern": "API", "frequency": "Daily", "role": "Producer"},
            {"source": "M-P", "target": "A", "pattern": "Batch", "frequency": "Hourly", "role": "Consumer"},
            {"source": "S2", "target": "A", "pattern": "File", "frequency": "Daily", "role": "Producer"},
        ],
        "metadata": {
            "code": "A",
            "review": "R-1",
            "integrationMiddleware": ["M-P", "M-C"],
            "generatedDate": "2024-01-01",
        },
    }


@pytest.fixture
def flow_model(flow_payload):
    return GraphModel.from_payload(flow_payload)


@pytest.fixture
def collector():
    return EventCollector()


@pytest.fixture
def dispatcher(collector):
    return EventDispatcher([collector], strict=True)
