"""Shared pytest fixtures for clients, workers and tasks datasets."""

from __future__ import annotations

from datetime import date
from typing import Dict, List

import pytest

from data_alchemist.core.dataset import Dataset
from data_alchemist.core.enums import DataType
from data_alchemist.sessions.store import InMemorySessionStore

# Reference date used by every test that involves deadlines
TODAY = date(2025, 1, 15)


def build_dataset(data_type: DataType, rows: List[Dict]) -> Dataset:
    """Build a dataset from row dicts, copying them so tests never share state."""
    return Dataset(data_type=data_type, rows=[dict(r) for r in rows])


CLEAN_CLIENTS = [
    {"clientId": "C1", "clientName": "Acme Corp", "priority": "high", "requirements": "T1,T3", "budget": "50000"},
    {"clientId": "C2", "clientName": "Globex", "priority": "medium", "requirements": "T2", "budget": "12000"},
    {"clientId": "C3", "clientName": "Initech", "priority": "low", "requirements": "None yet"},
    {"clientId": "C4", "clientName": "Umbrella", "priority": "low", "requirements": "None yet"},
    {"clientId": "C5", "clientName": "Hooli", "priority": "medium", "requirements": "None yet"},
]

CLEAN_WORKERS = [
    {"workerId": "W1", "name": "Alice", "skills": "python, sql", "availability": "100", "rate": "50"},
    {"workerId": "W2", "name": "Bob", "skills": "design", "availability": "50", "rate": "60"},
    {"workerId": "W3", "name": "Carol", "skills": "python", "availability": "100", "rate": "55"},
]

CLEAN_TASKS = [
    {"taskId": "T1", "clientId": "C1", "duration": "10", "skills": "python", "deadline": "2030-01-01", "assignedWorker": "W1"},
    {"taskId": "T2", "clientId": "C2", "duration": "5", "skills": "design", "deadline": "2030-02-01", "assignedWorker": "W2"},
    {"taskId": "T3", "clientId": "C1", "duration": "8", "skills": "sql", "deadline": "2030-06-30", "assignedWorker": ""},
]


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def clean_clients() -> Dataset:
    """Clients that pass every check when validated with the clean workers and tasks."""
    return build_dataset(DataType.CLIENTS, CLEAN_CLIENTS)


@pytest.fixture
def clean_workers() -> Dataset:
    return build_dataset(DataType.WORKERS, CLEAN_WORKERS)


@pytest.fixture
def clean_tasks() -> Dataset:
    return build_dataset(DataType.TASKS, CLEAN_TASKS)


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def make_dataset():
    """Factory building a dataset of the given type from row dicts."""
    return build_dataset
