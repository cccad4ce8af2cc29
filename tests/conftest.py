import copy
from collections import defaultdict
from datetime import date, datetime, timedelta

import pytest

from routinesense.core.cache import MemoryLocalCache
from routinesense.core.context import SessionContext
from routinesense.core.exceptions import RemoteStoreError
from routinesense.models.routine import RoutineDefinition, RoutineProduct, RoutineStep

TODAY = date(2024, 6, 15)
USER_ID = "user-123"


class InMemoryRemoteStore:
    """RemoteStore double; add a verb to `failing` to make it raise"""

    def __init__(self):
        self.collections = defaultdict(list)
        self.failing = set()
        self.calls = []

    def _check(self, verb, collection):
        self.calls.append((verb, collection))
        if verb in self.failing:
            raise RemoteStoreError(f"{verb} unavailable")

    @staticmethod
    def _matches(document, query):
        return all(document.get(field) == value for field, value in query.items())

    def upsert(self, collection, key, document):
        self._check("upsert", collection)
        documents = self.collections[collection]
        for index, existing in enumerate(documents):
            if self._matches(existing, key):
                documents[index] = copy.deepcopy(document)
                return
        documents.append(copy.deepcopy(document))

    def upsert_many(self, collection, key_fields, documents):
        self._check("upsert_many", collection)
        for document in documents:
            existing = self.collections[collection]
            key = {field: document[field] for field in key_fields}
            for index, stored in enumerate(existing):
                if self._matches(stored, key):
                    existing[index] = copy.deepcopy(document)
                    break
            else:
                existing.append(copy.deepcopy(document))

    def insert(self, collection, document):
        self._check("insert", collection)
        self.collections[collection].append(copy.deepcopy(document))

    def find(self, collection, query, sort=None, limit=None):
        self._check("find", collection)
        results = [copy.deepcopy(d) for d in self.collections[collection] if self._matches(d, query)]
        for field, direction in reversed(list(sort or [])):
            results.sort(key=lambda d: d[field], reverse=direction < 0)
        if limit:
            results = results[:limit]
        return results

    def update(self, collection, query, changes):
        self._check("update", collection)
        updated = 0
        for document in self.collections[collection]:
            if self._matches(document, query):
                document.update(changes)
                updated += 1
        return updated

    def count(self, collection, query):
        self._check("count", collection)
        return sum(1 for d in self.collections[collection] if self._matches(d, query))


def make_product(name, brand="Acme"):
    return RoutineProduct(id=f"p-{name.lower().replace(' ', '-')}", name=name, brand=brand)


def make_routine(routine_id, products=(), time_of_day="morning", name=None, extra_steps=0):
    steps = [
        RoutineStep(
            id=f"{routine_id}-s{index}",
            step_number=index + 1,
            title=f"Step {index + 1}",
            time_of_day="evening" if time_of_day == "evening" else "morning",
            product=make_product(product) if isinstance(product, str) else product,
        )
        for index, product in enumerate(products)
    ]
    for offset in range(extra_steps):
        steps.append(RoutineStep(step_number=len(steps) + 1, title=f"Massage {offset + 1}"))
    return RoutineDefinition(
        id=routine_id,
        name=name or f"Routine {routine_id}",
        time_of_day=time_of_day,
        steps=steps,
        created_at=datetime(2024, 1, 1, 8, 0),
        updated_at=datetime(2024, 1, 1, 8, 0),
    )


def days_ago(n):
    return (TODAY - timedelta(days=n)).isoformat()


@pytest.fixture
def remote():
    return InMemoryRemoteStore()

@pytest.fixture
def local_cache():
    return MemoryLocalCache()

@pytest.fixture
def user_context(remote, local_cache):
    """Signed-in session with a fixed reference day"""
    with SessionContext(USER_ID, remote, local_cache, today=TODAY) as context:
        yield context

@pytest.fixture
def guest_context(remote, local_cache):
    with SessionContext(None, remote, local_cache, today=TODAY) as context:
        yield context


@pytest.fixture
async def client(remote, local_cache):
    """API client whose sessions share the in-memory stores; lifespan is not run"""
    from httpx import ASGITransport, AsyncClient
    from fastapi import Depends

    from routinesense.api.deps import get_current_user_id, get_session_context
    from routinesense.main import app

    def session_override(user_id=Depends(get_current_user_id)):
        with SessionContext(user_id, remote, local_cache, today=TODAY) as context:
            yield context

    app.dependency_overrides[get_session_context] = session_override
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(monkeypatch):
    from routinesense.core.config import settings
    from routinesense.core.security import create_access_token

    monkeypatch.setattr(settings, "SECRET_KEY", "test-secret-key-for-routinesense-tokens")
    return {"Authorization": f"Bearer {create_access_token(USER_ID)}"}
