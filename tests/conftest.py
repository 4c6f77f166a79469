# shared fixtures for backend api tests
# provides mock db, test practitioners, patient, assessment and meal documents, httpx test clients

import time

import pytest
import pytest_asyncio
from unittest.mock import MagicMock
from datetime import date, timedelta
from bson import ObjectId

from httpx import AsyncClient, ASGITransport

from nutriplan.main import app
from nutriplan.services.db import get_db
from nutriplan.services.auth_service import hash_password
from nutriplan.dependencies import get_current_user


# test ids
PRACTITIONER_OID = ObjectId()
OTHER_PRACTITIONER_OID = ObjectId()
PATIENT_OID = ObjectId()
PATIENT_2_OID = ObjectId()
FOREIGN_PATIENT_OID = ObjectId()
ASSESSMENT_OID = ObjectId()
ASSESSMENT_2_OID = ObjectId()
MEAL_OID = ObjectId()
MEAL_2_OID = ObjectId()

PRACTITIONER_ID = str(PRACTITIONER_OID)
OTHER_PRACTITIONER_ID = str(OTHER_PRACTITIONER_OID)
PATIENT_ID = str(PATIENT_OID)
PATIENT_2_ID = str(PATIENT_2_OID)
FOREIGN_PATIENT_ID = str(FOREIGN_PATIENT_OID)
ASSESSMENT_ID = str(ASSESSMENT_OID)
MEAL_ID = str(MEAL_OID)
MEAL_2_ID = str(MEAL_2_OID)

TODAY = date.today()


def _iso(d: date) -> str:
    return d.isoformat()


# user documents (as they'd appear from mongodb)

PRACTITIONER_DOC = {
    "_id": PRACTITIONER_OID,
    "email": "dra.marina@nutriplan.com",
    "hashed_password": hash_password("nutri12345"),
    "name": "Dra. Marina Souza",
    "registration_number": "CRN-3 41520",
    "practice_name": "Clínica Equilíbrio",
    "phone": "+55 11 98888-0000",
    "created_at": "2024-01-10T00:00:00Z",
}

OTHER_PRACTITIONER_DOC = {
    "_id": OTHER_PRACTITIONER_OID,
    "email": "dr.paulo@nutriplan.com",
    "hashed_password": hash_password("nutri12345"),
    "name": "Dr. Paulo Lima",
    "registration_number": "CRN-2 11873",
    "practice_name": None,
    "phone": None,
    "created_at": "2024-02-01T00:00:00Z",
}


# patient documents — one on plan, one lapsed, one belonging to someone else

PATIENT_DOC = {
    "_id": PATIENT_OID,
    "user_id": PRACTITIONER_ID,
    "name": "Beatriz Almeida",
    "created_at": _iso(TODAY - timedelta(days=90)) + "T09:30:00Z",
    "contact": "beatriz@email.com",
    "birth_date": "1992-04-18",
    "next_appointment": None,
    "extra_notes": None,
    "anamnesis": "Intolerância à lactose.",
    "plan_start_date": _iso(TODAY - timedelta(days=20)),
    "plan_end_date": _iso(TODAY + timedelta(days=10)),
}

PATIENT_2_DOC = {
    "_id": PATIENT_2_OID,
    "user_id": PRACTITIONER_ID,
    "name": "Carlos Mendes",
    "created_at": _iso(TODAY - timedelta(days=200)) + "T14:00:00Z",
    "contact": "+55 11 97777-1234",
    "birth_date": "1985-11-02",
    "next_appointment": None,
    "extra_notes": "Treina à noite.",
    "anamnesis": None,
    "plan_start_date": _iso(TODAY - timedelta(days=200)),
    "plan_end_date": _iso(TODAY - timedelta(days=15)),
}

FOREIGN_PATIENT_DOC = {
    "_id": FOREIGN_PATIENT_OID,
    "user_id": OTHER_PRACTITIONER_ID,
    "name": "Daniela Rocha",
    "created_at": _iso(TODAY) + "T08:00:00Z",
    "plan_start_date": _iso(TODAY),
    "plan_end_date": _iso(TODAY + timedelta(days=60)),
}


# assessment documents

SAMPLE_ASSESSMENT = {
    "_id": ASSESSMENT_OID,
    "user_id": PRACTITIONER_ID,
    "patient_id": PATIENT_ID,
    "date": _iso(TODAY - timedelta(days=20)),
    "weight": 68.4,
    "height": 1.65,
    "calorie_goal": 1800,
    "body_fat": 27.5,
    "objective": "Emagrecimento",
    "activity_level": "moderate",
    "notes": None,
    "status": "active",
}

SAMPLE_ASSESSMENT_2 = {
    "_id": ASSESSMENT_2_OID,
    "user_id": PRACTITIONER_ID,
    "patient_id": PATIENT_ID,
    "date": _iso(TODAY - timedelta(days=80)),
    "weight": 71.0,
    "height": 1.65,
    "calorie_goal": 1700,
    "body_fat": 29.1,
    "objective": "Emagrecimento",
    "activity_level": "light",
    "notes": "Primeira consulta.",
    "status": "archived",
}


# meal documents — the plan built on SAMPLE_ASSESSMENT, stored out of time order

SAMPLE_MEALS = [
    {
        "_id": MEAL_OID,
        "user_id": PRACTITIONER_ID,
        "patient_id": PATIENT_ID,
        "assessment_id": ASSESSMENT_ID,
        "name": "Almoço",
        "description": "",
        "calories": 620.0,
        "time": "12:30",
        "type": "normal",
        "foods": [
            {"name": "Arroz integral", "quantity": "4 colheres", "calories": 220.0},
            {"name": "Frango grelhado", "quantity": "120 g", "calories": 400.0},
        ],
    },
    {
        "_id": MEAL_2_OID,
        "user_id": PRACTITIONER_ID,
        "patient_id": PATIENT_ID,
        "assessment_id": ASSESSMENT_ID,
        "name": "Café da manhã",
        "description": "Sem lactose",
        "calories": 350.0,
        "time": "07:30",
        "type": "normal",
        "foods": [
            {"name": "Pão integral", "quantity": "2 fatias", "calories": 150.0},
            {"name": "Ovos mexidos", "quantity": "2 unidades", "calories": 200.0},
        ],
    },
]


# async cursor mock

class AsyncCursorMock:
    """mock for motor's async cursor — supports async for and chained methods"""

    def __init__(self, data=None):
        self._data = list(data or [])
        self._index = 0

    def sort(self, key, direction=1):
        self._data.sort(key=lambda d: (d.get(key) is None, d.get(key) or ""), reverse=direction < 0)
        return self

    def skip(self, n):
        self._data = self._data[n:]
        return self

    def limit(self, n):
        self._data = self._data[:n]
        return self

    def __aiter__(self):
        self._index = 0
        return self

    async def __anext__(self):
        if self._index >= len(self._data):
            raise StopAsyncIteration
        item = self._data[self._index]
        self._index += 1
        return item

    async def to_list(self, length=None):
        if length is not None:
            return self._data[:length]
        return self._data


class MockCollection:
    """mock for a motor collection with async methods"""

    def __init__(self, data=None):
        self._data = data or []
        self.inserted = []

    def find(self, query=None, projection=None):
        results = self._data
        if query:
            results = [d for d in results if self._matches(d, query)]
        return AsyncCursorMock(results)

    async def find_one(self, query=None, projection=None):
        if not query:
            return self._data[0] if self._data else None
        for doc in self._data:
            if self._matches(doc, query):
                return doc
        return None

    async def insert_one(self, doc):
        oid = doc.get("_id", ObjectId())
        doc["_id"] = oid
        self._data.append(doc)
        self.inserted.append(doc)
        result = MagicMock()
        result.inserted_id = oid
        return result

    async def count_documents(self, query=None):
        if not query:
            return len(self._data)
        return len([d for d in self._data if self._matches(d, query)])

    async def update_one(self, query, update, upsert=False):
        result = MagicMock()
        result.modified_count = 0
        for doc in self._data:
            if self._matches(doc, query):
                if "$set" in update:
                    doc.update(update["$set"])
                result.modified_count = 1
                break
        return result

    async def delete_one(self, query):
        result = MagicMock()
        result.deleted_count = 0
        for i, doc in enumerate(self._data):
            if self._matches(doc, query):
                del self._data[i]
                result.deleted_count = 1
                break
        return result

    async def delete_many(self, query):
        keep = [d for d in self._data if not self._matches(d, query)]
        result = MagicMock()
        result.deleted_count = len(self._data) - len(keep)
        self._data[:] = keep
        return result

    def _matches(self, doc, query):
        """basic mongodb query matching for tests"""
        for key, value in query.items():
            doc_val = doc.get(key)
            if isinstance(value, dict):
                if "$in" in value and doc_val not in value["$in"]:
                    return False
            elif doc_val != value:
                return False
        return True


class MockDatabase:
    """mock database that mimics the Database class"""

    def __init__(self):
        self.users = MockCollection([
            PRACTITIONER_DOC.copy(),
            OTHER_PRACTITIONER_DOC.copy(),
        ])
        self.patients = MockCollection([
            PATIENT_DOC.copy(),
            PATIENT_2_DOC.copy(),
            FOREIGN_PATIENT_DOC.copy(),
        ])
        self.assessments = MockCollection([
            SAMPLE_ASSESSMENT.copy(),
            SAMPLE_ASSESSMENT_2.copy(),
        ])
        self.meals = MockCollection([meal.copy() for meal in SAMPLE_MEALS])

    async def connect(self):
        pass

    async def close(self):
        pass


@pytest.fixture(autouse=True)
def local_tz(monkeypatch):
    """process time zone, UTC unless a test pins another through the returned callable"""

    def pin(name):
        monkeypatch.setenv("TZ", name)
        time.tzset()

    pin("UTC")
    yield pin
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def mock_db():
    """create a fresh mock database for each test"""
    return MockDatabase()


def _practitioner_dict():
    """return practitioner user dict as get_current_user would return"""
    doc = PRACTITIONER_DOC.copy()
    doc["id"] = PRACTITIONER_ID
    del doc["_id"]
    return doc


@pytest_asyncio.fixture
async def client(mock_db):
    """httpx async test client with mocked database, no auth override"""

    async def override_get_db():
        return mock_db

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def practitioner_client(mock_db):
    """client authenticated as the test practitioner"""

    async def override_get_db():
        return mock_db

    async def override_get_current_user():
        return _practitioner_dict()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
