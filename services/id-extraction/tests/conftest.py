"""Shared test fixtures for ID extraction tests."""

import json
import sys
from pathlib import Path

import pytest

# Add parent directory to path so we can import the modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from errors import PersistenceError


class InMemoryStore:
    """Fake Supabase store keeping both tables in dicts."""

    def __init__(self, profiles: dict | None = None):
        self.raw: dict[str, dict] = {}
        self.profiles: dict[str, dict] = dict(profiles or {})
        self.calls: list[str] = []
        self.fail_on: set[str] = set()

    def _call(self, name: str):
        self.calls.append(name)
        if name in self.fail_on:
            raise PersistenceError(f"{name} failed")

    def upsert_raw_data(self, user_id, record, updated_at):
        self._call("upsert_raw_data")
        self.raw[user_id] = {"user_id": user_id, "extracted_data": record, "updated_at": updated_at}

    def get_profile(self, user_id):
        self._call("get_profile")
        return self.profiles.get(user_id)

    def insert_profile(self, row):
        self._call("insert_profile")
        self.profiles[row["id"]] = dict(row)
        return dict(row)

    def update_profile(self, user_id, values):
        self._call("update_profile")
        self.profiles[user_id].update(values)
        return dict(self.profiles[user_id])


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def request_payload() -> dict:
    return {
        "imageUrl": "https://project.supabase.co/storage/v1/object/sign/ids/u-1/passport/1.jpg?token=abc",
        "idType": "passport",
        "userId": "8f14e45f-ceea-467f-a8e0-2b6a5a3c1d11",
    }


@pytest.fixture
def mock_passport_response() -> str:
    """Mock model completion for a DRC passport."""
    return json.dumps({
        "idType": "passport",
        "idNumber": "OP0123456",
        "issueDate": "2019-05-10",
        "expiryDate": "2024-05-09",
        "firstName": "Jean",
        "middleName": "Pierre",
        "lastName": "Kabila",
        "birthDate": "1985-03-02",
        "birthPlace": "Kinshasa",
        "nationality": "Congolaise",
        "provinceOfOrigin": "Kinshasa",
        "gender": "Masculin",
        "address": None,
        "city": None,
        "province": None,
        "country": "République Démocratique du Congo",
        "rawData": {"mrz": "P<CODKABILA<<JEAN<PIERRE"},
    })


@pytest.fixture
def mock_markdown_response(mock_passport_response: str) -> str:
    """Same completion wrapped in a markdown code fence."""
    return f"```json\n{mock_passport_response}\n```"
