"""Candidate roster: registered candidates and their personal access codes."""

from __future__ import annotations

from uuid import uuid4

from proctor_app.constants.assessment_constants import CANDIDATES_KEY
from proctor_app.core.models import Candidate, CandidateInfo
from proctor_app.core.services.kv_store import KeyValueStore
from proctor_app.core.services.question_store import generate_access_code, normalize_code


class CandidateRoster:
    """Manages candidate registration and code lookup."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def register(self, info: CandidateInfo, access_code: str | None = None) -> Candidate:
        """Add a candidate, generating an access code unless one is supplied."""
        if any(not value.strip() for value in info.to_dict().values()):
            raise ValueError("All candidate fields are required.")
        candidate = Candidate(
            id=uuid4().hex,
            info=info,
            access_code=normalize_code(access_code) if access_code else generate_access_code(),
        )
        self._store.put_record(CANDIDATES_KEY, candidate.id, candidate.to_dict())
        return candidate

    def find_by_code(self, access_code: str) -> Candidate | None:
        code = normalize_code(access_code)
        if not code:
            return None
        for candidate in self.list_candidates():
            if candidate.access_code == code:
                return candidate
        return None

    def list_candidates(self) -> list[Candidate]:
        candidates = [Candidate.from_dict(record) for record in self._store.list_records(CANDIDATES_KEY)]
        return sorted(candidates, key=lambda c: (c.info.last_name.lower(), c.info.first_name.lower()))

    def remove(self, candidate_id: str) -> None:
        self._store.delete_record(CANDIDATES_KEY, candidate_id)
