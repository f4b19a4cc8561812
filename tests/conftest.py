import copy

import pytest

UCR_RECORD = {
    "schema": "ucr/food-inspection@1",
    "subject": {"type": "venue", "id": "Clayton HS - Stuber Concession"},
    "payload": {
        "inspection_type": "Routine",
        "score_100": 92,
        "violations": [
            {
                "code": "3-501.16",
                "title": "Cold holding",
                "narrative": "Sliced tomatoes at 48°F.\nDiscarded by PIC.",
                "critical": True,
                "corrected_on_site": True,
            },
            {
                "code": "6-501.12",
                "title": "Cleaning frequency",
                "narrative": "Debris under shelving.",
                "critical": False,
                "corrected_on_site": False,
            },
        ],
    },
    "evidence": {"source_system": "county-portal", "source_url": "https://example.org/i/1"},
    "time": {"observed": "2025-03-14", "ingested": "2025-03-15T10:00:00Z"},
    "cid": "bafybeigdyrzt",
}


@pytest.fixture
def ucr_record():
    return copy.deepcopy(UCR_RECORD)
