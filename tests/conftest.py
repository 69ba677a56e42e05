"""Shared pytest fixtures: a pinned calendar date and a seeded mirror."""

import os
from datetime import date

import pytest
from dotenv import load_dotenv

# Load .env first, then force an offline, unthrottled test configuration
load_dotenv()
os.environ["FIRESTORE_PROJECT_ID"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"

from httpx import ASGITransport, AsyncClient  # noqa: E402

from feemirror.config import settings  # noqa: E402
from feemirror.main import app, init_mirror_state  # noqa: E402

TODAY = date(2025, 6, 15)


def sample_documents() -> dict:
    """
    One school under monthly billing, seen on 15 June 2025.

    s1 has paid every month; s2 owes 250 tuition and 20 transport; s3 sits in
    a class group that settings do not define; s4 pays a custom fee of 75.
    """
    return {
        "settings": [
            {
                "id": "app",
                "schoolName": "Hillside Academy",
                "billingCycle": "monthly",
                "classGroups": [
                    {"id": "g1", "name": "Junior", "standardFee": 100},
                    {"id": "g2", "name": "Senior", "standardFee": "150"},
                ],
            }
        ],
        "students": [
            {
                "id": "s1",
                "fullName": "Ama Mensah",
                "className": "Basic 1",
                "classGroup": "g1",
                "admissionDate": "2025-01-10",
                "feePayments": [
                    {"period": month, "amountDue": 100, "amountPaid": 100, "outstandingAmount": 0, "paid": True}
                    for month in range(1, 7)
                ],
            },
            {
                "id": "s2",
                "fullName": "Kofi Boateng",
                "className": "Basic 4",
                "classGroup": "g2",
                "admissionDate": "2025-03-01T08:00:00Z",
                "hasTransport": True,
                "transportFee": 20,
                "feePayments": [
                    {"period": 3, "amountDue": 170, "amountPaid": 150, "outstandingAmount": 20},
                    {"period": 4, "amountDue": 170, "amountPaid": 150, "outstandingAmount": 20},
                    {
                        "period": 5,
                        "amountDue": 170,
                        "amountPaid": 50,
                        "outstandingAmount": 120,
                        "paidDate": "2025-06-03T09:00:00",
                    },
                    {"period": 6, "amountDue": 170, "amountPaid": 0, "outstandingAmount": 170},
                ],
                "transportPayments": [
                    {"month": 3, "amountDue": 20, "amountPaid": 20, "paidDate": "2025-03-05"},
                    {"month": 4, "amountDue": 20, "amountPaid": 0},
                    {"month": 5, "amountDue": 20, "amountPaid": 0},
                    {"month": 6, "amountDue": 20, "amountPaid": 20, "paidDate": "2025-06-02"},
                ],
            },
            {
                "id": "s3",
                "fullName": "Esi Owusu",
                "className": "Basic 2",
                "classGroup": "g9",
                "admissionDate": "2025-05-01",
                "feePayments": [{"period": 5, "amountPaid": 0}, {"period": 6, "amountPaid": 0}],
            },
            {
                "id": "s4",
                "fullName": "Yaw Darko",
                "className": "Basic 1",
                "classGroup": "g1",
                "admissionDate": "2025-06-01",
                "hasCustomFees": True,
                "customSchoolFee": 75,
                "feePayments": [{"period": 6, "amountPaid": 0}],
            },
        ],
        "outstandingStudents": [
            {"id": "s2", "fullName": "Kofi Boateng", "classGroup": "g2", "outstandingAmount": 270},
            {"id": "s4", "fullName": "Yaw Darko", "classGroup": "g1", "outstandingAmount": 75},
        ],
        "expenses": [
            {"id": "e1", "description": "Electricity", "amount": 300, "category": "Utilities", "date": "2025-06-01"},
            {"id": "e2", "description": "Chalk", "amount": "50", "reversed": True},
        ],
        "extraBilling": [
            {"id": "x1", "description": "Excursion", "amount": 40, "date": "2025-06-10"},
        ],
        "inventories": [
            {
                "id": "inv1",
                "inventoryName": "Uniforms",
                "year": 2025,
                "createdAt": "2025-01-02T10:00:00",
                "items": [
                    {
                        "itemName": "Shirt",
                        "quantity": 10,
                        "defaultPrice": 12.5,
                        "lowStockThreshold": 5,
                        "stockLog": [
                            {"date": "2025-01-02T10:00:00", "quantityChange": 14, "actionType": "Initial Stock"},
                        ],
                    },
                    {"itemName": "Tie", "quantity": 2, "defaultPrice": 3},
                    {"itemName": "Sweater", "quantity": 0, "defaultPrice": 20},
                ],
            }
        ],
        "sales": [
            {
                "id": "sale1",
                "inventoryName": "Uniforms",
                "itemName": "Shirt",
                "quantitySold": 4,
                "unitPrice": 12.5,
                "total": 50,
                "soldAt": "2025-02-01T12:00:00",
                "soldBy": "Adjoa",
                "year": 2025,
                "status": "completed",
            },
            {
                "id": "sale2",
                "inventoryName": "Uniforms",
                "itemName": "Tie",
                "quantitySold": 1,
                "total": 3,
                "soldAt": "2025-02-02T12:00:00",
                "year": 2025,
                "status": "reversed",
            },
        ],
        "staff": [
            {"id": "st1", "name": "Mr Asante", "role": "Teacher", "isActive": True},
            {"id": "st2", "name": "Mrs Addo", "role": "Admin", "isActive": True},
            {"id": "st3", "name": "Kwame", "role": "Driver", "isActive": True},
            {"id": "st4", "name": "Former Guard", "role": "Security", "isActive": False},
        ],
        "staffLogs": [
            {
                "id": "l1",
                "staffId": "st1",
                "staffName": "Mr Asante",
                "role": "Teacher",
                "date": "2025-06-15",
                "timeIn": "07:45",
                "timeOut": "15:00",
                "duties": "Form 1 maths",
                "isPresent": True,
            },
            {
                "id": "l2",
                "staffId": "st2",
                "staffName": "Mrs Addo",
                "role": "Admin",
                "date": "2025-06-15",
                "timeIn": "08:00",
                "notes": "Left early, clinic",
                "isPresent": True,
            },
            {"id": "l3", "staffId": "st3", "staffName": "Kwame", "role": "Driver", "date": "2025-06-14"},
        ],
    }


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def documents() -> dict:
    return sample_documents()


@pytest.fixture
def pinned_today(monkeypatch):
    """Every "today" lookup resolves to TODAY."""
    monkeypatch.setattr("feemirror.services.billing_engine.get_today", lambda: TODAY)
    monkeypatch.setattr("feemirror.services.dashboard_service.get_today", lambda: TODAY)
    monkeypatch.setattr("feemirror.api.v1.endpoints.staff.get_today", lambda: TODAY)
    monkeypatch.setattr("feemirror.services.snapshot_store.get_today", lambda: TODAY)
    return TODAY


@pytest.fixture
def store(pinned_today):
    """A fresh store on the app, seeded with sample_documents()."""
    mirror = init_mirror_state(app)
    for collection, docs in sample_documents().items():
        mirror.replace(collection, docs)
    return mirror


@pytest.fixture
def api_base() -> str:
    return f"http://test{settings.API_V1_PREFIX}"


@pytest.fixture
async def async_client(store, api_base: str):
    transport = ASGITransport(app=app)
    client = AsyncClient(transport=transport, base_url=api_base, timeout=30.0)
    yield client
    await client.aclose()
    await app.state.dashboard.aclose()
