"""
Tests for harvest-quota plan import and the realization view
"""

import base64
from datetime import datetime, timezone
from io import BytesIO

import pytest
from httpx import AsyncClient
from openpyxl import Workbook

from app.models.hunt_log import HuntLog
from app.models.quota_plan import QuotaPlan
from app.services.quota_service import accumulate, parse_plan_rows


def sheet_row(species=None, class_label=None, plan=None, executed=None, total=None, percent=None):
    row = [None] * 15
    row[0], row[1], row[2], row[3] = species, class_label, plan, executed
    row[13], row[14] = total, percent
    return row


PLAN_ROWS = [
    sheet_row("Realizacija odvzema"),
    sheet_row("divjad", "strukturni razred", "načrt", "izvršeni odstrel"),
    sheet_row("srna", "mladiči", 10, 2, 2, 20),
    sheet_row(None, "lanščaki", 8, "1", None, None),
    sheet_row(None, "odrasli", "0", None, None, None),
    sheet_row("jelen", None, "4,0", None, None, None),
    sheet_row("Datum zadnjega vnosa: 1.1.2025"),
]


def workbook_base64(rows) -> str:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def add_log(store):
    counter = {"n": 0}

    async def _add(finished_at, harvest_items=(), pending_items=(), ld_id="brezovica"):
        counter["n"] += 1
        await store.set(HuntLog.COLLECTION, f"log-{counter['n']}", {
            "ldId": ld_id,
            "hunterId": "uid-1",
            "startedAt": finished_at,
            "finishedAt": finished_at,
            "createdAt": finished_at,
            "harvestItems": list(harvest_items),
            "pendingItems": list(pending_items),
        })

    return _add


@pytest.fixture
async def stored_plan(store):
    plan = QuotaPlan(
        id=QuotaPlan.document_id("brezovica", 2025),
        ld_id="brezovica",
        year=2025,
        title="Realizacija odvzema – brezovica, 2025",
        items=parse_plan_rows([
            sheet_row("srna", "mladiči", 10),
            sheet_row(None, "lanščaki", 0),
            sheet_row("jelen", None, 4),
        ]),
    )
    await store.set(QuotaPlan.COLLECTION, plan.id, plan.to_document())
    return plan


class TestPlanParsing:
    """Test worksheet row parsing"""

    def test_species_carry_over_and_keys(self):
        items = parse_plan_rows(PLAN_ROWS)

        assert [(item.species, item.class_label, item.key) for item in items] == [
            ("srna", "mladiči", "SRNA__MLADICI"),
            ("srna", "lanščaki", "SRNA__LANSCAKI"),
            ("srna", "odrasli", "SRNA__ODRASLI"),
            ("jelen", "skupaj", "JELEN__SKUPAJ"),
        ]

    def test_figures_are_parsed_permissively(self):
        items = parse_plan_rows(PLAN_ROWS)

        assert items[0].plan == 10
        assert items[0].executed_excel == 2
        assert items[0].total_excel == 2
        assert items[0].percent_excel == 20
        assert items[1].executed_excel == 1
        assert items[1].total_excel is None
        assert items[2].plan == 0
        assert items[3].plan == 4

    def test_rows_without_class_or_figures_are_skipped(self):
        items = parse_plan_rows([
            sheet_row("srna"),
            sheet_row(None, None, None),
            sheet_row(None, "mladiči", "x"),
        ])

        assert len(items) == 1
        assert items[0].plan == 0

    def test_rows_before_any_species_are_skipped(self):
        assert parse_plan_rows([sheet_row(None, "mladiči", 3)]) == []

    def test_empty_sheet(self):
        assert parse_plan_rows([]) == []


class TestAccumulation:
    """Test executed and pending accumulation"""

    def test_counts_sum_per_key(self):
        logs = [
            HuntLog.decode("a", {"ldId": "x", "harvestItems": [{"key": "SRNA__MLADICI", "count": 4}]}),
            HuntLog.decode("b", {"ldId": "x", "harvestItems": [{"key": "SRNA__MLADICI", "count": "5"}]}),
        ]

        executed, pending = accumulate(logs)

        assert executed == {"SRNA__MLADICI": 9}
        assert pending == {}

    def test_non_positive_and_unusable_counts_are_ignored(self):
        logs = [HuntLog.decode("a", {"ldId": "x", "harvestItems": [
            {"key": "SRNA__MLADICI", "count": 0},
            {"key": "SRNA__MLADICI", "count": -2},
            {"key": "SRNA__MLADICI", "count": "abc"},
            {"key": "SRNA__MLADICI"},
            {"count": 3},
        ]})]

        executed, _ = accumulate(logs)

        assert executed == {}

    def test_pending_without_key_goes_to_catch_all(self):
        logs = [HuntLog.decode("a", {"ldId": "x", "pendingItems": [
            {"count": 2},
            {"key": "", "count": 1},
            {"key": "SRNA__MLADICI", "count": 1},
        ]})]

        _, pending = accumulate(logs)

        assert pending == {"PENDING_OTHER": 3, "SRNA__MLADICI": 1}


class TestPlanImportAPI:
    """Test POST /ld/odvzem-plan/import-excel"""

    async def test_import_replaces_plan(self, client: AsyncClient, store, moderator_headers):
        content = workbook_base64(PLAN_ROWS)

        response = await client.post(
            "/ld/odvzem-plan/import-excel?year=2025",
            json={"filename": "plan.xlsx", "contentBase64": content},
            headers=moderator_headers,
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True, "ldId": "brezovica", "year": 2025, "imported": 4}

        snapshot = await store.get(QuotaPlan.COLLECTION, "brezovica_2025")
        assert snapshot.data["source"]["filename"] == "plan.xlsx"
        assert [item["key"] for item in snapshot.data["items"]] == [
            "SRNA__MLADICI", "SRNA__LANSCAKI", "SRNA__ODRASLI", "JELEN__SKUPAJ",
        ]

        # A smaller re-import fully replaces the previous line items
        response = await client.post(
            "/ld/odvzem-plan/import-excel?year=2025",
            json={"contentBase64": workbook_base64([sheet_row("jelen", "teleta", 2)])},
            headers=moderator_headers,
        )
        assert response.json()["imported"] == 1

        snapshot = await store.get(QuotaPlan.COLLECTION, "brezovica_2025")
        assert [item["key"] for item in snapshot.data["items"]] == ["JELEN__TELETA"]
        assert snapshot.data["source"]["filename"] == "plan.xlsx"

    async def test_reimport_is_idempotent(self, client: AsyncClient, store, moderator_headers):
        content = workbook_base64(PLAN_ROWS)
        snapshots = []

        for _ in range(2):
            response = await client.post(
                "/ld/odvzem-plan/import-excel?year=2025",
                json={"filename": "plan.xlsx", "contentBase64": content},
                headers=moderator_headers,
            )
            assert response.status_code == 200
            snapshots.append(await store.get(QuotaPlan.COLLECTION, "brezovica_2025"))

        assert snapshots[0].data["items"] == snapshots[1].data["items"]
        assert snapshots[0].data["title"] == snapshots[1].data["title"]

    async def test_member_cannot_import(self, client: AsyncClient, member_headers):
        response = await client.post(
            "/ld/odvzem-plan/import-excel?year=2025",
            json={"contentBase64": workbook_base64(PLAN_ROWS)},
            headers=member_headers,
        )

        assert response.status_code == 403

    @pytest.mark.parametrize("query", ["", "?year=2019", "?year=2101"])
    async def test_invalid_year(self, client: AsyncClient, moderator_headers, query):
        response = await client.post(
            f"/ld/odvzem-plan/import-excel{query}",
            json={"contentBase64": workbook_base64(PLAN_ROWS)},
            headers=moderator_headers,
        )

        assert response.status_code == 400
        assert response.json()["error_type"] == "InvalidYearError"

    async def test_empty_upload(self, client: AsyncClient, moderator_headers):
        response = await client.post(
            "/ld/odvzem-plan/import-excel?year=2025",
            json={"contentBase64": ""},
            headers=moderator_headers,
        )

        assert response.status_code == 400
        assert response.json()["error_type"] == "EmptyUploadError"

    async def test_not_a_workbook(self, client: AsyncClient, moderator_headers):
        response = await client.post(
            "/ld/odvzem-plan/import-excel?year=2025",
            json={"contentBase64": base64.b64encode(b"not a workbook").decode("ascii")},
            headers=moderator_headers,
        )

        assert response.status_code == 400

    async def test_sheet_without_line_items(self, client: AsyncClient, store, moderator_headers):
        """A sheet whose rows are all skipped stores an empty plan"""
        response = await client.post(
            "/ld/odvzem-plan/import-excel?year=2026",
            json={"contentBase64": workbook_base64([sheet_row("Realizacija odvzema")])},
            headers=moderator_headers,
        )

        assert response.status_code == 200
        assert response.json()["imported"] == 0
        snapshot = await store.get(QuotaPlan.COLLECTION, "brezovica_2026")
        assert snapshot.data["items"] == []


class TestQuotaViewAPI:
    """Test GET /ld/odvzem-view"""

    async def test_view_without_logs(self, client: AsyncClient, stored_plan, member_headers):
        response = await client.get("/ld/odvzem-view?year=2025", headers=member_headers)

        assert response.status_code == 200
        view = response.json()["view"]
        assert view["ldId"] == "brezovica"
        assert view["year"] == 2025
        assert view["title"] == "Realizacija odvzema – brezovica, 2025"
        assert [row["executed"] for row in view["rows"]] == [0, 0, 0]
        assert [row["pending"] for row in view["rows"]] == [0, 0, 0]
        assert [row["percent"] for row in view["rows"]] == ["0%", "—", "0%"]

    async def test_view_scenario(self, client: AsyncClient, stored_plan, add_log, member_headers):
        """3 of a planned 10 is 30%"""
        await add_log(utc(2025, 5, 1, 8), [{"key": "SRNA__MLADICI", "count": 3}])

        response = await client.get("/ld/odvzem-view?year=2025", headers=member_headers)

        row = response.json()["view"]["rows"][0]
        assert row == {
            "key": "SRNA__MLADICI",
            "species": "srna",
            "classLabel": "mladiči",
            "plan": 10,
            "executed": 3,
            "pending": 0,
            "total": 3,
            "percent": "30%",
        }

    async def test_view_sums_logs(self, client: AsyncClient, stored_plan, add_log, member_headers):
        await add_log(utc(2025, 5, 1), [{"key": "SRNA__MLADICI", "count": 4}])
        await add_log(utc(2025, 6, 1), [{"key": "SRNA__MLADICI", "count": 5}, {"key": "SRNA__MLADICI", "count": 0}])

        response = await client.get("/ld/odvzem-view?year=2025", headers=member_headers)

        row = response.json()["view"]["rows"][0]
        assert row["executed"] == 9
        assert row["percent"] == "90%"

    async def test_pending_is_not_counted_in_total(self, client: AsyncClient, stored_plan, add_log, member_headers):
        await add_log(utc(2025, 5, 1), [{"key": "JELEN__SKUPAJ", "count": 1}],
                      [{"key": "JELEN__SKUPAJ", "count": 2}])

        response = await client.get("/ld/odvzem-view?year=2025", headers=member_headers)

        row = response.json()["view"]["rows"][2]
        assert row["executed"] == 1
        assert row["pending"] == 2
        assert row["total"] == 1
        assert row["percent"] == "25%"

    async def test_only_logs_of_the_year_and_association(self, client: AsyncClient, stored_plan, add_log,
                                                         member_headers):
        await add_log(utc(2024, 12, 31, 23, 59), [{"key": "SRNA__MLADICI", "count": 1}])
        await add_log(utc(2025, 1, 1), [{"key": "SRNA__MLADICI", "count": 1}])
        await add_log(utc(2025, 12, 31, 23, 59), [{"key": "SRNA__MLADICI", "count": 1}])
        await add_log(utc(2026, 1, 1), [{"key": "SRNA__MLADICI", "count": 1}])
        await add_log(utc(2025, 5, 1), [{"key": "SRNA__MLADICI", "count": 7}], ld_id="vrhnika")

        response = await client.get("/ld/odvzem-view?year=2025", headers=member_headers)

        assert response.json()["view"]["rows"][0]["executed"] == 2

    async def test_client_offsets_are_counted_in_utc(self, client: AsyncClient, stored_plan, add_log,
                                                     member_headers):
        """finishedAt written with a UTC offset lands in the year of its UTC instant"""
        # 2026-01-01T01:30Z and 2025-12-31T22:30Z
        await add_log("2025-12-31T23:30:00-02:00", [{"key": "SRNA__MLADICI", "count": 3}])
        await add_log("2026-01-01T00:30:00+02:00", [{"key": "JELEN__SKUPAJ", "count": 1}])

        response = await client.get("/ld/odvzem-view?year=2025", headers=member_headers)

        rows = response.json()["view"]["rows"]
        assert rows[0]["executed"] == 0
        assert rows[2]["executed"] == 1

    async def test_missing_plan_is_empty(self, client: AsyncClient, add_log, member_headers):
        await add_log(utc(2025, 5, 1), [{"key": "SRNA__MLADICI", "count": 1}])

        response = await client.get("/ld/odvzem-view?year=2025", headers=member_headers)

        assert response.status_code == 200
        view = response.json()["view"]
        assert view["rows"] == []
        assert view["updatedAt"] is None
        assert view["title"] == "Realizacija odvzema – brezovica, 2025"

    async def test_invalid_year(self, client: AsyncClient, member_headers):
        response = await client.get("/ld/odvzem-view?year=1999", headers=member_headers)

        assert response.status_code == 400

    async def test_import_then_view(self, client: AsyncClient, moderator_headers, member_headers):
        """A fresh import with no logs shows zero realization"""
        await client.post(
            "/ld/odvzem-plan/import-excel?year=2025",
            json={"contentBase64": workbook_base64(PLAN_ROWS)},
            headers=moderator_headers,
        )

        response = await client.get("/ld/odvzem-view?year=2025", headers=member_headers)

        rows = response.json()["view"]["rows"]
        assert len(rows) == 4
        assert all(row["executed"] == 0 and row["pending"] == 0 for row in rows)
        assert rows[2]["percent"] == "—"
        assert response.json()["view"]["updatedAt"] is not None
