"""
招聘会 API 测试

覆盖招聘会创建、候选人报名、成绩录入、分数线调整与逐轮晋级
"""
import csv
import io

import pytest
from httpx import AsyncClient


async def create_drive(client: AsyncClient, job_id: str, **overrides) -> dict:
    data = {
        "name": "Campus Drive 2030",
        "type": "campus",
        "job_id": job_id,
        "aptitude_cutoff": 60,
        "technical_cutoff": 70,
        "candidates": [
            {"name": "Asha Rao", "email": "asha@college.edu", "college": "City College"},
            {"name": "Ben Li", "email": "ben@college.edu"},
            {"name": "Asha Duplicate", "email": "ASHA@college.edu"},
        ],
        **overrides
    }
    response = await client.post("/api/v1/drive-sessions", json=data)
    assert response.status_code == 200, response.text
    return response.json()["data"]


async def drive_candidates(client: AsyncClient, session_id: str) -> dict:
    """按邮箱索引招聘会候选人"""
    response = await client.get("/api/v1/drive-candidates", params={"drive_session_id": session_id})
    return {c["email"]: c for c in response.json()["data"]}


class TestDriveSessionAPI:
    """招聘会 API 测试类"""

    @pytest.mark.asyncio
    async def test_create_skips_duplicate_emails(self, client: AsyncClient, factory):
        job = await factory.create_job()
        session = await create_drive(client, job["id"])

        assert session["total_candidates"] == 2
        assert session["registered_candidates"] == 0
        assert session["job_title"] == job["title"]
        assert session["status"] == "active"

        candidates = await drive_candidates(client, session["id"])
        assert set(candidates) == {"asha@college.edu", "ben@college.edu"}
        asha = candidates["asha@college.edu"]
        assert asha["registration_status"] == "pending"
        assert asha["qualification_status"] == "pending"
        assert asha["current_round"] == 1
        assert len(asha["registration_token"]) == 32

    @pytest.mark.asyncio
    async def test_create_validation(self, client: AsyncClient, factory):
        response = await client.post("/api/v1/drive-sessions", json={"name": "X", "job_id": "missing"})
        assert response.status_code == 404

        job = await factory.create_job()
        response = await client.post("/api/v1/drive-sessions", json={
            "name": "X", "job_id": job["id"], "type": "virtual",
        })
        assert response.status_code == 422

        response = await client.post("/api/v1/drive-sessions", json={
            "name": "X", "job_id": job["id"], "candidates": [{"name": "A", "email": "no-at-sign"}],
        })
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_and_detail(self, client: AsyncClient, factory):
        job = await factory.create_job()
        session = await create_drive(client, job["id"])

        response = await client.get("/api/v1/drive-sessions")
        sessions = response.json()["data"]
        assert len(sessions) == 1
        assert sessions[0]["total_candidates"] == 2

        response = await client.get(f"/api/v1/drive-sessions/{session['id']}")
        assert response.json()["data"]["name"] == "Campus Drive 2030"

        response = await client.get("/api/v1/drive-sessions/missing")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_stats_follow_candidate_updates(self, client: AsyncClient, factory):
        job = await factory.create_job()
        session = await create_drive(client, job["id"])
        candidates = await drive_candidates(client, session["id"])

        await client.put(f"/api/v1/drive-candidates/{candidates['asha@college.edu']['id']}", json={
            "registration_status": "selected",
            "aptitude_score": 75,
            "technical_score": 82,
            "current_round": 3,
        })
        await client.put(f"/api/v1/drive-candidates/{candidates['ben@college.edu']['id']}", json={
            "registration_status": "test_completed",
            "aptitude_score": 40,
        })

        stats = (await client.get(f"/api/v1/drive-sessions/{session['id']}")).json()["data"]
        assert stats["registered_candidates"] == 2
        assert stats["aptitude_completed"] == 2
        assert stats["aptitude_qualified"] == 1
        assert stats["technical_completed"] == 1
        assert stats["technical_qualified"] == 1
        assert stats["interview_scheduled"] == 1
        assert stats["final_selected"] == 1

    @pytest.mark.asyncio
    async def test_update_candidate_validation(self, client: AsyncClient, factory):
        job = await factory.create_job()
        session = await create_drive(client, job["id"])
        candidates = await drive_candidates(client, session["id"])
        candidate_id = candidates["ben@college.edu"]["id"]

        response = await client.put(f"/api/v1/drive-candidates/{candidate_id}", json={"aptitude_score": 120})
        assert response.status_code == 422

        response = await client.put(f"/api/v1/drive-candidates/{candidate_id}", json={"registration_status": "waiting"})
        assert response.status_code == 422

        response = await client.put("/api/v1/drive-candidates/missing", json={"college": "X"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_cutoffs_recompute_qualification(self, client: AsyncClient, factory):
        """调整分数线后重新判定每位候选人的晋级状态"""
        job = await factory.create_job()
        session = await create_drive(client, job["id"])
        candidates = await drive_candidates(client, session["id"])
        await client.put(f"/api/v1/drive-candidates/{candidates['asha@college.edu']['id']}", json={
            "aptitude_score": 70, "technical_score": 80,
        })
        await client.put(f"/api/v1/drive-candidates/{candidates['ben@college.edu']['id']}", json={
            "aptitude_score": 50,
        })

        url = f"/api/v1/drive-sessions/{session['id']}/cutoffs"
        response = await client.put(url, json={"aptitude_cutoff": 45, "technical_cutoff": 85})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["candidates_updated"] == 2
        assert data["session"]["aptitude_cutoff"] == 45
        assert data["session"]["technical_cutoff"] == 85

        candidates = await drive_candidates(client, session["id"])
        # 两项成绩都有时须同时达标
        assert candidates["asha@college.edu"]["qualification_status"] == "not_qualified"
        # 只有能力测试成绩时只看能力测试
        assert candidates["ben@college.edu"]["qualification_status"] == "qualified"

        response = await client.put(url, json={"aptitude_cutoff": 45, "technical_cutoff": 85})
        assert response.json()["data"]["candidates_updated"] == 0

        response = await client.put(url, json={"aptitude_cutoff": 45, "technical_cutoff": 75})
        assert response.json()["data"]["candidates_updated"] == 1

    @pytest.mark.asyncio
    async def test_delete_session_removes_candidates(self, client: AsyncClient, factory):
        job = await factory.create_job()
        session = await create_drive(client, job["id"])

        response = await client.delete(f"/api/v1/drive-sessions/{session['id']}")
        assert response.status_code == 200

        assert await drive_candidates(client, session["id"]) == {}
        response = await client.get(f"/api/v1/drive-sessions/{session['id']}")
        assert response.status_code == 404


class TestDriveRegistration:
    """招聘会报名测试"""

    @pytest.mark.asyncio
    async def test_get_registration(self, client: AsyncClient, factory):
        job = await factory.create_job()
        session = await create_drive(client, job["id"])
        token = (await drive_candidates(client, session["id"]))["asha@college.edu"]["registration_token"]

        response = await client.get(f"/api/v1/drive/register/{token}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["candidate"]["name"] == "Asha Rao"
        assert data["drive_session"]["id"] == session["id"]
        assert data["job"]["title"] == job["title"]

    @pytest.mark.asyncio
    async def test_submit_registration(self, client: AsyncClient, factory):
        job = await factory.create_job()
        session = await create_drive(client, job["id"])
        token = (await drive_candidates(client, session["id"]))["ben@college.edu"]["registration_token"]

        response = await client.post(f"/api/v1/drive/register/{token}", json={
            "phone": "+91 98765 43210", "college": "State University",
        })
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["registration_status"] == "registered"
        assert data["registered_at"] is not None
        assert data["college"] == "State University"
        assert data["name"] == "Ben Li"

        stats = (await client.get(f"/api/v1/drive-sessions/{session['id']}")).json()["data"]
        assert stats["registered_candidates"] == 1

    @pytest.mark.asyncio
    async def test_unknown_token(self, client: AsyncClient):
        response = await client.get("/api/v1/drive/register/not-a-token")
        assert response.status_code == 404

        response = await client.post("/api/v1/drive/register/not-a-token", json={})
        assert response.status_code == 404


async def set_scores(client: AsyncClient, candidate: dict, **fields) -> None:
    response = await client.put(f"/api/v1/drive-candidates/{candidate['id']}", json=fields)
    assert response.status_code == 200, response.text


class TestDriveProgression:
    """逐轮晋级与 AI 面试安排测试"""

    @pytest.mark.asyncio
    async def test_send_next_round(self, client: AsyncClient, factory, outbox):
        job = await factory.create_job()
        session = await create_drive(client, job["id"])
        candidates = await drive_candidates(client, session["id"])
        await set_scores(client, candidates["asha@college.edu"], aptitude_score=75)
        await set_scores(client, candidates["ben@college.edu"], aptitude_score=40)

        url = f"/api/v1/drive-sessions/{session['id']}/send-next-round"
        response = await client.post(url)
        assert response.status_code == 200
        assert response.json()["data"] == {"emails_sent": 1, "total_qualified": 1}

        assert [m["to"] for m in outbox] == ["asha@college.edu"]
        assert outbox[0]["subject"] == "Round 2: Technical Test Invitation - Campus Drive 2030"
        assert "Your Aptitude Score: 75%" in outbox[0]["text"]

        candidates = await drive_candidates(client, session["id"])
        assert candidates["asha@college.edu"]["current_round"] == 2
        assert candidates["ben@college.edu"]["current_round"] == 1

        # 已进入第二轮的不再重复通知
        response = await client.post(url)
        assert response.json()["data"] == {"emails_sent": 0, "total_qualified": 0}

    @pytest.mark.asyncio
    async def test_send_next_round_advances_without_smtp(self, client: AsyncClient, factory):
        job = await factory.create_job()
        session = await create_drive(client, job["id"])
        candidates = await drive_candidates(client, session["id"])
        await set_scores(client, candidates["ben@college.edu"], aptitude_score=60)

        response = await client.post(f"/api/v1/drive-sessions/{session['id']}/send-next-round")
        assert response.json()["data"] == {"emails_sent": 0, "total_qualified": 1}

        candidates = await drive_candidates(client, session["id"])
        assert candidates["ben@college.edu"]["current_round"] == 2

    @pytest.mark.asyncio
    async def test_schedule_interviews(self, client: AsyncClient, factory, outbox):
        """技术测试达标者获得候选人档案、应聘申请、AI 面试与预约令牌"""
        job = await factory.create_job()
        session = await create_drive(client, job["id"])
        candidates = await drive_candidates(client, session["id"])
        await set_scores(client, candidates["asha@college.edu"], aptitude_score=75, technical_score=80, current_round=2)
        await set_scores(client, candidates["ben@college.edu"], aptitude_score=70, technical_score=50, current_round=2)

        url = f"/api/v1/drive-sessions/{session['id']}/schedule-interviews"
        response = await client.post(url)
        assert response.status_code == 200
        assert response.json()["data"] == {"interviews_scheduled": 1, "total_qualified": 1, "emails_sent": 1}

        asha = (await drive_candidates(client, session["id"]))["asha@college.edu"]
        assert asha["current_round"] == 3
        assert asha["registration_status"] == "interview_scheduled"
        assert asha["interview_scheduled"] is True
        assert asha["qualification_status"] == "qualified"

        profiles = (await client.get("/api/v1/candidates")).json()["data"]
        assert profiles["total"] == 1
        profile = profiles["items"][0]
        assert (profile["first_name"], profile["last_name"], profile["email"]) == ("Asha", "Rao", "asha@college.edu")

        applications = (await client.get("/api/v1/applications", params={"job_id": job["id"]})).json()["data"]
        assert applications["total"] == 1
        application = applications["items"][0]
        assert application["status"] == "interview_scheduled"
        assert application["notes"] == "Drive recruitment candidate - Aptitude: 75%, Technical: 80%"

        interviews = (await client.get("/api/v1/interviews", params={"application_id": application["id"]})).json()["data"]
        assert interviews["total"] == 1
        assert interviews["items"][0]["type"] == "ai_video"
        assert interviews["items"][0]["duration"] == 30

        mail = outbox[0]
        assert mail["subject"] == "Final Round: AI Video Interview - Campus Drive 2030"
        token = mail["text"].split("http://frontend.test/schedule/")[1].split()[0]
        response = await client.get(f"/api/v1/interview-tokens/verify/{token}")
        assert response.json()["data"]["application_id"] == application["id"]

        response = await client.post(url)
        assert response.json()["data"]["total_qualified"] == 0

    @pytest.mark.asyncio
    async def test_schedule_reuses_existing_profile(self, client: AsyncClient, factory):
        job = await factory.create_job()
        existing = await factory.create_candidate(email="asha@college.edu", selected_job_id=job["id"])
        session = await create_drive(client, job["id"])
        candidates = await drive_candidates(client, session["id"])
        await set_scores(client, candidates["asha@college.edu"], technical_score=90, current_round=2)

        response = await client.post(f"/api/v1/drive-sessions/{session['id']}/schedule-interviews")
        assert response.json()["data"]["interviews_scheduled"] == 1

        assert (await client.get("/api/v1/candidates")).json()["data"]["total"] == 1
        applications = (await client.get("/api/v1/applications", params={"candidate_id": existing["id"]})).json()["data"]
        assert applications["total"] == 1
        # 已有申请保持原状态
        assert applications["items"][0]["status"] == "applied"

    @pytest.mark.asyncio
    async def test_bulk_schedule_interviews(self, client: AsyncClient, factory):
        job = await factory.create_job()
        session = await create_drive(client, job["id"])
        other = await create_drive(client, job["id"], name="Walk-in Drive", type="walk-in")
        candidates = await drive_candidates(client, session["id"])
        outsider = (await drive_candidates(client, other["id"]))["ben@college.edu"]
        url = f"/api/v1/drive-sessions/{session['id']}/bulk-schedule-interviews"

        response = await client.post(url, json={
            "candidate_ids": [candidates["asha@college.edu"]["id"], "missing", outsider["id"]],
        })
        data = response.json()["data"]
        assert data["interviews_scheduled"] == 1
        assert data["total_requested"] == 3
        assert data["errors"] == [
            "Candidate missing not found",
            f"Candidate {outsider['id']} not found",
        ]

        response = await client.post(url, json={"candidate_ids": [candidates["asha@college.edu"]["id"]]})
        data = response.json()["data"]
        assert data["interviews_scheduled"] == 0
        assert data["errors"] == ["Candidate Asha Rao already has interview scheduled"]

        applications = (await client.get("/api/v1/applications", params={"job_id": job["id"]})).json()["data"]
        assert applications["items"][0]["notes"] == "Drive recruitment candidate - Aptitude: -, Technical: -"

        response = await client.post(url, json={"candidate_ids": []})
        assert response.status_code == 422

        response = await client.post("/api/v1/drive-sessions/missing/bulk-schedule-interviews", json={"candidate_ids": ["x"]})
        assert response.status_code == 404


class TestDriveCandidateFilter:
    """候选人筛选与 CSV 导出测试"""

    async def _scored(self, client: AsyncClient, factory) -> dict:
        job = await factory.create_job()
        session = await create_drive(client, job["id"])
        candidates = await drive_candidates(client, session["id"])
        await set_scores(client, candidates["asha@college.edu"], aptitude_score=75, technical_score=80)
        await set_scores(client, candidates["ben@college.edu"], aptitude_score=40, qualification_status="not_qualified")
        return session

    @pytest.mark.asyncio
    async def test_filter_by_scores_and_status(self, client: AsyncClient, factory):
        session = await self._scored(client, factory)
        url = f"/api/v1/drive-sessions/{session['id']}/candidates/filtered"

        async def emails(**params):
            data = (await client.get(url, params=params)).json()["data"]
            assert data["count"] == len(data["candidates"])
            return {c["email"] for c in data["candidates"]}

        assert await emails() == {"asha@college.edu", "ben@college.edu"}
        assert await emails(min_aptitude_score=50) == {"asha@college.edu"}
        assert await emails(max_aptitude_score=50) == {"ben@college.edu"}
        # 没有技术成绩的候选人不参与技术成绩区间
        assert await emails(max_technical_score=90) == {"asha@college.edu"}
        assert await emails(qualification_status="not_qualified") == {"ben@college.edu"}
        assert await emails(registration_status="registered") == set()

        data = (await client.get(url, params={"min_aptitude_score": 50})).json()["data"]
        assert data["filters"]["min_aptitude"] == 50
        assert data["filters"]["qualification_status"] is None

    @pytest.mark.asyncio
    async def test_export_csv(self, client: AsyncClient, factory):
        session = await self._scored(client, factory)

        response = await client.get(
            f"/api/v1/drive-sessions/{session['id']}/candidates/filtered", params={"export": "csv"}
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]

        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == [
            "Name", "Email", "Phone", "College", "Aptitude Score", "Technical Score", "Status", "Qualification",
        ]
        by_email = {row[1]: row for row in rows[1:]}
        assert by_email["asha@college.edu"] == [
            "Asha Rao", "asha@college.edu", "", "City College", "75", "80", "pending", "pending",
        ]
        assert by_email["ben@college.edu"][4:] == ["40", "", "pending", "not_qualified"]

    @pytest.mark.asyncio
    async def test_unknown_session(self, client: AsyncClient):
        response = await client.get("/api/v1/drive-sessions/missing/candidates/filtered")
        assert response.status_code == 404
