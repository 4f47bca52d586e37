"""
Tests for the HTTP surface of the console.
"""

import pytest
from fastapi.testclient import TestClient

from backoffice_api.main import create_app
from importacoes.console import ImportacaoConsole

HEADERS = {"X-API-Token": "test-token"}


@pytest.fixture
def client(fake_server, app_config):
    console = ImportacaoConsole(app_config, transport=fake_server.transport)
    with TestClient(create_app(console)) as test_client:
        yield test_client


class TestAuth:
    def test_health_is_public(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["services"]["poller"] == "IDLE"
        assert response.json()["services"]["live_updates"] == "disconnected"

    def test_missing_token_rejected(self, client):
        response = client.get("/importacoes")

        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"

    def test_metrics_exposed(self, client):
        client.get("/health")
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text


class TestImportacoesEndpoints:
    """Test the import job routes end to end against the fake API."""

    def test_list_starts_poller(self, client, fake_server):
        fake_server.seed("PROCESSANDO")
        fake_server.seed("FINALIZADO_SUCESSO")

        response = client.get("/importacoes", headers=HEADERS)

        body = response.json()
        assert response.status_code == 200
        assert len(body["items"]) == 2
        assert body["poller_state"] == "POLLING"
        assert client.get("/importacoes/poller", headers=HEADERS).json()["state"] == (
            "POLLING"
        )

    def test_list_with_pagination(self, client, fake_server):
        for _ in range(3):
            fake_server.seed("FINALIZADO_SUCESSO")

        body = client.get(
            "/importacoes", params={"page": 2, "pageSize": 2}, headers=HEADERS
        ).json()

        assert body["page"] == 2
        assert body["page_size"] == 2
        assert len(body["items"]) == 1
        assert body["poller_state"] == "IDLE"

    def test_submit_file(self, client, fake_server):
        response = client.post(
            "/importacoes",
            data={"fidcId": "F1", "origem": "Cnab"},
            files={"arquivo": ("lote.rem", b"0HEADER\n9TRAILER\n")},
            headers=HEADERS,
        )

        assert response.status_code == 201
        importacao_id = response.json()["importacao_id"]
        assert importacao_id in fake_server.jobs

        detail = client.get(f"/importacoes/{importacao_id}", headers=HEADERS).json()
        assert detail["job"]["status"] == "PROCESSANDO"
        assert detail["job"]["tentativas"] == 0
        assert [event["status"] for event in detail["job"]["events"]] == ["PROCESSANDO"]

    def test_submit_without_file(self, client, fake_server):
        response = client.post("/importacoes", data={"fidcId": "F1"}, headers=HEADERS)

        assert response.status_code == 400
        assert "arquivo" in response.json()["details"]["fields"]
        assert fake_server.requests == []

    def test_live_updates_status_and_subscription(self, client):
        response = client.get("/importacoes/tempo-real", headers=HEADERS)

        assert response.status_code == 200
        assert response.json() == {"status": "disconnected", "empresa_ids": []}

        response = client.put(
            "/importacoes/tempo-real/empresas",
            json={"empresa_ids": ["E1", "E2"]},
            headers=HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["empresa_ids"] == ["E1", "E2"]

    def test_detail_not_found(self, client):
        response = client.get("/importacoes/nao-existe", headers=HEADERS)

        assert response.status_code == 404
        assert response.json()["details"]["importacao_id"] == "nao-existe"

    def test_detail_shows_storage_and_message_ids(self, client, fake_server):
        job_id = fake_server.seed("FINALIZADO_SUCESSO")
        fake_server.jobs[job_id] = {
            **fake_server.jobs[job_id],
            "fileKey": "importacoes/2025/01/lote.rem",
            "ultimoMessageId": "msg-42",
        }

        response = client.get(f"/importacoes/{job_id}", headers=HEADERS)

        job = response.json()["job"]
        assert response.status_code == 200
        assert job["file_key"] == "importacoes/2025/01/lote.rem"
        assert job["ultimo_message_id"] == "msg-42"

    def test_detail_upstream_failure(self, client, fake_server):
        job_id = fake_server.seed()
        fake_server.fail_next(500, {"detail": "Banco indisponível"})

        response = client.get(f"/importacoes/{job_id}", headers=HEADERS)

        assert response.status_code == 502
        assert response.json()["message"] == "Banco indisponível"

    def test_reprocess(self, client, fake_server):
        job_id = fake_server.seed("FINALIZADO_FALHA", tentativas=1)
        client.get(f"/importacoes/{job_id}", headers=HEADERS)

        response = client.post(
            f"/importacoes/{job_id}/reprocessar",
            json={"current_status": "FINALIZADO_FALHA"},
            headers=HEADERS,
        )

        body = response.json()
        assert response.status_code == 200
        assert body["job"]["status"] == "PROCESSANDO"
        assert body["job"]["tentativas"] == 2
        assert body["job"]["completed_at"] is None
        assert body["job"]["events"][-1]["status"] == "REPROCESSAR"

    def test_reprocess_running_job_refused(self, client, fake_server):
        job_id = fake_server.seed("PROCESSANDO")

        response = client.post(
            f"/importacoes/{job_id}/reprocessar",
            json={"current_status": "PROCESSANDO"},
            headers=HEADERS,
        )

        assert response.status_code == 409
        assert response.json()["error"] == "ReprocessNotAllowedError"

    def test_reprocess_without_body(self, client, fake_server):
        job_id = fake_server.seed("FINALIZADO_SUCESSO")

        response = client.post(f"/importacoes/{job_id}/reprocessar", headers=HEADERS)

        assert response.status_code == 200
        assert fake_server.jobs[job_id]["tentativas"] == 1

    def test_excel_analysis_flow(self, client, fake_server):
        analise = client.post(
            "/importacoes/analises",
            data={"fidcId": "F1"},
            files={"arquivo": ("carteira.xlsx", b"PK\x03\x04")},
            headers=HEADERS,
        ).json()

        assert analise["can_import"] is True
        assert analise["warnings"][0]["code"] == "W01"

        response = client.post(
            f"/importacoes/analises/{analise['analysis_id']}/confirmar",
            json={"force_warnings": True},
            headers=HEADERS,
        )
        assert response.status_code == 201
        assert response.json()["importacao_id"] in fake_server.jobs

    def test_notifications_are_drained(self, client, fake_server):
        client.post("/importacoes", data={}, headers=HEADERS)

        first = client.get("/importacoes/notificacoes", headers=HEADERS).json()
        second = client.get("/importacoes/notificacoes", headers=HEADERS).json()

        assert first[0]["level"] == "error"
        assert second == []
