"""
Pytest configuration and fixtures for the importacoes console tests.

The ingestion API is replaced by an in-memory fake served through
httpx.MockTransport. Every mutation replaces a job record with a new dict, so
snapshots handed out earlier never change.
"""

import json
import os
import re
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
from hypothesis import settings

os.environ.setdefault("API_AUTH_TOKEN", "test-token")

from importacoes.config import (
    AppConfig,
    IngestionApiConfig,
    LiveUpdatesConfig,
    PollingConfig,
)
from importacoes.console import ImportacaoConsole
from importacoes.infrastructure import ImportacaoRepository
from importacoes.views import Notifier

# Configure Hypothesis profiles
settings.register_profile("ci", max_examples=100, deadline=None)
settings.register_profile("dev", max_examples=50, deadline=5000)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))

BASE_URL = "http://ingestion.test"
BASE_PATH = "/operacoes/importacoes"
HUB_PATH = "/hubs/importacoes"
TERMINAL = {"FINALIZADO_SUCESSO", "FINALIZADO_FALHA"}

_MULTIPART_PART = re.compile(
    rb'name="([^"]+)"(?:; filename="([^"]*)")?\r\n'
    rb"(?:Content-Type: [^\r\n]*\r\n)?\r\n(.*?)\r\n--",
    re.S,
)


def parse_multipart(body: bytes) -> Tuple[Dict[str, str], Dict[str, Tuple[str, bytes]]]:
    fields: Dict[str, str] = {}
    files: Dict[str, Tuple[str, bytes]] = {}
    for name, file_name, value in _MULTIPART_PART.findall(body):
        if file_name:
            files[name.decode()] = (file_name.decode(), value)
        else:
            fields[name.decode()] = value.decode()
    return fields, files


class FakeIngestionServer:
    """In-memory stand-in for the ingestion API import endpoints."""

    def __init__(self, envelope: bool = False):
        self.envelope = envelope
        self.jobs: Dict[str, Dict[str, Any]] = {}
        self.analyses: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []
        self.uploads: List[Dict[str, Any]] = []
        self._failures: List[Tuple[int, Any]] = []
        self._clock = datetime(2025, 1, 15, 10, 0, 0)
        self.transport = httpx.MockTransport(self.handle)

    # ---- test helpers ----

    def now(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat() + "Z"

    def fail_next(self, status_code: int, body: Any = None) -> None:
        """Make the next request fail with the given response."""
        self._failures.append((status_code, body))

    def seed(
        self,
        status: str = "PROCESSANDO",
        tentativas: int = 0,
        file_name: str = "lote.rem",
    ) -> str:
        job_id = str(uuid.uuid4())
        created = self.now()
        self.jobs[job_id] = {
            "id": job_id,
            "fidcId": "F1",
            "origem": "Cnab",
            "tipoArquivo": "CNAB",
            "fileName": file_name,
            "fileHash": None,
            "status": "PROCESSANDO",
            "errorSummary": None,
            "ultimoCodigoFalha": None,
            "tentativas": tentativas,
            "ultimaTentativaEm": created,
            "createdAt": created,
            "completedAt": None,
            "userEmail": "ops@example.com",
            "eventos": [
                {"id": str(uuid.uuid4()), "status": "PROCESSANDO",
                 "message": "Arquivo recebido", "createdAt": created}
            ],
        }
        if status != "PROCESSANDO":
            self.advance(job_id, status)
        return job_id

    def advance(self, job_id: str, status: str, error: Optional[str] = None) -> None:
        """Simulate the remote worker moving a job to a new status."""
        job = self.jobs[job_id]
        stamp = self.now()
        failed = status == "FINALIZADO_FALHA"
        self.jobs[job_id] = {
            **job,
            "status": status,
            "errorSummary": (error or "Linha 3 inválida") if failed else None,
            "ultimoCodigoFalha": "E042" if failed else None,
            "completedAt": stamp if status in TERMINAL else None,
            "eventos": job["eventos"]
            + [{"id": str(uuid.uuid4()), "status": status, "message": None,
                "createdAt": stamp}],
        }

    def count(self, method: str = None, path_suffix: str = "") -> int:
        return sum(
            1
            for request in self.requests
            if (method is None or request.method == method)
            and request.url.path == BASE_PATH + path_suffix
        )

    # ---- transport ----

    def _reply(self, status_code: int, body: Any = None) -> httpx.Response:
        if body is None:
            return httpx.Response(status_code)
        if self.envelope and 200 <= status_code < 300:
            body = {"model": body, "success": True}
        return httpx.Response(status_code, json=body)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._failures:
            status_code, body = self._failures.pop(0)
            return httpx.Response(status_code, json=body) if body is not None else httpx.Response(status_code)

        path = request.url.path
        if request.method == "POST" and path == HUB_PATH + "/negotiate":
            return httpx.Response(
                200, json={"connectionToken": "token-1", "negotiateVersion": 1}
            )
        if not path.startswith(BASE_PATH):
            return httpx.Response(404)
        parts = [part for part in path[len(BASE_PATH):].split("/") if part]

        if request.method == "GET" and not parts:
            return self._list(request)
        if request.method == "POST" and not parts:
            return self._create(request)
        if request.method == "POST" and parts == ["analises"]:
            return self._analyze(request)
        if request.method == "POST" and len(parts) == 3 and parts[0] == "analises":
            return self._confirm(parts[1], request)
        if request.method == "GET" and len(parts) == 1:
            job = self.jobs.get(parts[0])
            if job is None:
                return httpx.Response(404, json={"detail": "Importação não encontrada"})
            return self._reply(200, job)
        if request.method == "POST" and len(parts) == 2 and parts[1] == "reprocessar":
            return self._reprocess(parts[0])
        return httpx.Response(405)

    def _list(self, request: httpx.Request) -> httpx.Response:
        page = int(request.url.params.get("page", 1))
        page_size = int(request.url.params.get("pageSize", 10))
        ordered = list(reversed(list(self.jobs.values())))
        start = (page - 1) * page_size
        items = [
            {key: value for key, value in job.items() if key != "eventos"}
            for job in ordered[start:start + page_size]
        ]
        total_pages = max(1, -(-len(ordered) // page_size))
        return self._reply(
            200,
            {
                "items": items,
                "page": page,
                "pageSize": page_size,
                "totalItems": len(ordered),
                "totalPages": total_pages,
            },
        )

    def _create(self, request: httpx.Request) -> httpx.Response:
        fields, files = parse_multipart(request.content)
        if "arquivo" not in files or not fields.get("fidcId"):
            return httpx.Response(
                400, json={"errors": [{"message": "Arquivo e fidcId são obrigatórios."}]}
            )
        self.uploads.append(
            {"fields": fields, "file": files["arquivo"], "headers": dict(request.headers)}
        )
        job_id = self.seed(file_name=files["arquivo"][0])
        self.jobs[job_id] = {
            **self.jobs[job_id],
            "fidcId": fields["fidcId"],
            "origem": fields.get("origem"),
            "tipoArquivo": fields.get("tipoArquivo"),
            "fileHash": fields.get("fileHash"),
        }
        return self._reply(201, {"importacaoId": job_id})

    def _analyze(self, request: httpx.Request) -> httpx.Response:
        fields, files = parse_multipart(request.content)
        analysis_id = str(uuid.uuid4())
        file_name = files["arquivo"][0]
        self.analyses[analysis_id] = {"fields": fields, "file_name": file_name}
        return self._reply(
            200,
            {
                "analysisId": analysis_id,
                "fileName": file_name,
                "status": "VALIDA_COM_AVISOS",
                "canImport": True,
                "summary": {"totalLinhas": 3, "linhasValidas": 3, "avisos": 1},
                "errors": [],
                "warnings": [{"code": "W01", "message": "Data futura", "lineNumber": 2}],
                "createdAt": self.now(),
            },
        )

    def _confirm(self, analysis_id: str, request: httpx.Request) -> httpx.Response:
        analysis = self.analyses.get(analysis_id)
        if analysis is None:
            return httpx.Response(404, json={"detail": "Análise não encontrada"})
        if not json.loads(request.content or b"{}").get("forceWarnings"):
            return httpx.Response(
                422, json={"errors": [{"value": "Confirme os avisos para importar."}]}
            )
        job_id = self.seed(file_name=analysis["file_name"])
        return self._reply(201, {"importacaoId": job_id})

    def _reprocess(self, job_id: str) -> httpx.Response:
        job = self.jobs.get(job_id)
        if job is None:
            return httpx.Response(404, json={"detail": "Importação não encontrada"})
        stamp = self.now()
        self.jobs[job_id] = {
            **job,
            "status": "PROCESSANDO",
            "tentativas": job["tentativas"] + 1,
            "ultimaTentativaEm": stamp,
            "errorSummary": None,
            "ultimoCodigoFalha": None,
            "completedAt": None,
            "eventos": job["eventos"]
            + [{"id": str(uuid.uuid4()), "status": "REPROCESSAR",
                "message": "Reprocessamento manual", "createdAt": stamp}],
        }
        return httpx.Response(204)


@pytest.fixture
def fake_server():
    return FakeIngestionServer()


@pytest.fixture
def api_config():
    return IngestionApiConfig(base_url=BASE_URL, importacoes_path=BASE_PATH, timeout=5)


@pytest.fixture
def app_config(api_config):
    return AppConfig(
        ingestion_api=api_config,
        polling=PollingConfig(interval_seconds=0.01, default_page_size=10),
        live_updates=LiveUpdatesConfig(
            enabled=False,
            hub_path=HUB_PATH,
            coalesce_seconds=0.01,
            reconnect_delays=(0,),
            empresa_ids=[],
        ),
    )


@pytest.fixture
def repository(fake_server, api_config):
    return ImportacaoRepository(api_config, transport=fake_server.transport)


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def console(fake_server, app_config):
    return ImportacaoConsole(app_config, transport=fake_server.transport)
