"""
Batch endpoint tests: POST /api/lotes/processar and the health checks.

The processor is wired to an in-memory storage through FastAPI dependency
overrides; Supabase is never contacted.
"""

import io
import os
from unittest.mock import patch

import pytest

# Ensure env vars are set before importing anything that triggers app imports
os.environ.setdefault("ORCHESTRATOR_SECRET", "test-orchestrator-secret")

from fastapi.testclient import TestClient

from maladireta.config import Settings
from maladireta.main import app
from maladireta.routers.batches import get_batch_processor
from maladireta.services.batch_processor import BatchProcessor

BUCKET = "test-bucket"
GUID = "3c72ef90-5fea-496c-9fe6-939b106970ec"
SOURCE_KEY = f"lotes/{GUID}/impressao.csv"
AUTH_HEADERS = {"X-Orchestrator-Secret": "test-orchestrator-secret"}


class InMemoryStorage:
    def __init__(self, objects):
        self.objects = dict(objects)
        self.stored = {}

    def fetch(self, bucket, key):
        return io.BytesIO(self.objects[(bucket, key)])

    def store(self, bucket, key, content, content_type):
        self.stored[(bucket, key)] = content
        return f"{bucket}/{key}"

    def exists(self, bucket, key):
        return (bucket, key) in self.objects


def _make_payload(**overrides) -> dict:
    """Build a minimal valid orchestrator payload (camelCase)."""
    payload = {
        "loteId": 42,
        "cliente": {"id": 1, "nome": "Gráfica Exemplo", "email": "contato@example.com"},
        "perfilProcessamento": {"id": 7, "nome": "Mala Direta", "logotipoPath": None},
        "arquivosPcl": [
            {
                "id": 100,
                "loteId": 42,
                "nomeArquivo": "impressao.csv",
                "caminhoArquivo": SOURCE_KEY,
                "tamanhoBytes": 120,
                "numeroPaginas": 3,
            }
        ],
        "tipoProcessamento": "ClienteMalaDireta",
        "processamentoConfig": {},
    }
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# App fixture
# ---------------------------------------------------------------------------

@pytest.fixture()
def storage():
    return InMemoryStorage({
        (BUCKET, SOURCE_KEY): "Nome,Endereco,Cidade,UF,CEP\nAna,Rua A 100,Santos,SP,11000-000\n".encode("utf-8"),
    })


@pytest.fixture()
def client(storage):
    """TestClient with the batch processor bound to in-memory storage."""
    app.dependency_overrides[get_batch_processor] = lambda: BatchProcessor(
        storage, Settings(storage_bucket=BUCKET)
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


# ===========================================================================
# Authentication
# ===========================================================================

class TestOrchestratorAuth:
    """The endpoint requires the shared orchestrator secret."""

    def test_rejects_request_without_secret(self, client):
        response = client.post("/api/lotes/processar", json=_make_payload())

        assert response.status_code == 401

    def test_rejects_wrong_secret(self, client):
        response = client.post(
            "/api/lotes/processar",
            json=_make_payload(),
            headers={"X-Orchestrator-Secret": "wrong"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid orchestrator secret"

    def test_rejects_everything_when_secret_unconfigured(self, client):
        with patch.dict(os.environ, {"ORCHESTRATOR_SECRET": ""}):
            response = client.post("/api/lotes/processar", json=_make_payload(), headers=AUTH_HEADERS)

        assert response.status_code == 401


# ===========================================================================
# Success
# ===========================================================================

class TestProcessBatchSuccess:
    """A valid batch is converted and reported as Sucesso."""

    def test_success_response_shape(self, client):
        response = client.post("/api/lotes/processar", json=_make_payload(), headers=AUTH_HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["loteId"] == 42
        assert data["status"] == "Sucesso"
        assert data["sucesso"] is True
        assert data["tipoProcessamento"] == "ClienteMalaDireta"
        assert data["arquivosProcessados"] == ["impressao.csv"]
        assert data["totalPaginas"] == 3
        assert data["tempoProcessamento"] >= 0
        assert "dataProcessamento" in data

        details = data["detalhesProcessamento"]
        assert details["arquivosProcessadosS3"] == [f"{BUCKET}/processados/{GUID}/impressao.pcl"]
        assert details["configuracaoUtilizada"]["tipoEnvelope"] == "Janela"

    def test_generated_job_is_uploaded(self, client, storage):
        client.post("/api/lotes/processar", json=_make_payload(), headers=AUTH_HEADERS)

        content = storage.stored[(BUCKET, f"processados/{GUID}/impressao.pcl")]
        assert content.startswith(b"\x1bE")
        assert b"\x1b&a25V\x1b&a20HAna\n" in content
        assert b"CEP: 11000-000\n" in content

    def test_unexpected_processing_type_is_only_a_warning(self, client):
        response = client.post(
            "/api/lotes/processar",
            json=_make_payload(tipoProcessamento="OutroTipo"),
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "Sucesso"


# ===========================================================================
# Validation errors
# ===========================================================================

class TestProcessBatchValidation:
    """Missing required data returns 400 Erro de Validação."""

    @pytest.mark.parametrize("overrides, message", [
        ({"loteId": 0}, "loteId"),
        ({"loteId": -3}, "loteId"),
        ({"cliente": None}, "cliente"),
        ({"perfilProcessamento": None}, "perfilProcessamento"),
        ({"arquivosPcl": []}, "arquivosPcl"),
        ({"arquivosPcl": None}, "arquivosPcl"),
        ({"tipoProcessamento": ""}, "tipoProcessamento"),
        ({"tipoProcessamento": None}, "tipoProcessamento"),
    ])
    def test_validation_failures(self, client, storage, overrides, message):
        response = client.post("/api/lotes/processar", json=_make_payload(**overrides), headers=AUTH_HEADERS)

        assert response.status_code == 400
        data = response.json()
        assert data["status"] == "Erro de Validação"
        assert data["sucesso"] is False
        assert message in data["mensagemRetorno"]
        assert data["arquivosProcessados"] == []
        assert data["totalPaginas"] == 0
        assert data["detalhesProcessamento"] is None
        assert storage.stored == {}


# ===========================================================================
# Internal errors
# ===========================================================================

class TestProcessBatchInternalErrors:
    """Processing failures return 500 Erro Interno."""

    def test_invalid_boolean_override(self, client, storage):
        response = client.post(
            "/api/lotes/processar",
            json=_make_payload(processamentoConfig={"EnderecoCompleto": "sim"}),
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 500
        data = response.json()
        assert data["status"] == "Erro Interno"
        assert data["sucesso"] is False
        assert "EnderecoCompleto" in data["mensagemRetorno"]
        assert storage.stored == {}

    def test_missing_source_file_names_the_file(self, client):
        payload = _make_payload(arquivosPcl=[
            {"nomeArquivo": "sumiu.csv", "caminhoArquivo": f"lotes/{GUID}/sumiu.csv", "numeroPaginas": 1},
        ])

        response = client.post("/api/lotes/processar", json=payload, headers=AUTH_HEADERS)

        assert response.status_code == 500
        assert response.json()["status"] == "Erro Interno"
        assert "sumiu.csv" in response.json()["mensagemRetorno"]


# ===========================================================================
# Health
# ===========================================================================

class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_storage_health_ok(self, client):
        with patch("maladireta.main.SupabaseObjectStorage") as mock_storage_cls:
            mock_storage_cls.return_value.bucket_exists.return_value = True

            response = client.get("/health/storage")

        assert response.status_code == 200
        assert response.json()["storage"] == "reachable"

    def test_storage_health_missing_bucket(self, client):
        with patch("maladireta.main.SupabaseObjectStorage") as mock_storage_cls:
            mock_storage_cls.return_value.bucket_exists.return_value = False

            response = client.get("/health/storage")

        assert response.status_code == 503

    def test_storage_health_unreachable(self, client):
        with patch("maladireta.main.SupabaseObjectStorage") as mock_storage_cls:
            mock_storage_cls.return_value.bucket_exists.side_effect = Exception("connection refused")

            response = client.get("/health/storage")

        assert response.status_code == 503
        assert "connection refused" in response.json()["detail"]
