"""HTTP surface: routes, status codes and error messages."""
import pytest

from src.ragq.api.dependencies import Services
from src.ragq.api.routers.root import GREETING, NO_MODELS_MESSAGE


def test_root_greeting(client):
    response = client.get("/api/")

    assert response.status_code == 200
    assert response.text == GREETING


def test_models_lists_installed_models(client, llm):
    response = client.get("/api/models")

    assert response.status_code == 200
    assert response.json() == {"models": ["llama3:latest", "nomic-embed-text:latest"]}


def test_models_without_installed_models(client, llm):
    llm.models = []

    response = client.get("/api/models")

    assert response.status_code == 200
    assert response.json() == {"error": NO_MODELS_MESSAGE}


def test_models_when_ollama_is_down(client, llm):
    llm.fail = "Failed to connect to Ollama"

    response = client.get("/api/models")

    assert response.status_code == 200
    assert "Failed to connect to Ollama" in response.json()["error"]


def test_prompt_returns_answer(client, llm):
    response = client.post("/api/prompt", json={"prompt": "2+2?"})

    assert response.status_code == 200
    assert response.json() == {"answer": "4 😀"}
    assert llm.calls[0]["model"] is None


def test_prompt_with_model_override(client, llm):
    client.post("/api/prompt", json={"prompt": "2+2?", "model": "mistral"})

    assert llm.calls[0]["model"] == "mistral"


def test_prompt_against_unreachable_model(client, llm):
    llm.fail = "Failed to connect to Ollama"

    response = client.post("/api/prompt", json={"prompt": "2+2?"})

    assert response.status_code == 500
    assert "Failed to prompt LLM" in response.json()["detail"]
    assert "Failed to connect to Ollama" in response.json()["detail"]


def test_prompt_validation_errors(client):
    assert client.post("/api/prompt", json={}).status_code == 422
    assert client.post("/api/prompt", json={"prompt": 42}).status_code == 422


def test_prompt_accepts_empty_string(client, llm):
    response = client.post("/api/prompt", json={"prompt": ""})

    assert response.status_code == 200
    assert llm.calls[0]["messages"] == [{"role": "user", "content": ""}]


def test_insert_then_get_document(client):
    response = client.post("/api/documents", json={"content": "The sky is blue.", "metadata": {}})

    assert response.status_code == 201
    body = response.json()
    assert body["msg"] == "Successfully uploaded documents"
    assert len(body["ids"]) == 1

    response = client.get(f"/api/documents/{body['ids'][0]}")
    assert response.status_code == 200
    assert response.json() == {"answer": "The sky is blue."}


def test_insert_document_metadata_is_optional(client):
    response = client.post("/api/documents", json={"content": "No metadata here."})
    assert response.status_code == 201


def test_insert_document_requires_content(client):
    assert client.post("/api/documents", json={"metadata": {}}).status_code == 422
    assert client.post("/api/documents", json={"content": ""}).status_code == 422


def test_insert_document_failure(client, llm):
    llm.embed_fail = "embedding model missing"

    response = client.post("/api/documents", json={"content": "The sky is blue."})

    assert response.status_code == 500
    assert response.json()["detail"].startswith("Failed to insert document")


def test_bulk_insert(client):
    documents = [{"content": f"Fact number {i}", "metadata": {"i": i}} for i in range(3)]

    response = client.post("/api/documents/bulk", json={"documents": documents})

    assert response.status_code == 201
    ids = response.json()["ids"]
    assert len(ids) == 3
    for i, doc_id in enumerate(ids):
        assert client.get(f"/api/documents/{doc_id}").json() == {"answer": f"Fact number {i}"}

    info = client.get("/api/documents").json()
    assert info["points_count"] == 3


def test_bulk_insert_rejects_empty_list(client):
    assert client.post("/api/documents/bulk", json={"documents": []}).status_code == 422


def test_get_unknown_document(client):
    response = client.get("/api/documents/6f1c1b8e-3c1e-4a4e-9a51-1f0f6f7f2b11")

    assert response.status_code == 404
    assert response.json()["detail"] == "Document not found"
    assert client.get("/api/documents/not-a-point-id").status_code == 404
    assert client.get("/api/documents/%C2%B2").status_code == 404
    assert client.get("/api/documents/" + "9" * 30).status_code == 404


def test_collection_info(client):
    response = client.get("/api/documents")

    assert response.status_code == 200
    info = response.json()
    assert info["name"] == "test_documents"
    assert info["points_count"] == 0


def test_prompt_with_document(client, llm):
    doc_id = client.post("/api/documents", json={"content": "The sky is blue."}).json()["ids"][0]

    response = client.post(f"/api/documents/{doc_id}/prompt", json={"prompt": "What colour is the sky?"})

    assert response.status_code == 200
    assert response.json() == {"answer": "4 😀"}
    assert "The sky is blue." in llm.calls[0]["messages"][0]["content"]


def test_prompt_with_unknown_document(client, llm):
    response = client.post(
        "/api/documents/6f1c1b8e-3c1e-4a4e-9a51-1f0f6f7f2b11/prompt",
        json={"prompt": "What colour is the sky?"},
    )

    assert response.status_code == 404
    assert llm.calls == []


def test_prompt_with_knowledge(client, llm):
    client.post("/api/documents", json={"content": "The sky is blue."})

    response = client.post("/api/prompt-with-knowledge", json={"prompt": "Is the sky blue?"})

    assert response.status_code == 200
    assert response.json() == {"answer": "4 😀"}
    assert "The sky is blue." in llm.calls[0]["messages"][0]["content"]


def test_prompt_with_knowledge_on_empty_collection(client, llm):
    response = client.post("/api/prompt-with-knowledge", json={"prompt": "Is the sky blue?"})

    assert response.status_code == 200
    assert "Context:" not in llm.calls[0]["messages"][0]["content"]


def test_chat_streams_server_sent_events(client, llm):
    client.post("/api/documents", json={"content": "The sky is blue."})

    with client.stream("POST", "/api/chat", json={"prompt": "Is the sky blue?"}) as response:
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        body = "".join(response.iter_text())

    assert body == (
        "data: Hel\n\n"
        "data: lo\n\n"
        "data:  world\n\n"
        "event: end\ndata: [DONE]\n\n"
    )
    assert llm.stream_closed


def test_chat_against_unreachable_model(client, llm):
    llm.fail = "Failed to connect to Ollama"

    response = client.post("/api/chat", json={"prompt": "Is the sky blue?"})

    assert response.status_code == 500
    assert "Failed to prompt LLM" in response.json()["detail"]


def test_chat_reports_mid_stream_failure_as_error_event(client, llm):
    llm.fail_after = 1

    with client.stream("POST", "/api/chat", json={"prompt": "Is the sky blue?"}) as response:
        body = "".join(response.iter_text())

    assert body.startswith("data: Hel\n\n")
    assert "event: error\ndata: Failed to prompt LLM: stream dropped\n\n" in body
    assert "[DONE]" not in body


@pytest.mark.asyncio
async def test_services_close_releases_model_client(llm, vector_store, pipeline):
    services = Services(llm=llm, vector_store=vector_store, pipeline=pipeline)

    await services.aclose()

    assert llm.closed
