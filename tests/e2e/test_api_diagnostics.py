"""
API tests for the diagnostics endpoints
"""
import pytest


@pytest.mark.e2e
class TestDiagnosticsApi:

    def test_ocr_available(self, client):
        response = client.get("/api/test/ocr")

        assert response.status_code == 200
        assert response.json() == {
            "available": True,
            "status": "OK",
            "testResult": "OCR initialized successfully",
        }

    def test_ocr_unavailable_still_ok(self, client, fake_ocr):
        fake_ocr.available = False

        response = client.get("/api/test/ocr")

        assert response.status_code == 200
        assert response.json()["status"] == "NOT_AVAILABLE"
        assert response.json()["error"] == "Tesseract is not available"

    def test_system_info(self, client):
        info = client.get("/api/test/system").json()

        assert set(info) == {
            "pythonVersion", "osName", "osVersion", "workingDir", "tesseractCmd", "ocrLanguages",
        }
        assert info["ocrLanguages"] == "rus+eng"
