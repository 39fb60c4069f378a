"""
API tests for receipt upload and retrieval
"""
from datetime import datetime, timedelta

import pytest

from pricebot.exceptions import ProcessingError
from pricebot.models import Receipt


def upload(client, content, name="receipt.png", content_type="image/png"):
    return client.post("/api/receipts/upload", files={"file": (name, content, content_type)})


@pytest.mark.e2e
class TestUpload:

    def test_upload_receipt(self, client, test_db, upload_dir, png_bytes):
        response = upload(client, png_bytes)

        assert response.status_code == 201
        data = response.json()
        assert data["processed_text"] == "MILK 1.99 BREAD 0.89"
        assert data["original_text"] == "MILK   1.99\n\nBREAD  0.89"
        assert data["file_name"] == "receipt.png"

        assert test_db.query(Receipt).filter(Receipt.id == data["id"]).first() is not None
        assert len(list(upload_dir.iterdir())) == 1

    def test_non_image(self, client, test_db):
        response = upload(client, b"hello", "notes.txt", "text/plain")

        assert response.status_code == 400
        assert test_db.query(Receipt).count() == 0

    def test_empty_file(self, client):
        response = upload(client, b"", "empty.jpg", "image/jpeg")
        assert response.status_code == 400
        assert response.json()["detail"] == "File is empty"

    def test_undecodable_image(self, client, upload_dir):
        response = upload(client, b"not really a jpeg", "r.jpg", "image/jpeg")

        assert response.status_code == 400
        assert list(upload_dir.iterdir()) == []

    def test_ocr_unavailable(self, client, test_db, fake_ocr, png_bytes):
        fake_ocr.available = False

        response = upload(client, png_bytes)

        assert response.status_code == 503
        assert test_db.query(Receipt).count() == 0

    def test_recognition_failure(self, client, test_db, fake_ocr, png_bytes):
        fake_ocr.error = ProcessingError("Tesseract error: crashed")

        response = upload(client, png_bytes)

        assert response.status_code == 500
        assert response.json()["detail"] == "Tesseract error: crashed"
        assert test_db.query(Receipt).count() == 0


@pytest.mark.e2e
class TestOcrStatus:

    def test_available(self, client):
        response = client.get("/api/receipts/status")
        assert response.status_code == 200
        assert response.json()["available"] is True

    def test_unavailable(self, client, fake_ocr):
        fake_ocr.available = False
        response = client.get("/api/receipts/status")
        assert response.status_code == 503
        assert response.json()["available"] is False


@pytest.mark.e2e
class TestReceiptQueries:

    @pytest.fixture
    def stored(self, test_db):
        base = datetime(2024, 3, 1, 12, 0)
        rows = [
            Receipt(original_text="MILK 1.99", processed_text="MILK 1.99",
                    file_name="monday.jpg", created_at=base),
            Receipt(original_text="BREAD 0.89", processed_text="BREAD 0.89",
                    file_name="tuesday.jpg", created_at=base + timedelta(days=1)),
        ]
        test_db.add_all(rows)
        test_db.commit()
        return rows

    def test_list_newest_first(self, client, stored):
        names = [r["file_name"] for r in client.get("/api/receipts").json()]
        assert names == ["tuesday.jpg", "monday.jpg"]

    def test_search_text(self, client, stored):
        found = client.get("/api/receipts/search", params={"text": "milk"}).json()
        assert [r["file_name"] for r in found] == ["monday.jpg"]

    def test_search_file_name(self, client, stored):
        found = client.get("/api/receipts/search/filename", params={"fileName": "TUES"}).json()
        assert [r["file_name"] for r in found] == ["tuesday.jpg"]

    def test_after(self, client, stored):
        found = client.get("/api/receipts/after", params={"date": "2024-03-01T12:00:00"}).json()
        assert [r["file_name"] for r in found] == ["tuesday.jpg"]

    def test_between(self, client, stored):
        params = {"startDate": "2024-03-01T00:00:00", "endDate": "2024-03-02T12:00:00"}
        found = client.get("/api/receipts/between", params=params).json()
        assert len(found) == 2

    def test_bad_dates(self, client, stored):
        assert client.get("/api/receipts/after", params={"date": "yesterday"}).status_code == 400
        params = {"startDate": "2024-03-02T00:00:00", "endDate": "2024-03-01T00:00:00"}
        assert client.get("/api/receipts/between", params=params).status_code == 400

    def test_get_update_delete(self, client, stored):
        receipt_id = stored[0].id

        assert client.get(f"/api/receipts/{receipt_id}").json()["file_name"] == "monday.jpg"

        updated = client.put(f"/api/receipts/{receipt_id}", json={"processedText": "MILK 2.09"})
        assert updated.status_code == 200
        assert updated.json()["processed_text"] == "MILK 2.09"

        assert client.delete(f"/api/receipts/{receipt_id}").status_code == 204
        assert client.get(f"/api/receipts/{receipt_id}").status_code == 404

    def test_missing_receipt(self, client):
        assert client.get("/api/receipts/missing").status_code == 404
        assert client.put("/api/receipts/missing", json={"processedText": "x"}).status_code == 404
        assert client.delete("/api/receipts/missing").status_code == 404
