"""
API Integration Tests for Image Endpoints
"""

import base64
import io
import json
import zipfile

from PIL import Image

from tests.conftest import to_b64


def decode_b64_image(payload):
    return Image.open(io.BytesIO(base64.b64decode(payload)))


def parse_ndjson(response):
    return [json.loads(line) for line in response.text.splitlines() if line.strip()]


class TestProcessAPI:
    """Integration tests for single image rendering"""

    def test_process_basic(self, client, png_b64):
        """Render with default options returns a PNG of the same size"""
        response = client.post("/api/image/process", json={"sourceBytes": png_b64})

        assert response.status_code == 200
        data = response.json()

        assert data["outputMime"] == "image/png"
        assert (data["width"], data["height"]) == (80, 60)
        assert data["processing_time_ms"] > 0
        assert decode_b64_image(data["encodedBytes"]).size == (80, 60)

    def test_process_with_options(self, client, png_b64):
        request_data = {
            "sourceBytes": png_b64,
            "name": "photo.png",
            "options": {
                "resize": {"enabled": True, "mode": "cover", "width": 40, "height": 40},
                "rotate": {"degrees": 90},
                "filters": {"brightness": 120, "saturation": 80},
                "sharpen": {"strength": 1},
                "watermarkText": {"text": "Sample", "opacity": 0.5},
                "output": {"type": "image/jpg", "quality": 0.7, "jpegBackground": "#000"},
            },
        }
        response = client.post("/api/image/process", json=request_data)

        assert response.status_code == 200
        data = response.json()
        assert data["outputMime"] == "image/jpeg"
        assert (data["width"], data["height"]) == (40, 40)
        assert decode_b64_image(data["encodedBytes"]).format == "JPEG"

    def test_malformed_options_fall_back(self, client, png_b64):
        """Bad option values never cause validation errors"""
        request_data = {
            "sourceBytes": png_b64,
            "options": {
                "resize": {"enabled": "yes", "mode": "sideways", "width": "abc", "height": None},
                "filters": {"blur": "lots", "contrast": 9000},
                "flip": "both",
                "watermarkText": {"position": "middle", "size": -4, "text": "x"},
                "output": {"type": "image/tiff", "quality": "high"},
            },
        }
        response = client.post("/api/image/process", json=request_data)

        assert response.status_code == 200
        assert response.json()["outputMime"] == "image/png"

    def test_decode_failure_is_422(self, client):
        response = client.post("/api/image/process", json={"sourceBytes": to_b64(b"nope")})

        assert response.status_code == 422
        data = response.json()
        assert data["kind"] == "decode"
        assert data["error"]

    def test_null_options_use_defaults(self, client, png_b64):
        response = client.post("/api/image/process", json={"sourceBytes": png_b64, "options": None})

        assert response.status_code == 200
        assert (response.json()["width"], response.json()["height"]) == (80, 60)

    def test_missing_source_is_rejected(self, client):
        response = client.post("/api/image/process", json={"options": {}})
        assert response.status_code == 422

    def test_process_file_upload(self, client, png_bytes):
        options = {"resize": {"enabled": True, "mode": "exact", "width": 20, "height": 10}}
        response = client.post(
            "/api/image/process-file",
            files={"file": ("photo.png", png_bytes, "image/png")},
            data={"options": json.dumps(options)},
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert Image.open(io.BytesIO(response.content)).size == (20, 10)

    def test_process_file_invalid_options_json(self, client, png_bytes):
        response = client.post(
            "/api/image/process-file",
            files={"file": ("photo.png", png_bytes, "image/png")},
            data={"options": "{not json"},
        )
        assert response.status_code == 400

    def test_process_file_too_large(self, client, png_bytes):
        limit_mb = 100 / (1024 * 1024)
        client.app.state.config["render"]["max_upload_mb"] = limit_mb
        assert len(png_bytes) > 100

        response = client.post(
            "/api/image/process-file",
            files={"file": ("photo.png", png_bytes, "image/png")},
        )
        assert response.status_code == 413


class TestBatchAPI:
    """Integration tests for the batch endpoints"""

    def test_batch_stream(self, client, png_b64):
        items = [{"sourceBytes": png_b64, "name": f"img{i}.png"} for i in range(2)]
        response = client.post("/api/image/batch", json={"items": items})

        assert response.status_code == 200
        assert response.headers["x-batch-id"]
        events = parse_ndjson(response)

        assert [e["type"] for e in events] == ["item", "progress", "item", "progress", "done"]
        assert events[0]["index"] == 0
        assert events[0]["name"] == "img0.png"
        assert events[0]["outputMime"] == "image/png"
        assert events[1]["value"] == 0.5
        assert events[3]["value"] == 1.0

    def test_batch_aborts_on_failure(self, client, png_b64):
        items = [
            {"sourceBytes": png_b64},
            {"sourceBytes": to_b64(b"broken")},
            {"sourceBytes": png_b64},
        ]
        events = parse_ndjson(client.post("/api/image/batch", json={"items": items}))

        assert [e["type"] for e in events] == ["item", "progress", "error"]
        assert events[-1]["index"] == 1
        assert events[-1]["message"]

    def test_empty_batch_rejected(self, client):
        response = client.post("/api/image/batch", json={"items": []})
        assert response.status_code == 422

    def test_cancel_running_batch(self, client):
        client.app.state.render_service.start_batch("running")

        response = client.delete("/api/image/batch/running")
        assert response.status_code == 200
        assert response.json() == {"batch_id": "running", "cancelled": True}
        assert client.app.state.render_service.is_cancelled("running")

    def test_cancel_unknown_batch(self, client):
        response = client.delete("/api/image/batch/does-not-exist")
        assert response.status_code == 404

    def test_batch_zip(self, client, png_b64):
        items = [
            {"sourceBytes": png_b64, "name": "a.png", "options": {"output": {"type": "image/jpeg"}}},
            {"sourceBytes": png_b64, "name": "b.png"},
        ]
        response = client.post("/api/image/batch/zip", json={"items": items})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/zip"
        archive = zipfile.ZipFile(io.BytesIO(response.content))
        assert archive.namelist() == ["a.jpg", "b.png"]

    def test_batch_zip_uses_client_batch_id(self, client, png_b64):
        response = client.post(
            "/api/image/batch/zip?batch_id=holiday-export", json={"items": [{"sourceBytes": png_b64}]}
        )

        assert response.status_code == 200
        assert response.headers["x-batch-id"] == "holiday-export"
        assert client.app.state.render_service.active_batches == 0

    def test_batch_zip_cancelled_is_409(self, client, png_b64, monkeypatch):
        """Cancelling the client chosen id stops the bundle at the next item"""
        render_service = client.app.state.render_service
        render_item = render_service._render_item

        def render_then_cancel(item):
            encoded = render_item(item)
            assert render_service.cancel_batch("zip-job")
            return encoded

        monkeypatch.setattr(render_service, "_render_item", render_then_cancel)
        items = [{"sourceBytes": png_b64} for _ in range(3)]
        response = client.post("/api/image/batch/zip?batch_id=zip-job", json={"items": items})

        assert response.status_code == 409
        assert response.json()["kind"] == "cancelled"
        assert render_service.active_batches == 0
        assert client.delete("/api/image/batch/zip-job").status_code == 404

    def test_batch_id_already_running(self, client, png_b64):
        client.app.state.render_service.start_batch("busy")

        response = client.post("/api/image/batch/zip?batch_id=busy", json={"items": [{"sourceBytes": png_b64}]})
        assert response.status_code == 409

    def test_batch_zip_decode_failure(self, client, png_b64):
        items = [{"sourceBytes": png_b64}, {"sourceBytes": to_b64(b"broken")}]
        response = client.post("/api/image/batch/zip", json={"items": items})

        assert response.status_code == 422
        assert response.json()["index"] == 1


class TestPresetsAPI:
    """Integration tests for the preset catalogue"""

    def test_list_presets(self, client):
        response = client.get("/api/image/presets")

        assert response.status_code == 200
        presets = {p["id"]: p for p in response.json()}
        assert set(presets) == {"clarendon", "gingham", "moon", "lofi", "earlybird", "inkwell"}
        assert presets["inkwell"]["filters"]["grayscale"] == 1.0
        assert presets["clarendon"]["sharpen"] == 0.4

    def test_preset_in_request(self, client, png_b64):
        response = client.post("/api/image/process", json={"sourceBytes": png_b64, "preset": "moon"})

        assert response.status_code == 200
        image = decode_b64_image(response.json()["encodedBytes"]).convert("RGB")
        r, g, b = image.getpixel((40, 30))
        assert r == g == b
