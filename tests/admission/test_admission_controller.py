from __future__ import annotations

import io

from tests.fakes import OFFICE, north_of, pair_at

_, PROBE = pair_at(0.15, 0.95)


def payload(**overrides):
    body = {
        "user_id": "u-1",
        "type": "check_in",
        "face_embedding": PROBE,
        "location": north_of(OFFICE, 20),
        "wifi_info": {"ssid": "Office_Wifi_5G", "bssid": "aa:bb"},
    }
    body.update(overrides)
    return body


def test_health_needs_no_token(client):
    assert client.get("/health").status_code == 200


def test_ping_requires_bearer_token(client, auth_headers):
    assert client.get("/ping").status_code == 401
    assert client.get("/ping", headers={"Authorization": "Bearer nope"}).status_code == 401
    assert client.get("/ping", headers=auth_headers()).get_json() == {"ok": True}


def test_verify_checkin_then_checkout(client, auth_headers, harness):
    r1 = client.post("/verify", json=payload(), headers=auth_headers())
    r2 = client.post("/verify", json=payload(type="check_out"), headers=auth_headers())

    assert r1.status_code == 200
    assert r1.get_json()["success"] is True
    assert r2.status_code == 200
    assert r2.get_json()["flags"] == {"location": "valid", "wifi": "valid"}
    (record,) = harness.attendance.records.values()
    assert record.wifi_ssid == "Office_Wifi_5G"


def test_verify_rejection_is_tagged_400(client, auth_headers):
    r = client.post("/verify", json=payload(location=north_of(OFFICE, 150)), headers=auth_headers())

    assert r.status_code == 400
    assert r.get_json()["error"] == "LOCATION_INVALID"


def test_verify_malformed_body_is_invalid_request(client, auth_headers):
    r1 = client.post("/verify", data="not json", headers=auth_headers())
    r2 = client.post("/verify", json=payload(type="lunch"), headers=auth_headers())

    assert r1.status_code == 400 and r1.get_json()["error"] == "INVALID_REQUEST"
    assert r2.status_code == 400 and r2.get_json()["error"] == "INVALID_REQUEST"


def test_verify_for_another_user_is_403(client, auth_headers):
    r = client.post("/verify", json=payload(), headers=auth_headers("u-2"))

    assert r.status_code == 403


def test_enroll_requires_own_identity(client, auth_headers):
    r = client.post("/enroll", json={"user_id": "u-1", "face_embedding": [0.1, 0.2]}, headers=auth_headers("u-2"))

    assert r.status_code == 403


def test_enroll_stores_poses(client, auth_headers, harness):
    r = client.post(
        "/enroll",
        json={"user_id": "u-9", "face_embeddings": [[0.1, 0.2], [0.2, 0.1], [0.3, 0.3]]},
        headers=auth_headers("u-9"),
    )

    assert r.status_code == 200
    assert r.get_json()["poses_stored"] == 3
    assert harness.profiles.get_for_user("u-9").pose_count == 3


def test_enroll_mixed_dimensions_is_embedding_mismatch(client, auth_headers):
    r = client.post(
        "/enroll",
        json={"user_id": "u-1", "face_embeddings": [[0.1, 0.2], [0.1]]},
        headers=auth_headers(),
    )

    assert r.status_code == 400
    assert r.get_json()["error"] == "EMBEDDING_MISMATCH"


def test_code_qr_renders_png(client, auth_headers):
    r = client.get("/code/qr", headers=auth_headers())

    assert r.status_code == 200
    assert r.mimetype == "image/png"
    assert r.data.startswith(b"\x89PNG")


def test_code_image_requires_upload(client, auth_headers):
    r = client.post(
        "/verify/code-image",
        data={"type": "check_in", "not_image": (io.BytesIO(b"x"), "x.txt")},
        headers=auth_headers(),
        content_type="multipart/form-data",
    )

    assert r.status_code == 400
    assert r.get_json()["error"] == "INVALID_REQUEST"


def test_history_lists_own_records(client, auth_headers):
    client.post("/verify", json=payload(), headers=auth_headers())

    r = client.get("/attendance/history", headers=auth_headers())

    data = r.get_json()["data"]
    assert r.status_code == 200
    assert len(data) == 1
    assert data[0]["duration"] is None
    assert data[0]["verification_method"] == "embedding"


def test_verify_with_non_string_ssid_is_invalid_request(client, auth_headers, harness):
    r = client.post("/verify", json=payload(wifi_info={"ssid": 12345, "bssid": None}), headers=auth_headers())

    assert r.status_code == 400
    assert r.get_json()["error"] == "INVALID_REQUEST"
    assert harness.attendance.records == {}
