from __future__ import annotations

from helpers import member, pdf, post_team


def test_no_participants_is_404(client, auth_headers):
    resp = client.get("/api/cic-participant", headers=auth_headers)

    assert resp.status_code == 404
    assert resp.json()["message"] == "No participants found"


def test_sbc_rows_split_data_and_download(client, store, auth_headers):
    payload = {
        "team": {"team_name": "Truss", "institution_name": "X University", "email": "truss@example.com"},
        "leader": member("Lead"),
        "members": [member("Ana")],
        "sbc": {"bridge_name": "Golden"},
        "dosbim": [{"full_name": "Dr. Sari"}, {"full_name": "Dr. Tono"}],
    }
    post_team(
        client,
        "sbc",
        payload,
        auth_headers,
        files={
            "payment_proof": pdf(),
            "leader_ktm": pdf("ktm.pdf"),
            "dosbim_photo": ("sari.png", b"png", "image/png"),
            "dosbim2_photo": ("tono.png", b"png", "image/png"),
        },
    )

    resp = client.get("/api/sbc-participant", headers=auth_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "success"
    leader, ana = body["participants"]

    assert leader["data"]["full_name"] == "Lead"
    assert leader["data"]["is_leader"] is True
    assert leader["data"]["team_email"] == "truss@example.com"
    assert leader["data"]["bridge_name"] == "Golden"
    assert leader["data"]["is_verified"] is False
    assert "ktm" not in leader["data"]
    assert "payment_proof" not in leader["data"]

    assert leader["download"]["ktm"].endswith(".pdf")
    assert leader["download"]["payment_proof"].endswith(".pdf")
    assert ana["download"]["ktm"] is None
    assert ana["download"]["payment_proof"] == leader["download"]["payment_proof"]

    assert [a["full_name"] for a in leader["data"]["dosbim"]] == ["Dr. Sari", "Dr. Tono"]
    assert "photo" not in leader["data"]["dosbim"][0]
    photos = leader["download"]["dosbim_photo"]
    assert len(photos) == 2
    assert photos[0].endswith(".png")


def test_fcec_abstract_files_go_to_download(client, auth_headers):
    payload = {
        "team": {"team_name": "Flow", "institution_name": "X University"},
        "leader": member("Lead"),
        "fcec": {"abstract_title": "Porous pavements"},
    }
    post_team(client, "fcec", payload, auth_headers, files={"payment_proof": pdf(), "abstract_file": pdf()})

    (row,) = client.get("/api/fcec-participant", headers=auth_headers).json()["participants"]

    assert row["data"]["abstract_title"] == "Porous pavements"
    assert "abstract_file" not in row["data"]
    assert row["download"]["abstract_file"].endswith(".pdf")
    assert row["download"]["originality_statement"] is None
    # FCEC takes no voucher upload.
    assert "voucher" not in row["download"]
    assert "voucher" not in row["data"]


def test_participants_are_per_track(client, auth_headers):
    payload = {
        "team": {"team_name": "Flow", "institution_name": "X University"},
        "leader": member("Lead"),
        "fcec": {"abstract_title": "Porous pavements"},
    }
    post_team(client, "fcec", payload, auth_headers)

    assert client.get("/api/cic-participant", headers=auth_headers).status_code == 404


def test_requires_token(client):
    assert client.get("/api/cic-participant").status_code == 401
