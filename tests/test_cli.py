import base64

import pytest
from PIL import Image

from conftest import TEST_API_KEY, FakeResponse, error_response, image_response, make_png_b64, make_png_bytes
from imagemage.cli import build_parser, main
from imagemage.logging_utils import get_log_file_path
from imagemage.processing.metadata import read_prompt_from_png


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


# =============================================================================
# generate
# =============================================================================

def test_generate_end_to_end(api_key, fake_post, workdir, png_b64):
    fake_post.queue(image_response(png_b64))

    assert main(["generate", "watercolor fox"]) == 0

    saved = workdir / "watercolor_fox.png"
    assert saved.read_bytes() == base64.b64decode(png_b64)
    image_config = fake_post.payloads[0]["generationConfig"]["imageConfig"]
    assert image_config == {"imageSize": "4K"}


def test_generate_does_not_clobber_existing_file(api_key, fake_post, workdir, png_b64):
    (workdir / "watercolor_fox.png").write_bytes(b"precious")
    fake_post.queue(image_response(png_b64))

    assert main(["generate", "watercolor fox"]) == 0

    assert (workdir / "watercolor_fox.png").read_bytes() == b"precious"
    assert (workdir / "watercolor_fox_1.png").exists()


def test_generate_batch_isolates_failures(api_key, fake_post, workdir, png_b64, capsys):
    fake_post.queue(
        image_response(png_b64),
        error_response(500, "Internal error"),
        image_response(png_b64),
    )

    assert main(["generate", "mountain", "--count", "3", "-o", "out"]) == 0

    out = capsys.readouterr().out
    assert "Error generating image 2: service error: Internal error" in out
    assert "Successfully generated 2/3 images" in out
    assert sorted(p.name for p in (workdir / "out").iterdir()) == ["mountain_1.png", "mountain_3.png"]


def test_generate_batch_survives_non_object_body(api_key, fake_post, workdir, png_b64, capsys):
    fake_post.queue(FakeResponse(200, text="null"), image_response(png_b64))

    assert main(["generate", "mountain", "-c", "2"]) == 0

    out = capsys.readouterr().out
    assert "Error generating image 1: unexpected response body" in out
    assert "Successfully generated 1/2 images" in out
    assert (workdir / "mountain_2.png").exists()


def test_generate_non_object_body_is_reported_not_raised(api_key, fake_post, workdir, capsys):
    fake_post.queue(FakeResponse(200, text="[]"))
    assert main(["generate", "fox"]) == 1
    assert "Error generating image 1: unexpected response body" in capsys.readouterr().out


def test_generate_all_failures_exit_nonzero(api_key, fake_post, workdir, capsys):
    fake_post.queue(error_response(403, "quota exceeded"), error_response(403, "quota exceeded"))
    assert main(["generate", "mountain", "-c", "2"]) == 1
    assert "Successfully generated 0/2 images" in capsys.readouterr().out


def test_generate_without_key_fails_before_request(clean_env, fake_post, workdir, capsys):
    assert main(["generate", "fox"]) == 1
    assert fake_post.calls == []
    assert "API key not found" in capsys.readouterr().err


def test_generate_frugal_with_4k_fails_before_request(api_key, fake_post, workdir, capsys):
    assert main(["generate", "fox", "--frugal", "-r", "4K"]) == 1
    assert fake_post.calls == []
    assert "1K" in capsys.readouterr().err


def test_generate_frugal_with_slide_is_incompatible(api_key, fake_post, workdir):
    assert main(["generate", "fox", "--frugal", "--slide"]) == 1
    assert fake_post.calls == []


def test_generate_bad_aspect_ratio(api_key, fake_post, workdir, capsys):
    assert main(["generate", "fox", "-a", "7:3"]) == 1
    assert fake_post.calls == []
    assert "unsupported aspect ratio: 7:3" in capsys.readouterr().err


def test_generate_frugal_payload(api_key, fake_post, workdir, png_b64):
    fake_post.queue(image_response(png_b64))
    assert main(["generate", "fox", "--frugal", "-a", "9:16"]) == 0

    assert "gemini-2.5-flash-image" in fake_post.calls[0]["url"]
    assert fake_post.payloads[0]["generationConfig"]["imageConfig"] == {"aspectRatio": "9:16"}


def test_generate_style_and_store_prompt(api_key, fake_post, workdir, png_b64):
    fake_post.queue(image_response(png_b64))
    assert main(["generate", "fox", "--style", "ukiyo-e", "--store-prompt"]) == 0

    sent = fake_post.payloads[0]["contents"][0]["parts"][0]["text"]
    assert sent == "fox, style: ukiyo-e"
    assert read_prompt_from_png(workdir / "fox.png") == "fox, style: ukiyo-e"


def test_generate_store_prompt_failure_is_only_a_warning(api_key, fake_post, workdir, capsys):
    # Valid base64 that is not a PNG: saving works, metadata can't
    fake_post.queue(image_response(base64.b64encode(b"raw bytes").decode()))
    assert main(["generate", "fox", "--store-prompt"]) == 0
    assert "failed to store prompt" in capsys.readouterr().out
    assert (workdir / "fox.png").read_bytes() == b"raw bytes"


def test_generate_slide_applies_config(api_key, fake_post, workdir, png_b64):
    config = workdir / "theme.json"
    config.write_text('{"style": "corporate", "resolution": "2K"}')
    fake_post.queue(image_response(png_b64))

    assert main(["generate", "roadmap", "--slide", "--config", str(config)]) == 0

    payload = fake_post.payloads[0]
    assert payload["generationConfig"]["imageConfig"] == {"aspectRatio": "16:9", "imageSize": "4K"}
    assert payload["contents"][0]["parts"][0]["text"] == "roadmap. Style: corporate"


def test_generate_config_fills_unset_values(api_key, fake_post, workdir, png_b64):
    config = workdir / "theme.yaml"
    config.write_text("aspectRatio: '4:3'\nresolution: 2K\n")
    fake_post.queue(image_response(png_b64))

    assert main(["generate", "roadmap", "--config", str(config), "-r", "1K"]) == 0
    image_config = fake_post.payloads[0]["generationConfig"]["imageConfig"]
    assert image_config == {"aspectRatio": "4:3", "imageSize": "1K"}


def test_count_must_be_positive(workdir):
    with pytest.raises(SystemExit) as excinfo:
        main(["generate", "fox", "--count", "0"])
    assert excinfo.value.code == 2


# =============================================================================
# edit
# =============================================================================

def _write_png(path):
    path.write_bytes(make_png_bytes())
    return path


def test_edit_default_output(api_key, fake_post, workdir, png_b64):
    _write_png(workdir / "photo.png")
    fake_post.queue(image_response(png_b64))

    assert main(["edit", "photo.png", "make it sunset"]) == 0

    assert (workdir / "photo-edited.png").read_bytes() == base64.b64decode(png_b64)
    parts = fake_post.payloads[0]["contents"][0]["parts"]
    assert parts[0] == {"text": "make it sunset"}
    assert len(parts) == 2


def test_edit_refuses_to_overwrite_without_force(api_key, fake_post, workdir, capsys):
    _write_png(workdir / "photo.png")
    (workdir / "photo-edited.png").write_bytes(b"keep me")

    assert main(["edit", "photo.png", "make it sunset"]) == 1
    assert fake_post.calls == []
    assert (workdir / "photo-edited.png").read_bytes() == b"keep me"
    assert "--force" in capsys.readouterr().err


def test_edit_force_overwrites(api_key, fake_post, workdir, png_b64):
    _write_png(workdir / "photo.png")
    (workdir / "photo-edited.png").write_bytes(b"old")
    fake_post.queue(image_response(png_b64))

    assert main(["edit", "photo.png", "make it sunset", "--force"]) == 0
    assert (workdir / "photo-edited.png").read_bytes() == base64.b64decode(png_b64)


def test_edit_composition_keeps_order(api_key, fake_post, workdir, png_b64):
    base = workdir / "base.png"
    base.write_bytes(make_png_bytes(color=(1, 1, 1, 255)))
    person = workdir / "person.png"
    person.write_bytes(make_png_bytes(color=(2, 2, 2, 255)))
    fake_post.queue(image_response(png_b64))

    assert main(["edit", "base.png", "add this person", "-i", "person.png", "-o", "out/result.png"]) == 0

    parts = fake_post.payloads[0]["contents"][0]["parts"]
    assert base64.b64decode(parts[1]["inlineData"]["data"]) == base.read_bytes()
    assert base64.b64decode(parts[2]["inlineData"]["data"]) == person.read_bytes()
    assert (workdir / "out" / "result.png").exists()


def test_edit_missing_input(api_key, fake_post, workdir, capsys):
    _write_png(workdir / "photo.png")
    assert main(["edit", "photo.png", "x", "-i", "ghost.png"]) == 1
    assert "input image not found: ghost.png" in capsys.readouterr().err
    assert fake_post.calls == []


def test_edit_fifteen_images_rejected(api_key, fake_post, workdir, capsys):
    _write_png(workdir / "base.png")
    extra = []
    for i in range(14):
        extra += ["-i", str(_write_png(workdir / f"in{i}.png"))]

    assert main(["edit", "base.png", "merge"] + extra) == 1
    assert "too many input images (15)" in capsys.readouterr().err
    assert fake_post.calls == []


def test_edit_remote_error_is_fatal(api_key, fake_post, workdir, capsys):
    _write_png(workdir / "photo.png")
    fake_post.queue(error_response(400, "image violates safety policy"))

    assert main(["edit", "photo.png", "x"]) == 1
    assert "safety" in capsys.readouterr().err
    assert not (workdir / "photo-edited.png").exists()


# =============================================================================
# icon
# =============================================================================

def test_icon_generates_each_size(api_key, fake_post, workdir):
    fake_post.queue(image_response(make_png_b64(size=(100, 100))))

    assert main(["icon", "coffee cup", "--sizes", "16, 32", "-o", "icons"]) == 0

    assert len(fake_post.calls) == 1
    assert "gemini-2.5-flash-image" in fake_post.calls[0]["url"]
    assert fake_post.payloads[0]["generationConfig"]["imageConfig"] == {"aspectRatio": "1:1"}
    for size in (16, 32):
        with Image.open(workdir / "icons" / f"icon_{size}x{size}_coffee_cup.png") as img:
            assert img.size == (size, size)


def test_icon_invalid_size(api_key, fake_post, workdir, capsys):
    assert main(["icon", "cup", "--sizes", "64,big"]) == 1
    assert "invalid size: big" in capsys.readouterr().err
    assert fake_post.calls == []


# =============================================================================
# restore / pattern / story / diagram
# =============================================================================

def test_restore_never_overwrites(api_key, fake_post, workdir, png_b64):
    _write_png(workdir / "old.png")
    (workdir / "old-restored.png").write_bytes(b"first pass")
    fake_post.queue(image_response(png_b64))

    assert main(["restore", "old.png", "--colorize"]) == 0

    assert (workdir / "old-restored.png").read_bytes() == b"first pass"
    assert (workdir / "old-restored_1.png").exists()
    prompt = fake_post.payloads[0]["contents"][0]["parts"][0]["text"]
    assert "Colorize" in prompt


def test_pattern_defaults_to_square(api_key, fake_post, workdir, png_b64):
    fake_post.queue(image_response(png_b64), image_response(png_b64))

    assert main(["pattern", "autumn leaves", "-c", "2"]) == 0

    assert fake_post.payloads[0]["generationConfig"]["imageConfig"]["aspectRatio"] == "1:1"
    assert (workdir / "seamless_autumn_leaves_1.png").exists()
    assert (workdir / "seamless_autumn_leaves_2.png").exists()


def test_story_chains_previous_frame(api_key, fake_post, workdir):
    frame1 = make_png_b64(color=(10, 10, 10, 255))
    frame3 = make_png_b64(color=(30, 30, 30, 255))
    fake_post.queue(
        image_response(frame1),
        error_response(500, "flaky"),
        image_response(frame3),
    )

    assert main(["story", "a seed grows into a tree", "--frames", "3"]) == 0

    first, second, third = fake_post.payloads
    assert len(first["contents"][0]["parts"]) == 1
    # Frame 2 failed, so frame 3 still continues from frame 1
    assert second["contents"][0]["parts"][1]["inlineData"]["data"] == frame1
    assert third["contents"][0]["parts"][1]["inlineData"]["data"] == frame1
    assert "frame 3 of 3" in third["contents"][0]["parts"][0]["text"]
    assert (workdir / "a_seed_grows_into_a_tree_1.png").exists()
    assert not (workdir / "a_seed_grows_into_a_tree_2.png").exists()
    assert (workdir / "a_seed_grows_into_a_tree_3.png").exists()


def test_diagram(api_key, fake_post, workdir, png_b64):
    fake_post.queue(image_response(png_b64))

    assert main(["diagram", "user login flow", "--type", "sequence"]) == 0

    assert fake_post.payloads[0]["generationConfig"]["imageConfig"] == {
        "aspectRatio": "16:9",
        "imageSize": "4K",
    }
    assert (workdir / "sequence_user_login_flow.png").exists()


def test_all_commands_registered():
    parser = build_parser()
    subparsers = next(a for a in parser._actions if a.dest == "command")
    assert set(subparsers.choices) == {
        "generate", "edit", "restore", "icon", "pattern", "story", "diagram",
    }


def test_run_is_logged_to_file(api_key, fake_post, workdir, png_b64, capsys):
    fake_post.queue(image_response(png_b64))
    assert main(["generate", "logged fox"]) == 0

    log_file = get_log_file_path()
    assert log_file is not None
    content = log_file.read_text(encoding="utf-8")
    assert "generateContent [ok] gemini-3-pro-image-preview" in content
    assert TEST_API_KEY not in content
    # Without --debug nothing is logged to the console
    assert "generateContent" not in capsys.readouterr().err


def test_fatal_error_points_to_log(clean_env, fake_post, workdir, capsys):
    assert main(["generate", "fox"]) == 1
    assert f"See {get_log_file_path()}" in capsys.readouterr().err
