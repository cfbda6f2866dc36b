"""Tests for the siteimage-build command."""

import json
import logging

from siteimage.cli import OUTPUT_MANIFEST, main


def _write_manifest(site_dir, pages) -> str:
    path = site_dir / "manifest.json"
    path.write_text(json.dumps({"pages": pages}), encoding="utf-8")
    return str(path)


def test_build_from_manifest(site_dir, tmp_path):
    manifest = _write_manifest(
        site_dir,
        [
            {"path": "index.html", "images": [{"src": "/cat.jpg", "width": 200, "format": "webp", "alt": "cat"}]},
            {"path": "about.html", "images": [{"src": "/cat.jpg", "width": 200, "format": "webp", "alt": "cat"}]},
        ],
    )
    out = tmp_path / "dist"

    code = main([manifest, "--out", str(out), "--src-dir", str(site_dir), "--workers", "2"])

    assert code == 0
    rendered = json.loads((out / OUTPUT_MANIFEST).read_text(encoding="utf-8"))
    index, about = rendered["index.html"][0], rendered["about.html"][0]
    assert index == about
    # Height comes from the 800x600 source
    assert (index["width"], index["height"], index["alt"]) == (200, 150, "cat")
    assert (out / index["src"].lstrip("/")).is_file()
    assert len(list(out.rglob("*.webp"))) == 1


def _failing_manifest(site_dir) -> str:
    images = [
        {"src": "/cat.jpg", "width": 10, "height": 10, "format": "png"},
        {"src": "/nope.jpg", "width": 10, "height": 10, "format": "png"},
        {"src": "/gone.jpg", "width": 10, "height": 10, "format": "png"},
        # Needs its natural height, so the missing source shows up before the build
        {"src": "/absent.jpg", "width": 10, "format": "png"},
    ]
    return _write_manifest(site_dir, [{"path": "index.html", "images": images}])


def test_missing_images_continue_policy(site_dir, tmp_path):
    manifest = _failing_manifest(site_dir)
    out = tmp_path / "dist"

    code = main([manifest, "--out", str(out), "--src-dir", str(site_dir), "--on-error", "continue"])

    assert code == 2
    rendered = json.loads((out / OUTPUT_MANIFEST).read_text(encoding="utf-8"))
    # /absent.jpg never resolved, so the page lists the three registered images only
    srcs = [attrs["src"] for attrs in rendered["index.html"]]
    assert len(srcs) == 3
    built = [p for p in out.rglob("*.png")]
    assert ["/" + p.relative_to(out).as_posix() for p in built] == [srcs[0]]
    assert "cat_" in built[0].name


def test_missing_images_abort_policy_reports_all(site_dir, tmp_path, caplog):
    manifest = _failing_manifest(site_dir)
    out = tmp_path / "dist"

    with caplog.at_level(logging.ERROR, logger="siteimage.cli"):
        code = main([manifest, "--out", str(out), "--src-dir", str(site_dir)])

    assert code == 1
    errors = "\n".join(r.getMessage() for r in caplog.records if r.levelno >= logging.ERROR)
    assert "3 image(s) failed to build" in errors
    for src in ("/nope.jpg", "/gone.jpg", "/absent.jpg"):
        assert src in errors
    assert not (out / OUTPUT_MANIFEST).exists()
    # Every entry is attempted before the policy applies
    assert len(list(out.rglob("*.png"))) == 1
