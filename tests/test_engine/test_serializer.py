"""Tests for the transform serializer."""

import itertools
import random

import pytest

from siteimage.engine.resolver import resolve_transform
from siteimage.engine.serializer import (
    filename_format,
    parse_transform,
    props_to_filename,
    serialize_transform,
    to_query_string,
)
from siteimage.errors import InvalidTransform
from siteimage.models.transform import OutputFormat, ResolvedTransform, TransformRequest


def _t(**overrides) -> ResolvedTransform:
    fields = dict(src="/cat.jpg", width=400, height=300, format=OutputFormat.WEBP)
    fields.update(overrides)
    return ResolvedTransform(**fields)


def test_query_string_field_order():
    t = _t(quality=75, options=(("fit", "cover"), ("bg", "#fff")))
    names = [name for name, _ in serialize_transform(t)]
    assert names == ["src", "w", "h", "f", "q", "bg", "fit"]


def test_query_string_is_stable():
    assert to_query_string(_t()) == "src=%2Fcat.jpg&w=400&h=300&f=webp"


def test_option_order_does_not_change_key():
    a = resolve_transform(
        TransformRequest(src="/a.jpg", width=1, height=1, format="png", options={"fit": "cover", "bg": "red"})
    )
    b = resolve_transform(
        TransformRequest(src="/a.jpg", width=1, height=1, format="png", options={"bg": "red", "fit": "cover"})
    )
    assert to_query_string(a) == to_query_string(b)


def test_parse_spec_example_query():
    t = parse_transform("src=/cat.jpg&w=400&h=300&f=webp")
    assert t == _t()


def test_parse_accepts_mapping_and_leading_question_mark():
    assert parse_transform({"src": "/cat.jpg", "w": "400", "h": "300", "f": "webp"}) == _t()
    assert parse_transform("?src=/cat.jpg&w=400&h=300&f=webp") == _t()


def test_unknown_params_become_options():
    t = parse_transform("src=/cat.jpg&w=400&h=300&f=webp&fit=cover")
    assert t.options == (("fit", "cover"),)


@pytest.mark.parametrize(
    "query",
    [
        "",
        "w=400&h=300&f=webp",
        "src=/cat.jpg&h=300&f=webp",
        "src=/cat.jpg&w=400&f=webp",
        "src=/cat.jpg&w=400&h=300",
        "src=/cat.jpg&w=400&h=300&f=gif",
        "src=/cat.jpg&w=0400&h=300&f=webp",
        "src=/cat.jpg&w=-4&h=300&f=webp",
        "src=/cat.jpg&w=4.5&h=300&f=webp",
        "src=/cat.jpg&w=400&h=300&f=webp&q=101",
        "src=/cat.jpg&src=/dog.jpg&w=400&h=300&f=webp",
    ],
)
def test_parse_rejects(query):
    with pytest.raises(InvalidTransform):
        parse_transform(query)


def _sample_transforms(seed: int = 7, count: int = 400) -> list[ResolvedTransform]:
    rng = random.Random(seed)
    srcs = ["/cat.jpg", "/a b&c=d.png", "https://example.com/x.jpg?v=2", "/dir/ünïcode.webp", "cat.jpg"]
    option_sets = [(), (("fit", "cover"),), (("bg", "#000"), ("fit", "contain")), (("x", ""),)]
    samples = []
    for _ in range(count):
        samples.append(
            ResolvedTransform(
                src=rng.choice(srcs),
                width=rng.randint(1, 40),
                height=rng.randint(1, 40),
                format=rng.choice(list(OutputFormat)),
                quality=rng.choice([None, 1, 50, 100]),
                options=rng.choice(option_sets),
            )
        )
    return samples


def test_round_trip():
    for t in _sample_transforms():
        assert parse_transform(to_query_string(t)) == t


def test_round_trip_of_resolver_output():
    t = resolve_transform(TransformRequest(src="/hero.jpg", width=1600, aspect_ratio="16:9", format="avif", quality=60))
    assert parse_transform(to_query_string(t)) == t


def test_distinct_transforms_have_distinct_keys_and_filenames():
    samples = set(_sample_transforms(seed=11, count=1000))
    keys = {to_query_string(t) for t in samples}
    filenames = {props_to_filename(t) for t in samples}
    assert len(keys) == len(samples)
    assert len(filenames) == len(samples)


def test_each_field_changes_key():
    base = _t(quality=50, options=(("fit", "cover"),))
    variants = [
        _t(src="/dog.jpg", quality=50, options=(("fit", "cover"),)),
        _t(width=401, quality=50, options=(("fit", "cover"),)),
        _t(height=301, quality=50, options=(("fit", "cover"),)),
        _t(format=OutputFormat.PNG, quality=50, options=(("fit", "cover"),)),
        _t(quality=51, options=(("fit", "cover"),)),
        _t(quality=50, options=(("fit", "contain"),)),
        _t(quality=50),
    ]
    keys = [to_query_string(t) for t in [base, *variants]]
    assert all(a != b for a, b in itertools.combinations(keys, 2))


def test_filename_layout():
    name = props_to_filename(_t(src="/images/blog/cat.jpg", format=OutputFormat.JPEG))
    assert name.startswith("images/blog/cat_")
    assert name.endswith(".jpg")


def test_filename_blocks_path_traversal():
    name = props_to_filename(_t(src="/../../etc/passwd"))
    assert ".." not in name.split("/")
    assert not name.startswith("/")
    assert name.startswith("etc/passwd_")


def test_remote_filename():
    name = props_to_filename(_t(src="https://cdn.example.com/media/photo.jpeg?x=1"))
    assert name.startswith("remote/cdn.example.com/media/photo_")


def test_long_stem_is_truncated():
    name = props_to_filename(_t(src="/" + "a" * 500 + ".jpg"))
    stem = name.rsplit("_", 1)[0]
    assert len(stem) == 64


def test_default_filename_format_prefix():
    t = _t()
    assert filename_format(t, to_query_string(t)).startswith("_image/cat_")
    assert filename_format(t, to_query_string(t), prefix="") == props_to_filename(t)
