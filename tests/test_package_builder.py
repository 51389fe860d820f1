from __future__ import annotations

import pytest

from epub_gen.core.package_builder import (
    build_package_model,
    collect_images,
    cover_entry,
    extension_for,
    font_entries,
    resolve_media_type,
    rewrite_image_sources,
)
from epub_gen.models.package import COVER_ID, TOC_ID
from helpers import make_chapters


def _spine_ids(package):
    return [item.idref for item in package.spine]


def test_play_order_puts_toc_between_buckets():
    chapters = make_chapters(
        {"title": "Intro", "before_toc": True},
        {"title": "Second"},
    )
    package = build_package_model(chapters, toc_title="Contents")

    labels = [(point.label, point.play_order) for point in package.nav_points]
    assert labels == [("1. Intro", 0), ("Contents", 1), ("2. Second", 2)]
    assert package.play_orders == [0, 1, 2]


def test_spine_lists_before_toc_chapters_first():
    chapters = make_chapters(
        {"title": "A"},
        {"title": "B", "before_toc": True},
        {"title": "C"},
    )
    package = build_package_model(chapters, toc_title="Contents")

    assert _spine_ids(package) == [
        "content_1_item_1",
        TOC_ID,
        "content_0_item_0",
        "content_2_item_2",
    ]


def test_excluded_chapter_stays_in_spine_without_nav_point():
    chapters = make_chapters(
        {"title": "Cover page", "before_toc": True, "exclude_from_toc": True},
        {"title": "One"},
        {"title": "Hidden", "exclude_from_toc": True},
        {"title": "Two"},
    )
    package = build_package_model(chapters, toc_title="Contents")

    assert _spine_ids(package) == [
        "content_0_item_0",
        TOC_ID,
        "content_1_item_1",
        "content_2_item_2",
        "content_3_item_3",
    ]
    nav_ids = [point.id for point in package.nav_points]
    assert nav_ids == [TOC_ID, "content_1_item_1", "content_3_item_3"]
    assert package.play_orders == [0, 1, 2]

    excluded = [entry for entry in package.chapters if entry.exclude_from_toc]
    assert [entry.play_order for entry in excluded] == [None, None]


def test_play_orders_are_contiguous_and_unique():
    chapters = make_chapters(
        *({"title": f"T{n}", "exclude_from_toc": n % 3 == 0, "before_toc": n < 2} for n in range(9))
    )
    package = build_package_model(chapters, toc_title="Contents")

    orders = package.play_orders
    assert orders == list(range(len(orders)))


def test_every_spine_item_is_in_the_manifest():
    chapters = make_chapters({"title": "A"}, {"before_toc": True}, {"exclude_from_toc": True})
    package = build_package_model(chapters, toc_title="Contents")

    manifest_ids = [item.id for item in package.manifest]
    assert len(manifest_ids) == len(set(manifest_ids))
    assert set(_spine_ids(package)) <= set(manifest_ids)
    hrefs = {item.href for item in package.manifest}
    assert {point.href for point in package.nav_points} <= hrefs


def test_chapter_file_names_follow_input_position():
    chapters = make_chapters({"title": "A"}, {"title": "B", "before_toc": True})
    package = build_package_model(chapters, toc_title="Contents")

    by_index = {entry.index: entry for entry in package.chapters}
    assert by_index[0].href == "content_0.xhtml"
    assert by_index[0].id == "item_0"
    assert by_index[1].href == "content_1.xhtml"
    assert by_index[1].manifest_id == "content_1_item_1"


def test_untitled_chapter_gets_generated_label():
    package = build_package_model(make_chapters({}, {"title": "Named"}), toc_title="Contents")

    assert [point.label for point in package.toc_entries] == ["1. Chapter 1", "2. Named"]
    assert [point.title for point in package.toc_entries] == ["Chapter 1", "Named"]


def test_toc_item_is_nav_document_only_in_version_three():
    chapters = make_chapters({"title": "A"})

    v3 = {item.id: item for item in build_package_model(chapters, "Contents", version=3).manifest}
    v2 = {item.id: item for item in build_package_model(chapters, "Contents", version=2).manifest}

    assert v3[TOC_ID].properties == "nav"
    assert v2[TOC_ID].properties is None


def test_manifest_order():
    chapters = make_chapters({"title": "A"}, {"title": "B", "before_toc": True})
    images = collect_images(make_chapters({"content": '<img src="a.png"/>'}))
    package = build_package_model(
        chapters,
        toc_title="Contents",
        images=images,
        fonts=font_entries(["fonts/Serif.ttf"]),
        cover=cover_entry("cover.jpg"),
    )

    assert [item.id for item in package.manifest] == [
        "ncx",
        TOC_ID,
        "css",
        COVER_ID,
        "image_0",
        "content_1_item_1",
        "content_0_item_0",
        "font_0",
    ]


@pytest.mark.parametrize(
    "source, expected",
    [
        ("pic.png", "image/png"),
        ("https://example.com/photo.JPG?w=200#top", "image/jpeg"),
        ("drawing.svg", "image/svg+xml"),
        ("https://example.com/image", None),
        ("notes.txt", None),
    ],
)
def test_resolve_media_type(source, expected):
    assert resolve_media_type(source) == expected


def test_extension_is_filesystem_safe():
    assert extension_for("image/png") == "png"
    assert extension_for("image/svg+xml") == "svg"
    assert extension_for("image/x-made-up") == "xmadeup"


def test_images_are_deduplicated_by_url():
    chapters = make_chapters(
        {"content": '<p><img src="a.png"/><img src="a.png"/></p>'},
        {"content": '<img src="a.png"/><img src="b.gif?v=2"/><img src="noext"/>'},
    )
    images = collect_images(chapters)

    assert [image.url for image in images] == ["a.png", "b.gif?v=2"]
    assert images[1].media_type == "image/gif"
    assert images[1].href == f"images/{images[1].id}.gif"
    assert images[0].id != images[1].id


def test_rewrite_points_at_packaged_copies_only():
    (chapter,) = make_chapters({"content": '<p><img alt="x" src="a.png"/><img alt="y" src="noext"/></p>'})
    images = collect_images([chapter])
    out = rewrite_image_sources(chapter.content, {image.url: image for image in images})

    assert f'src="{images[0].href}"' in out
    assert 'src="noext"' in out
    assert 'src="a.png"' not in out


def test_rewrite_without_images_returns_content_unchanged():
    assert rewrite_image_sources("<p>x</p>", {}) == "<p>x</p>"


def test_cover_entry():
    cover = cover_entry("art/front.png")
    assert cover.id == COVER_ID
    assert cover.href == "cover.png"
    assert cover.media_type == "image/png"
    assert cover_entry("front") is None
    assert cover_entry(None) is None


def test_font_entries_keep_their_file_names():
    fonts = font_entries(["/tmp/fonts/Body.woff2", "https://cdn.example/Title.otf?x=1", "Odd.fnt"])

    assert [font.href for font in fonts] == ["fonts/Body.woff2", "fonts/Title.otf", "fonts/Odd.fnt"]
    assert [font.media_type for font in fonts] == [
        "font/woff2",
        "font/otf",
        "application/x-font-ttf",
    ]


def test_fonts_with_the_same_name_get_distinct_files():
    fonts = font_entries(["a/F.ttf", "b/F.ttf", "c/f.TTF", "a/F.ttf"])

    assert [font.source for font in fonts] == ["a/F.ttf", "b/F.ttf", "c/f.TTF"]
    assert [font.href for font in fonts] == ["fonts/F.ttf", "fonts/F_1.ttf", "fonts/f_2.TTF"]
    assert fonts[2].media_type == "font/ttf"
