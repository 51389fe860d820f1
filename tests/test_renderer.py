from __future__ import annotations

import pytest
from lxml import etree

from epub_gen.core.package_builder import build_package_model
from epub_gen.core.renderer import (
    CONTAINER_XML,
    default_stylesheet,
    render_ncx,
    render_opf,
    render_structure,
    render_toc_xhtml,
)
from epub_gen.errors import TemplateRenderError
from epub_gen.models.book import EpubOptions, TemplateOptions
from helpers import make_chapters

OPF = "{http://www.idpf.org/2007/opf}"
NCX = "{http://www.daisy.org/z3986/2005/ncx/}"
XHTML = "{http://www.w3.org/1999/xhtml}"
DC = "{http://purl.org/dc/elements/1.1/}"


def _parse(document: str):
    return etree.fromstring(document.encode("utf-8"))


@pytest.fixture
def package():
    return build_package_model(
        make_chapters(
            {"title": "Preface", "before_toc": True},
            {"title": "Tom & Jerry <3", "authors": ["Hanna & Barbera"]},
            {"title": "Appendix", "exclude_from_toc": True},
        ),
        toc_title="Table Of Contents",
    )


def test_structural_documents_are_well_formed(book, package):
    documents = render_structure(book, package)
    for text in (documents.opf, documents.ncx, documents.toc_xhtml):
        assert _parse(text) is not None
    assert _parse(CONTAINER_XML) is not None


def test_opf_manifest_and_spine_follow_the_model(book, package):
    root = _parse(render_opf(book, package))

    items = root.findall(f"{OPF}manifest/{OPF}item")
    assert [item.get("id") for item in items] == [item.id for item in package.manifest]
    refs = root.findall(f"{OPF}spine/{OPF}itemref")
    assert [ref.get("idref") for ref in refs] == [item.idref for item in package.spine]
    assert root.find(f"{OPF}spine").get("toc") == "ncx"


def test_opf_metadata(book, package):
    root = _parse(render_opf(book, package))
    metadata = root.find(f"{OPF}metadata")

    assert root.get("version") == "3.0"
    assert metadata.find(f"{DC}identifier").text == book.id
    assert metadata.find(f"{DC}title").text == "Field Notes"
    assert metadata.find(f"{DC}description").text == "Field Notes"
    assert [c.text for c in metadata.findall(f"{DC}creator")] == ["Ada Lovelace"]
    assert metadata.find(f"{DC}publisher").text == "anonymous"
    assert metadata.find(f"{DC}language").text == "en"


def test_opf_version_two(book, package):
    book = book.model_copy(update={"version": 2})
    root = _parse(render_opf(book, package))
    assert root.get("version") == "2.0"
    assert "dcterms:modified" not in render_opf(book, package)


def test_ncx_nav_points_match_play_order(book, package):
    root = _parse(render_ncx(book, package))
    points = root.findall(f"{NCX}navMap/{NCX}navPoint")

    assert [int(p.get("playOrder")) for p in points] == [0, 1, 2]
    assert [p.find(f"{NCX}content").get("src") for p in points] == [
        "content_0.xhtml",
        "toc.xhtml",
        "content_1.xhtml",
    ]
    labels = [p.find(f"{NCX}navLabel/{NCX}text").text for p in points]
    assert labels == ["1. Preface", "Table Of Contents", "2. Tom & Jerry <3"]
    assert root.find(f"{NCX}head/{NCX}meta").get("content") == book.id


def test_toc_xhtml_lists_chapters_in_nav_order(book, package):
    root = _parse(render_toc_xhtml(book, package))
    links = root.findall(f".//{XHTML}nav/{XHTML}ol/{XHTML}li/{XHTML}a")

    assert [a.get("href") for a in links] == ["content_0.xhtml", "content_1.xhtml"]
    assert links[1].text.startswith("Tom & Jerry <3")
    assert links[1].find(f"{XHTML}small").text == "Hanna & Barbera"


def test_toc_xhtml_version_two_has_no_nav_element(book, package):
    book = book.model_copy(update={"version": 2})
    text = render_toc_xhtml(book, package)
    root = _parse(text)

    assert root.find(f".//{XHTML}nav") is None
    assert root.find(f".//{XHTML}div[@id='toc']") is not None
    assert "XHTML 1.1" in text


def test_special_characters_are_escaped(package):
    book = EpubOptions(title="Tom & Jerry <3", author="A&B", content=["<p>x</p>"])
    documents = render_structure(book, package)

    assert "Tom &amp; Jerry &lt;3" in documents.opf
    assert "A&amp;B" in documents.ncx
    assert _parse(documents.opf).find(f"{OPF}metadata/{DC}title").text == "Tom & Jerry <3"


def test_custom_template_replaces_builtin(book, package):
    book = book.model_copy(
        update={"template": TemplateOptions(ncx="<ncx>{{ book.title }}|{{ package.play_orders | join(',') }}</ncx>")}
    )
    assert render_ncx(book, package) == "<ncx>Field Notes|0,1,2</ncx>"
    # other documents keep the built-in templates
    assert _parse(render_opf(book, package)).tag == f"{OPF}package"


def test_template_syntax_error_is_reported(book, package):
    book = book.model_copy(update={"template": TemplateOptions(opf="{% for %}")})
    with pytest.raises(TemplateRenderError) as excinfo:
        render_opf(book, package)
    assert excinfo.value.document == "content.opf"
    assert excinfo.value.stage == "render"


def test_undefined_template_variable_is_an_error(book, package):
    book = book.model_copy(update={"template": TemplateOptions(html_toc="{{ nothing.here }}")})
    with pytest.raises(TemplateRenderError):
        render_toc_xhtml(book, package)


def test_default_stylesheet_is_bundled():
    assert default_stylesheet().strip()
