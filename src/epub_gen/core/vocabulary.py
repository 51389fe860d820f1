"""Tag and attribute allowlists for EPUB content documents."""

# Attributes kept on any element; everything else is stripped.
ALLOWED_ATTRIBUTES = frozenset(
    {
        "about",
        "accesskey",
        "alt",
        "aria-activedescendant",
        "aria-atomic",
        "aria-autocomplete",
        "aria-busy",
        "aria-checked",
        "aria-controls",
        "aria-describedat",
        "aria-describedby",
        "aria-disabled",
        "aria-dropeffect",
        "aria-expanded",
        "aria-flowto",
        "aria-grabbed",
        "aria-haspopup",
        "aria-hidden",
        "aria-invalid",
        "aria-label",
        "aria-labelledby",
        "aria-level",
        "aria-live",
        "aria-multiline",
        "aria-multiselectable",
        "aria-orientation",
        "aria-owns",
        "aria-posinset",
        "aria-pressed",
        "aria-readonly",
        "aria-relevant",
        "aria-required",
        "aria-selected",
        "aria-setsize",
        "aria-sort",
        "aria-valuemax",
        "aria-valuemin",
        "aria-valuenow",
        "aria-valuetext",
        "class",
        "colspan",
        "content",
        "contenteditable",
        "contextmenu",
        "datatype",
        "dir",
        "draggable",
        "dropzone",
        "epub:prefix",
        "epub:type",
        "hidden",
        "href",
        "hreflang",
        "id",
        "inlist",
        "itemid",
        "itemref",
        "itemscope",
        "itemtype",
        "lang",
        "media",
        "prefix",
        "property",
        "rel",
        "resource",
        "rev",
        "role",
        "rowspan",
        "spellcheck",
        "src",
        "style",
        "tabindex",
        "target",
        "title",
        "type",
        "typeof",
        "vocab",
        "xml:base",
        "xml:lang",
        "xml:space",
    }
)

# XHTML 1.1 vocabulary accepted by EPUB 2 reading systems
XHTML11_TAGS = frozenset(
    {
        "a",
        "abbr",
        "acronym",
        "address",
        "applet",
        "b",
        "basefont",
        "bdo",
        "big",
        "blockquote",
        "br",
        "caption",
        "center",
        "cite",
        "code",
        "col",
        "colgroup",
        "dd",
        "del",
        "dfn",
        "div",
        "dl",
        "dt",
        "em",
        "embed",
        "font",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "hr",
        "i",
        "iframe",
        "img",
        "ins",
        "kbd",
        "li",
        "map",
        "noscript",
        "object",
        "ol",
        "p",
        "param",
        "pre",
        "q",
        "s",
        "samp",
        "small",
        "span",
        "strike",
        "strong",
        "sub",
        "sup",
        "table",
        "tbody",
        "td",
        "tfoot",
        "th",
        "thead",
        "tr",
        "tt",
        "u",
        "ul",
        "var",
    }
)

# EPUB 3 content documents are HTML5 serialized as XML
HTML5_TAGS = XHTML11_TAGS | frozenset(
    {
        "article",
        "aside",
        "bdi",
        "data",
        "details",
        "figcaption",
        "figure",
        "footer",
        "header",
        "main",
        "mark",
        "nav",
        "rp",
        "rt",
        "ruby",
        "section",
        "summary",
        "time",
        "wbr",
    }
)

# EPUB 2 documents do not declare the epub namespace
XHTML11_ATTRIBUTES = frozenset(
    name for name in ALLOWED_ATTRIBUTES if not name.startswith("epub:")
)

SUPPORTED_VERSIONS = (2, 3)


def allowed_tags_for(version: int) -> frozenset[str]:
    """Return the tag allowlist for an EPUB major version."""
    if version == 2:
        return XHTML11_TAGS
    if version == 3:
        return HTML5_TAGS
    raise ValueError(f"Unsupported EPUB version: {version}")


def allowed_attributes_for(version: int) -> frozenset[str]:
    """Return the attribute allowlist for an EPUB major version."""
    if version == 2:
        return XHTML11_ATTRIBUTES
    if version == 3:
        return ALLOWED_ATTRIBUTES
    raise ValueError(f"Unsupported EPUB version: {version}")
