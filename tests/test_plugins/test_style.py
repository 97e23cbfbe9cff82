"""Tests for the netage/style plugin."""

from __future__ import annotations

from bs4 import BeautifulSoup

from netage.document import REMOVE_ON_SAVE, element_children, parse_document
from netage.models import DocumentConfig
from netage.plugins.runner import RunContext
from netage.plugins.style.plugin import (
    BASE_STYLESHEET_URL,
    FIXUP_SCRIPT_URL,
    STYLESHEET_BASE_URL,
    StylePlugin,
    StyleState,
    create_fixup_script,
    resolve_stylesheet,
)
from netage.pubsub import Topic


class TestResolveStylesheet:
    def test_known_status_any_case(self) -> None:
        assert resolve_stylesheet("netage-cv") == f"{STYLESHEET_BASE_URL}NETAGE-CV.css"
        assert resolve_stylesheet("NETAGE-Final") == f"{STYLESHEET_BASE_URL}NETAGE-FINAL.css"

    def test_unknown_or_missing_falls_back_to_basic(self) -> None:
        basic = f"{STYLESHEET_BASE_URL}NETAGE-BASIC.css"
        assert resolve_stylesheet("REC") == basic
        assert resolve_stylesheet("") == basic
        assert resolve_stylesheet(None) == basic


class TestFixupScript:
    def test_without_location(self) -> None:
        script = create_fixup_script(parse_document(""), None)
        assert script["src"] == FIXUP_SCRIPT_URL
        assert not script.has_attr("onload")

    def test_location_without_fragment(self) -> None:
        script = create_fixup_script(parse_document(""), "https://example.org/spec.html")
        assert not script.has_attr("onload")

    def test_fragment_is_revisited(self) -> None:
        script = create_fixup_script(parse_document(""), "https://example.org/spec.html#intro")
        assert script["onload"] == 'window.location.href = "#intro"'


class TestInstall:
    def test_head_prefix(self, make_ctx) -> None:
        ctx = make_ctx()
        plugin = StylePlugin()
        plugin.install(ctx)

        children = element_children(ctx.document.head)
        assert children[0].get("name") == "viewport"
        assert [c.get_attribute_list("rel") for c in children[1:5]] == [
            ["preconnect"],
            ["preload"],
            ["preload"],
            ["preload"],
        ]
        assert children[5]["href"] == BASE_STYLESHEET_URL
        assert children[6].get("charset") == "utf-8"
        assert plugin.state is StyleState.HINTS_INJECTED

    def test_hints_are_processing_only(self, make_ctx) -> None:
        ctx = make_ctx()
        StylePlugin().install(ctx)
        marked = ctx.document.head.find_all(class_=REMOVE_ON_SAVE)
        assert len(marked) == 5

    def test_existing_viewport_kept(self, make_ctx) -> None:
        html = '<html><head><meta name="viewport" content="width=500"></head><body></body></html>'
        ctx = make_ctx(html)
        StylePlugin().install(ctx)
        viewports = ctx.document.find_all("meta", attrs={"name": "viewport"})
        assert len(viewports) == 1
        assert viewports[0]["content"] == "width=500"

    def test_viewport_content(self, make_ctx) -> None:
        ctx = make_ctx()
        StylePlugin().install(ctx)
        viewport = ctx.document.find("meta", attrs={"name": "viewport"})
        assert viewport["content"] == "width=device-width, initial-scale=1, shrink-to-fit=no"


class TestRun:
    def test_links_stylesheet(self, make_ctx) -> None:
        ctx = make_ctx(specStatus="netage-ld")
        plugin = StylePlugin()
        plugin.run(ctx)
        link = ctx.document.head.find("link", href=f"{STYLESHEET_BASE_URL}NETAGE-LD.css")
        assert link is not None
        assert plugin.stylesheet_url == link["href"]

    def test_missing_status_warns(self, make_ctx, warnings_of) -> None:
        ctx = make_ctx()
        recorder = warnings_of(ctx)
        StylePlugin().run(ctx)
        assert ctx.config.spec_status == "NETAGE-BASIC"
        assert recorder.messages == ["`specStatus` missing. Defaulting to 'NETAGE-BASIC'."]

    def test_unknown_status_is_kept_but_styled_basic(self, make_ctx, warnings_of) -> None:
        ctx = make_ctx(specStatus="REC")
        recorder = warnings_of(ctx)
        plugin = StylePlugin()
        plugin.run(ctx)
        assert ctx.config.spec_status == "REC"
        assert plugin.stylesheet_url.endswith("NETAGE-BASIC.css")
        assert recorder.calls == []

    def test_fixup_attached_once_on_end_all(self, make_ctx) -> None:
        ctx = make_ctx(specStatus="NETAGE-CV")
        plugin = StylePlugin()
        plugin.run(ctx)
        assert plugin.state is StyleState.FIXUP_SCHEDULED
        assert ctx.document.find("script", src=FIXUP_SCRIPT_URL) is None

        ctx.hub.pub(Topic.END_ALL, ctx.config)
        ctx.hub.pub(Topic.END_ALL, ctx.config)
        scripts = ctx.document.body.find_all("script", src=FIXUP_SCRIPT_URL)
        assert len(scripts) == 1
        assert ctx.document.body.find_all(True)[-1] is scripts[0]

    def test_no_toc_skips_fixup(self, make_ctx) -> None:
        ctx = make_ctx(specStatus="NETAGE-CV", noToc=True)
        plugin = StylePlugin()
        plugin.run(ctx)
        ctx.hub.pub(Topic.END_ALL, ctx.config)
        assert plugin.state is StyleState.STYLE_LINKED
        assert ctx.document.find("script") is None

    def test_fixup_uses_location(self, make_ctx) -> None:
        ctx = make_ctx(location="https://example.org/#conformance", specStatus="NETAGE-CV")
        StylePlugin().run(ctx)
        ctx.hub.pub(Topic.END_ALL, ctx.config)
        script = ctx.document.find("script", src=FIXUP_SCRIPT_URL)
        assert script["onload"] == 'window.location.href = "#conformance"'


class TestBeforeSave:
    def test_stylesheet_moved_last(self, make_ctx) -> None:
        ctx = make_ctx(specStatus="NETAGE-CV")
        plugin = StylePlugin()
        plugin.run(ctx)

        export_doc = parse_document(str(ctx.document))
        extra = export_doc.new_tag("link", rel="stylesheet", href="local.css")
        export_doc.head.append(extra)
        ctx.hub.pub(Topic.BEFORE_SAVE, export_doc)

        last = element_children(export_doc.head)[-1]
        assert last["href"] == plugin.stylesheet_url
        assert plugin.state is StyleState.EXPORT_FINALIZED

    def test_missing_link_is_ignored(self, make_ctx) -> None:
        ctx = make_ctx(specStatus="NETAGE-CV")
        plugin = StylePlugin()
        plugin.run(ctx)
        ctx.hub.pub(Topic.BEFORE_SAVE, parse_document("<p>bare</p>"))
        assert plugin.state is StyleState.FIXUP_SCHEDULED


class TestBareDocument:
    def test_headless_document_gets_structure(self) -> None:
        ctx = RunContext(
            document=BeautifulSoup("<p>x</p>", "html.parser"),
            config=DocumentConfig(specStatus="NETAGE-CV"),
        )
        plugin = StylePlugin()
        plugin.install(ctx)
        plugin.run(ctx)
        ctx.hub.pub(Topic.END_ALL, ctx.config)

        head = ctx.document.head
        assert head.find("meta", attrs={"name": "viewport"}) is not None
        assert head.find("link", href=f"{STYLESHEET_BASE_URL}NETAGE-CV.css") is not None
        assert ctx.document.body.p.string == "x"
        assert ctx.document.body.find("script", src=FIXUP_SCRIPT_URL) is not None

    def test_run_without_install_on_bare_soup(self) -> None:
        ctx = RunContext(document=BeautifulSoup("", "html.parser"))
        StylePlugin().run(ctx)
        assert ctx.document.head.find("link", rel="stylesheet") is not None
