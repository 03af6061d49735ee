import pytest

from crosspub.errors import TemplateNotFound, TemplateSyntaxError
from crosspub.templates import (
    DEFAULT_TEMPLATES_DIR,
    PAGE_TEMPLATES,
    TemplateLoader,
    compile_template,
    render_string,
)


def test_variable_interpolation():
    out = render_string("Hello {name} from {site.name}!", {"name": "Ada", "site": {"name": "Capsule"}})
    assert out == "Hello Ada from Capsule!"


def test_missing_variables_render_empty():
    assert render_string("[{missing}][{site.name}][{a.b.c}]", {"site": {}}) == "[][][]"


def test_scalar_formatting():
    ctx = {"yes": True, "no": False, "n": 3, "none": None, "items": [1], "obj": {"a": 1}}
    assert render_string("{yes} {no} {n} [{none}] [{items}] [{obj}]", ctx) == "true false 3 [] [] []"


def test_conditional_true_and_false():
    template = compile_template("{{ if has_topics }}X{{ endif }}")
    assert template.render({"has_topics": False}) == ""
    assert template.render({"has_topics": True}) == "X"
    assert template.render({}) == ""


def test_conditional_truthiness():
    template = compile_template("{{ if value }}yes{{ endif }}")
    assert template.render({"value": "text"}) == "yes"
    assert template.render({"value": ""}) == ""
    assert template.render({"value": []}) == ""
    assert template.render({"value": [1]}) == "yes"
    assert template.render({"value": None}) == ""


def test_negated_conditional():
    template = compile_template("{{ if not has_posts }}empty{{ endif }}")
    assert template.render({"has_posts": False}) == "empty"
    assert template.render({}) == "empty"
    assert template.render({"has_posts": True}) == ""


def test_loop():
    template = compile_template("{{ for p in posts }}{p.title};{{ endfor }}")
    assert template.render({"posts": [{"title": "A"}, {"title": "B"}]}) == "A;B;"
    assert template.render({"posts": []}) == ""
    assert template.render({}) == ""


def test_loop_over_non_sequence_renders_nothing():
    template = compile_template("{{ for p in posts }}x{{ endfor }}")
    assert template.render({"posts": "abc"}) == ""
    assert template.render({"posts": {"a": 1}}) == ""
    assert template.render({"posts": 5}) == ""


def test_loop_variable_is_scoped_to_iteration():
    template = compile_template("{item}|{{ for item in items }}{item.name}{{ endfor }}|{item}")
    out = template.render({"item": "outer", "items": [{"name": "a"}, {"name": "b"}]})
    assert out == "outer|ab|outer"


def test_loop_reads_outer_context():
    template = compile_template("{{ for p in posts }}{site.name}/{p.slug} {{ endfor }}")
    out = template.render({"site": {"name": "s"}, "posts": [{"slug": "a"}, {"slug": "b"}]})
    assert out == "s/a s/b "


def test_conditional_inside_loop():
    source = "{{ for t in topics }}{{ if t.featured }}*{{ endif }}{t.title},{{ endfor }}"
    out = render_string(
        source, {"topics": [{"title": "A", "featured": True}, {"title": "B"}]}
    )
    assert out == "*A,B,"


def test_nested_loops():
    source = "{{ for row in rows }}[{{ for cell in row.cells }}{cell}{{ endfor }}]{{ endfor }}"
    out = render_string(source, {"rows": [{"cells": ["a", "b"]}, {"cells": []}]})
    assert out == "[ab][]"


def test_empty_context_blanks_everything():
    source = "A{x}B{{ if y }}C{z}{{ endif }}D{{ for i in items }}E{i.f}{{ endfor }}F"
    assert render_string(source, {}) == "ABDF"


def test_standalone_directive_lines_are_removed():
    source = "# Posts\n{{ for p in posts }}\n=> {p.link} {p.title}\n{{ endfor }}\nend\n"
    out = render_string(source, {"posts": [{"link": "/a", "title": "A"}, {"link": "/b", "title": "B"}]})
    assert out == "# Posts\n=> /a A\n=> /b B\nend\n"


def test_indented_standalone_directive_lines_are_removed():
    source = "<ul>\n  {{ if show }}\n  <li>x</li>\n  {{ endif }}\n</ul>\n"
    assert render_string(source, {"show": True}) == "<ul>\n  <li>x</li>\n</ul>\n"
    assert render_string(source, {"show": False}) == "<ul>\n</ul>\n"


def test_directive_at_end_without_newline():
    assert render_string("a\n{{ if x }}b{{ endif }}", {"x": True}) == "a\nb"
    assert render_string("a\n{{ if x }}\nb\n{{ endif }}", {"x": True}) == "a\nb\n"


def test_literal_braces_pass_through():
    source = "body { margin: 0 } {not a var} {1} {}"
    assert render_string(source, {}) == source


def test_template_is_reusable():
    template = compile_template("{a}")
    assert template.render({"a": "1"}) == "1"
    assert template.render({"a": "2"}) == "2"
    assert template.render() == ""


@pytest.mark.parametrize(
    "source, fragment",
    [
        ("{{ if x }}open", "never closed"),
        ("{{ for p in posts }}open", "never closed"),
        ("text{{ endif }}", "unexpected 'endif'"),
        ("{{ endfor }}", "unexpected 'endfor'"),
        ("{{ if x }}{{ endfor }}", "expected 'endif'"),
        ("{{ for p in ps }}{{ endif }}{{ endfor }}", "expected 'endfor'"),
        ("{{ else }}", "unknown directive 'else'"),
        ("{{ }}", "empty directive"),
        ("{{ if }}x{{ endif }}", "expected '{{ if name }}'"),
        ("{{ if a b }}x{{ endif }}", "expected '{{ if name }}'"),
        ("{{ for p of posts }}{{ endfor }}", "expected '{{ for item in sequence }}'"),
        ("{{ for p in }}{{ endfor }}", "expected '{{ for item in sequence }}'"),
        ("{{ for 1p in posts }}{{ endfor }}", "invalid loop variable"),
        ("{{ if a..b }}{{ endif }}", "invalid variable path"),
        ("{{ if x }}{{ endif now }}", "takes no arguments"),
        ("hello {{ if x", "unclosed directive"),
        ("{{name}}", "unknown directive 'name'"),
    ],
)
def test_syntax_errors(source, fragment):
    with pytest.raises(TemplateSyntaxError) as excinfo:
        compile_template(source)
    assert fragment in str(excinfo.value)


def test_syntax_error_position():
    source = "line one\nline two {{ if x }}\nno end\n"
    with pytest.raises(TemplateSyntaxError) as excinfo:
        compile_template(source, name="post.html")
    err = excinfo.value
    assert err.lineno == 2
    assert err.column == 10
    assert err.directive == "{{ if x }}"
    assert err.name == "post.html"
    assert str(err).startswith("post.html:2:10:")


def test_unexpected_close_position():
    with pytest.raises(TemplateSyntaxError) as excinfo:
        compile_template("a\nb\n  {{ endfor }}\n")
    assert excinfo.value.lineno == 3
    assert excinfo.value.column == 3


def test_loader_prefers_override(tmp_path):
    override = tmp_path / "override"
    default = tmp_path / "default"
    override.mkdir()
    default.mkdir()
    (override / "post.html").write_text("custom {post.title}", encoding="utf-8")
    (default / "post.html").write_text("default {post.title}", encoding="utf-8")
    (default / "index.html").write_text("default index", encoding="utf-8")

    loader = TemplateLoader([override, default], ".html")
    assert loader.find("post") == override / "post.html"
    assert loader.load("post").render({"post": {"title": "T"}}) == "custom T"
    assert loader.load("index").render() == "default index"


def test_loader_skips_missing_override_directory(tmp_path):
    default = tmp_path / "default"
    default.mkdir()
    (default / "index.gmi").write_text("# Index", encoding="utf-8")
    loader = TemplateLoader([tmp_path / "nope", default], ".gmi")
    assert loader.load("index").render() == "# Index"


def test_loader_caches_templates(tmp_path):
    (tmp_path / "index.html").write_text("one", encoding="utf-8")
    loader = TemplateLoader([tmp_path], ".html")
    first = loader.load("index")
    (tmp_path / "index.html").write_text("two", encoding="utf-8")
    assert loader.load("index") is first


def test_loader_missing_template(tmp_path):
    loader = TemplateLoader([tmp_path], ".html")
    with pytest.raises(TemplateNotFound) as excinfo:
        loader.load_all(["index"])
    assert "index.html" in str(excinfo.value)
    assert str(tmp_path) in str(excinfo.value)


def test_loader_reports_syntax_errors_with_path(tmp_path):
    (tmp_path / "about.gmi").write_text("{{ if x }}", encoding="utf-8")
    loader = TemplateLoader([tmp_path], ".gmi")
    with pytest.raises(TemplateSyntaxError) as excinfo:
        loader.load("about")
    assert excinfo.value.name == str(tmp_path / "about.gmi")


@pytest.mark.parametrize("fmt, ext", [("html", ".html"), ("gemini", ".gmi")])
def test_bundled_templates_compile(fmt, ext):
    loader = TemplateLoader([DEFAULT_TEMPLATES_DIR / fmt], ext)
    templates = loader.load_all(PAGE_TEMPLATES)
    assert set(templates) == set(PAGE_TEMPLATES)
    for template in templates.values():
        template.render({})
