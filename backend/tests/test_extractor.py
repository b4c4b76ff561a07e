from studio.extractor import (
    ArtifactStream,
    derive_filename,
    extract,
    find_media_directive,
    iter_segments,
    strip_media_directives,
)

RESPONSE = (
    "Here is your page.\n"
    "```html\n<h1>A</h1>\n```\n"
    "And some styles:\n"
    "```css\nbody { color: red; }\n```\n"
    "Done."
)


def test_comment_filename_is_used():
    text = "```js\n// utils.js\nconsole.log(1)\n```"
    files = extract(text)
    assert list(files) == ["utils.js"]
    assert files["utils.js"] == "// utils.js\nconsole.log(1)"


def test_filename_marker_wins_over_language():
    text = "```html\n<!-- filename: about.html -->\n<p>About</p>\n```"
    assert list(extract(text)) == ["about.html"]

    text = "```\nFILE: notes.md\n# Notes\n```"
    assert list(extract(text)) == ["notes.md"]


def test_filename_marker_inside_block_comments():
    assert derive_filename("/** filename: a.js */\nrun()", "js") == "a.js"
    assert derive_filename("{/* filename: App.jsx */}\n<App />", "jsx") == "App.jsx"
    assert derive_filename("<p>name: Bob</p>", "html") == "index.html"


def test_language_defaults_and_fallbacks():
    assert derive_filename("<p>x</p>", "html") == "index.html"
    assert derive_filename("body{}", "CSS") == "style.css"
    assert derive_filename("let a = 1", "javascript") == "script.js"
    assert derive_filename("fn main() {}", "rust") == "file.rust"
    assert derive_filename("plain text") == "artifact.txt"


def test_fence_attribute_names_file():
    text = "```js file=app.js\nstart()\n```"
    assert extract(text) == {"app.js": "start()"}


def test_plain_comment_is_not_a_filename():
    assert derive_filename("// set up the page\nrun()", "js") == "script.js"


def test_no_fences_yields_empty_file_set():
    assert extract("Just a conversational answer.") == {}
    assert extract("") == {}


def test_unterminated_fence_stays_prose():
    assert extract("Working on it:\n```html\n<h1>Half") == {}


def test_same_name_last_block_wins_in_first_position():
    text = (
        "```js\nfirst()\n```\n"
        "```css\nbody{}\n```\n"
        "```js\nsecond()\n```"
    )
    files = extract(text)
    assert list(files) == ["script.js", "style.css"]
    assert files["script.js"] == "second()"


def test_blank_lines_around_content_are_trimmed():
    files = extract("```html\n\n\n  <div>x</div>\n\n```")
    assert files["index.html"] == "  <div>x</div>"


def test_segments_alternate_prose_and_fences():
    segments = list(iter_segments(RESPONSE))
    assert [s.fenced for s in segments] == [False, True, False, True, False]
    assert segments[1].lang == "html"
    assert segments[3].content == "body { color: red; }"


def test_growing_prefix_never_loses_closed_artifacts():
    previous = {}
    for end in range(len(RESPONSE) + 1):
        current = extract(RESPONSE[:end])
        assert set(previous) <= set(current)
        for name, content in previous.items():
            assert current[name] == content
        previous = current
    assert previous == {"index.html": "<h1>A</h1>", "style.css": "body { color: red; }"}


def test_stream_reports_artifacts_once_closed():
    stream = ArtifactStream()
    assert stream.feed("Sure!\n```ht") == {}
    assert stream.feed("ml\n<h1>Hi</h1>\n") == {}
    assert stream.feed("```\nMore text") == {"index.html": "<h1>Hi</h1>"}
    assert stream.feed(" and more") == {}
    assert stream.feed("\n```css\nh1{}\n```") == {"style.css": "h1{}"}
    assert stream.files == {"index.html": "<h1>Hi</h1>", "style.css": "h1{}"}
    assert stream.text.startswith("Sure!")


def test_media_directive():
    text = "Here you go [GENERATE_IMAGE: a red fox in snow] enjoy"
    assert find_media_directive(text) == "a red fox in snow"
    assert strip_media_directives(text) == "Here you go  enjoy"
    assert find_media_directive("nothing here") is None
