import asyncio
import json

import pytest

from studio import db
from studio.errors import MalformedProjectError
from studio.preview import PreviewRegistry
from studio.store import SEED_FILES, DocumentStore

DELAY = 0.02


def make_store(files=None, **kwargs):
    options = {"registry": PreviewRegistry(), "checkpoint_delay": DELAY, "persist": False}
    options.update(kwargs)
    return DocumentStore("p1", files=files, **options)


async def settle():
    await asyncio.sleep(DELAY * 5)


def test_defaults_to_seed_files():
    store = make_store()
    assert store.files == SEED_FILES
    assert store.active_file == "index.html"


def test_select_missing_file_is_empty():
    store = make_store({"index.html": "<p>x</p>"})
    assert store.select("missing.js") == ""


@pytest.mark.asyncio
async def test_edit_is_visible_before_checkpoint():
    store = make_store({"index.html": "a"})
    store.edit("index.html", "ab")
    assert store.select("index.html") == "ab"
    assert store.history("index.html").stack == ["a"]

    await settle()
    assert store.history("index.html").stack == ["a", "ab"]


@pytest.mark.asyncio
async def test_burst_of_edits_collapses_into_one_checkpoint():
    store = make_store({"index.html": ""})
    for text in ["h", "he", "hel", "hell", "hello"]:
        store.edit("index.html", text)
    await settle()
    assert store.history("index.html").stack == ["", "hello"]


@pytest.mark.asyncio
async def test_files_checkpoint_independently():
    store = make_store({"index.html": "a", "style.css": "x"})
    store.edit("index.html", "b")
    store.edit("style.css", "y")
    await settle()
    assert store.history("index.html").stack == ["a", "b"]
    assert store.history("style.css").stack == ["x", "y"]


@pytest.mark.asyncio
async def test_edit_to_same_content_does_not_grow_history():
    store = make_store({"index.html": "same"})
    store.edit("index.html", "same")
    await settle()
    assert store.history("index.html").stack == ["same"]


@pytest.mark.asyncio
async def test_new_file_history_starts_at_first_checkpoint():
    store = make_store({"index.html": ""})
    store.edit("app.js", "run()")
    await settle()
    assert store.history("app.js").stack == ["run()"]
    assert store.undo("app.js") is None
    assert store.select("app.js") == "run()"


@pytest.mark.asyncio
async def test_undo_then_redo_restores_content():
    store = make_store({"index.html": "one"})
    store.edit("index.html", "two")
    await settle()

    assert store.undo("index.html") == "one"
    assert store.select("index.html") == "one"
    assert store.redo("index.html") == "two"
    assert store.select("index.html") == "two"


@pytest.mark.asyncio
async def test_undo_with_pending_checkpoint():
    store = make_store({"index.html": "one"})
    store.edit("index.html", "two")
    assert store.can_undo("index.html")
    assert not store.can_redo("index.html")

    assert store.undo("index.html") == "one"
    await settle()
    # the pending timer must not overwrite the restored content
    assert store.select("index.html") == "one"
    assert store.history("index.html").index == 0

    assert store.redo("index.html") == "two"


@pytest.mark.asyncio
async def test_undo_redo_at_boundaries_are_noops():
    store = make_store({"index.html": "one"})
    assert store.undo("index.html") is None
    assert store.redo("index.html") is None
    assert store.select("index.html") == "one"
    assert store.undo("never-edited.js") is None


@pytest.mark.asyncio
async def test_new_edit_after_undo_drops_redo():
    store = make_store({"index.html": "a"})
    store.edit("index.html", "b")
    await settle()
    store.undo("index.html")
    store.edit("index.html", "c")
    await settle()
    assert store.history("index.html").stack == ["a", "c"]
    assert store.redo("index.html") is None


@pytest.mark.asyncio
async def test_history_stays_bounded():
    store = make_store({"index.html": "v0"}, history_limit=50)
    for i in range(1, 80):
        store.edit("index.html", f"v{i}")
        store.flush()
    entry = store.history("index.html")
    assert len(entry.stack) == 50
    assert 0 <= entry.index < len(entry.stack)
    assert entry.current == "v79"


@pytest.mark.asyncio
async def test_clear_is_undoable():
    store = make_store({"index.html": "<p>keep</p>"})
    store.clear("index.html")
    assert store.select("index.html") == ""
    assert "index.html" in store.files
    await settle()
    assert store.undo("index.html") == "<p>keep</p>"


@pytest.mark.asyncio
async def test_load_file_set_resets_history_and_cancels_timers():
    store = make_store({"index.html": "a"})
    store.edit("index.html", "b")
    store.load_file_set({"main.css": "x", "page.html": "<p>p</p>"})
    await settle()

    assert list(store.files) == ["main.css", "page.html"]
    assert store.active_file == "page.html"
    assert store.history("page.html").stack == ["<p>p</p>"]
    assert store.history("index.html") is None


def test_active_file_selection_rule():
    assert make_store({"a.css": "", "page.html": "", "index.html": ""}).active_file == "index.html"
    assert make_store({"b.js": "", "about.html": ""}).active_file == "about.html"
    assert make_store({"notes.txt": "", "b.js": ""}).active_file == "notes.txt"
    assert make_store({}).active_file is None


@pytest.mark.asyncio
async def test_replace_all_commits_through_edit():
    store = make_store({"index.html": "a.b.c"})
    assert store.replace_all(".", "_") == "a_b_c"
    assert store.select("index.html") == "a_b_c"
    await settle()
    assert store.undo("index.html") == "a.b.c"


@pytest.mark.asyncio
async def test_replace_all_with_empty_query_is_noop():
    store = make_store({"index.html": "abc"})
    store.replace_all("", "x")
    await settle()
    assert store.history("index.html").stack == ["abc"]


def test_find_on_active_file():
    store = make_store({"index.html": "Hello hello"})
    assert tuple(store.find_next("HELLO", 1)) == (6, 11)
    assert tuple(store.find_prev("hello", 6)) == (0, 5)


def test_import_replaces_files():
    store = make_store()
    store.import_project('{"app.js": "go()", "home.html": "<p>home</p>"}')
    assert list(store.files) == ["app.js", "home.html"]
    assert store.active_file == "home.html"
    assert store.history("app.js").stack == ["go()"]


@pytest.mark.parametrize("document", ["[1, 2]", "null", "42", "{not json"])
def test_malformed_import_leaves_files_unchanged(document):
    store = make_store({"index.html": "<p>keep</p>"})
    with pytest.raises(MalformedProjectError):
        store.import_project(document)
    assert store.files == {"index.html": "<p>keep</p>"}


def test_export_import_round_trip():
    files = {"z.html": "<p>z</p>", "a.css": "", "m.js": "x = 'ü'"}
    source = make_store(files)
    target = make_store()
    target.import_project(source.export_project())
    assert list(target.files.items()) == list(files.items())


@pytest.mark.asyncio
async def test_only_one_live_preview_handle():
    registry = PreviewRegistry()
    store = make_store({"index.html": "<p>1</p>"}, registry=registry)
    first = store.preview_handle
    assert registry.resolve(first) is not None

    store.edit("index.html", "<p>2</p>")
    store.edit("index.html", "<p>3</p>")
    assert registry.live_count() == 1
    assert registry.resolve(first) is None
    assert "<p>3</p>" in registry.resolve(store.preview_handle)

    store.close()
    assert registry.live_count() == 0


@pytest.mark.asyncio
async def test_edits_write_through_to_storage():
    store = make_store({"index.html": "a"}, persist=True)
    store.edit("index.html", "b")
    saved = db.get("preview_files_p1")
    assert json.loads(saved) == {"index.html": "b"}
    assert saved == store.export_project()

    reopened = DocumentStore.open("p1", registry=PreviewRegistry(), persist=False)
    assert reopened.files == {"index.html": "b"}


def test_open_without_saved_files_uses_seed():
    store = DocumentStore.open("fresh", registry=PreviewRegistry(), persist=False)
    assert store.files == SEED_FILES
