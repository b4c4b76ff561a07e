from studio import db


def test_set_get_delete():
    assert db.get("missing") is None
    assert db.get("missing", []) == []
    db.set("k", {"a": 1})
    assert db.get("k") == {"a": 1}
    assert db.delete("k") is True
    assert db.delete("k") is False


def test_list_keys_by_prefix():
    db.set("bot:1", {})
    db.set("bot:2", {})
    db.set("other", 1)
    assert sorted(db.list_keys("bot:")) == ["bot:1", "bot:2"]


def test_subscribers_see_writes_until_unsubscribed():
    seen = []
    unsubscribe = db.subscribe(lambda key, value: seen.append((key, value)))
    db.set("last_active_bot_id", "a")
    db.delete("last_active_bot_id")
    unsubscribe()
    db.set("last_active_bot_id", "b")
    assert seen == [("last_active_bot_id", "a"), ("last_active_bot_id", None)]
