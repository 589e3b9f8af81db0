import threading

import pytest

from tools.knowledge_base import cipher
from tools.knowledge_base.kb_store import (
    KnowledgeStore,
    decode_knowledge,
    parse_records,
    serialize_records,
)

from conftest import TEST_KEY

KEY_BYTES = TEST_KEY.encode("utf-8")


def write_legacy_file(path, text, key=KEY_BYTES):
    data = text.encode("utf-8")
    path.write_bytes(bytes(b ^ key[i % len(key)] for i, b in enumerate(data)))


def test_missing_file_starts_empty(store, kb_path):
    assert not kb_path.exists()
    assert len(store) == 0
    assert store.get_all_entries() == []


def test_exact_match_after_normalization(store):
    store.add_entry("What is 2+2?", "4")
    assert store.find_answer("what is 2+2") == "4"

    match = store.lookup("WHAT IS 2+2!!")
    assert match.exact is True
    assert match.question == "what is 22"


def test_keys_are_normalized(store):
    store.add_entry("Hello, World!", "hi")
    assert store.get_all_entries() == [("hello world", "hi")]


def test_overwrite_on_normalized_duplicate(store):
    store.add_entry("Hi!", "first")
    store.add_entry("hi", "second")

    assert len(store) == 1
    assert store.find_answer("HI") == "second"


def test_fuzzy_threshold_is_strict(store):
    store.add_entry("how do I reset my password", "Use the reset link.")

    # 5/7 shared tokens, below 0.8
    assert store.find_answer("how can I reset my password") == ""
    # 6/7 shared tokens
    assert store.find_answer("how do I reset my password please") == "Use the reset link."


def test_fuzzy_match_reports_score(store):
    store.add_entry("how do I reset my password", "Use the reset link.")
    match = store.lookup("please how do I reset my password")

    assert match is not None
    assert match.exact is False
    assert match.score == pytest.approx(6 / 7)


def test_single_shared_token_returns_empty(store):
    store.add_entry("how do I reset my password", "Use the reset link.")
    store.add_entry("where is the train station", "Down the road.")

    assert store.find_answer("password") == ""
    assert store.find_answer("station wagon") == ""


def test_best_fuzzy_match_wins(store):
    store.add_entry("one two three four five six seven eight nine", "nine words")
    store.add_entry("one two three four five six seven eight nine ten", "ten words")

    # probe overlaps 9/11 with the first entry and 10/11 with the second
    assert store.find_answer("one two three four five six seven eight nine ten eleven") == "ten words"


def test_threshold_is_configurable(kb_path):
    loose = KnowledgeStore(kb_path, TEST_KEY, threshold=0.5)
    loose.add_entry("how do I reset my password", "Use the reset link.")
    assert loose.find_answer("how can I reset my password") == "Use the reset link."


def test_persistence_across_instances(store, kb_path):
    store.add_entry("What is the capital of France?", "Paris")
    store.add_entry("Who wrote Hamlet?", "Shakespeare")
    store.save()

    reopened = KnowledgeStore(kb_path, TEST_KEY)
    assert len(reopened) == 2
    assert reopened.find_answer("what is the capital of france") == "Paris"
    assert reopened.find_answer("Who wrote Hamlet") == "Shakespeare"


def test_saved_file_is_nonce_format(store, kb_path):
    store.add_entry("question", "answer")
    store.save()

    raw = kb_path.read_bytes()
    assert b"question" not in raw
    assert cipher.decrypt(raw, KEY_BYTES) == b"question|||answer\n"


def test_save_rotates_nonce(store, kb_path):
    store.add_entry("question", "answer")
    store.save()
    first = kb_path.read_bytes()
    store.save()
    assert kb_path.read_bytes() != first


def test_legacy_file_is_loaded(kb_path):
    write_legacy_file(kb_path, "hello there|||General Kenobi\nwhat is python|||A language\n")

    store = KnowledgeStore(kb_path, TEST_KEY)
    assert len(store) == 2
    assert store.find_answer("What is Python?") == "A language"


def test_short_legacy_file_is_loaded(kb_path):
    # Shorter than a nonce, so the nonce path yields nothing
    write_legacy_file(kb_path, "q|||a\n")

    store = KnowledgeStore(kb_path, TEST_KEY)
    assert store.get_all_entries() == [("q", "a")]


def test_legacy_file_migrates_on_save(kb_path):
    write_legacy_file(kb_path, "old question|||old answer\n")
    store = KnowledgeStore(kb_path, TEST_KEY)
    store.save()

    assert decode_knowledge(kb_path.read_bytes(), KEY_BYTES).fmt == "nonce"
    assert KnowledgeStore(kb_path, TEST_KEY).find_answer("old question") == "old answer"


def test_legacy_keys_are_normalized_on_load(kb_path):
    write_legacy_file(kb_path, "What's UP?|||not much\n")
    store = KnowledgeStore(kb_path, TEST_KEY)
    assert store.get_all_entries() == [("whats up", "not much")]


def test_garbage_file_does_not_raise(kb_path):
    kb_path.write_bytes(bytes(range(200)))
    store = KnowledgeStore(kb_path, TEST_KEY)
    assert isinstance(store.get_all_entries(), list)


def test_empty_file_loads_empty(kb_path):
    kb_path.write_bytes(b"")
    assert len(KnowledgeStore(kb_path, TEST_KEY)) == 0


def test_answer_may_contain_separator(store, kb_path):
    store.add_entry("pipes", "a|||b|||c")
    store.save()

    assert KnowledgeStore(kb_path, TEST_KEY).find_answer("pipes") == "a|||b|||c"


def test_parse_records_splits_on_first_separator():
    text = "q1|||a1\nno separator here\n\nq2|||a|||2\n"
    assert parse_records(text) == [("q1", "a1"), ("q2", "a|||2")]


def test_serialize_records_format():
    assert serialize_records([("q", "a"), ("x", "y")]) == "q|||a\nx|||y\n"


def test_decode_empty_bytes():
    result = decode_knowledge(b"", KEY_BYTES)
    assert result.entries == []
    assert result.malformed is False


def test_clear_leaves_file_until_save(store, kb_path):
    store.add_entry("q", "a")
    store.save()

    store.clear()
    assert len(store) == 0
    assert len(KnowledgeStore(kb_path, TEST_KEY)) == 1

    store.save()
    assert len(KnowledgeStore(kb_path, TEST_KEY)) == 0


def test_load_replaces_unsaved_changes(store):
    store.add_entry("saved", "yes")
    store.save()
    store.add_entry("unsaved", "no")

    assert store.load() == 1
    assert store.find_answer("unsaved") == ""
    assert store.find_answer("saved") == "yes"


def test_get_all_entries_is_a_snapshot(store):
    store.add_entry("q", "a")
    snapshot = store.get_all_entries()
    store.add_entry("other", "b")
    assert snapshot == [("q", "a")]


def test_save_failure_raises_and_keeps_mapping(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("file in the way")
    store = KnowledgeStore(blocker / "kb.dat", TEST_KEY)
    store.add_entry("q", "a")

    with pytest.raises(OSError):
        store.save()
    assert store.find_answer("q") == "a"


def test_bytes_key_matches_str_key(kb_path):
    writer = KnowledgeStore(kb_path, KEY_BYTES)
    writer.add_entry("q", "a")
    writer.save()
    assert KnowledgeStore(kb_path, TEST_KEY).find_answer("q") == "a"


def test_concurrent_ingest(store):
    def worker(n):
        for i in range(50):
            store.add_entry(f"worker {n} question {i}", f"answer {n}-{i}")
            store.find_answer(f"worker {n} question {i}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(store) == 200


def test_save_with_empty_key_keeps_existing_file(kb_path):
    original = KnowledgeStore(kb_path, "k")
    original.add_entry("q", "a")
    original.save()
    before = kb_path.read_bytes()

    keyless = KnowledgeStore(kb_path, "")
    keyless.add_entry("other", "b")
    keyless.save()

    assert kb_path.read_bytes() == before
    assert KnowledgeStore(kb_path, "k").find_answer("q") == "a"
