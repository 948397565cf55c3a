"""Tests for the content tree translation orchestrator."""

import threading
from unittest.mock import Mock

import pytest

from content_translator.config import TranslationConfig
from content_translator.translation import (
    ContentTranslator,
    summarize_errors,
    translate_object,
)


def shape(node):
    """Reduce a tree to its structure: keys, list lengths and leaf kinds."""
    if isinstance(node, dict):
        return {key: shape(value) for key, value in node.items()}
    if isinstance(node, list):
        return [shape(item) for item in node]
    return type(node).__name__


def upper(text, target, source):
    return text.upper()


@pytest.fixture
def config():
    """Config without pacing delay."""
    return TranslationConfig(skip_fields={"level"}, request_delay=0)


@pytest.fixture
def source_tree():
    """The course hero example."""
    return {
        "hero": {"title": "Learn to trade", "level": "Beginner"},
        "tags": ["forex", "risk"],
    }


class TestTranslateObject:
    """Tests for ContentTranslator.translate_object."""

    def test_uppercase_scenario(self, config, source_tree):
        """Test the basic scenario with an uppercasing translator."""
        translator = ContentTranslator(upper, config=config)
        outcome = translator.translate_object(source_tree, "fr", "en")

        assert outcome.tree == {
            "hero": {"title": "LEARN TO TRADE", "level": "Beginner"},
            "tags": ["FOREX", "RISK"],
        }
        assert outcome.progress.total == 3
        assert outcome.progress.completed == 3
        assert outcome.progress.errors == []
        assert outcome.translated_count == 3

    def test_single_field_failure(self, config, source_tree):
        """Test one failing field falls back to its source text."""
        def flaky(text, target, source):
            if text == "risk":
                raise RuntimeError("Rate limit exceeded")
            return text.upper()

        translator = ContentTranslator(flaky, config=config)
        outcome = translator.translate_object(source_tree, "fr", "en")

        assert outcome.tree["tags"] == ["FOREX", "risk"]
        assert outcome.tree["hero"]["title"] == "LEARN TO TRADE"
        assert len(outcome.progress.errors) == 1
        assert outcome.progress.errors[0].path == "tags[1]"
        assert outcome.progress.errors[0].error == "Rate limit exceeded"
        assert outcome.progress.completed == 3

    def test_translator_called_with_languages(self, config, source_tree):
        """Test the callback receives (text, target, source)."""
        translate = Mock(side_effect=upper)
        ContentTranslator(translate, config=config).translate_object(source_tree, "de", "en")

        translate.assert_any_call("Learn to trade", "de", "en")
        assert translate.call_count == 3

    def test_source_tree_not_mutated(self, config, source_tree):
        """Test the input tree is left untouched."""
        before = {"hero": dict(source_tree["hero"]), "tags": list(source_tree["tags"])}
        ContentTranslator(upper, config=config).translate_object(source_tree, "fr", "en")
        assert source_tree == before

    def test_shape_preserved(self, config):
        """Test output has the same structure as the input."""
        tree = {
            "meta": {"id": 101, "price": 49.5, "published": True, "badge": None},
            "sections": [
                {"heading": "Intro", "points": ["a", "", "  "], "order": 1},
                {"heading": "More", "points": []},
            ],
            "empty": {},
            "level": {"name": "Advanced", "rank": 3},
        }
        outcome = ContentTranslator(upper, config=config).translate_object(tree, "fr")

        assert shape(outcome.tree) == shape(tree)
        assert outcome.tree["meta"] == tree["meta"]
        assert outcome.tree["empty"] == {}
        assert outcome.tree["sections"][1]["points"] == []

    def test_skipped_subtree_identical(self, config):
        """Test skipped keys holding objects are copied and never sent."""
        tree = {"title": "Course", "level": {"name": "Advanced", "tags": ["x"]}}
        translate = Mock(side_effect=upper)

        outcome = ContentTranslator(translate, config=config).translate_object(tree, "fr")

        assert outcome.tree["level"] == {"name": "Advanced", "tags": ["x"]}
        translate.assert_called_once_with("Course", "fr", "en")

    def test_blank_strings_pass_through(self, config):
        """Test empty and whitespace strings are not sent for translation."""
        tree = {"title": "Hello", "subtitle": "", "note": "   \n"}
        translate = Mock(side_effect=upper)

        outcome = ContentTranslator(translate, config=config).translate_object(tree, "fr")

        assert outcome.tree == {"title": "HELLO", "subtitle": "", "note": "   \n"}
        assert translate.call_count == 1
        assert outcome.progress.skipped_blank == 2
        assert outcome.progress.completed == 3

    def test_total_outage_returns_source(self, config):
        """Test a translator that always fails still yields a full tree."""
        tree = {
            "hero": {"title": "Learn", "level": "Beginner", "blank": ""},
            "faq": [{"q": "Why?", "a": "Because."}],
        }

        def down(text, target, source):
            raise ConnectionError("service unavailable")

        outcome = ContentTranslator(down, config=config).translate_object(tree, "es")

        assert outcome.tree == tree
        # Non-blank, non-skipped leaves: title, q, a
        assert len(outcome.progress.errors) == 3
        assert outcome.all_failed
        assert outcome.progress.completed == outcome.progress.total

    def test_none_result_is_a_failure(self, config):
        """Test a callback returning None counts as a failed field."""
        outcome = ContentTranslator(lambda *args: None, config=config).translate_object(
            {"title": "Hello"}, "fr"
        )

        assert outcome.tree == {"title": "Hello"}
        assert outcome.progress.errors[0].error == "No translation returned"

    def test_empty_result_is_a_failure(self, config):
        """Test an empty translation keeps the source text and records an error."""
        outcome = ContentTranslator(lambda *args: "", config=config).translate_object(
            {"title": "Hello"}, "fr"
        )

        assert outcome.tree == {"title": "Hello"}
        assert len(outcome.progress.errors) == 1
        assert outcome.progress.errors[0].path == "title"
        assert outcome.progress.errors[0].error == "No translation returned"

    def test_error_without_message_uses_type_name(self, config):
        """Test exceptions with empty messages still produce an error text."""
        def fail(text, target, source):
            raise TimeoutError()

        outcome = ContentTranslator(fail, config=config).translate_object({"a": "b"}, "fr")
        assert outcome.progress.errors[0].error == "TimeoutError"

    def test_same_language_rejected(self, config):
        """Test source and target must differ."""
        with pytest.raises(ValueError):
            ContentTranslator(upper, config=config).translate_object({"a": "b"}, "en", "en")

    def test_scalar_root_rejected(self, config):
        """Test the root must be a container."""
        with pytest.raises(TypeError):
            ContentTranslator(upper, config=config).translate_object("text", "fr")

    def test_non_string_key_rejected(self, config):
        """Test a map with a non-string key is rejected before translating."""
        translate = Mock(side_effect=upper)

        with pytest.raises(TypeError):
            ContentTranslator(translate, config=config).translate_object({1: "one"}, "fr")
        translate.assert_not_called()

    def test_root_list(self, config):
        """Test translating a list of FAQ entries."""
        tree = [{"question": "Why?", "id": "q1"}, {"question": "How?", "id": "q2"}]
        outcome = ContentTranslator(upper, config=TranslationConfig(request_delay=0)).translate_object(
            tree, "fr"
        )
        assert outcome.tree == [
            {"question": "WHY?", "id": "q1"},
            {"question": "HOW?", "id": "q2"},
        ]


class TestProgress:
    """Tests for progress reporting."""

    def test_progress_before_each_field_and_at_end(self, config, source_tree):
        """Test a snapshot precedes every field and one closes the run."""
        snapshots = []
        ContentTranslator(upper, config=config).translate_object(
            source_tree, "fr", on_progress=snapshots.append
        )

        assert [s.current_path for s in snapshots] == [
            "hero.title", "tags[0]", "tags[1]", "tags[1]"
        ]
        assert [s.completed for s in snapshots] == [0, 1, 2, 3]

    def test_progress_monotonic_and_reaches_total_once(self, config):
        """Test completed never decreases and hits total exactly once."""
        tree = {"items": [{"t": str(i)} for i in range(6)], "blank": ""}
        snapshots = []

        def sometimes(text, target, source):
            if text in ("2", "4"):
                raise RuntimeError("nope")
            return text

        ContentTranslator(sometimes, config=config).translate_object(
            tree, "fr", on_progress=snapshots.append
        )

        completed = [s.completed for s in snapshots]
        assert completed == sorted(completed)
        assert completed.count(snapshots[-1].total) == 1
        assert completed[-1] == snapshots[-1].total == 7

    def test_snapshots_are_independent(self, config, source_tree):
        """Test later changes do not leak into earlier snapshots."""
        snapshots = []

        def fail(text, target, source):
            raise RuntimeError("down")

        ContentTranslator(fail, config=config).translate_object(
            source_tree, "fr", on_progress=snapshots.append
        )

        assert snapshots[0].errors == []
        assert len(snapshots[-1].errors) == 3

    def test_progress_callback_errors_propagate(self, config, source_tree):
        """Test exceptions in the progress callback are not swallowed."""
        def broken(progress):
            raise RuntimeError("ui bug")

        with pytest.raises(RuntimeError, match="ui bug"):
            ContentTranslator(upper, config=config).translate_object(
                source_tree, "fr", on_progress=broken
            )

    def test_empty_tree_reports_once(self, config):
        """Test a tree without text fields reports a finished run."""
        snapshots = []
        outcome = ContentTranslator(upper, config=config).translate_object(
            {"level": "x", "count": 2}, "fr", on_progress=snapshots.append
        )

        assert outcome.tree == {"level": "x", "count": 2}
        assert len(snapshots) == 1
        assert snapshots[0].total == 0
        assert snapshots[0].percent_complete == 100.0

    def test_summarize_errors(self, config):
        """Test the user-facing warning text."""
        def fail(text, target, source):
            raise RuntimeError("down")

        outcome = ContentTranslator(fail, config=config).translate_object(
            {"a": "x", "b": "y"}, "fr"
        )

        assert summarize_errors(outcome.progress) == (
            "2 of 2 fields failed to translate and were left in the original language"
        )

    def test_summarize_no_errors(self, config):
        """Test no warning when everything translated."""
        outcome = ContentTranslator(upper, config=config).translate_object({"a": "x"}, "fr")
        assert summarize_errors(outcome.progress) is None


class TestPacingAndStopping:
    """Tests for pacing, cancellation and deadlines."""

    def test_delay_between_remote_calls(self, source_tree):
        """Test the pause is applied between remote calls only."""
        sleep = Mock()
        config = TranslationConfig(skip_fields={"level"}, request_delay=0.1)
        tree = dict(source_tree, blank="")

        ContentTranslator(upper, config=config, sleep=sleep).translate_object(tree, "fr")

        # Three remote calls, so two pauses
        assert sleep.call_count == 2
        sleep.assert_called_with(0.1)

    def test_calls_are_sequential(self, config):
        """Test the callback is never entered concurrently."""
        active = {"now": 0, "max": 0}

        def tracked(text, target, source):
            active["now"] += 1
            active["max"] = max(active["max"], active["now"])
            active["now"] -= 1
            return text

        tree = {"items": [str(i) for i in range(10)]}
        ContentTranslator(tracked, config=config).translate_object(tree, "fr")
        assert active["max"] == 1

    def test_cancel_before_start(self, config, source_tree):
        """Test a set cancel event leaves the tree untranslated."""
        cancel = threading.Event()
        cancel.set()
        translate = Mock(side_effect=upper)

        outcome = ContentTranslator(translate, config=config).translate_object(
            source_tree, "fr", cancel_event=cancel
        )

        assert outcome.tree == source_tree
        assert outcome.progress.stopped_reason == "cancelled"
        assert outcome.progress.completed == 0
        translate.assert_not_called()

    def test_cancel_midway(self, config, source_tree):
        """Test cancelling after the first field keeps the rest in source text."""
        cancel = threading.Event()

        def translate_then_cancel(text, target, source):
            cancel.set()
            return text.upper()

        outcome = ContentTranslator(translate_then_cancel, config=config).translate_object(
            source_tree, "fr", cancel_event=cancel
        )

        assert outcome.tree == {
            "hero": {"title": "LEARN TO TRADE", "level": "Beginner"},
            "tags": ["forex", "risk"],
        }
        assert outcome.progress.completed == 1
        assert outcome.progress.errors == []

    def test_deadline(self, source_tree):
        """Test the run stops once the deadline has passed."""
        ticks = iter([0.0, 0.0, 5.0, 11.0, 12.0])
        config = TranslationConfig(skip_fields={"level"}, request_delay=0, deadline_seconds=10)

        outcome = ContentTranslator(upper, config=config, clock=lambda: next(ticks)).translate_object(
            source_tree, "fr"
        )

        assert outcome.progress.stopped_reason == "deadline"
        assert outcome.progress.completed == 2
        assert outcome.tree["tags"] == ["FOREX", "risk"]


class TestTranslateToLanguages:
    """Tests for multi-language runs."""

    def test_each_language_gets_own_progress(self, config, source_tree):
        """Test one independent run per target language."""
        def tagged(text, target, source):
            return f"{target}:{text}"

        outcomes = ContentTranslator(tagged, config=config).translate_to_languages(
            source_tree, ["fr", "de"], source_language="en"
        )

        assert list(outcomes) == ["fr", "de"]
        assert outcomes["fr"].tree["tags"] == ["fr:forex", "fr:risk"]
        assert outcomes["de"].tree["hero"]["title"] == "de:Learn to trade"
        assert outcomes["fr"].progress is not outcomes["de"].progress

    def test_source_language_skipped(self, config, source_tree):
        """Test the source language is not translated into itself."""
        outcomes = ContentTranslator(upper, config=config).translate_to_languages(
            source_tree, ["en", "fr"], source_language="en"
        )
        assert list(outcomes) == ["fr"]

    def test_progress_tagged_with_language(self, config, source_tree):
        """Test progress callbacks receive the language."""
        seen = []
        ContentTranslator(upper, config=config).translate_to_languages(
            source_tree, ["fr", "es"], on_progress=lambda lang, p: seen.append(lang)
        )
        assert seen == ["fr"] * 4 + ["es"] * 4


class TestModuleTranslateObject:
    """Tests for the translate_object convenience function."""

    def test_returns_tree_and_progress(self, source_tree):
        """Test the functional form."""
        tree, progress = translate_object(
            source_tree,
            "fr",
            upper,
            config=TranslationConfig(skip_fields={"level"}, request_delay=0),
        )

        assert tree["tags"] == ["FOREX", "RISK"]
        assert progress.total == 3
