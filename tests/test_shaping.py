"""Tests for bidi reordering and glyph reshaping."""

from __future__ import annotations

import logging
from types import SimpleNamespace

import arabic_reshaper

from rtldocs.core.models import Direction, ShapedRun
from rtldocs.core.shaping import Shaper, contains_persian, segment_runs, text_direction


class TestDetection:
    def test_contains_persian(self):
        assert contains_persian("قرارداد")
        assert contains_persian("Invoice شماره 5")
        assert not contains_persian("Invoice 5")
        assert not contains_persian("")
        assert not contains_persian(None)

    def test_text_direction(self):
        assert text_direction("سلام") is Direction.RTL
        assert text_direction("hello") is Direction.LTR


class TestShaper:
    def test_latin_text_is_a_single_ltr_run(self):
        assert Shaper().shape("Invoice 2024") == [ShapedRun("Invoice 2024", Direction.LTR, 0)]

    def test_empty_text_has_no_runs(self):
        assert Shaper().shape("") == []

    def test_mixed_sentence_visual_order(self):
        runs = Shaper().shape("سلام API دنیا")
        first = arabic_reshaper.reshape("دنیا")[::-1]
        last = arabic_reshaper.reshape("سلام")[::-1]

        assert "".join(r.text for r in runs) == f"{first} API {last}"
        assert [r.direction for r in runs] == [Direction.RTL, Direction.LTR, Direction.RTL]
        assert runs[1].text.strip() == "API"
        assert [r.visual_index for r in runs] == [0, 1, 2]

    def test_digits_stay_left_to_right(self):
        visual = Shaper().visual_text("مبلغ 1234")
        assert "1234" in visual

    def test_disabled_shaper_passes_text_through(self):
        assert Shaper(enabled=False).shape("سلام") == [ShapedRun("سلام", Direction.RTL, 0)]

    def test_shaping_failure_returns_input_and_logs_once(self, caplog):
        def boom(text):
            raise RuntimeError("broken reshaper")

        shaper = Shaper()
        shaper._reshaper = SimpleNamespace(reshape=boom)
        with caplog.at_level(logging.WARNING, logger="rtldocs.core.shaping"):
            first = shaper.shape("سلام")
            second = shaper.shape("دنیا")

        assert first == [ShapedRun("سلام", Direction.RTL, 0)]
        assert second == [ShapedRun("دنیا", Direction.RTL, 0)]
        assert len([r for r in caplog.records if "Shaping failed" in r.getMessage()]) == 1


class TestSegmentRuns:
    def test_neutrals_join_the_run_on_their_left(self):
        runs = segment_runs("abc ابج")
        assert [r.text for r in runs] == ["abc ", "ابج"]

    def test_only_neutrals_take_base_direction(self):
        assert segment_runs("  ") == [ShapedRun("  ", Direction.RTL, 0)]
