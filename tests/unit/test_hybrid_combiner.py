import pytest

from models.domain import MentionContext, MentionSource
from services.item_recognition.catalog_index import CatalogIndex
from services.item_recognition.errors import OracleTransportError
from services.item_recognition.hybrid_combiner import (
    annotate_inline_hints,
    combine,
    extract_inline,
    extract_single_pass,
    filter_by_confidence,
)
from services.item_recognition.lexical_matcher import match_items
from services.item_recognition.config import ExtractionConfig
from services.item_recognition.models import (
    ConfirmedCandidate,
    ItemCatalogEntry,
    OracleConfirmation,
    OracleExtraction,
    ScoredMention,
    TokenUsage,
)

from conftest import (
    DRAGON_UPDATE,
    SAMPLE_ITEMS,
    FakeOracle,
    candidate,
    confirmation_of,
    extraction_of,
)


def _by_id(mentions):
    return {m.item_id: m for m in mentions}


class TestCombine:
    @pytest.mark.asyncio
    async def test_partitions_by_source(self):
        oracle = FakeOracle(
            extractions=[
                OracleExtraction(
                    candidates=[
                        candidate("Dragon platebody", confidence=0.95),
                        candidate("Dragon claws"),
                        candidate("Abyssal whip", confidence=0.9),
                        candidate("Made up item", confidence=0.9),
                    ],
                    usage=TokenUsage(prompt_tokens=100, completion_tokens=20, reasoning_tokens=5),
                )
            ],
            confirmations=[confirmation_of("Dragon chainbody")],
        )

        result = await combine("Dragon changes", DRAGON_UPDATE, SAMPLE_ITEMS, oracle=oracle)
        mentions = _by_id(result.mentions)

        assert set(mentions) == {1, 2, 3, 8}
        assert mentions[1].source == MentionSource.BOTH
        assert mentions[1].confidence == 1.0
        assert mentions[8].source == MentionSource.BOTH
        assert mentions[8].confidence == 1.0
        assert mentions[3].source == MentionSource.LLM_ONLY
        assert mentions[3].confidence == 0.8
        assert mentions[2].source == MentionSource.ALGO_VALIDATED
        assert mentions[2].confidence == 0.7
        assert mentions[2].context == MentionContext.MENTION_ONLY

    @pytest.mark.asyncio
    async def test_sorted_by_confidence(self):
        oracle = FakeOracle(
            extractions=[extraction_of("Abyssal whip", "Dragon platebody")],
            confirmations=[confirmation_of("Dragon chainbody", "Dragon claws")],
        )

        result = await combine("Dragon changes", DRAGON_UPDATE, SAMPLE_ITEMS, oracle=oracle)

        confidences = [m.confidence for m in result.mentions]
        assert confidences == sorted(confidences, reverse=True)
        assert result.mentions[0].item_id == 1

    @pytest.mark.asyncio
    async def test_only_lexical_only_items_are_confirmed(self):
        oracle = FakeOracle(extractions=[extraction_of("Dragon platebody", "Dragon claws")])

        await combine("Dragon changes", DRAGON_UPDATE, SAMPLE_ITEMS, oracle=oracle)

        assert len(oracle.confirm_calls) == 1
        assert oracle.confirm_calls[0]["names"] == ["Dragon chainbody"]

    @pytest.mark.asyncio
    async def test_no_confirmation_call_without_lexical_only_items(self):
        oracle = FakeOracle(
            extractions=[extraction_of("Dragon platebody", "Dragon chainbody", "Dragon claws")]
        )

        await combine("Dragon changes", DRAGON_UPDATE, SAMPLE_ITEMS, oracle=oracle)

        assert oracle.confirm_calls == []

    @pytest.mark.asyncio
    async def test_unconfirmed_lexical_items_are_dropped(self):
        oracle = FakeOracle(extractions=[extraction_of("Dragon platebody")])

        result = await combine("Dragon changes", DRAGON_UPDATE, SAMPLE_ITEMS, oracle=oracle)

        assert set(_by_id(result.mentions)) == {1}

    @pytest.mark.asyncio
    async def test_low_llm_confidence_is_kept_below_the_band(self):
        oracle = FakeOracle(
            extractions=[OracleExtraction(candidates=[candidate("Twisted bow", confidence=0.4)])]
        )

        result = await combine("Bow news", "Nothing lexical here", SAMPLE_ITEMS, oracle=oracle)

        assert result.mentions[0].confidence == 0.4
        assert result.mentions[0].source == MentionSource.LLM_ONLY

    @pytest.mark.asyncio
    async def test_failed_confirmation_yields_no_algo_items(self):
        oracle = FakeOracle(
            extractions=[extraction_of("Dragon platebody")],
            confirmations=[OracleTransportError("timeout")],
        )

        result = await combine("Dragon changes", DRAGON_UPDATE, SAMPLE_ITEMS, oracle=oracle)

        assert [m.item_id for m in result.mentions] == [1]
        assert result.stats["algo_validated"] == 0

    @pytest.mark.asyncio
    async def test_extraction_failure_propagates(self):
        oracle = FakeOracle(extractions=[OracleTransportError("connection reset")])

        with pytest.raises(OracleTransportError):
            await combine("Dragon changes", DRAGON_UPDATE, SAMPLE_ITEMS, oracle=oracle)

    @pytest.mark.asyncio
    async def test_usage_and_stats(self):
        oracle = FakeOracle(
            extractions=[extraction_of("Dragon platebody", "Abyssal whip", "Nonsense")],
            confirmations=[confirmation_of("Dragon chainbody")],
        )

        result = await combine("Dragon changes", DRAGON_UPDATE, SAMPLE_ITEMS, oracle=oracle)

        assert result.usage == TokenUsage(prompt_tokens=150, completion_tokens=25)
        assert result.stats == {
            "llm_candidates": 3,
            "llm_validated": 2,
            "algo_matches": 3,
            "confirmed": 1,
            "llm_only": 1,
            "algo_validated": 1,
            "total": 3,
        }
        assert result.latency >= 0

    @pytest.mark.asyncio
    async def test_greedy_algo_match_snippet_uses_matched_prefix(self):
        oracle = FakeOracle(confirmations=[OracleConfirmation(confirmed=[ConfirmedCandidate(name="Virtus mask")])])
        catalog = [ItemCatalogEntry(id=1, name="Virtus mask")]

        result = await combine(
            "Virtus", "Virtus drops are rarer.", catalog, oracle=oracle, config=ExtractionConfig().with_greedy()
        )

        assert len(result.mentions) == 1
        assert result.mentions[0].source == MentionSource.ALGO_VALIDATED
        assert result.mentions[0].snippet == "Virtus drops are rarer."


class TestSinglePass:
    CATALOG = [
        ItemCatalogEntry(id=1, name="Dragon platebody", value=500_000, buy_limit=8),
        ItemCatalogEntry(id=2, name="Dragon chainbody", value=100_000, buy_limit=8),
        ItemCatalogEntry(id=3, name="Abyssal whip", value=120_000, buy_limit=70),
    ]

    @pytest.mark.asyncio
    async def test_only_significant_hits_become_hints(self):
        oracle = FakeOracle(extractions=[extraction_of("Dragon platebody", "Abyssal whip")])

        result = await extract_single_pass(
            "Dragon changes", DRAGON_UPDATE, self.CATALOG, oracle=oracle, margin_threshold=1_000_000
        )

        assert oracle.extract_calls[0]["hints"] == ["Dragon platebody"]
        assert oracle.confirm_calls == []
        mentions = _by_id(result.mentions)
        assert mentions[1].source == MentionSource.BOTH
        assert mentions[1].confidence == 1.0
        assert mentions[3].source == MentionSource.LLM_ONLY
        assert mentions[3].confidence == 0.8
        assert result.stats == {"algo_candidates": 1, "llm_extracted": 2, "validated": 2, "confirmed": 1}


class TestInline:
    CATALOG = [
        ItemCatalogEntry(id=1, name="Virtus mask"),
        ItemCatalogEntry(id=2, name="Virtus robe top"),
        ItemCatalogEntry(id=3, name="Cannonball"),
        ItemCatalogEntry(id=4, name="Twisted bow"),
    ]

    def test_annotate_groups_hints_by_trigger(self):
        text = "Virtus drops are rarer. Cannonball smithing is faster. Virtus again."
        index = CatalogIndex(self.CATALOG)
        lexical = match_items(text, index, greedy=True)

        annotated, triggers = annotate_inline_hints(text, lexical, index)

        assert triggers == {"virtus": ["Virtus mask", "Virtus robe top"], "cannonball": ["Cannonball"]}
        assert annotated == (
            "Virtus «Virtus mask, Virtus robe top» drops are rarer. "
            "Cannonball «Cannonball» smithing is faster. Virtus again."
        )

    def test_hints_are_not_nested_inside_other_hints(self):
        catalog = [
            ItemCatalogEntry(id=1, name="Zamorak godsword"),
            ItemCatalogEntry(id=2, name="Godsword blade"),
        ]
        text = "Zamorak brought a new godsword."
        index = CatalogIndex(catalog)
        lexical = match_items(text, index, greedy=True)

        annotated, _ = annotate_inline_hints(text, lexical, index)

        assert annotated == "Zamorak «Zamorak godsword» brought a new godsword «Godsword blade»."

    def test_hints_per_trigger_are_capped(self):
        catalog = [ItemCatalogEntry(id=i, name=f"Virtus piece{i}") for i in range(1, 8)]
        index = CatalogIndex(catalog)
        lexical = match_items("Virtus set", index, greedy=True)

        annotated, _ = annotate_inline_hints("Virtus set", lexical, index, max_hints_per_trigger=2)

        assert annotated == "Virtus «Virtus piece1, Virtus piece2» set"

    @pytest.mark.asyncio
    async def test_extract_inline_validates_against_significant_items(self):
        oracle = FakeOracle(extractions=[extraction_of("Virtus mask", "Elder maul")])

        result = await extract_inline("Virtus", "Virtus drops are rarer.", self.CATALOG, oracle=oracle)

        assert "«Virtus mask, Virtus robe top»" in oracle.extract_calls[0]["text"]
        assert [m.item_id for m in result.mentions] == [1]
        assert result.mentions[0].source == MentionSource.BOTH
        assert result.stats["triggers"] == 1
        assert result.stats["total_hints"] == 2


def test_filter_by_confidence():
    mentions = [
        ScoredMention(1, "A", "", MentionContext.BUFF, 0.9, MentionSource.BOTH),
        ScoredMention(2, "B", "", MentionContext.BUFF, 0.5, MentionSource.LLM_ONLY),
        ScoredMention(3, "C", "", MentionContext.BUFF, 0.3, MentionSource.LLM_ONLY),
    ]

    assert [m.item_id for m in filter_by_confidence(mentions)] == [1, 2]
    assert [m.item_id for m in filter_by_confidence(mentions, min_confidence=0.95)] == []
