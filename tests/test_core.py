"""
Core model unit tests: Range, Node, normalizers, percepts, indexes, bindings.
"""
import math

import pytest

from codedash.errors import ConstructionError
from codedash.model import (
    CombineIndex, ComputeIndex, MapIndex, Node, NormalizerDef,
    PerceptDef, Range, SourceIndex, bind, index, map_index, numeric_fields,
    validate_source, with_normalize,
)
from codedash.presets import Registry, default_registry
from codedash.presets import indexes as idx
from codedash.presets import percepts as pct
from codedash.presets.normalizers import NORMALIZERS, nth_position, percentile, rank


def make_node(**overrides) -> Node:
    raw = {
        "name": "auth.ts::login", "short_name": "login",
        "file": "auth.ts", "semantic_type": "function",
    }
    raw.update(overrides)
    return Node(**raw)


# ── Range ─────────────────────────────────────────────────────────────────────

class TestRange:
    def test_mapper_endpoints(self):
        r = Range(0.2, 5.0)
        assert r.mapper(0) == 0.2
        assert r.mapper(1) == pytest.approx(5.0)

    def test_mapper_midpoint(self):
        assert Range(0, 10).mapper(0.5) == 5

    def test_inverted_range_allowed(self):
        r = Range(240, 0)
        assert r.mapper(0) == 240
        assert r.mapper(1) == 0
        assert r.mapper(0.25) == 180

    def test_non_number_rejected(self):
        with pytest.raises(ConstructionError, match="lo must be number"):
            Range("a", 1)

    def test_bool_rejected(self):
        with pytest.raises(ConstructionError):
            Range(0, True)

    def test_from_pair(self):
        assert Range.from_pair([1, 2]) == Range(1, 2)

    def test_from_pair_wrong_length(self):
        with pytest.raises(ConstructionError, match=r"range\(hue\)"):
            Range.from_pair([1, 2, 3], "hue")

    def test_immutable(self):
        with pytest.raises(AttributeError):
            Range(0, 1).lo = 5


# ── Node ──────────────────────────────────────────────────────────────────────

class TestNode:
    def test_defaults_applied(self):
        n = make_node()
        assert n.lines == 1
        assert n.cyclomatic == 1
        assert n.git_churn_30d == 0
        assert n.exported is False
        assert n.visibility == "private"

    def test_coverage_nullable_no_default(self):
        assert make_node().coverage is None
        assert make_node(coverage=0.4).coverage == 0.4

    def test_missing_required_field(self):
        with pytest.raises(ConstructionError, match="required field 'file'"):
            Node(name="x", short_name="x", semantic_type="function")

    def test_wrong_type(self):
        with pytest.raises(ConstructionError, match="field 'lines' expected number"):
            make_node(lines="many")

    def test_unknown_field(self):
        with pytest.raises(ConstructionError, match="unknown field"):
            make_node(colour="red")

    def test_from_dict_ignores_extra_keys(self):
        n = Node.from_dict({
            "name": "a.ts::f", "short_name": "f", "file": "a.ts",
            "semantic_type": "function", "kind": "function", "lines": 7,
        })
        assert n.lines == 7

    def test_immutable(self):
        n = make_node()
        with pytest.raises(AttributeError):
            n.lines = 99
        with pytest.raises(AttributeError):
            del n.lines

    def test_equality_and_hash(self):
        assert make_node(lines=3) == make_node(lines=3)
        assert len({make_node(lines=3), make_node(lines=3)}) == 1

    def test_to_dict_roundtrip(self):
        n = make_node(lines=12, coverage=0.5)
        assert Node(**n.to_dict()) == n

    def test_numeric_fields(self):
        fields = numeric_fields()
        assert "lines" in fields
        assert "coverage" in fields
        assert "name" not in fields
        assert fields == sorted(fields)

    def test_validate_source(self):
        assert validate_source("lines") == (True, None)
        ok, msg = validate_source("short_name")
        assert not ok and "not number" in msg
        ok, msg = validate_source("nope")
        assert not ok and "unknown field" in msg


# ── Normalizers ───────────────────────────────────────────────────────────────

class TestNthPosition:
    def test_ten_values(self):
        assert nth_position(10, 10) == 1
        assert nth_position(10, 50) == 5
        assert nth_position(10, 90) == 9

    def test_never_below_one(self):
        assert nth_position(0, 10) == 1
        assert nth_position(1, 10) == 1

    def test_ceil(self):
        assert nth_position(2, 90) == 2
        assert nth_position(7, 10) == 1
        assert nth_position(11, 90) == 10


class TestPercentile:
    def test_one_to_ten(self):
        stats = percentile.stats(list(range(1, 11)))
        assert stats["p10"] == 1
        assert stats["p90"] == 9
        fn = percentile.fit(list(range(1, 11)))
        assert fn(1) == 0
        assert fn(9) == 1
        assert fn(5) == 0.5

    def test_clamps_outliers(self):
        fn = percentile.fit(list(range(1, 11)))
        assert fn(-100) == 0
        assert fn(10_000) == 1

    def test_empty_is_half(self):
        fn = percentile.fit([])
        assert fn(0) == 0.5
        assert fn(42) == 0.5

    def test_flat_distribution_is_half(self):
        fn = percentile.fit([3, 3, 3, 3])
        assert fn(3) == 0.5
        assert fn(100) == 0.5

    def test_stats_fields(self):
        stats = percentile.stats([5, 1, 3])
        assert stats["min"] == 1
        assert stats["max"] == 5
        assert stats["count"] == 3


class TestRank:
    def test_ties_share_average_rank(self):
        fn = rank.fit([10, 20, 20, 30])
        assert fn(20) == pytest.approx(0.5)
        assert fn(10) == 0
        assert fn(30) == 1

    def test_miss_uses_insertion_rank(self):
        fn = rank.fit([10, 20, 20, 30])
        assert fn(15) == pytest.approx(1 / 3)
        assert fn(25) == pytest.approx(1.0)
        assert fn(5) == 0

    def test_above_all_samples(self):
        assert rank.fit([1, 2, 3])(99) == 1.0

    def test_single_value(self):
        fn = rank.fit([7])
        assert fn(7) == 0.5

    def test_empty_is_half(self):
        assert rank.fit([])(3) == 0.5


class TestNormalizerProperties:
    SAMPLES = [
        [1, 2, 3, 4, 5, 6, 7, 8, 9, 10],
        [0.5, 100, 3, 3, 7, 2_000, 41],
        [-5, -1, 0, 0, 0, 1, 8],
        [42],
    ]

    @pytest.mark.parametrize("name", sorted(NORMALIZERS))
    def test_output_in_unit_interval(self, name):
        for values in self.SAMPLES:
            fn = NORMALIZERS[name].fit(values)
            for v in values + [min(values) - 10, max(values) + 10]:
                assert 0.0 <= fn(v) <= 1.0

    @pytest.mark.parametrize("name", sorted(NORMALIZERS))
    def test_monotonic(self, name):
        for values in self.SAMPLES:
            fn = NORMALIZERS[name].fit(values)
            outs = [fn(v) for v in sorted(set(values))]
            assert outs == sorted(outs)


class TestNormalizerDef:
    def test_requires_callables(self):
        with pytest.raises(ConstructionError, match="stats must be callable"):
            NormalizerDef("bad", stats=None, normalize=lambda s: lambda r: r)
        with pytest.raises(ConstructionError, match="normalize must be callable"):
            NormalizerDef("bad", stats=len, normalize="x")

    def test_fit_clamps_user_output(self):
        loose = NormalizerDef("loose", stats=len, normalize=lambda s: lambda raw: raw * 10)
        fn = loose.fit([1, 2])
        assert fn(1) == 1.0
        assert fn(-1) == 0.0


# ── Percept ───────────────────────────────────────────────────────────────────

class TestPercept:
    def test_mapper(self):
        size = PerceptDef("size", range=(0.2, 5.0))
        assert size.mapper(0) == 0.2
        assert size.mapper(1) == pytest.approx(5.0)
        assert size.mapper(0.5) == pytest.approx(2.6)

    def test_inverted(self):
        assert pct.hue.mapper(0) == 240
        assert pct.hue.mapper(1) == 0

    def test_steps_give_exactly_s_levels(self):
        p = PerceptDef("glow", range=(0, 1), steps=3)
        outs = {p.mapper(i / 100) for i in range(101)}
        assert outs == {0, 0.5, 1}

    def test_steps_with_inverted_range(self):
        p = PerceptDef("hue", range=(240, 0), steps=5)
        outs = {p.mapper(i / 100) for i in range(101)}
        assert len(outs) == 5
        assert max(outs) == 240 and min(outs) == 0

    def test_integral_float_steps_accepted(self):
        assert PerceptDef("x", range=(0, 1), steps=4.0).steps == 4

    @pytest.mark.parametrize("steps", [1, 0, 2.5, "3", True, math.inf])
    def test_bad_steps_rejected(self, steps):
        with pytest.raises(ConstructionError, match="steps must be integer >= 2"):
            PerceptDef("x", range=(0, 1), steps=steps)

    def test_range_required(self):
        with pytest.raises(ConstructionError, match="range is required"):
            PerceptDef("x", range=None)

    def test_name_required(self):
        with pytest.raises(ConstructionError):
            PerceptDef("", range=(0, 1))


# ── Index ─────────────────────────────────────────────────────────────────────

class TestIndex:
    def test_source(self):
        i = index("lines", source="lines")
        assert isinstance(i, SourceIndex)
        assert i.kind == "source"
        assert i.resolve(make_node(lines=42)) == 42
        assert i.normalize == "percentile"

    def test_resolver_is_resolve(self):
        assert idx.lines.resolver(make_node(lines=3)) == 3

    def test_source_nullable_field_absent(self):
        assert idx.coverage.resolve(make_node()) is None

    def test_source_must_be_numeric(self):
        with pytest.raises(ConstructionError, match="not number"):
            index("bad", source="file")

    def test_source_unknown_field(self):
        with pytest.raises(ConstructionError, match="unknown field"):
            index("bad", source="colour")

    def test_requires_one_variant(self):
        with pytest.raises(ConstructionError, match="needs one of 'source', 'compute', 'combine'"):
            index("empty")

    def test_rejects_multiple_variants(self):
        with pytest.raises(ConstructionError, match="only one of"):
            index("both", source="lines", compute=lambda n: 1)

    def test_compute(self):
        i = index("density", compute=lambda n: n.lines / n.params)
        assert isinstance(i, ComputeIndex)
        assert i.resolve(make_node(lines=10, params=2)) == 5

    def test_compute_error_is_absence(self):
        i = index("density", compute=lambda n: n.lines / n.params)
        assert i.resolve(make_node(lines=10, params=0)) is None

    def test_compute_non_number_is_absence(self):
        assert index("s", compute=lambda n: "big").resolve(make_node()) is None
        assert index("b", compute=lambda n: True).resolve(make_node()) is None
        assert index("nan", compute=lambda n: math.nan).resolve(make_node()) is None

    def test_combine(self):
        assert isinstance(idx.complexity, CombineIndex)
        n = make_node(lines=10, params=2)
        assert idx.complexity.resolve(n) == pytest.approx(10 * 0.3 + 2 * 2.0)

    def test_combine_absent_if_either_absent(self):
        c = index("cov_lines", combine=(idx.coverage, idx.lines, lambda a, b: a * b))
        assert c.resolve(make_node(lines=5)) is None
        assert c.resolve(make_node(lines=5, coverage=0.5)) == 2.5

    def test_combine_shape(self):
        with pytest.raises(ConstructionError, match="combine must be"):
            index("bad", combine=(idx.lines, idx.params))
        with pytest.raises(ConstructionError, match=r"combine\[1\] must be IndexDef"):
            index("bad", combine=(idx.lines, "params", max))

    def test_map_keeps_name_and_normalizer(self):
        ranked = index("churn", source="git_churn_30d", normalize="rank")
        m = map_index(ranked, math.log1p)
        assert isinstance(m, MapIndex)
        assert m.name == "churn"
        assert m.normalize == "rank"
        assert m.resolve(make_node(git_churn_30d=0)) == 0

    def test_map_override_normalizer(self):
        assert map_index(idx.churn, math.log1p, normalize="rank").normalize == "rank"

    def test_map_propagates_absence(self):
        assert map_index(idx.coverage, lambda v: v * 2).resolve(make_node()) is None

    def test_with_normalize_copies(self):
        ranked = with_normalize(idx.lines, "rank")
        assert ranked.normalize == "rank"
        assert idx.lines.normalize == "percentile"
        assert ranked.field == "lines"
        assert type(ranked) is SourceIndex

    def test_bad_normalize_type(self):
        with pytest.raises(ConstructionError, match="normalize must be string or NormalizerDef"):
            index("x", source="lines", normalize=3)

    def test_immutable(self):
        with pytest.raises(AttributeError):
            idx.lines.name = "other"


# ── Binding ───────────────────────────────────────────────────────────────────

class TestBinding:
    def test_order_independent(self):
        a = bind(idx.churn, pct.hue)
        b = bind(pct.hue, idx.churn)
        assert a.key == b.key == "hue"
        assert a.source_label == b.source_label == "churn"

    def test_normalizer_ref(self):
        assert bind(idx.churn, pct.hue).normalizer_ref == "percentile"
        assert bind(idx.churn, pct.hue, normalize="rank").normalizer_ref == "rank"

    def test_missing_part(self):
        with pytest.raises(ConstructionError, match="PerceptDef required"):
            bind(idx.churn)

    def test_duplicate_part(self):
        with pytest.raises(ConstructionError, match="multiple IndexDef"):
            bind(idx.churn, idx.lines, pct.hue)

    def test_unknown_part(self):
        with pytest.raises(ConstructionError, match="expected IndexDef or PerceptDef"):
            bind(idx.churn, "hue")

    def test_with_resolved(self):
        b = bind(idx.churn, pct.hue, label="heat")
        r = b.with_resolved(rank)
        assert r.resolved is rank
        assert b.resolved is None
        assert r.label == "heat"

    def test_repr(self):
        assert repr(bind(idx.churn, pct.hue)) == "Binding<churn -> hue>"

    def test_immutable(self):
        b = bind(idx.churn, pct.hue)
        with pytest.raises(AttributeError):
            b.label = "x"


# ── Registry ──────────────────────────────────────────────────────────────────

class TestRegistry:
    def test_default_catalogs(self):
        reg = default_registry()
        assert set(reg.normalizers) == {"percentile", "rank"}
        assert "complexity" in reg.indexes
        assert list(reg.percepts)[:3] == ["hue", "size", "border"]
        assert "recommended" in reg.presets

    def test_built_once(self):
        assert default_registry() is default_registry()

    def test_catalogs_read_only(self):
        with pytest.raises(TypeError):
            default_registry().indexes["x"] = idx.lines

    def test_requires_percentile_and_rank(self):
        with pytest.raises(ConstructionError, match="missing required normalizer"):
            Registry(normalizers={"percentile": percentile}, indexes={}, percepts={}, presets={})

    def test_rejects_wrong_kind(self):
        with pytest.raises(ConstructionError, match="must be PerceptDef"):
            default_registry().extend(percepts={"glow": idx.lines})

    def test_extend_leaves_original(self):
        extra = PerceptDef("glow", range=(0, 1))
        reg = default_registry().extend(percepts={"glow": extra})
        assert reg.percepts["glow"] is extra
        assert "glow" not in default_registry().percepts
