"""Tests for Metadata and MetadataBuilder."""

import pytest
from hypothesis import given

from klaw_outcome import Metadata, MetadataBuilder
from tests.strategies import metadata


class TestMetadataLookup:
    """Tests for case-insensitive lookups."""

    def test_lookup_ignores_case(self):
        """Keys match regardless of case."""
        meta = Metadata({'TraceId': 'abc'})
        assert meta['traceid'] == 'abc'
        assert meta['TRACEID'] == 'abc'
        assert 'traceID' in meta
        assert meta.contains_key('tRaCeId')

    def test_missing_key_raises(self):
        """Missing keys raise KeyError."""
        with pytest.raises(KeyError):
            Metadata()['missing']

    def test_get_with_default(self):
        """Mapping.get works with folded keys."""
        meta = Metadata(a=1)
        assert meta.get('A') == 1
        assert meta.get('b', 'fallback') == 'fallback'

    def test_first_spelling_is_kept(self):
        """Iteration reports the first spelling of a key."""
        meta = Metadata({'TraceId': 1}, traceid=2)
        assert list(meta) == ['TraceId']
        assert meta['traceid'] == 2

    def test_insertion_order(self):
        """Keys iterate in insertion order."""
        meta = Metadata([('b', 1), ('a', 2), ('c', 3)])
        assert list(meta) == ['b', 'a', 'c']

    def test_non_str_key_rejected(self):
        """Only string keys are accepted."""
        with pytest.raises(TypeError):
            Metadata({1: 'x'})


class TestMetadataMerge:
    """Tests for merging and equality."""

    def test_later_writes_win(self):
        """merge writes entries on top of the existing ones."""
        meta = Metadata(k='old').merge({'K': 'new'})
        assert meta['k'] == 'new'
        assert len(meta) == 1

    def test_merge_returns_new_instance(self):
        """merge never mutates the receiver."""
        meta = Metadata(k='v')
        merged = meta.merge(other=1)
        assert 'other' not in meta
        assert merged['other'] == 1

    def test_merge_nothing_returns_self(self):
        """merge without arguments is the identity."""
        meta = Metadata(k='v')
        assert meta.merge() is meta

    def test_equality_ignores_case(self):
        """Equality compares folded keys."""
        assert Metadata(Key=1) == Metadata(key=1)
        assert Metadata(key=1) == {'KEY': 1}
        assert Metadata(key=1) != Metadata(key=2)

    def test_equality_with_non_str_keys(self):
        """Mappings with non-string keys are simply unequal."""
        assert Metadata() != {1: 2}
        assert not Metadata(a=1) == {'a': 1, 2: 'b'}

    def test_empty_is_shared(self):
        """EMPTY is an empty Metadata."""
        assert len(Metadata.EMPTY) == 0
        assert not Metadata.EMPTY

    @given(metadata, metadata)
    def test_merge_right_bias(self, left, right):
        """Every key of the right side wins in a merge."""
        merged = left.merge(right)
        for key, value in right.items():
            assert merged[key] == value
        for key, value in left.items():
            if key not in right:
                assert merged[key] == value


class TestMetadataToString:
    """Tests for bounded rendering."""

    def test_renders_pairs(self):
        """Pairs are rendered as key:value joined by commas."""
        assert Metadata(a=1, b=None).to_string() == 'a:1,b:null'

    def test_take_limits_entries(self):
        """take renders at most that many entries."""
        assert Metadata(a=1, b=2, c=3).to_string(2) == 'a:1,b:2'

    def test_non_positive_take(self):
        """take of zero or less renders nothing."""
        assert Metadata(a=1).to_string(0) == ''
        assert Metadata(a=1).to_string(-1) == ''

    def test_str(self):
        """str() renders every entry."""
        assert str(Metadata(a=1)) == 'a:1'


class TestMetadataBuilder:
    """Tests for the fluent builder."""

    def test_build(self):
        """Builder accumulates entries."""
        meta = MetadataBuilder().add('a', 1).add_range({'b': 2}, c=3).build()
        assert dict(meta) == {'a': 1, 'b': 2, 'c': 3}

    def test_add_if(self):
        """add_if honours bools and callables."""
        meta = (
            MetadataBuilder()
            .add_if(True, 'yes', 1)
            .add_if(False, 'no', 2)
            .add_if(lambda: True, 'lazy', 3)
            .build()
        )
        assert list(meta) == ['yes', 'lazy']

    def test_remove_and_clear(self):
        """remove drops a key case-insensitively, clear drops all."""
        builder = MetadataBuilder({'Key': 1, 'other': 2}).remove('KEY')
        assert list(builder.build()) == ['other']
        assert builder.clear().build() is Metadata.EMPTY

    def test_build_snapshots(self):
        """Later builder changes do not leak into built Metadata."""
        builder = MetadataBuilder().add('a', 1)
        meta = builder.build()
        builder.add('b', 2)
        assert 'b' not in meta
