import copy
import math

import numpy as np
import pytest
from hypothesis import given, strategies as st

from fastforest.errors import PreconditionViolation
from fastforest.problem_spec import LABEL_DTYPES, LabelType, ProblemSpec, ProblemType, cast_labels


def _expected_cast(value, dtype):
    dtype = np.dtype(dtype)
    if dtype.kind == 'f':
        return dtype.type(value)
    v = int(math.trunc(value))
    bits = 8 * dtype.itemsize
    if dtype.kind == 'u':
        return v % 2**bits
    return (v + 2**(bits - 1)) % 2**bits - 2**(bits - 1)


_int_labels = st.lists(st.integers(min_value=-2**40, max_value=2**40), min_size=1, max_size=20)
_float_labels = st.lists(st.floats(min_value=-1e6, max_value=1e6, allow_nan=False), min_size=1, max_size=20)


def _populated_spec():
    return ProblemSpec() \
        .column_count(4) \
        .classes_([3, 1, 2]) \
        .class_weights([0.5, 1.0, 2.0])


class TestProblemSpecBuilder:

    def test_defaults(self):
        spec = ProblemSpec()
        assert spec.column_count_ == 0
        assert spec.class_count_ == 0
        assert spec.row_count_ == 0
        assert spec.actual_mtry_ == 0
        assert spec.actual_msample_ == 0
        assert spec.problem_type_ == ProblemType.CHECKLATER
        assert spec.class_type_ == LabelType.UNKNOWN
        assert not spec.is_weighted
        assert len(spec.class_weights_) == 0
        assert not spec.used()

    def test_small_classification_problem(self):
        spec = ProblemSpec().column_count(4).classes_([0, 1, 2])
        assert spec.class_count_ == 3
        assert spec.column_count_ == 4
        assert spec.class_type_ == ProblemSpec.type_of(0)
        assert spec.to_classlabel(1, LabelType.INT32) == 1
        assert spec.to_classlabel(1, np.int32) == 1
        assert spec.used()

    def test_classes_replaces_previous_labels(self):
        spec = ProblemSpec().classes_([1, 2, 3]).classes_([7.5, 8.5])
        assert spec.class_count_ == 2
        assert spec.class_type_ == LabelType.DOUBLE
        assert spec.labels(LabelType.DOUBLE).tolist() == [7.5, 8.5]

    def test_classes_from_numpy_array_uses_its_dtype(self):
        spec = ProblemSpec().classes_(np.array([5, 6], dtype=np.uint16))
        assert spec.class_type_ == LabelType.UINT16

    @pytest.mark.parametrize('labels', [[], np.zeros((0,)), np.zeros((2, 2)), [True, False]])
    def test_classes_rejects_invalid_labels(self, labels):
        with pytest.raises(PreconditionViolation):
            ProblemSpec().classes_(labels)

    def test_class_weights_are_appended(self):
        spec = ProblemSpec().class_weights([1.0, 2.0]).class_weights([3.0])
        assert spec.is_weighted
        assert spec.class_weights_.tolist() == [1.0, 2.0, 3.0]

    def test_labels_are_read_only(self):
        spec = ProblemSpec().classes_([1, 2])
        with pytest.raises(ValueError):
            spec.labels(LabelType.INT64)[0] = 5

    @pytest.mark.parametrize('index', [-1, 3, 10])
    def test_to_classlabel_out_of_range(self, index):
        spec = ProblemSpec().classes_([0, 1, 2])
        with pytest.raises(PreconditionViolation):
            spec.to_classlabel(index)

    @pytest.mark.parametrize('index', [1.5, '1', True, None])
    def test_to_classlabel_rejects_non_integer_index(self, index):
        spec = ProblemSpec().classes_([0, 1, 2])
        with pytest.raises(PreconditionViolation):
            spec.to_classlabel(index)

    def test_to_classlabel_accepts_numpy_integers(self):
        spec = ProblemSpec().classes_([4, 5, 6])
        assert spec.to_classlabel(np.int32(2), LabelType.INT64) == 6

    def test_to_classlabel_wraps_integer_kinds(self):
        spec = ProblemSpec().classes_([300, -1])
        assert spec.to_classlabel(0, LabelType.UINT8) == 44
        assert spec.to_classlabel(1, LabelType.UINT16) == 65535
        assert spec.to_classlabel(0, LabelType.DOUBLE) == 300.0

    def test_to_classlabel_truncates_floating_labels(self):
        spec = ProblemSpec().classes_([2.7, -2.7])
        assert spec.to_classlabel(0, LabelType.INT8) == 2
        assert spec.to_classlabel(1, LabelType.INT8) == -2

    @given(st.one_of(_int_labels, _float_labels))
    def test_every_label_kind_is_materialized(self, labels):
        spec = ProblemSpec().classes_(labels)
        assert spec.class_count_ == len(labels)
        for label_type, dtype in LABEL_DTYPES.items():
            assert len(spec.labels(label_type)) == len(labels)
            for i, value in enumerate(labels):
                assert spec.to_classlabel(i, label_type) == _expected_cast(value, dtype)


class TestTypeOf:

    @pytest.mark.parametrize('value, expected', [
        (0, LabelType.INT64),
        (1.5, LabelType.DOUBLE),
        (np.uint8(3), LabelType.UINT8),
        (np.float32(1.0), LabelType.FLOAT),
        (np.int16, LabelType.INT16),
        (np.dtype(np.uint64), LabelType.UINT64),
        (LabelType.INT8, LabelType.INT8),
    ])
    def test_supported_kinds(self, value, expected):
        assert ProblemSpec.type_of(value) == expected

    @pytest.mark.parametrize('value', [True, np.bool_(False), 'abc', 'f8', 'int32', np.complex128(1j), object()])
    def test_unsupported_kinds(self, value):
        with pytest.raises(PreconditionViolation):
            ProblemSpec.type_of(value)

    def test_string_labels_are_rejected(self):
        with pytest.raises(PreconditionViolation):
            ProblemSpec().classes_(['f8'])
        with pytest.raises(PreconditionViolation):
            ProblemSpec().classes_(np.array(['f8', 'i4']))


class TestProblemSpecSerialization:

    def test_layout(self):
        spec = _populated_spec()
        buf = spec.serialize()
        assert spec.serialized_size() == 8 + 2 * 3
        assert buf[:8].tolist() == [4.0, 3.0, 0.0, 0.0, 0.0, float(ProblemType.CHECKLATER),
                                    float(LabelType.INT64), 1.0]
        assert buf[8:11].tolist() == [0.5, 1.0, 2.0]
        assert buf[11:].tolist() == [3.0, 1.0, 2.0]

    def test_unweighted_layout(self):
        spec = ProblemSpec().classes_([4, 5])
        assert spec.serialize()[8:].tolist() == [4.0, 5.0]

    def test_round_trip(self):
        spec = _populated_spec()
        spec.row_count_ = 10
        spec.actual_mtry_ = 2
        spec.actual_msample_ = 10
        spec.problem_type_ = ProblemType.CLASSIFICATION
        restored = ProblemSpec().unserialize(spec.serialize())
        assert restored == spec
        assert restored.used()
        for label_type in LABEL_DTYPES:
            assert np.array_equal(restored.labels(label_type), spec.labels(label_type))

    @given(st.one_of(_int_labels, _float_labels), st.booleans())
    def test_label_kinds_are_rederived_after_round_trip(self, labels, weighted):
        spec = ProblemSpec().column_count(len(labels)).classes_(labels)
        if weighted:
            spec.class_weights(np.arange(len(labels), dtype=np.float64))
        before = dict((label_type, spec.labels(label_type).copy()) for label_type in LABEL_DTYPES)

        restored = ProblemSpec().unserialize(spec.serialize())

        assert restored.column_count_ == spec.column_count_
        assert restored.class_count_ == spec.class_count_
        assert restored.class_type_ == spec.class_type_
        assert restored.is_weighted == weighted
        assert np.array_equal(restored.class_weights_, spec.class_weights_)
        for label_type, dtype in LABEL_DTYPES.items():
            rederived = cast_labels(restored.labels(LabelType.DOUBLE), dtype)
            assert np.array_equal(rederived, before[label_type])

    def test_weight_mismatch_is_rejected(self):
        spec = ProblemSpec().classes_([0, 1, 2]).class_weights([1.0, 2.0])
        with pytest.raises(PreconditionViolation):
            spec.serialize(np.zeros((8 + 2 * 3,)))

    def test_wrong_buffer_length_is_rejected(self):
        spec = _populated_spec()
        with pytest.raises(PreconditionViolation):
            spec.serialize(np.zeros((spec.serialized_size() + 1,)))
        buf = spec.serialize()
        with pytest.raises(PreconditionViolation):
            ProblemSpec().unserialize(buf[:-1])
        with pytest.raises(PreconditionViolation):
            ProblemSpec().unserialize(np.zeros((7,)))

    def test_failed_unserialize_keeps_state(self):
        buf = ProblemSpec().classes_([0, 1]).serialize()
        buf[6] = 99.0
        spec = _populated_spec()
        with pytest.raises(PreconditionViolation):
            spec.unserialize(buf)
        assert spec == _populated_spec()


class TestProblemSpecState:

    def test_clear_restores_defaults(self):
        spec = _populated_spec()
        spec.row_count_ = 100
        spec.actual_mtry_ = 3
        spec.clear()
        assert spec == ProblemSpec()
        assert spec.row_count_ == 0
        assert not spec.used()

    @given(st.one_of(_int_labels, _float_labels), st.integers(min_value=0, max_value=100))
    def test_clear_after_any_population(self, labels, columns):
        spec = ProblemSpec().column_count(columns).classes_(labels).class_weights(np.ones((len(labels),)))
        spec.clear()
        assert spec == ProblemSpec()
        assert not spec.used()

    def test_equality_ignores_used_flag(self):
        spec = ProblemSpec().column_count(0)
        assert spec.used()
        assert spec == ProblemSpec()

    def test_equality_compares_labels_and_weights(self):
        assert ProblemSpec().classes_([1, 2]) != ProblemSpec().classes_([1, 3])
        assert _populated_spec() != _populated_spec().class_weights([1.0])
        assert copy.deepcopy(_populated_spec()) == _populated_spec()

    def test_map_round_trip(self):
        spec = _populated_spec()
        mapping = spec.make_map()
        assert 'class_weights_' in mapping
        assert mapping['column_count_'].tolist() == [4.0]

        restored = ProblemSpec().make_from_map(mapping)
        assert restored.column_count_ == 4
        assert restored.class_count_ == 3
        assert restored.class_type_ == LabelType.INT64
        assert restored.is_weighted
        assert restored.class_weights_.tolist() == [0.5, 1.0, 2.0]

    def test_labels_must_be_restored_after_map_import(self):
        restored = ProblemSpec().make_from_map(_populated_spec().make_map())
        with pytest.raises(PreconditionViolation):
            restored.to_classlabel(0)
        with pytest.raises(PreconditionViolation):
            restored.labels(LabelType.DOUBLE)
        with pytest.raises(PreconditionViolation):
            restored.serialize()

        restored.classes_([3, 1, 2])
        assert restored.to_classlabel(0, LabelType.INT64) == 3
        assert restored == _populated_spec()

    def test_map_import_keeps_matching_labels(self):
        spec = _populated_spec()
        restored = ProblemSpec().classes_([3, 1, 2]).make_from_map(spec.make_map())
        assert restored.labels(LabelType.INT64).tolist() == [3, 1, 2]
        assert restored.serialize().tolist() == spec.serialize().tolist()
