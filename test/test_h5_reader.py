import logging

import numpy as np
import pytest

h5py = pytest.importorskip("h5py")

from hdf5ct.core import DecodeError, ResourceError, SemanticType, decode_records, inspect_schema
from hdf5ct.io.h5_reader import (
    H5Reader,
    RawDatasetInfo,
    compound_descriptor,
    read_attributes,
    read_raw_bytes,
    type_class_of,
)


TV = np.dtype([("time", "<f8"), ("value", "<f4")])


@pytest.fixture
def sample_file(make_h5):
    return make_h5(
        {
            "Foo1": {
                "chan1": np.array([(0.0, 1.5), (1.0, 2.5)], dtype=TV),
                "chan2": np.array([(0.5, 3.0)], dtype=TV),
                "plain": np.arange(4, dtype=np.float64),
                "nested": lambda g: g.create_group("nested"),
            },
            "Zzz": {"ignored": np.array([(0.0, 0.0)], dtype=TV)},
        },
        root_attrs={"creator": "unit-test"},
        group_attrs={"rate": 10},
        dataset_attrs={"chan1": {"units": "rpm"}},
    )


@pytest.fixture
def reader(sample_file):
    r = H5Reader(sample_file)
    yield r
    r.close()


class TestTypeClass:
    @pytest.mark.parametrize(
        "dtype, expected",
        [
            (np.dtype("<i4"), "INTEGER"),
            (np.dtype("<u2"), "INTEGER"),
            (np.dtype("<f8"), "FLOAT"),
            (np.dtype("S5"), "STRING"),
            (h5py.string_dtype(), "STRING"),
            (TV, "COMPOUND"),
            (np.dtype(("<f8", (3,))), "ARRAY"),
            (h5py.enum_dtype({"A": 0, "B": 1}, basetype="i1"), "ENUM"),
            (h5py.vlen_dtype(np.int32), "VLEN"),
            (h5py.ref_dtype, "REFERENCE"),
            (np.dtype("V8"), "OPAQUE"),
            (np.dtype(bool), "ENUM"),
        ],
    )
    def test_type_class_of(self, dtype, expected):
        assert type_class_of(dtype) == expected


class TestH5Reader:
    def test_parent_group_is_first_group(self, reader):
        assert reader.group_name == "Foo1"
        assert reader.file_name == "sample.h5"

    def test_sibling_groups_logged(self, sample_file, caplog):
        with caplog.at_level(logging.WARNING, logger="hdf5ct.io.h5_reader"):
            H5Reader(sample_file).close()
        assert any("Zzz" in r.getMessage() for r in caplog.records)

    def test_list_datasets_skips_subgroups(self, reader):
        infos = reader.list_datasets()
        assert [i.name for i in infos] == ["chan1", "chan2", "plain"]
        for info in infos:
            assert isinstance(info, RawDatasetInfo)
            assert info.path == f"/Foo1/{info.name}"
            assert callable(info.loader)

    def test_descriptor_of_compound(self, reader):
        info = reader.list_datasets()[0]
        d = info.descriptor
        assert d.rank == 1
        assert d.shape == (2,)
        assert d.itemsize == 12
        assert [(m.name, m.type_class, m.size, m.offset) for m in d.members] == [
            ("time", "FLOAT", 8, 0),
            ("value", "FLOAT", 4, 8),
        ]

    def test_descriptor_of_plain_dataset_has_no_members(self, reader):
        plain = reader.list_datasets()[2]
        assert plain.descriptor.members == ()

    def test_loader_returns_decodable_bytes(self, reader):
        info = reader.list_datasets()[0]
        schema = inspect_schema(info.descriptor)
        ch = decode_records(info.loader(), schema, info.name)
        np.testing.assert_array_equal(ch.time, [0.0, 1.0])
        np.testing.assert_allclose(ch.values, [1.5, 2.5])
        assert ch.value_type is SemanticType.FLOAT32

    def test_attributes(self, reader):
        root = reader.root_attributes()
        assert [(a.name, a.value, a.type_tag) for a in root] == [("creator", "unit-test", "STRING")]

        group = reader.group_attributes()
        assert [(a.name, a.value, a.type_tag) for a in group] == [("rate", "10", "INTEGER")]

        chan1 = reader.list_datasets()[0].attributes()
        assert [(a.name, a.value) for a in chan1] == [("units", "rpm")]

    def test_context_manager_closes_file(self, sample_file):
        with H5Reader(sample_file) as r:
            assert r._file.id.valid
        assert not r._file.id.valid


def test_big_endian_data_is_converted(make_h5):
    be = np.dtype([("time", ">f8"), ("value", ">i4")])
    path = make_h5({"G": {"be": np.array([(1.0, 258), (2.0, -1)], dtype=be)}})

    with H5Reader(path) as r:
        (info,) = r.list_datasets()
        schema = inspect_schema(info.descriptor)
        ch = decode_records(info.loader(), schema, info.name)

    np.testing.assert_array_equal(ch.time, [1.0, 2.0])
    np.testing.assert_array_equal(ch.values, [258, -1])


def test_unsigned_member_descriptor(make_h5):
    dt = np.dtype([("Time", "<u4"), ("Data", "<u2")])
    path = make_h5({"G": {"u": np.array([(1, 2)], dtype=dt)}})
    with h5py.File(path, "r") as f:
        d = compound_descriptor(f["G/u"])
    assert [(m.type_class, m.signed) for m in d.members] == [("INTEGER", False), ("INTEGER", False)]


def test_array_attribute_is_comma_joined(make_h5):
    path = make_h5({"G": {}}, root_attrs={"gains": np.array([1.0, 2.5])})
    with h5py.File(path, "r") as f:
        (rec,) = read_attributes(f)
    assert rec.value == "1.0,2.5"
    assert rec.type_tag == "FLOAT"


def test_no_group_is_resource_error(make_h5, tmp_path):
    path = tmp_path / "flat.h5"
    with h5py.File(path, "w") as f:
        f.create_dataset("d", data=np.arange(3))
    with pytest.raises(ResourceError):
        H5Reader(path)


def test_unreadable_file_is_resource_error(tmp_path):
    path = tmp_path / "junk.h5"
    path.write_bytes(b"not an hdf5 file")
    with pytest.raises(ResourceError):
        H5Reader(path)


class _BrokenDataset:
    name = "/G/broken"

    def __getitem__(self, key):
        raise OSError("Can't read data (inflate() failed)")


def test_storage_read_failure_is_decode_error():
    with pytest.raises(DecodeError, match="/G/broken"):
        read_raw_bytes(_BrokenDataset())
