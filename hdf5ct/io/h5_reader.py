from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Protocol
import logging

import h5py  # pivotal dependency for HDF5 file handling
import numpy as np

from hdf5ct.core.exceptions import DecodeError, ResourceError
from hdf5ct.core.metadata import AttributeRecord, stringify_attribute_value
from hdf5ct.core.schema import CompoundDescriptor, MemberDescriptor


logger = logging.getLogger(__name__)


@dataclass
class RawDatasetInfo:
    """
    Layout + lazy loader for a single dataset under the parent group.

    Examples of name / path:
    - "chan1"  /  "/Foo1/chan1"
    """

    name: str                        # leaf name, used as channel name
    path: str                        # full path inside the file
    descriptor: CompoundDescriptor

    # Lazy loaders: when called, read ONLY this dataset
    loader: Callable[[], bytes]
    # -> raw little-endian element bytes
    attributes: Callable[[], list[AttributeRecord]]


class ContainerReader(Protocol):
    """Protocol for container readers.

    Implementations expose the parent group's datasets and the attributes
    of the root, the parent group and each dataset.
    """

    file_name: str
    group_name: str

    def root_attributes(self) -> List[AttributeRecord]:
        ...

    def group_attributes(self) -> List[AttributeRecord]:
        ...

    def list_datasets(self) -> List[RawDatasetInfo]:
        ...

    def close(self) -> None:
        ...


def type_class_of(dtype: np.dtype) -> str:
    """HDF5 type class name for a numpy dtype as returned by h5py."""
    if h5py.check_enum_dtype(dtype) is not None:
        return "ENUM"
    if h5py.check_string_dtype(dtype) is not None:
        return "STRING"
    if h5py.check_vlen_dtype(dtype) is not None:
        return "VLEN"
    if h5py.check_ref_dtype(dtype) is not None:
        return "REFERENCE"
    if dtype.names is not None:
        return "COMPOUND"
    if dtype.subdtype is not None:
        return "ARRAY"

    kind = dtype.kind
    if kind in ("i", "u"):
        return "INTEGER"
    if kind == "f":
        return "FLOAT"
    if kind == "b":
        # h5py stores numpy bools as an enum
        return "ENUM"
    if kind in ("S", "U"):
        return "STRING"
    if kind == "V":
        return "OPAQUE"
    if kind in ("M", "m"):
        return "TIME"
    return "UNKNOWN"


def compound_descriptor(ds: h5py.Dataset) -> CompoundDescriptor:
    """Describe a dataset's dataspace and compound element type."""
    dtype = ds.dtype
    members: list[MemberDescriptor] = []
    if dtype.names is not None:
        for name in dtype.names:
            sub, offset = dtype.fields[name][:2]
            members.append(
                MemberDescriptor(
                    name=name,
                    type_class=type_class_of(sub),
                    size=int(sub.itemsize),
                    offset=int(offset),
                    signed=sub.kind != "u",
                )
            )
    return CompoundDescriptor(
        rank=int(ds.ndim),
        shape=tuple(int(n) for n in ds.shape),
        itemsize=int(dtype.itemsize),
        members=tuple(members),
    )


def read_raw_bytes(ds: h5py.Dataset) -> bytes:
    """Read the whole dataset as contiguous little-endian element bytes.

    Storage-level read failures (missing filter, corrupt chunk) are
    reported as DecodeError so only this dataset is lost.
    """
    try:
        data = ds[()]
    except OSError as e:
        raise DecodeError(f"Unable to read dataset '{ds.name}': {e}") from e
    arr = np.ascontiguousarray(data)
    if arr.dtype.names is not None:
        arr = arr.astype(arr.dtype.newbyteorder("<"))
    return arr.tobytes()


def read_attributes(obj: h5py.Group | h5py.Dataset) -> list[AttributeRecord]:
    """Read all attributes of an object, in name order."""
    records: list[AttributeRecord] = []
    try:
        names = sorted(obj.attrs.keys())
    except OSError as e:
        raise DecodeError(f"Unable to list attributes of '{obj.name}': {e}") from e
    for name in names:
        attr_id = obj.attrs.get_id(name)
        try:
            value = obj.attrs[name]
        except (OSError, TypeError) as e:
            # e.g. attribute types h5py cannot map onto numpy
            logger.warning("Cannot read attribute '%s' of %s: %s", name, obj.name, e)
            value = ""
        records.append(
            AttributeRecord(
                name=name,
                value=stringify_attribute_value(value),
                type_tag=type_class_of(attr_id.dtype),
            )
        )
    return records


class H5Reader:
    """Concrete ContainerReader on top of h5py.File.

    Only the first group directly under the root (in name order) is used:
    the "parent group". Its datasets are listed; subgroups, named datatypes
    and dangling links are skipped with a diagnostic.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.file_name = self.path.name
        try:
            self._file = h5py.File(self.path, "r")
        except OSError as e:
            raise ResourceError(f"Unable to open HDF5 file '{self.path}': {e}") from e

        try:
            self.group_name = self._find_parent_group()
        except ResourceError:
            self._file.close()
            raise
        self._group: h5py.Group = self._file[self.group_name]

    # ------------------------------------------------------------------
    # Context manager / lifecycle
    # ------------------------------------------------------------------
    def __enter__(self) -> "H5Reader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._file.id.valid:
            self._file.close()

    # ------------------------------------------------------------------
    # Group discovery
    # ------------------------------------------------------------------
    def _find_parent_group(self) -> str:
        root = self._file
        parent: str | None = None
        for name in root:
            cls = root.get(name, getclass=True)
            if cls is not h5py.Group:
                continue
            if parent is None:
                parent = name
                logger.info("Top parent group = %s", name)
            else:
                logger.warning("Ignoring additional top-level group '%s'", name)
        if parent is None:
            raise ResourceError(f'There are no child groups under "/" in {self.file_name}')
        return parent

    # ------------------------------------------------------------------
    # ContainerReader protocol implementation
    # ------------------------------------------------------------------
    def root_attributes(self) -> list[AttributeRecord]:
        return read_attributes(self._file)

    def group_attributes(self) -> list[AttributeRecord]:
        return read_attributes(self._group)

    def list_datasets(self) -> list[RawDatasetInfo]:
        """List datasets directly under the parent group, in name order."""
        infos: list[RawDatasetInfo] = []
        for name in self._group:
            cls = self._group.get(name, getclass=True)
            if cls is None:
                logger.warning("%s: unresolvable link; not handled", name)
                continue
            if cls is h5py.Group:
                logger.warning("%s\ttype = GROUP; not currently handled", name)
                continue
            if cls is h5py.Datatype:
                logger.warning("%s\ttype = DATATYPE; not currently handled", name)
                continue
            if cls is not h5py.Dataset:
                logger.warning("%s\ttype = %s; not a dataset, not handled", name, cls.__name__)
                continue

            ds: h5py.Dataset = self._group[name]

            def make_loader(d: h5py.Dataset = ds) -> Callable[[], bytes]:
                def _loader() -> bytes:
                    return read_raw_bytes(d)

                return _loader

            def make_attributes(d: h5py.Dataset = ds) -> Callable[[], list[AttributeRecord]]:
                def _attributes() -> list[AttributeRecord]:
                    return read_attributes(d)

                return _attributes

            infos.append(
                RawDatasetInfo(
                    name=name,
                    path=ds.name,
                    descriptor=compound_descriptor(ds),
                    loader=make_loader(),
                    attributes=make_attributes(),
                )
            )
        return infos
