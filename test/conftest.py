import pytest

from hdf5ct.core import SinkOptions


class RecordingSink:
    """In-memory sink: records every call in order."""

    def __init__(self, destination=None, options=None):
        self.destination = destination
        self.options = options
        self.calls = []
        self.closed = False

    def set_time(self, t):
        self.calls.append(("time", t))

    def put(self, channel, value):
        self.calls.append(("put", channel, value))

    def close(self):
        self.closed = True

    @property
    def records(self):
        """(time, channel, value) triples, in emission order."""
        out = []
        current = None
        for call in self.calls:
            if call[0] == "time":
                current = call[1]
            else:
                out.append((current, call[1], call[2]))
        return out


class SinkRecorder:
    """Sink factory that keeps every sink it created, by destination."""

    def __init__(self):
        self.sinks = {}

    def __call__(self, destination, options: SinkOptions):
        sink = RecordingSink(destination, options)
        self.sinks[destination] = sink
        return sink


@pytest.fixture
def sink_recorder():
    return SinkRecorder()


@pytest.fixture
def make_h5(tmp_path):
    """Build an HDF5 file: {group: {dataset: ndarray or callable(group)}}."""
    h5py = pytest.importorskip("h5py")

    def _make(groups, name="sample.h5", root_attrs=None, group_attrs=None, dataset_attrs=None):
        path = tmp_path / name
        with h5py.File(path, "w") as f:
            for key, value in (root_attrs or {}).items():
                f.attrs[key] = value
            for group_name, datasets in groups.items():
                grp = f.create_group(group_name)
                for key, value in (group_attrs or {}).items():
                    grp.attrs[key] = value
                for ds_name, data in datasets.items():
                    if callable(data):
                        data(grp)
                        continue
                    ds = grp.create_dataset(ds_name, data=data)
                    for key, value in (dataset_attrs or {}).get(ds_name, {}).items():
                        ds.attrs[key] = value
        return path

    return _make
